from __future__ import annotations

import pytest

from parcel_labels.scraping.confirmation import (
    extract_confirmation,
    extract_cost,
    extract_tracking_number,
    find_tracking_number,
)


@pytest.mark.unit
def test_tracking_number_after_label():
    assert extract_tracking_number("Tracking: AB123456789GB") == "AB123456789GB"


@pytest.mark.unit
def test_total_with_pound_sign():
    assert extract_cost("Total: £12.34") == "£12.34"


@pytest.mark.unit
def test_no_match_yields_none():
    record = extract_confirmation("Thank you for your order")
    assert record.tracking_number is None
    assert record.cost is None


@pytest.mark.unit
def test_reference_and_bare_tracking_numbers():
    assert extract_tracking_number("Reference # CD987654321GB") == "CD987654321GB"
    assert extract_tracking_number("Your parcel EF000000001GB is on its way") == "EF000000001GB"


@pytest.mark.unit
def test_barcode_digits_are_the_last_resort():
    assert extract_tracking_number("Barcode: 0123456789") == "0123456789"
    assert extract_tracking_number("Barcode: 0123456789 Tracking: AB123456789GB") == "AB123456789GB"


@pytest.mark.unit
def test_cost_variants_are_normalized_to_pounds():
    assert extract_cost("Cost 3.20") == "£3.20"
    assert extract_cost("Price: $4") == "£4"
    assert extract_cost("You paid £1,234.50.") == "£1,234.50"


@pytest.mark.unit
def test_cost_needs_a_digit():
    assert extract_cost("Total: pending") is None


@pytest.mark.unit
def test_full_confirmation_page():
    text = "Label created\nTracking number: AB123456789GB\nService: Tracked 24\nTotal £3.20"
    record = extract_confirmation(text)
    assert record.tracking_number == "AB123456789GB"
    assert record.cost == "£3.20"


@pytest.mark.unit
def test_tracking_number_from_download_filename():
    assert find_tracking_number("label-AB123456789GB.pdf") == "AB123456789GB"
    assert find_tracking_number("label.pdf") is None
