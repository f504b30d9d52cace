from __future__ import annotations

import pytest
from playwright.sync_api import Error as PWError

from parcel_labels.scraping.element_resolver import (
    LABEL_PROXIMITY_XPATH,
    ElementResolver,
    aria_label_selector,
    id_lookup_selector,
    id_selector,
    label_selector,
    name_selector,
    normalize_synonym,
    placeholder_selector,
    test_id_selector as testid_selector,
)
from parcel_labels.testing.fakes import FakeElement, FakePage

# Imported helper, not a test: keep pytest from collecting it.
testid_selector.__test__ = False

NAME_SYNONYMS = ("Full name", "Name", "Recipient name", "fullName")


@pytest.mark.unit
def test_selector_builders_are_pure_and_case_insensitive():
    assert aria_label_selector("Full name") == (
        'input[aria-label*="Full name" i], textarea[aria-label*="Full name" i]'
    )
    assert placeholder_selector("City") == 'input[placeholder*="City" i], textarea[placeholder*="City" i]'
    assert label_selector("Postcode") == 'label:has-text("Postcode")'
    assert normalize_synonym("Address  line 1") == "addressline1"
    assert name_selector("Address line 1") == (
        'input[name*="addressline1" i], textarea[name*="addressline1" i]'
    )
    assert id_selector("Post code") == 'input[id*="postcode" i], textarea[id*="postcode" i]'
    assert testid_selector("Weight") == 'input[data-testid*="weight" i], textarea[data-testid*="weight" i]'


@pytest.mark.unit
def test_quotes_in_synonyms_are_escaped():
    assert 'aria-label*="Say \\"hi\\"" i' in aria_label_selector('Say "hi"')


@pytest.mark.unit
def test_aria_label_match_fills_and_reports_strategy():
    field = FakeElement("name")
    page = FakePage({aria_label_selector("Full name"): field})

    outcome = ElementResolver(page).fill(NAME_SYNONYMS, "Ada Lovelace", field="name")

    assert field.value == "Ada Lovelace"
    assert outcome.matched is True
    assert outcome.strategy == "aria-label"
    assert outcome.synonym == "Full name"


@pytest.mark.unit
def test_earlier_synonym_beats_stronger_strategy_of_later_synonym():
    via_placeholder = FakeElement("placeholder")
    via_aria = FakeElement("aria")
    page = FakePage({
        placeholder_selector("Full name"): via_placeholder,
        aria_label_selector("Name"): via_aria,
    })

    outcome = ElementResolver(page).fill(NAME_SYNONYMS, "x")

    assert outcome.strategy == "placeholder"
    assert via_placeholder.value == "x"
    assert via_aria.value is None


@pytest.mark.unit
def test_label_with_for_attribute_resolves_target():
    target = FakeElement("input")
    label = FakeElement("label", attrs={"for": "recipient.name"})
    page = FakePage({label_selector("Full name"): label, id_lookup_selector("recipient.name"): target})

    outcome = ElementResolver(page).fill(NAME_SYNONYMS, "Ada")

    assert outcome.strategy == "label"
    assert target.value == "Ada"


@pytest.mark.unit
def test_label_without_association_uses_structural_proximity():
    nested = FakeElement("input")
    label = FakeElement("label", children={LABEL_PROXIMITY_XPATH: nested})
    page = FakePage({label_selector("City"): label})

    outcome = ElementResolver(page).fill(("City", "Town"), "London")

    assert outcome.strategy == "label"
    assert nested.value == "London"


@pytest.mark.unit
def test_machine_name_fallbacks_in_order():
    by_id = FakeElement("id")
    by_testid = FakeElement("testid")
    page = FakePage({id_selector("Address line 1"): by_id, testid_selector("Address line 1"): by_testid})

    outcome = ElementResolver(page).fill(("Address line 1",), "12 Row")

    assert outcome.strategy == "id"
    assert by_id.value == "12 Row"
    assert by_testid.value is None


@pytest.mark.unit
def test_no_match_is_silent_and_touches_nothing():
    """
    A field that is not on the page is skipped without an error.

    This is deliberate: a partial form must not block the rest of the fill. The
    caller only learns about it through matched=False.
    """
    unrelated = FakeElement("postcode")
    page = FakePage({aria_label_selector("Postcode"): unrelated})

    outcome = ElementResolver(page).fill(NAME_SYNONYMS, "Ada", field="name")

    assert outcome.matched is False
    assert outcome.strategy is None
    assert unrelated.value is None
    assert {name for name, _ in page.calls} == {"query_selector"}


@pytest.mark.unit
def test_lookup_error_moves_on_to_next_synonym():
    class FlakyPage(FakePage):
        def query_selector(self, selector):
            if "Broken" in selector:
                raise PWError("Unexpected token in selector")
            return super().query_selector(selector)

    field = FakeElement("name")
    page = FlakyPage({aria_label_selector("Name"): field})

    outcome = ElementResolver(page).fill(("Broken", "Name"), "Ada")

    assert outcome.matched is True
    assert outcome.synonym == "Name"


@pytest.mark.unit
def test_control_that_rejects_input_is_reported_unmatched():
    field = FakeElement("readonly", fill_error=PWError("Element is not editable"))
    page = FakePage({aria_label_selector("Weight"): field})

    outcome = ElementResolver(page).fill(("Weight",), "2")

    assert outcome.matched is False
    assert outcome.strategy == "aria-label"
