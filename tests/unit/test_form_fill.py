from __future__ import annotations

from pathlib import Path

import pytest
from playwright.sync_api import Error as PWError

from parcel_labels.scraping.element_resolver import aria_label_selector, placeholder_selector
from parcel_labels.scraping.form_fill import LabelFormFiller
from parcel_labels.scraping.selectors import PortalSelectors
from parcel_labels.services.label_request import LabelRequest
from parcel_labels.testing.fakes import FakeElement, FakePage

CREATE_URL = "https://portal.example/orders/single/create"
SEL = PortalSelectors()


class StubAuthenticator:
    def __init__(self) -> None:
        self.calls = 0

    def ensure_logged_in(self, page) -> bool:
        self.calls += 1
        return True


def _form_page(**extra) -> tuple[FakePage, dict]:
    fields = {
        "name": FakeElement("name"),
        "address1": FakeElement("address1"),
        "city": FakeElement("city"),
        "postcode": FakeElement("postcode"),
        "weight": FakeElement("weight"),
    }
    elements = {
        aria_label_selector("Full name"): fields["name"],
        aria_label_selector("Address line 1"): fields["address1"],
        placeholder_selector("City"): fields["city"],
        aria_label_selector("Postcode"): fields["postcode"],
        aria_label_selector("Weight"): fields["weight"],
        SEL.service_selects[0]: FakeElement("service", options=[("TRACKED24", "Royal Mail Tracked 24")]),
    }
    elements.update(extra)
    return FakePage(elements), fields


def _filler(store, diagnostics, auth=None) -> LabelFormFiller:
    return LabelFormFiller(
        store=store,
        authenticator=auth or StubAuthenticator(),
        diagnostics=diagnostics,
        create_order_url=CREATE_URL,
    )


@pytest.mark.unit
def test_fill_populates_fields_and_returns_preview(store, session_with, diagnostics, minimal_request):
    session_with(logged_in=True)
    page, fields = _form_page()
    auth = StubAuthenticator()

    report = _filler(store, diagnostics, auth).fill(page, minimal_request)

    assert auth.calls == 1
    assert ("goto", CREATE_URL) in page.calls
    assert fields["name"].value == "Ada Lovelace"
    assert fields["address1"].value == "12 Analytical Row"
    assert fields["city"].value == "London"
    assert fields["postcode"].value == "N1 9GU"
    assert fields["weight"].value == "1.5"

    assert report.preview.name == "Ada Lovelace"
    assert report.preview.service == "Royal Mail Tracked 24"
    assert report.preview.unmatched_fields == ()
    assert store.read().form_filled is True


@pytest.mark.unit
def test_fill_never_clicks_submit(store, session_with, diagnostics, minimal_request):
    session_with(logged_in=True)
    submit = FakeElement("submit")
    page, _ = _form_page(**{SEL.submit_buttons[0]: submit})

    _filler(store, diagnostics).fill(page, minimal_request)

    assert submit.clicks == 0


@pytest.mark.unit
def test_initial_and_preview_screenshots_are_captured(store, session_with, diagnostics, minimal_request):
    session_with(logged_in=True)
    page, _ = _form_page()

    report = _filler(store, diagnostics).fill(page, minimal_request)

    names = sorted(p.name for p in Path(diagnostics.screenshot_dir).iterdir())
    assert any("form-initial" in n for n in names)
    assert any("form-preview" in n for n in names)
    assert "form-preview" in report.screenshot


@pytest.mark.unit
def test_missing_controls_are_skipped_and_listed(store, session_with, diagnostics, minimal_request):
    session_with(logged_in=True)
    page, fields = _form_page()
    del page.elements[aria_label_selector("Postcode")]
    del page.elements[SEL.service_selects[0]]

    report = _filler(store, diagnostics).fill(page, minimal_request)

    assert report.preview.unmatched_fields == ("postcode", "service")
    assert fields["city"].value == "London"
    assert store.read().form_filled is True


@pytest.mark.unit
def test_optional_fields_are_only_filled_when_given(store, session_with, diagnostics):
    session_with(logged_in=True)
    company = FakeElement("company")
    length = FakeElement("length")
    reference = FakeElement("reference")
    page, fields = _form_page(**{
        aria_label_selector("Company"): company,
        aria_label_selector("Length"): length,
        aria_label_selector("Reference"): reference,
    })
    request = LabelRequest(
        name="Ada Lovelace",
        address1="12 Analytical Row",
        city="London",
        postcode="N1 9GU",
        weight=2.0,
        length=30,
        service="tracked24",
        reference="ORDER-42",
    )

    report = _filler(store, diagnostics).fill(page, request)

    assert company.value is None
    assert length.value == "30"
    assert fields["weight"].value == "2"
    assert reference.value == "ORDER-42"
    assert report.preview.reference == "ORDER-42"
    assert [o.field for o in report.outcomes][-2:] == ["service", "reference"]


@pytest.mark.unit
def test_navigation_fault_propagates_without_progress(store, session_with, diagnostics, minimal_request):
    session_with(logged_in=True)
    page, _ = _form_page()
    page.goto_error = PWError("net::ERR_CONNECTION_RESET")

    with pytest.raises(PWError):
        _filler(store, diagnostics).fill(page, minimal_request)

    assert store.read().form_filled is False
