from __future__ import annotations

import logging
from dataclasses import dataclass

from parcel_labels.scraping.auth import NAV_TIMEOUT_MS, SETTLE_MS, PortalAuthenticator
from parcel_labels.scraping.diagnostics import DiagnosticCapture
from parcel_labels.scraping.element_resolver import ElementResolver, FillOutcome
from parcel_labels.scraping.service_resolver import ServiceResolver
from parcel_labels.scraping.session_store import SessionStore
from parcel_labels.services.label_request import LabelRequest
from parcel_labels.services.portal_client import FormPreview

logger = logging.getLogger(__name__)

# Label synonyms per request field, most specific first. The last entry is usually the
# camelCase machine name, which the name/id/data-testid strategies match after normalizing.
FIELD_SYNONYMS: dict[str, tuple[str, ...]] = {
    "name": ("Full name", "Name", "Recipient name", "fullName"),
    "company": ("Company", "Company name", "Business name", "companyName"),
    "address1": ("Address line 1", "Address 1", "Street address", "addressLine1", "address1"),
    "address2": ("Address line 2", "Address 2", "addressLine2", "address2"),
    "city": ("City", "Town", "Town/City", "city"),
    "postcode": ("Postcode", "Post code", "ZIP", "Postal code", "postcode"),
    "email": ("Email", "Email address", "email"),
    "phone": ("Phone", "Telephone", "Mobile", "Contact number", "phone"),
    "weight": ("Weight", "Package weight", "weight"),
    "length": ("Length", "length"),
    "width": ("Width", "width"),
    "height": ("Height", "height"),
    "reference": ("Reference", "Order reference", "Customer reference", "Your reference", "reference"),
    "contents": ("Contents", "Package contents", "Description", "Item description", "contents"),
}

# Fill order on the page. Service selection happens between package details and reference.
PACKAGE_FIELDS = ("name", "company", "address1", "address2", "city", "postcode",
                  "email", "phone", "weight", "length", "width", "height")
TRAILING_FIELDS = ("reference", "contents")


def _as_text(value) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class FillReport:
    preview: FormPreview
    screenshot: str | None
    outcomes: tuple[FillOutcome, ...]


class LabelFormFiller:
    """
    What it does:
    - Fills the portal's single-order form from a LabelRequest. Never submits.

    Why it matters:
    - The human reviews the preview screenshot between fill and submit; nothing
      irreversible happens here.

    Behavior:
    - Logs in, opens the create-order page, fills every field present in the request,
      selects the service, captures "form-initial" and "form-preview" screenshots.
    - Missing controls are skipped and listed in FormPreview.unmatched_fields.
    - form_filled is advanced only after the whole sequence succeeded; faults propagate.
    """

    def __init__(
        self,
        *,
        store: SessionStore,
        authenticator: PortalAuthenticator,
        diagnostics: DiagnosticCapture,
        create_order_url: str,
    ) -> None:
        self.store = store
        self.authenticator = authenticator
        self.diagnostics = diagnostics
        self.create_order_url = create_order_url

    def fill(self, page, request: LabelRequest) -> FillReport:
        self.authenticator.ensure_logged_in(page)

        page.goto(self.create_order_url, wait_until="networkidle", timeout=NAV_TIMEOUT_MS)
        page.wait_for_timeout(SETTLE_MS)
        self.diagnostics.capture(page, "form-initial")

        resolver = ElementResolver(page)
        outcomes: list[FillOutcome] = []

        for field in PACKAGE_FIELDS:
            outcome = self._fill_field(resolver, request, field)
            if outcome:
                outcomes.append(outcome)

        selection = ServiceResolver(page).select_service(request.service)
        outcomes.append(FillOutcome(field="service", matched=selection.matched, strategy=selection.strategy))

        for field in TRAILING_FIELDS:
            outcome = self._fill_field(resolver, request, field)
            if outcome:
                outcomes.append(outcome)

        shot = self.diagnostics.capture(page, "form-preview")
        self.store.advance("form_filled")

        unmatched = tuple(o.field for o in outcomes if not o.matched)
        if unmatched:
            logger.warning("Form filled with unmatched fields: %s", ", ".join(unmatched))

        preview = FormPreview(
            name=request.name,
            company=request.company,
            address1=request.address1,
            address2=request.address2,
            city=request.city,
            postcode=request.postcode,
            weight=request.weight,
            service=selection.display_name,
            reference=request.reference,
            unmatched_fields=unmatched,
        )
        return FillReport(preview=preview, screenshot=shot, outcomes=tuple(outcomes))

    def _fill_field(self, resolver: ElementResolver, request: LabelRequest, field: str) -> FillOutcome | None:
        value = getattr(request, field)
        if value is None:
            return None
        return resolver.fill(FIELD_SYNONYMS[field], _as_text(value), field=field)
