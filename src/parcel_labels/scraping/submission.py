from __future__ import annotations

import logging
from dataclasses import dataclass

from parcel_labels.scraping.confirmation import extract_confirmation
from parcel_labels.scraping.diagnostics import DiagnosticCapture
from parcel_labels.scraping.selectors import PortalSelectors, click_first
from parcel_labels.scraping.session_store import SessionStore
from parcel_labels.services.portal_client import ConfirmationRecord
from parcel_labels.utils.errors import PreconditionError

logger = logging.getLogger(__name__)

NETWORK_IDLE_TIMEOUT_MS = 30_000
SETTLE_MS = 3_000


@dataclass(frozen=True)
class SubmissionOutcome:
    record: ConfirmationRecord
    screenshot: str | None
    submit_clicked: str | None
    confirm_clicked: str | None


def require_form_filled(store: SessionStore) -> None:
    """Raises PreconditionError unless the stored session shows a filled form. No browser access."""
    descriptor = store.read()
    if descriptor is None or not descriptor.form_filled:
        raise PreconditionError("Form has not been filled yet. Call create-label first.")


class LabelSubmitter:
    """
    What it does:
    - Pushes a filled order through the portal's purchase steps and reads the result.

    Why it matters:
    - This is the step that spends money. It refuses to run unless the session says a
      form was filled in this browser.

    Behavior:
    - FormFilled -> AwaitingReview: click the first submit/continue candidate, wait for
      network idle, screenshot "review".
    - AwaitingReview -> Confirmed: click a confirm/pay candidate if one exists (some flows
      have a single step), wait again.
    - Screenshot "confirmation", mine the page text, advance label_generated.
    - Faults propagate before label_generated is advanced.
    """

    def __init__(
        self,
        *,
        store: SessionStore,
        diagnostics: DiagnosticCapture,
        selectors: PortalSelectors | None = None,
    ) -> None:
        self.store = store
        self.diagnostics = diagnostics
        self.sel = selectors or PortalSelectors()

    def submit(self, page) -> SubmissionOutcome:
        require_form_filled(self.store)

        submit_clicked = click_first(page, self.sel.submit_buttons)
        if submit_clicked:
            logger.info("Clicked submit control %s", submit_clicked)
        else:
            logger.warning("No submit control matched; reading the current page as final")
        self._settle(page)
        self.diagnostics.capture(page, "review")

        confirm_clicked = click_first(page, self.sel.confirm_buttons)
        if confirm_clicked:
            logger.info("Clicked confirmation control %s", confirm_clicked)
            self._settle(page)

        shot = self.diagnostics.capture(page, "confirmation")
        record = extract_confirmation(page.inner_text("body"))
        logger.info("Confirmation: tracking=%s cost=%s", record.tracking_number, record.cost)

        self.store.advance("label_generated")
        return SubmissionOutcome(
            record=record,
            screenshot=shot,
            submit_clicked=submit_clicked,
            confirm_clicked=confirm_clicked,
        )

    def _settle(self, page) -> None:
        page.wait_for_load_state("networkidle", timeout=NETWORK_IDLE_TIMEOUT_MS)
        page.wait_for_timeout(SETTLE_MS)
