"""
clickdrop_playwright.py

What this module does
- Implements the label portal client on top of Playwright, satisfying `LabelPortalClient`.
- Wires the session manager, login flow, form filler, submitter and downloader together.

Why it matters
- Each CLI command creates one client, runs one operation and closes it. The browser and
  the workflow progress live on between commands (see browser_session / session_store).

Safety guarantees
- fill() never submits.
- submit() refuses to run unless the stored session shows a filled form, and download()
  unless it shows a generated label. Both checks happen before any browser access.

Behavior summary
- Every operation returns an OperationResult; faults are logged, a screenshot is taken
  when a page exists, and the result carries the message and screenshot path.
- close() disconnects without killing the browser; reset() kills it and forgets the session.
"""

from __future__ import annotations

import logging
from pathlib import Path

from playwright.sync_api import TimeoutError as PWTimeoutError

from parcel_labels.scraping.auth import PortalAuthenticator
from parcel_labels.scraping.browser_session import BrowserSessionManager
from parcel_labels.scraping.diagnostics import DiagnosticCapture
from parcel_labels.scraping.download import LabelDownloader, require_label_generated
from parcel_labels.scraping.form_fill import LabelFormFiller
from parcel_labels.scraping.session_store import SessionStore
from parcel_labels.scraping.submission import LabelSubmitter, require_form_filled
from parcel_labels.services.catalog import list_services
from parcel_labels.services.label_request import LabelRequest
from parcel_labels.services.portal_client import LabelPortalClient, OperationResult, PortalCredentials
from parcel_labels.utils.errors import PortalAutomationError, PreconditionError

logger = logging.getLogger(__name__)


class PlaywrightLabelClient(LabelPortalClient):
    """
    Playwright implementation of LabelPortalClient.

    What it does:
    - Runs fill / submit / download / screenshot / reset against the portal.

    Behavior:
    - Uses Playwright-managed Chromium, attached over CDP (no chromedriver).
    - Captures screenshots in screenshot_dir at each step and on every failure.
    """

    def __init__(
        self,
        *,
        credentials: PortalCredentials,
        login_url: str,
        create_order_url: str,
        session_path: str | Path,
        screenshot_dir: str | Path,
        label_dir: str | Path,
        headless: bool = True,
        sessions: BrowserSessionManager | None = None,
    ) -> None:
        self.store = SessionStore(session_path)
        self.diagnostics = DiagnosticCapture(screenshot_dir)
        self.sessions = sessions or BrowserSessionManager(store=self.store, headless=headless)

        self.authenticator = PortalAuthenticator(
            store=self.store,
            credentials=credentials,
            login_url=login_url,
            create_order_url=create_order_url,
            diagnostics=self.diagnostics,
        )
        self.filler = LabelFormFiller(
            store=self.store,
            authenticator=self.authenticator,
            diagnostics=self.diagnostics,
            create_order_url=create_order_url,
        )
        self.submitter = LabelSubmitter(store=self.store, diagnostics=self.diagnostics)
        self.downloader = LabelDownloader(store=self.store, label_dir=label_dir)

    # -------------------- LabelPortalClient interface --------------------

    def fill(self, request: LabelRequest) -> OperationResult:
        try:
            page = self.sessions.acquire_page()
            report = self.filler.fill(page, request)
        except Exception as e:
            return self._failure("Form fill error", "form-error", e)

        message = "Form filled successfully. Please review the screenshot before calling submit."
        if report.preview.unmatched_fields:
            message += f" Fields not found on the page: {', '.join(report.preview.unmatched_fields)}."
        return OperationResult.ok(message, screenshot=report.screenshot, form_state=report.preview)

    def submit(self) -> OperationResult:
        try:
            require_form_filled(self.store)
        except PreconditionError as e:
            return OperationResult.failure(str(e))
        except Exception as e:
            return self._failure("Submit failed", "submit-error", e)

        try:
            page = self.sessions.acquire_page()
            outcome = self.submitter.submit(page)
        except Exception as e:
            return self._failure("Submit failed", "submit-error", e)

        message = "Label created successfully. Call download-label to save the PDF."
        if outcome.submit_clicked is None:
            message += " No submit control was found; check the confirmation screenshot."
        return OperationResult.ok(
            message,
            screenshot=outcome.screenshot,
            tracking_number=outcome.record.tracking_number,
            cost=outcome.record.cost,
        )

    def download(self) -> OperationResult:
        try:
            require_label_generated(self.store)
        except PreconditionError as e:
            return OperationResult.failure(str(e))
        except Exception as e:
            return self._failure("Download failed", "download-error", e)

        try:
            page = self.sessions.acquire_page()
            outcome = self.downloader.download(page)
        except Exception as e:
            return self._failure("Download failed", "download-error", e)

        return OperationResult.ok(
            f"Label downloaded successfully to {outcome.path}",
            label_path=outcome.path,
            tracking_number=outcome.tracking_number,
        )

    def list_services(self) -> OperationResult:
        return OperationResult.ok(
            "Use the 'code' value with --service option in create-label",
            services=tuple(list_services()),
        )

    def screenshot(self, filename: str | None = None, full_page: bool = False) -> OperationResult:
        try:
            page = self.sessions.acquire_page()
            path = self.diagnostics.screenshot(page, filename=filename, full_page=full_page)
        except Exception as e:
            logger.exception("Screenshot failed")
            return OperationResult.failure(f"Screenshot failed: {e}")
        return OperationResult.ok("Screenshot saved.", screenshot=path)

    def reset(self) -> OperationResult:
        try:
            had_session = self.sessions.terminate()
        except Exception as e:
            logger.exception("Reset failed")
            return OperationResult.failure(f"Reset failed: {e}")

        if had_session:
            return OperationResult.ok("Browser session closed and cleared.")
        return OperationResult.ok("No active session. Nothing to reset.")

    def close(self) -> None:
        """
        Ends this invocation's connection. The browser and the stored session stay alive.

        Safe to call multiple times.
        """
        self.sessions.close()

    # -------------------- Helpers --------------------

    def _failure(self, prefix: str, tag: str, error: Exception) -> OperationResult:
        if isinstance(error, PWTimeoutError):
            logger.error("%s (timeout): %s", prefix, error)
            message = f"{prefix} (timeout): {error}"
        else:
            logger.exception(prefix)
            message = f"{prefix}: {error}"

        shot = getattr(error, "screenshot", None) if isinstance(error, PortalAutomationError) else None
        if shot is None:
            shot = self.diagnostics.capture(self.sessions.page, tag)
        return OperationResult.failure(message, screenshot=shot)
