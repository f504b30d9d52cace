from __future__ import annotations

import logging
import re
import time

from playwright.sync_api import Error as PWError

from parcel_labels.scraping.diagnostics import DiagnosticCapture
from parcel_labels.scraping.selectors import PortalSelectors, click_first, fill_first, is_login_url
from parcel_labels.scraping.session_store import SessionStore
from parcel_labels.services.portal_client import PortalCredentials
from parcel_labels.utils.errors import LoginFailedError, LoginFieldsNotFoundError

logger = logging.getLogger(__name__)

NAV_TIMEOUT_MS = 30_000
LOGIN_WAIT_S = 30.0
SETTLE_MS = 2_000
POLL_MS = 500


class PortalAuthenticator:
    """
    What it does:
    - Makes sure the browser session is logged into the portal.

    Why it matters:
    - Every workflow entry calls it; on an already-authenticated session it costs one
      navigation.

    Behavior:
    - The descriptor's logged_in flag is advisory: it is verified by loading the
      create-order page and checking we were not bounced to a login URL.
    - Raises LoginFieldsNotFoundError / LoginFailedError (with screenshot) when the login
      page cannot be driven.
    - Advances logged_in only after a login attempt that was not rejected.
    """

    def __init__(
        self,
        *,
        store: SessionStore,
        credentials: PortalCredentials,
        login_url: str,
        create_order_url: str,
        diagnostics: DiagnosticCapture,
        selectors: PortalSelectors | None = None,
        login_wait_s: float = LOGIN_WAIT_S,
    ) -> None:
        self.store = store
        self.credentials = credentials
        self.login_url = login_url
        self.create_order_url = create_order_url
        self.diagnostics = diagnostics
        self.sel = selectors or PortalSelectors()
        self.login_wait_s = login_wait_s

    def ensure_logged_in(self, page) -> bool:
        descriptor = self.store.read()
        if descriptor is not None and descriptor.logged_in and self._still_logged_in(page):
            logger.info("Existing session is still authenticated")
            return True

        self._login(page)
        self.store.advance("logged_in")
        return True

    # -------------------- Helpers --------------------

    def _still_logged_in(self, page) -> bool:
        try:
            page.goto(self.create_order_url, wait_until="networkidle", timeout=NAV_TIMEOUT_MS)
        except PWError as e:
            logger.info("Session check navigation failed, logging in again: %s", e)
            return False

        if is_login_url(page.url, self.sel.login_url_markers):
            logger.info("Session expired (redirected to %s), logging in again", page.url)
            return False
        return True

    def _login(self, page) -> None:
        logger.info("Logging in to %s", self.login_url)
        page.goto(self.login_url, wait_until="networkidle", timeout=NAV_TIMEOUT_MS)
        page.wait_for_timeout(SETTLE_MS)
        self.diagnostics.capture(page, "login")

        user_sel = fill_first(page, self.sel.username_fields, self.credentials.username)
        pass_sel = fill_first(page, self.sel.password_fields, self.credentials.password)

        if not user_sel or not pass_sel:
            shot = self.diagnostics.capture(page, "login-error")
            missing = [n for n, s in (("username", user_sel), ("password", pass_sel)) if not s]
            raise LoginFieldsNotFoundError(
                f"Could not find login fields ({', '.join(missing)}). See screenshot: {shot}",
                screenshot=shot,
            )

        if not click_first(page, self.sel.login_buttons):
            logger.warning("No login button matched; waiting for the portal anyway")

        if not self._wait_for_authenticated(page) and is_login_url(
            page.url, self.sel.login_url_markers
        ):
            shot = self.diagnostics.capture(page, "login-failed")
            raise LoginFailedError(
                f"Login failed. Check credentials. See screenshot: {shot}", screenshot=shot
            )

        page.wait_for_timeout(SETTLE_MS)
        logger.info("Logged in")

    def _wait_for_authenticated(self, page) -> bool:
        """
        Polls until the URL looks like the authenticated area or an account menu shows up.

        Returns False when neither signal appeared within login_wait_s.
        """
        pattern = re.compile(self.sel.authenticated_url_pattern, re.IGNORECASE)
        deadline = time.monotonic() + self.login_wait_s

        while True:
            if pattern.search(page.url or ""):
                return True
            for selector in self.sel.account_menus:
                try:
                    if page.query_selector(selector):
                        return True
                except PWError:
                    continue  # page mid-navigation
            if time.monotonic() >= deadline:
                return False
            page.wait_for_timeout(POLL_MS)
