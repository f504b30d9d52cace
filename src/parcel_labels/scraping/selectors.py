from __future__ import annotations

from dataclasses import dataclass

from playwright.sync_api import Error as PWError


@dataclass(frozen=True)
class PortalSelectors:
    """
    Centralized candidate selectors for the label portal.

    What it does:
    - Keeps every ordered candidate list in one place.

    Why it matters:
    - The portal markup is undocumented and drifts. Each control is found by trying
      candidates in order, and fixing a drift means editing one tuple here.

    Behavior:
    - Order is priority: callers stop at the first candidate that matches.
    """

    # Auth flow
    username_fields: tuple[str, ...] = (
        'input[type="email"]',
        'input[name="email"]',
        'input[id*="email"]',
        'input[placeholder*="email" i]',
        'input[name="username"]',
        "#username",
        "#email",
    )
    password_fields: tuple[str, ...] = (
        'input[type="password"]',
        'input[name="password"]',
        "#password",
    )
    login_buttons: tuple[str, ...] = (
        'button[type="submit"]',
        'input[type="submit"]',
        'button:has-text("Log in")',
        'button:has-text("Sign in")',
        'button:has-text("Login")',
        'button:has-text("Continue")',
        '[data-testid="login-button"]',
    )
    account_menus: tuple[str, ...] = (
        '[aria-label*="account"]',
        ".user-menu",
        ".account-menu",
        '[data-testid="user-menu"]',
    )
    authenticated_url_pattern: str = r"orders|dashboard|home"
    login_url_markers: tuple[str, ...] = ("login", "signin")

    # Service selection
    service_selects: tuple[str, ...] = (
        'select[name*="service" i]',
        'select[id*="service" i]',
        'select[aria-label*="service" i]',
        "#serviceType",
        "#service",
    )

    # Submission flow
    submit_buttons: tuple[str, ...] = (
        'button:has-text("Buy postage")',
        'button:has-text("Apply postage")',
        'button:has-text("Create label")',
        'button:has-text("Continue")',
        'button:has-text("Next")',
        'button:has-text("Submit")',
        'button[type="submit"]',
        '[data-testid="submit-button"]',
        '[data-testid="create-label-button"]',
    )
    confirm_buttons: tuple[str, ...] = (
        'button:has-text("Confirm")',
        'button:has-text("Pay")',
        'button:has-text("Complete")',
        'button:has-text("Finish")',
    )

    # Download
    download_buttons: tuple[str, ...] = (
        'button:has-text("Download")',
        'button:has-text("Print")',
        'button:has-text("Get label")',
        'a:has-text("Download")',
        'a:has-text("Print label")',
        '[data-testid="download-label"]',
        ".download-label",
    )


def is_login_url(url: str, markers: tuple[str, ...] = PortalSelectors.login_url_markers) -> bool:
    low = (url or "").lower()
    return any(m in low for m in markers)


def click_first(page, candidates: tuple[str, ...]) -> str | None:
    """
    Clicks the first candidate present on the page.

    Returns the selector that was clicked, or None when nothing matched. A candidate that
    errors while being queried or clicked is skipped.
    """
    for selector in candidates:
        try:
            el = page.query_selector(selector)
            if el:
                el.click()
                return selector
        except PWError:
            continue
    return None


def fill_first(page, candidates: tuple[str, ...], value: str) -> str | None:
    """Fills the first candidate present on the page. Same skipping rules as click_first()."""
    for selector in candidates:
        try:
            el = page.query_selector(selector)
            if el:
                el.fill(value)
                return selector
        except PWError:
            continue
    return None
