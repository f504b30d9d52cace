from __future__ import annotations

import logging
from dataclasses import dataclass

from playwright.sync_api import Error as PWError

from parcel_labels.scraping.selectors import PortalSelectors
from parcel_labels.services.catalog import service_display_name

logger = logging.getLogger(__name__)

OPTION_TIMEOUT_MS = 2_000


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def radio_selector(code: str, display_name: str) -> str:
    return (
        f'input[type="radio"][value*="{_quote(code)}" i], '
        f'input[type="radio"][value*="{_quote(display_name)}" i]'
    )


def tile_selector(code: str, display_name: str) -> str:
    return (
        f'[data-service="{_quote(code)}"], [data-value="{_quote(code)}"], '
        f'.service-tile:has-text("{_quote(display_name)}")'
    )


def text_label_selector(display_name: str) -> str:
    name = _quote(display_name)
    return f'label:text-is("{name}"), div:text-is("{name}"):not(:has(div))'


@dataclass(frozen=True)
class ServiceSelection:
    code: str
    display_name: str
    matched: bool
    strategy: str | None = None


class ServiceResolver:
    """
    What it does:
    - Picks the shipping service on the order form, whatever control the portal uses for it.

    Why it matters:
    - The service picker has been a dropdown, radio group and card grid at different times.

    Behavior:
    - Tries dropdown, radio, tile, then plain text label; the first successful action wins.
    - Best effort: nothing found returns ServiceSelection(matched=False), never raises.
    """

    def __init__(self, page, selectors: PortalSelectors | None = None) -> None:
        self.page = page
        self.sel = selectors or PortalSelectors()

    def select_service(self, code: str) -> ServiceSelection:
        name = service_display_name(code)

        for strategy, attempt in (
            ("select", self._via_select),
            ("radio", self._via_radio),
            ("tile", self._via_tile),
            ("label", self._via_label),
        ):
            try:
                if attempt(code, name):
                    logger.info("Selected service %s via %s", code, strategy)
                    return ServiceSelection(code, name, matched=True, strategy=strategy)
            except PWError as e:
                logger.debug("Service %s strategy failed: %s", strategy, e)

        logger.warning("Could not find a control for service %s (%s)", code, name)
        return ServiceSelection(code, name, matched=False)

    def _via_select(self, code: str, name: str) -> bool:
        for selector in self.sel.service_selects:
            select = self.page.query_selector(selector)
            if not select:
                continue
            # Value first, then the visible label.
            try:
                select.select_option(value=code, timeout=OPTION_TIMEOUT_MS)
            except PWError:
                select.select_option(label=name, timeout=OPTION_TIMEOUT_MS)
            return True
        return False

    def _click(self, selector: str) -> bool:
        el = self.page.query_selector(selector)
        if not el:
            return False
        el.click()
        return True

    def _via_radio(self, code: str, name: str) -> bool:
        return self._click(radio_selector(code, name))

    def _via_tile(self, code: str, name: str) -> bool:
        return self._click(tile_selector(code, name))

    def _via_label(self, code: str, name: str) -> bool:
        return self._click(text_label_selector(name))
