"""
element_resolver.py

What this module does
- Finds the input for a form field from a list of human label synonyms, without knowing
  the portal's markup in advance.

Why it matters
- Field ids and names are not documented and change between portal releases. Resolution
  degrades from specific (accessible name) to generic (test ids) instead of failing.

Behavior summary
- Strategies are tried in fixed priority for each synonym; the first hit across the whole
  synonym list wins.
- Only <input> and <textarea> controls are considered.
- A field that cannot be found is NOT an error. fill() returns FillOutcome(matched=False)
  and nothing on the page is touched, so one missing field never blocks the rest of a
  form. Callers decide whether to report it.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from playwright.sync_api import Error as PWError

logger = logging.getLogger(__name__)

TEXT_CONTROLS = ("input", "textarea")

# Relative to a <label>: following sibling, a child of the label's parent, or a descendant.
LABEL_PROXIMITY_XPATH = (
    "xpath=following-sibling::input | following-sibling::textarea"
    " | ../input | ../textarea | .//input | .//textarea"
)


def normalize_synonym(synonym: str) -> str:
    """'Address line 1' -> 'addressline1' (for matching machine names)."""
    return re.sub(r"\s+", "", synonym).lower()


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _attr_contains(attr: str, value: str) -> str:
    v = _quote(value)
    return ", ".join(f'{tag}[{attr}*="{v}" i]' for tag in TEXT_CONTROLS)


def aria_label_selector(synonym: str) -> str:
    return _attr_contains("aria-label", synonym)


def placeholder_selector(synonym: str) -> str:
    return _attr_contains("placeholder", synonym)


def label_selector(synonym: str) -> str:
    return f'label:has-text("{_quote(synonym)}")'


def name_selector(synonym: str) -> str:
    return _attr_contains("name", normalize_synonym(synonym))


def id_selector(synonym: str) -> str:
    return _attr_contains("id", normalize_synonym(synonym))


def test_id_selector(synonym: str) -> str:
    return _attr_contains("data-testid", normalize_synonym(synonym))


def id_lookup_selector(element_id: str) -> str:
    """Attribute form instead of '#id' so ids with dots or colons still work."""
    return f'[id="{_quote(element_id)}"]'


@dataclass(frozen=True)
class FillOutcome:
    field: str
    matched: bool
    synonym: str | None = None
    strategy: str | None = None


def _query(page, selector: str):
    return page.query_selector(selector)


def _find_via_label(page, synonym: str):
    label = page.query_selector(label_selector(synonym))
    if not label:
        return None

    target_id = label.get_attribute("for")
    if target_id:
        field = page.query_selector(id_lookup_selector(target_id))
        if field:
            return field

    return label.query_selector(LABEL_PROXIMITY_XPATH)


def _by_selector(build: Callable[[str], str]):
    return lambda page, synonym: _query(page, build(synonym))


# Ordered (strategy name, finder). Each finder is (page, synonym) -> element | None.
STRATEGIES: tuple[tuple[str, Callable], ...] = (
    ("aria-label", _by_selector(aria_label_selector)),
    ("placeholder", _by_selector(placeholder_selector)),
    ("label", _find_via_label),
    ("name", _by_selector(name_selector)),
    ("id", _by_selector(id_selector)),
    ("data-testid", _by_selector(test_id_selector)),
)


class ElementResolver:
    def __init__(self, page, strategies: Sequence[tuple[str, Callable]] = STRATEGIES) -> None:
        self.page = page
        self.strategies = tuple(strategies)

    def locate(self, synonyms: Sequence[str]):
        """Returns (element, synonym, strategy) for the first hit, or (None, None, None)."""
        for synonym in synonyms:
            try:
                for strategy_name, find in self.strategies:
                    el = find(self.page, synonym)
                    if el:
                        return el, synonym, strategy_name
            except PWError as e:
                # A synonym that produces an unusable selector moves on to the next one.
                logger.debug("Lookup for %r failed: %s", synonym, e)
        return None, None, None

    def fill(self, synonyms: Sequence[str], value: str, *, field: str | None = None) -> FillOutcome:
        name = field or (synonyms[0] if synonyms else "?")
        el, synonym, strategy = self.locate(synonyms)

        if el is None:
            logger.warning("No control found for field '%s' (tried %s)", name, list(synonyms))
            return FillOutcome(field=name, matched=False)

        try:
            el.fill(value)
        except PWError as e:
            logger.warning("Control for field '%s' refused input: %s", name, e)
            return FillOutcome(field=name, matched=False, synonym=synonym, strategy=strategy)

        logger.info("Filled '%s' via %s (%r)", name, strategy, synonym)
        return FillOutcome(field=name, matched=True, synonym=synonym, strategy=strategy)
