"""
Pattern-based mining of the confirmation page text.

The portal offers no structured confirmation data, so the tracking number and the cost
are pulled out of the rendered text with ordered regular expressions. Both are optional:
a miss yields None, never an error.
"""

from __future__ import annotations

import re

from parcel_labels.services.portal_client import ConfirmationRecord

# Two letters, nine digits, GB suffix (e.g. AB123456789GB).
TRACKING_NUMBER = r"[A-Z]{2}\d{9}GB"

TRACKING_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(rf"Tracking[:\s#]*({TRACKING_NUMBER})", re.IGNORECASE),
    re.compile(rf"Reference[:\s#]*({TRACKING_NUMBER})", re.IGNORECASE),
    re.compile(rf"({TRACKING_NUMBER})"),
    re.compile(r"Barcode[:\s#]*(\d+)", re.IGNORECASE),
)

COST_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"Total[:\s]*[£$]?(\d[\d.,]*)", re.IGNORECASE),
    re.compile(r"Cost[:\s]*[£$]?(\d[\d.,]*)", re.IGNORECASE),
    re.compile(r"Price[:\s]*[£$]?(\d[\d.,]*)", re.IGNORECASE),
    re.compile(r"£(\d[\d.,]*)"),
)


def _first_match(patterns: tuple[re.Pattern, ...], text: str) -> str | None:
    for pattern in patterns:
        m = pattern.search(text)
        if m:
            return m.group(1)
    return None


def extract_tracking_number(text: str) -> str | None:
    return _first_match(TRACKING_PATTERNS, text or "")


def extract_cost(text: str) -> str | None:
    amount = _first_match(COST_PATTERNS, text or "")
    if amount is None:
        return None
    return f"£{amount.rstrip('.,')}"


def extract_confirmation(text: str) -> ConfirmationRecord:
    return ConfirmationRecord(
        tracking_number=extract_tracking_number(text),
        cost=extract_cost(text),
    )


def find_tracking_number(filename: str) -> str | None:
    """Tracking number embedded in a downloaded label's suggested filename, if any."""
    m = re.search(rf"({TRACKING_NUMBER})", filename or "")
    return m.group(1) if m else None
