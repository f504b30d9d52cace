from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path

from parcel_labels.scraping.confirmation import find_tracking_number
from parcel_labels.scraping.selectors import PortalSelectors, click_first
from parcel_labels.scraping.session_store import SessionStore
from parcel_labels.utils.errors import PreconditionError

logger = logging.getLogger(__name__)

DOWNLOAD_TIMEOUT_MS = 30_000
LABEL_EXTENSION = ".pdf"


@dataclass(frozen=True)
class DownloadOutcome:
    path: str
    tracking_number: str


def require_label_generated(store: SessionStore) -> None:
    """Raises PreconditionError unless the stored session shows a generated label. No browser access."""
    descriptor = store.read()
    if descriptor is None or not descriptor.label_generated:
        raise PreconditionError("Label has not been generated yet. Call submit first.")


def label_basename(suggested_filename: str) -> str:
    """Tracking number from the suggested filename, else label-<epoch ms>."""
    return find_tracking_number(suggested_filename) or f"label-{int(time.time() * 1000)}"


class LabelDownloader:
    """
    What it does:
    - Saves the label PDF the portal produces after a purchase.

    Behavior:
    - Arms the download listener before clicking, so a fast download is not missed.
    - Clicks the first download/print candidate and waits (bounded) for the download.
    - Saves to <label_dir>/<tracking number or label-timestamp>.pdf.
    - Timeouts (playwright TimeoutError) propagate to the caller.
    """

    def __init__(
        self,
        *,
        store: SessionStore,
        label_dir: str | Path,
        selectors: PortalSelectors | None = None,
        timeout_ms: int = DOWNLOAD_TIMEOUT_MS,
    ) -> None:
        self.store = store
        self.label_dir = Path(label_dir)
        self.sel = selectors or PortalSelectors()
        self.timeout_ms = timeout_ms

    def download(self, page) -> DownloadOutcome:
        require_label_generated(self.store)

        with page.expect_download(timeout=self.timeout_ms) as download_info:
            clicked = click_first(page, self.sel.download_buttons)
            if clicked:
                logger.info("Clicked download control %s", clicked)
            else:
                logger.warning("No download control matched; waiting for a download anyway")

        download = download_info.value
        name = label_basename(download.suggested_filename)

        self.label_dir.mkdir(parents=True, exist_ok=True)
        out = self.label_dir / f"{name}{LABEL_EXTENSION}"
        download.save_as(str(out))
        logger.info("Saved label to %s", out)

        return DownloadOutcome(path=str(out), tracking_number=name)
