from __future__ import annotations

import logging
import time
from pathlib import Path

logger = logging.getLogger(__name__)

FILE_PREFIX = "parcel-labels"


def _epoch_ms() -> int:
    return int(time.time() * 1000)


class DiagnosticCapture:
    """
    What it does:
    - Captures full-page screenshots at workflow steps and on failures.

    Why it matters:
    - The portal is undocumented; a picture of the page is the fastest way to see why a
      heuristic missed.

    Behavior:
    - Writes <screenshot_dir>/parcel-labels-<tag>-<epoch ms>.png; the directory is
      created on first write, not on construction.
    - capture() is best effort: a failing screenshot is logged and returns None so it
      never hides the fault being diagnosed.
    """

    def __init__(self, screenshot_dir: str | Path) -> None:
        self.screenshot_dir = Path(screenshot_dir)

    def path_for(self, tag: str) -> Path:
        self.screenshot_dir.mkdir(parents=True, exist_ok=True)
        return self.screenshot_dir / f"{FILE_PREFIX}-{tag}-{_epoch_ms()}.png"

    def capture(self, page, tag: str) -> str | None:
        if page is None:
            return None
        try:
            out = self.path_for(tag)
            page.screenshot(path=str(out), full_page=True)
        except Exception as e:
            logger.warning("Screenshot '%s' failed: %s", tag, e)
            return None
        logger.debug("Captured %s", out)
        return str(out)

    def screenshot(self, page, filename: str | None = None, full_page: bool = False) -> str:
        """Explicit screenshot request; unlike capture() errors propagate."""
        name = filename or f"{FILE_PREFIX}-{_epoch_ms()}.png"
        self.screenshot_dir.mkdir(parents=True, exist_ok=True)
        out = self.screenshot_dir / Path(name).name
        page.screenshot(path=str(out), full_page=full_page)
        return str(out)
