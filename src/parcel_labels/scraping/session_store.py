"""
session_store.py

What this module does
- Persists the single active session descriptor as a small JSON file.

Why it matters
- Every CLI command runs in its own short-lived process. The descriptor is the only
  thing that carries "which browser" and "how far the workflow got" between them.

Behavior summary
- `read()` returns None when there is no usable descriptor (missing or unparseable).
- `advance(...)` only ever flips progress flags to True; `delete()` is the only way back.
- Writes go through a temp file + rename so a crash never leaves half a descriptor.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel

logger = logging.getLogger(__name__)

PROGRESS_FLAGS = ("logged_in", "form_filled", "label_generated")


class SessionDescriptor(BaseModel):
    connection_handle: str
    created_at: datetime
    logged_in: bool = False
    form_filled: bool = False
    label_generated: bool = False
    browser_pid: int | None = None
    user_data_dir: str | None = None

    @classmethod
    def new(
        cls,
        connection_handle: str,
        *,
        browser_pid: int | None = None,
        user_data_dir: str | None = None,
    ) -> SessionDescriptor:
        return cls(
            connection_handle=connection_handle,
            created_at=datetime.now(timezone.utc),
            browser_pid=browser_pid,
            user_data_dir=user_data_dir,
        )


class SessionStore:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> SessionDescriptor | None:
        try:
            raw = self.path.read_text(encoding="utf-8")
            return SessionDescriptor.model_validate_json(raw)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            # ValueError covers ValidationError and UnicodeDecodeError.
            logger.warning("Session descriptor at %s is unreadable, ignoring it: %s", self.path, e)
            return None

    def write(self, descriptor: SessionDescriptor) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(descriptor.model_dump_json(), encoding="utf-8")
        os.replace(tmp, self.path)

    def advance(self, *flags: str) -> SessionDescriptor | None:
        """
        Sets the given progress flags to True on the stored descriptor.

        Returns the updated descriptor, or None when no session is stored
        (there is nothing to advance).
        """
        unknown = set(flags) - set(PROGRESS_FLAGS)
        if unknown:
            raise ValueError(f"Unknown progress flag(s): {', '.join(sorted(unknown))}")

        descriptor = self.read()
        if descriptor is None:
            return None

        updated = descriptor.model_copy(update={flag: True for flag in flags})
        self.write(updated)
        logger.debug("Session advanced: %s", ", ".join(flags))
        return updated

    def delete(self) -> bool:
        try:
            self.path.unlink()
            return True
        except FileNotFoundError:
            return False
