from __future__ import annotations

import tempfile
from pathlib import Path


def app_base_dir() -> Path:
    """Source checkout root. Only meaningful in dev; installed copies live under site-packages."""
    # .../src/parcel_labels/config/paths.py -> repo root is 3 parents up
    return Path(__file__).resolve().parents[3]


def user_data_dir() -> Path:
    """Writable per-user directory for runtime artifacts."""
    return Path.home() / ".parcel-labels"


def env_file_paths() -> tuple[Path, ...]:
    """
    .env locations, lowest priority first: the dev checkout root, the user directory,
    then the current working directory.
    """
    return (app_base_dir() / ".env", user_data_dir() / ".env", Path.cwd() / ".env")


def default_session_path() -> Path:
    # Temp storage: the descriptor only matters while the browser it points at is alive.
    return Path(tempfile.gettempdir()) / "parcel-labels-session.json"


def default_screenshot_dir() -> Path:
    return user_data_dir() / "artifacts"


def default_label_dir() -> Path:
    return Path.home() / "shipping-labels"
