from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from parcel_labels.config.paths import (
    default_label_dir,
    default_screenshot_dir,
    default_session_path,
    env_file_paths,
)

_UNSET = object()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=tuple(str(p) for p in env_file_paths()),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    portal_login_url: str = Field(
        default="https://business.parcel.royalmail.com/", alias="PORTAL_LOGIN_URL"
    )
    portal_create_order_url: str = Field(
        default="https://business.parcel.royalmail.com/orders/single/create",
        alias="PORTAL_CREATE_ORDER_URL",
    )
    portal_username: str | None = Field(default=None, alias="PORTAL_USERNAME")
    portal_password: str | None = Field(default=None, alias="PORTAL_PASSWORD")
    portal_headless: bool = Field(default=True, alias="PORTAL_HEADLESS")

    session_path: Path = Field(default_factory=default_session_path, alias="SESSION_PATH")
    screenshot_dir: Path = Field(default_factory=default_screenshot_dir, alias="SCREENSHOT_DIR")
    label_dir: Path = Field(default_factory=default_label_dir, alias="LABEL_DIR")


def require_portal_credentials(
    username: object = _UNSET, password: object = _UNSET
) -> tuple[str, str]:
    """
    Explicit arguments (None included) win over the loaded settings, so tests can
    check the validation without a local .env file.
    """
    user = settings.portal_username if username is _UNSET else username
    pw = settings.portal_password if password is _UNSET else password

    missing = []
    if not isinstance(user, str) or not user.strip():
        missing.append("PORTAL_USERNAME")
    if not isinstance(pw, str) or not pw:
        missing.append("PORTAL_PASSWORD")
    if missing:
        raise RuntimeError(
            f"Missing required portal settings: {', '.join(missing)}. "
            "Add them to .env (recommended) or set them as environment variables."
        )

    return user, pw


settings = Settings()
