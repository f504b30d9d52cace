from __future__ import annotations

import pytest

from parcel_labels.config.settings import Settings, require_portal_credentials


@pytest.mark.unit
def test_require_portal_credentials_raises_when_missing():
    with pytest.raises(RuntimeError) as e:
        require_portal_credentials(username=None, password=None)

    msg = str(e.value)
    assert "Missing required portal settings" in msg
    assert "PORTAL_USERNAME" in msg
    assert "PORTAL_PASSWORD" in msg


@pytest.mark.unit
def test_require_portal_credentials_names_only_the_missing_one():
    with pytest.raises(RuntimeError) as e:
        require_portal_credentials(username="ops@example.com", password="")

    assert "PORTAL_PASSWORD" in str(e.value)
    assert "PORTAL_USERNAME" not in str(e.value)


@pytest.mark.unit
def test_require_portal_credentials_returns_values_when_present():
    assert require_portal_credentials(username="ops@example.com", password="s3cret") == (
        "ops@example.com",
        "s3cret",
    )


@pytest.mark.unit
def test_settings_read_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("PORTAL_HEADLESS", "false")
    monkeypatch.setenv("SESSION_PATH", str(tmp_path / "s.json"))
    monkeypatch.setenv("PORTAL_CREATE_ORDER_URL", "https://portal.example/create")

    s = Settings(_env_file=None)

    assert s.portal_headless is False
    assert s.session_path == tmp_path / "s.json"
    assert s.portal_create_order_url == "https://portal.example/create"


@pytest.mark.unit
def test_settings_defaults(monkeypatch):
    for var in ("SESSION_PATH", "LABEL_DIR", "PORTAL_HEADLESS", "LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)

    s = Settings(_env_file=None)

    assert s.portal_headless is True
    assert s.log_level == "INFO"
    assert s.session_path.name == "parcel-labels-session.json"
    assert s.label_dir.name == "shipping-labels"


@pytest.mark.unit
def test_default_artifact_dirs_are_user_writable(monkeypatch, tmp_path):
    monkeypatch.delenv("SCREENSHOT_DIR", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))

    s = Settings(_env_file=None)

    assert s.screenshot_dir == tmp_path / ".parcel-labels" / "artifacts"
    assert "site-packages" not in str(s.screenshot_dir)
