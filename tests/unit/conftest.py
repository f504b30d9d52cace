from __future__ import annotations

import pytest

from parcel_labels.scraping.diagnostics import DiagnosticCapture
from parcel_labels.scraping.session_store import SessionDescriptor, SessionStore
from parcel_labels.services.label_request import LabelRequest


@pytest.fixture()
def store(tmp_path):
    return SessionStore(tmp_path / "session.json")


@pytest.fixture()
def diagnostics(tmp_path):
    return DiagnosticCapture(tmp_path / "shots")


@pytest.fixture()
def session_with(store):
    """Writes a descriptor with the given progress flags and returns it."""

    def _make(**flags) -> SessionDescriptor:
        descriptor = SessionDescriptor.new(
            "ws://127.0.0.1:9222/devtools/browser/existing",
            browser_pid=1111,
            user_data_dir="/tmp/parcel-labels-profile-existing",
        ).model_copy(update=flags)
        store.write(descriptor)
        return descriptor

    return _make


@pytest.fixture()
def minimal_request():
    return LabelRequest(
        name="Ada Lovelace",
        address1="12 Analytical Row",
        city="London",
        postcode="N1 9GU",
        weight=1.5,
        service="TRACKED24",
    )
