from __future__ import annotations

from pathlib import Path

import pytest

from parcel_labels.scraping.diagnostics import DiagnosticCapture
from parcel_labels.testing.fakes import FakePage


@pytest.mark.unit
def test_directory_is_created_on_first_capture(tmp_path):
    shots = tmp_path / "nested" / "shots"
    diagnostics = DiagnosticCapture(shots)
    assert not shots.exists()

    path = diagnostics.capture(FakePage(), "review")

    assert Path(path).parent == shots
    assert Path(path).name.startswith("parcel-labels-review-")


@pytest.mark.unit
def test_capture_without_page_writes_nothing(tmp_path):
    diagnostics = DiagnosticCapture(tmp_path / "shots")

    assert diagnostics.capture(None, "form-error") is None
    assert not (tmp_path / "shots").exists()


@pytest.mark.unit
def test_capture_swallows_unwritable_directory(tmp_path):
    blocker = tmp_path / "shots"
    blocker.write_text("not a directory", encoding="utf-8")

    assert DiagnosticCapture(blocker / "inner").capture(FakePage(), "login") is None
