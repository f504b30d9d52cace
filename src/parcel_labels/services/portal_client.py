from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Protocol

from parcel_labels.services.catalog import ServiceInfo
from parcel_labels.services.label_request import LabelRequest


@dataclass(frozen=True)
class PortalCredentials:
    username: str
    password: str


@dataclass(frozen=True)
class FormPreview:
    """Reviewable echo of a filled form. `unmatched_fields` lists controls that were silently skipped."""

    name: str
    address1: str
    city: str
    postcode: str
    weight: float
    service: str
    company: str | None = None
    address2: str | None = None
    reference: str | None = None
    unmatched_fields: tuple[str, ...] = ()


@dataclass(frozen=True)
class ConfirmationRecord:
    tracking_number: str | None = None
    cost: str | None = None


@dataclass(frozen=True)
class OperationResult:
    """
    What it does:
    - The structured outcome of one boundary operation.

    Why it matters:
    - Every fault is resolved into one of these; callers never see a raw exception.

    Behavior:
    - to_dict() renders {"success": True, ...} or {"error": True, ...} and drops empty fields.
    """

    success: bool
    message: str
    screenshot: str | None = None
    form_state: FormPreview | None = None
    tracking_number: str | None = None
    cost: str | None = None
    label_path: str | None = None
    services: tuple[ServiceInfo, ...] = field(default_factory=tuple)

    @classmethod
    def ok(cls, message: str, **kwargs) -> OperationResult:
        return cls(success=True, message=message, **kwargs)

    @classmethod
    def failure(cls, message: str, *, screenshot: str | None = None) -> OperationResult:
        return cls(success=False, message=message, screenshot=screenshot)

    def to_dict(self) -> dict:
        out: dict = {"success": True} if self.success else {"error": True}
        out["message"] = self.message
        for key in ("screenshot", "tracking_number", "cost", "label_path"):
            value = getattr(self, key)
            if value is not None:
                out[key] = value
        if self.form_state is not None:
            state = asdict(self.form_state)
            state["unmatched_fields"] = list(self.form_state.unmatched_fields)
            out["form_state"] = {k: v for k, v in state.items() if v is not None}
        if self.services:
            out["services"] = [asdict(s) for s in self.services]
        return out


class LabelPortalClient(Protocol):
    """
    What it does:
    - Defines the API the CLI expects from a label portal automation client.

    Why it matters:
    - The CLI stays stable while the implementation can change
      (Fake for tests, Playwright for real use).

    Behavior:
    - Each call maps to one CLI invocation and returns an OperationResult.
    - close() ends the invocation without ending the browser session.
    """

    def fill(self, request: LabelRequest) -> OperationResult: ...

    def submit(self) -> OperationResult: ...

    def download(self) -> OperationResult: ...

    def list_services(self) -> OperationResult: ...

    def screenshot(self, filename: str | None = None, full_page: bool = False) -> OperationResult: ...

    def reset(self) -> OperationResult: ...

    def close(self) -> None: ...
