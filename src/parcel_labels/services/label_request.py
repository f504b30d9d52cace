from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from parcel_labels.services.catalog import normalize_service_code


class LabelRequest(BaseModel):
    """
    What it does:
    - Describes one parcel label: recipient, package and service.

    Why it matters:
    - Bad input is rejected here, before a browser is launched or a form is touched.

    Behavior:
    - Frozen once built; weight and dimensions must be positive.
    - `service` is normalized to an upper-case catalog code.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(min_length=1)
    company: str | None = None
    address1: str = Field(min_length=1)
    address2: str | None = None
    city: str = Field(min_length=1)
    postcode: str = Field(min_length=1)
    email: str | None = None
    phone: str | None = None
    weight: float = Field(gt=0)
    length: float | None = Field(default=None, gt=0)
    width: float | None = Field(default=None, gt=0)
    height: float | None = Field(default=None, gt=0)
    service: str
    reference: str | None = None
    contents: str | None = None

    @field_validator("service")
    @classmethod
    def _known_service(cls, value: str) -> str:
        return normalize_service_code(value)

    @field_validator("company", "address2", "email", "phone", "reference", "contents")
    @classmethod
    def _blank_is_missing(cls, value: str | None) -> str | None:
        return value or None
