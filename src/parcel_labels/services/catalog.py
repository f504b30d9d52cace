from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ServiceCode(StrEnum):
    TRACKED24 = "TRACKED24"
    TRACKED48 = "TRACKED48"
    SPECIALDELIVERY9 = "SPECIALDELIVERY9"
    SPECIALDELIVERY1 = "SPECIALDELIVERY1"
    SIGNED = "SIGNED"
    SIGNED2 = "SIGNED2"


@dataclass(frozen=True)
class ServiceInfo:
    code: str
    name: str
    description: str


SERVICE_CATALOG: dict[ServiceCode, ServiceInfo] = {
    ServiceCode.TRACKED24: ServiceInfo(
        "TRACKED24", "Royal Mail Tracked 24", "Next working day delivery with tracking"
    ),
    ServiceCode.TRACKED48: ServiceInfo(
        "TRACKED48", "Royal Mail Tracked 48", "2-3 working day delivery with tracking"
    ),
    ServiceCode.SPECIALDELIVERY9: ServiceInfo(
        "SPECIALDELIVERY9",
        "Special Delivery Guaranteed by 9am",
        "Next day by 9am, compensation up to £2,500",
    ),
    ServiceCode.SPECIALDELIVERY1: ServiceInfo(
        "SPECIALDELIVERY1",
        "Special Delivery Guaranteed by 1pm",
        "Next day by 1pm, compensation up to £500",
    ),
    ServiceCode.SIGNED: ServiceInfo(
        "SIGNED", "Royal Mail Signed For 1st Class", "1st class with signature on delivery"
    ),
    ServiceCode.SIGNED2: ServiceInfo(
        "SIGNED2", "Royal Mail Signed For 2nd Class", "2nd class with signature on delivery"
    ),
}


def normalize_service_code(value: ServiceCode | str) -> str:
    """
    Accepts either a ServiceCode enum value or a raw string.
    Raises ValueError for anything outside the catalog.
    """
    if isinstance(value, ServiceCode):
        return value.value

    code = str(value).strip().upper()
    allowed = {c.value for c in ServiceCode}
    if code not in allowed:
        raise ValueError(f"Unknown service code {value!r}. Allowed: {', '.join(sorted(allowed))}")
    return code


def service_display_name(code: str) -> str:
    """Falls back to the raw code so an unknown value still reads sensibly in a preview."""
    try:
        return SERVICE_CATALOG[ServiceCode(code)].name
    except ValueError:
        return code


def list_services() -> list[ServiceInfo]:
    return list(SERVICE_CATALOG.values())
