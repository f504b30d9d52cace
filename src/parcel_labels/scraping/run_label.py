from __future__ import annotations

import argparse
import json
import sys

from pydantic import ValidationError

from parcel_labels.config.logging import configure_logging
from parcel_labels.config.settings import require_portal_credentials, settings
from parcel_labels.scraping.clickdrop_playwright import PlaywrightLabelClient
from parcel_labels.services.catalog import ServiceCode
from parcel_labels.services.label_request import LabelRequest
from parcel_labels.services.portal_client import OperationResult, PortalCredentials

LABEL_FIELDS = (
    "name", "company", "address1", "address2", "city", "postcode", "email", "phone",
    "weight", "length", "width", "height", "service", "reference", "contents",
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="parcel-labels",
        description="Parcel label creation via the carrier's web portal.",
    )
    parser.add_argument("--headful", action="store_true", help="Show the browser window for debugging.")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_create = sub.add_parser("create-label", help="Fill label creation form (does NOT submit).")
    p_create.add_argument("--name", required=True, help="Recipient full name")
    p_create.add_argument("--address1", required=True, help="Address line 1")
    p_create.add_argument("--city", required=True, help="City/town")
    p_create.add_argument("--postcode", required=True, help="UK postcode")
    p_create.add_argument("--weight", type=float, required=True, help="Weight in kg")
    p_create.add_argument(
        "--service",
        required=True,
        help=f"Service code: {', '.join(c.value for c in ServiceCode)}",
    )
    p_create.add_argument("--company", help="Company name")
    p_create.add_argument("--address2", help="Address line 2")
    p_create.add_argument("--email", help="Recipient email")
    p_create.add_argument("--phone", help="Recipient phone")
    p_create.add_argument("--length", type=float, help="Length in cm")
    p_create.add_argument("--width", type=float, help="Width in cm")
    p_create.add_argument("--height", type=float, help="Height in cm")
    p_create.add_argument("--reference", help="Customer reference e.g. order number")
    p_create.add_argument("--contents", help="Package contents description")

    sub.add_parser("submit", help="Submit the filled form after user confirmation.")
    sub.add_parser("download-label", help="Download the generated PDF label.")
    sub.add_parser("list-services", help="Show available services.")

    p_shot = sub.add_parser("screenshot", help="Take screenshot of current page.")
    p_shot.add_argument("--filename", help="Screenshot filename")
    p_shot.add_argument("--full-page", action="store_true", help="Capture full scrollable page")

    sub.add_parser("reset", help="Close browser and clear session.")
    return parser


def _label_request(args: argparse.Namespace) -> LabelRequest:
    return LabelRequest(**{f: getattr(args, f) for f in LABEL_FIELDS if getattr(args, f) is not None})


def _emit(result: OperationResult) -> int:
    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    return 0 if result.success else 1


def _usage_error(message: str) -> int:
    print(json.dumps({"error": True, "message": message}, indent=2, ensure_ascii=False))
    return 2


def main(argv: list[str] | None = None) -> int:
    """
    What it does:
    - One sub-command per workflow step: create-label, submit, download-label,
      plus list-services, screenshot and reset.

    Why it matters:
    - Each command is its own process; a human reviews the preview screenshot
      between create-label and submit.

    Behavior:
    - Prints the operation result as JSON on stdout; logs go to stderr.
    - Exit code 0 on success, 1 on a failure result, 2 on invalid arguments or
      missing credentials.
    - Always closes the client connection; the browser stays up for the next command.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(settings.log_level)

    request = None
    # Only the login inside create-label needs credentials.
    username, password = ("", "")
    if args.cmd == "create-label":
        try:
            request = _label_request(args)
            username, password = require_portal_credentials()
        except ValidationError as e:
            return _usage_error(f"Invalid label options: {e}")
        except RuntimeError as e:
            return _usage_error(str(e))

    client = PlaywrightLabelClient(
        credentials=PortalCredentials(username=username, password=password),
        login_url=settings.portal_login_url,
        create_order_url=settings.portal_create_order_url,
        session_path=settings.session_path,
        screenshot_dir=settings.screenshot_dir,
        label_dir=settings.label_dir,
        headless=settings.portal_headless and not args.headful,
    )

    try:
        if args.cmd == "create-label":
            return _emit(client.fill(request))
        if args.cmd == "submit":
            return _emit(client.submit())
        if args.cmd == "download-label":
            return _emit(client.download())
        if args.cmd == "screenshot":
            return _emit(client.screenshot(filename=args.filename, full_page=args.full_page))
        if args.cmd == "list-services":
            return _emit(client.list_services())
        return _emit(client.reset())
    finally:
        client.close()


if __name__ == "__main__":
    sys.exit(main())
