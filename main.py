"""
Command-line entry point for the booking engine, backed by the demo catalog.

Usage:
    python main.py slots --service bath-brush --pet pet-rex --from 2026-03-09 --to 2026-03-10
    python main.py book --service nail-trim --pet pet-mia --start 2026-03-09T14:00:00Z
    python main.py audit --from 2026-03-09 --to 2026-03-16
"""

import argparse
import json
import logging
import sys
import uuid

from booking_engine.api.availability import list_slots
from booking_engine.api.booking import create_booking
from booking_engine.config import settings
from booking_engine.demo_data import build_demo_store
from booking_engine.errors import SchedulingError
from booking_engine.evaluation.schedule_audit import ScheduleAuditor
from booking_engine.logging_context import new_request_id, set_request_id
from booking_engine.schemas.booking_schema import BookingRequest
from booking_engine.utils import parse_date, parse_instant

logger = logging.getLogger(__name__)


def _print_json(payload: dict) -> None:
    sys.stdout.write(json.dumps(payload, indent=2, default=str) + "\n")


def _cmd_slots(args: argparse.Namespace) -> int:
    store = build_demo_store()
    pet = store.get_pet(args.pet)
    response = list_slots(
        store,
        provider_id=args.provider,
        service_id=args.service,
        pet_category=pet.category,
        pet_size=pet.size,
        start_date=parse_date(args.date_from),
        end_date=parse_date(args.date_to),
        caller_timezone=args.tz,
    )
    _print_json(response.model_dump(mode="json"))
    return 0 if response.success else 1


def _cmd_book(args: argparse.Namespace) -> int:
    store = build_demo_store()
    request = BookingRequest(
        provider_id=args.provider,
        service_id=args.service,
        pet_id=args.pet,
        start=parse_instant(args.start),
        idempotency_key=args.key or uuid.uuid4().hex,
        notes=args.notes,
    )
    response = create_booking(store, request)
    _print_json(response.model_dump(mode="json"))
    return 0 if response.success else 1


def _cmd_audit(args: argparse.Namespace) -> int:
    store = build_demo_store()
    auditor = ScheduleAuditor()
    report = auditor.audit(
        store, args.provider, parse_date(args.date_from), parse_date(args.date_to)
    )
    sys.stdout.write(auditor.format_report(report) + "\n")
    return 0 if report.ok else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=f"{settings.engine_name}: list slots and place bookings on the demo catalog."
    )
    parser.add_argument(
        "--provider", default="paws-salon", help="Provider id (default: paws-salon)."
    )
    sub = parser.add_subparsers(dest="command", required=True)

    slots = sub.add_parser("slots", help="List available start times.")
    slots.add_argument("--service", required=True)
    slots.add_argument("--pet", required=True, help="Pet id used for eligibility.")
    slots.add_argument("--from", dest="date_from", required=True, help="YYYY-MM-DD, inclusive.")
    slots.add_argument("--to", dest="date_to", required=True, help="YYYY-MM-DD, exclusive.")
    slots.add_argument("--tz", default=None, help="Timezone to render instants in.")
    slots.set_defaults(handler=_cmd_slots)

    book = sub.add_parser("book", help="Commit a booking.")
    book.add_argument("--service", required=True)
    book.add_argument("--pet", required=True)
    book.add_argument("--start", required=True, help="ISO-8601 instant with offset.")
    book.add_argument("--key", default=None, help="Idempotency key (default: random).")
    book.add_argument("--notes", default=None)
    book.set_defaults(handler=_cmd_book)

    audit = sub.add_parser("audit", help="Audit committed bookings and utilization.")
    audit.add_argument("--from", dest="date_from", required=True)
    audit.add_argument("--to", dest="date_to", required=True)
    audit.set_defaults(handler=_cmd_audit)

    return parser


def main() -> None:
    args = build_parser().parse_args()
    set_request_id(new_request_id("CLI"))
    try:
        sys.exit(args.handler(args))
    except SchedulingError as exc:
        logger.error("%s: %s", exc.code, exc.message)
        sys.exit(2)


if __name__ == "__main__":
    main()
