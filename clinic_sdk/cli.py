"""CLI entrypoints for clinic admin operations."""

from __future__ import annotations

import argparse
import asyncio
import getpass
import json
import sys
from collections.abc import Sequence
from typing import Any

from redis import asyncio as redis_async

from clinic_sdk.client import ApiClient
from clinic_sdk.config import Settings, configure_structlog, get_settings
from clinic_sdk.errors import classify
from clinic_sdk.exceptions import SDKError
from clinic_sdk.services.appointments import AppointmentService
from clinic_sdk.services.auth import AuthService
from clinic_sdk.signals import SessionSignal
from clinic_sdk.store import CredentialStore, RedisCredentialStore
from clinic_sdk.types import AppointmentFilters, ErrorOverrides

FALLBACK_MESSAGE = "unexpected error, please retry"
SIGN_IN_OVERRIDES: ErrorOverrides = {
    "unauthorized": "invalid credentials.",
    "validation": "invalid data, please check and retry.",
}
STATUS_CHOICES = ("AGENDADO", "CONFIRMADO", "CANCELADO", "REALIZADO")


def _print_sign_in_hint() -> None:
    """Point the operator back to the sign-in command."""
    print("Session expired. Run 'signin' to start a new session.", file=sys.stderr)


async def _run_command(args: argparse.Namespace, settings: Settings) -> Any:
    """Execute one parsed command against the configured API."""
    redis_client = redis_async.from_url(settings.redis.url)
    store: CredentialStore = RedisCredentialStore(
        redis_client, key_prefix=settings.redis.key_prefix
    )
    signal = SessionSignal(navigate_to_sign_in=_print_sign_in_hint)
    try:
        async with ApiClient.from_settings(store, signal=signal, settings=settings) as api:
            if args.command == "signin":
                password = args.password or getpass.getpass("Password: ")
                await AuthService(api).sign_in(args.email, password)
                return {"signed_in": True}
            if args.command == "logout":
                await AuthService(api).logout()
                return {"signed_in": False}

            appointments = AppointmentService(api)
            if args.action == "list":
                filters = AppointmentFilters(
                    status=args.status,
                    start_date=args.start_date,
                    end_date=args.end_date,
                    doctor_id=args.doctor_id,
                    clinic_id=args.clinic_id,
                )
                return await appointments.list_appointments(filters)
            if args.action == "get":
                return await appointments.get(args.appointment_id)
            if args.action == "confirm":
                return await appointments.confirm(args.appointment_id)
            return await appointments.cancel(args.appointment_id)
    finally:
        await redis_client.aclose()


def _build_parser() -> argparse.ArgumentParser:
    """Build command-line parser for supported commands."""
    parser = argparse.ArgumentParser(prog="python -m clinic_sdk.cli")
    subcommands = parser.add_subparsers(dest="command", required=True)

    signin_parser = subcommands.add_parser("signin")
    signin_parser.add_argument("--email", required=True)
    signin_parser.add_argument(
        "--password",
        default=None,
        help="Prompted for when omitted.",
    )

    subcommands.add_parser("logout")

    appointments_parser = subcommands.add_parser("appointments")
    actions = appointments_parser.add_subparsers(dest="action", required=True)

    list_parser = actions.add_parser("list")
    list_parser.add_argument("--status", choices=STATUS_CHOICES, default=None)
    list_parser.add_argument("--start-date", default=None)
    list_parser.add_argument("--end-date", default=None)
    list_parser.add_argument("--doctor-id", default=None)
    list_parser.add_argument("--clinic-id", default=None)

    for action in ("get", "confirm", "cancel"):
        action_parser = actions.add_parser(action)
        action_parser.add_argument("appointment_id")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run CLI command."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    settings = get_settings()
    configure_structlog(settings)

    try:
        result = asyncio.run(_run_command(args, settings))
    except SDKError as exc:
        overrides = SIGN_IN_OVERRIDES if args.command == "signin" else None
        print(classify(exc, FALLBACK_MESSAGE, overrides), file=sys.stderr)
        return 1

    print(json.dumps(result))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
