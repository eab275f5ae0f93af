"""Appointment listing and status transitions."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote, urlencode

from clinic_sdk.client import ApiClient
from clinic_sdk.types import (
    Appointment,
    AppointmentFilters,
    AppointmentStatus,
    MissingParty,
    NamedParty,
    Party,
    ReferenceParty,
)

APPOINTMENTS_PATH = "/agendamento"

# Filter attribute -> query parameter name expected by the remote API.
_QUERY_PARAMETERS: tuple[tuple[str, str], ...] = (
    ("status", "status"),
    ("start_date", "dataInicio"),
    ("end_date", "dataFim"),
    ("doctor_id", "medicoId"),
    ("clinic_id", "clinicaId"),
)

_CONFIRMABLE: frozenset[str] = frozenset({"AGENDADO"})
_CANCELLABLE: frozenset[str] = frozenset({"AGENDADO", "CONFIRMADO"})


def build_query(filters: AppointmentFilters | None) -> str:
    """Return ``?key=value&...`` for the set filters, or an empty string."""
    if filters is None:
        return ""
    params = [
        (name, getattr(filters, attribute))
        for attribute, name in _QUERY_PARAMETERS
        if getattr(filters, attribute) is not None
    ]
    query = urlencode(params)
    return f"?{query}" if query else ""


def can_confirm(status: AppointmentStatus) -> bool:
    return status in _CONFIRMABLE


def can_cancel(status: AppointmentStatus) -> bool:
    return status in _CANCELLABLE


def parse_party(value: Any) -> Party:
    """Classify a loosely-shaped related-record field."""
    if isinstance(value, dict):
        name = value.get("name")
        if isinstance(name, str) and name.strip():
            return NamedParty(name=name.strip())
        return MissingParty()
    if isinstance(value, str) and value.strip():
        return ReferenceParty(reference=value.strip())
    return MissingParty()


def format_party(party: Party, placeholder: str = "-") -> str:
    """Render a related record for display."""
    if isinstance(party, NamedParty):
        return party.name
    if isinstance(party, ReferenceParty):
        return party.reference
    if isinstance(party, MissingParty):
        return placeholder
    raise TypeError(f"Unsupported party type: {type(party).__name__}")


def display_name(value: Any, placeholder: str = "-") -> str:
    """Return a display name for a ``user``, ``medico`` or ``clinica`` field."""
    return format_party(parse_party(value), placeholder)


class AppointmentService:
    """Appointment operations built on the verb-shaped client."""

    def __init__(self, api_client: ApiClient) -> None:
        self._api = api_client

    async def list_appointments(
        self, filters: AppointmentFilters | None = None
    ) -> list[Appointment]:
        """List appointments, optionally filtered."""
        data = await self._api.fetch(f"{APPOINTMENTS_PATH}{build_query(filters)}")
        return data if isinstance(data, list) else []

    async def get(self, appointment_id: str) -> Appointment:
        """Fetch one appointment."""
        return await self._api.fetch(_item_path(appointment_id))

    async def confirm(self, appointment_id: str) -> Appointment:
        """Confirm a scheduled appointment."""
        return await self._api.update(f"{_item_path(appointment_id)}/confirmar", {})

    async def cancel(self, appointment_id: str) -> Appointment:
        """Cancel a scheduled or confirmed appointment."""
        return await self._api.update(f"{_item_path(appointment_id)}/cancelar", {})


def _item_path(appointment_id: str) -> str:
    return f"{APPOINTMENTS_PATH}/{quote(appointment_id, safe='')}"
