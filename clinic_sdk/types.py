"""SDK data contract types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, TypedDict

AppointmentStatus = Literal["AGENDADO", "CONFIRMADO", "CANCELADO", "REALIZADO"]

HttpMethod = Literal["GET", "POST", "PATCH", "PUT", "DELETE"]


class ErrorOverrides(TypedDict, total=False):
    """Caller-supplied replacements for the default classifier messages."""

    unauthorized: str
    forbidden: str
    server: str
    validation: str


class TokenPayload(TypedDict, total=False):
    """Credential pair returned by sign-in and refresh endpoints."""

    access_token: str
    refresh_token: str


class Appointment(TypedDict, total=False):
    """Appointment record as returned by the remote API."""

    id: str
    data: str
    status: AppointmentStatus
    user: dict[str, Any] | str
    medico: dict[str, Any] | str
    clinica: dict[str, Any] | str
    tipo: str
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class AppointmentFilters:
    """Optional filters accepted by the appointment listing endpoint."""

    status: AppointmentStatus | None = None
    start_date: str | None = None
    end_date: str | None = None
    doctor_id: str | None = None
    clinic_id: str | None = None


@dataclass(frozen=True)
class NamedParty:
    """Related record embedded as an object carrying a display name."""

    name: str


@dataclass(frozen=True)
class ReferenceParty:
    """Related record embedded only as an identifier string."""

    reference: str


@dataclass(frozen=True)
class MissingParty:
    """Related record absent or in an unrecognized shape."""


Party = NamedParty | ReferenceParty | MissingParty
