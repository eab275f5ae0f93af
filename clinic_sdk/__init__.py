"""Public SDK exports."""

from clinic_sdk.client import ApiClient
from clinic_sdk.dispatcher import DispatchState, RequestDispatcher
from clinic_sdk.errors import ErrorCategory, categorize, classify
from clinic_sdk.exceptions import ApiError, ErrorKind, SDKError
from clinic_sdk.refresh import TokenRefresher
from clinic_sdk.services.appointments import AppointmentService
from clinic_sdk.services.auth import AuthService
from clinic_sdk.signals import SessionSignal
from clinic_sdk.store import (
    CredentialStore,
    CredentialStoreError,
    InMemoryCredentialStore,
    RedisCredentialStore,
)
from clinic_sdk.transport import RequestDescriptor

__all__ = [
    "ApiClient",
    "ApiError",
    "AppointmentService",
    "AuthService",
    "CredentialStore",
    "CredentialStoreError",
    "DispatchState",
    "ErrorCategory",
    "ErrorKind",
    "InMemoryCredentialStore",
    "RedisCredentialStore",
    "RequestDescriptor",
    "RequestDispatcher",
    "SDKError",
    "SessionSignal",
    "TokenRefresher",
    "categorize",
    "classify",
]
