"""API clients package."""

from hospitality_sync.clients.hospitality_api_client import (
    HospitalityAPIClient,
    HospitalityAPIError,
    PermissionDeniedError,
    ResourceNotFoundError,
    ServerError,
    SessionExpiredError,
    TransitionRejectedError,
    TransportError,
)

__all__ = [
    "HospitalityAPIClient",
    "HospitalityAPIError",
    "PermissionDeniedError",
    "ResourceNotFoundError",
    "ServerError",
    "SessionExpiredError",
    "TransitionRejectedError",
    "TransportError",
]
