"""Conector do backend REST: pipeline, prontidão, realtime e endpoints."""

from api.connectors.backend.endpoints import BackendApi
from api.connectors.backend.errors import (
    ApiResponseError,
    AuthenticationRequiredError,
    BackendApiError,
    BackendNotReadyError,
    BackendUnreachableError,
    RateLimitedError,
    RequestAbortedError,
    RequestTimeoutError,
    TransportError,
    UnexpectedResponseError,
)
from api.connectors.backend.gate import EndpointState, RequestGate, coalesce_key
from api.connectors.backend.http_base import HttpClientConfig, RetryPolicy
from api.connectors.backend.http_client import (
    BackendHttpClient,
    create_backend_http_client,
    http_config_from_settings,
)
from api.connectors.backend.models import ApiResponse, NotificationEnvelope
from api.connectors.backend.readiness import ReadinessConfig, ReadinessProber
from api.connectors.backend.realtime import RealtimeChannel, create_realtime_channel

__all__ = [
    "ApiResponse",
    "ApiResponseError",
    "AuthenticationRequiredError",
    "BackendApi",
    "BackendApiError",
    "BackendHttpClient",
    "BackendNotReadyError",
    "BackendUnreachableError",
    "EndpointState",
    "HttpClientConfig",
    "NotificationEnvelope",
    "RateLimitedError",
    "ReadinessConfig",
    "ReadinessProber",
    "RealtimeChannel",
    "RequestAbortedError",
    "RequestGate",
    "RequestTimeoutError",
    "RetryPolicy",
    "TransportError",
    "UnexpectedResponseError",
    "coalesce_key",
    "create_backend_http_client",
    "create_realtime_channel",
    "http_config_from_settings",
]
