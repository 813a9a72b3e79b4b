"""ESPN fantasy API integration."""

from .client import (
    EspnClient,
    EspnTimeoutError,
    EspnUnavailableError,
    FailurePolicy,
    FetchResult,
    build_player_filter,
)

__all__ = [
    "EspnClient",
    "EspnTimeoutError",
    "EspnUnavailableError",
    "FailurePolicy",
    "FetchResult",
    "build_player_filter",
]
