"""API module for the rental platform.

Provides a client for the borrower and rental REST endpoints.
"""

from .client import (
    PlatformAuthError,
    PlatformError,
    PlatformNotFoundError,
    RentalPlatformClient,
    RentalRecord,
)

__all__ = [
    "PlatformAuthError",
    "PlatformError",
    "PlatformNotFoundError",
    "RentalPlatformClient",
    "RentalRecord",
]
