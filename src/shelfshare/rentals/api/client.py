"""REST client for the book rental platform.

Wraps the borrower and rental endpoints the web and mobile front ends use.
The platform answers with ``{"success": bool, "message": str, "data": ...}``
envelopes; the client unwraps ``data`` and turns failures into
``PlatformError`` subclasses carrying the server's message.
"""

import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

import requests

from ..accrual.calculator import InvalidInputError, parse_instant, parse_rate
from ..cache import ResponseCache

logger = logging.getLogger(__name__)


class PlatformError(Exception):
    """Base exception for rental platform API errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class PlatformAuthError(PlatformError):
    """Raised when the token is missing, expired or lacks permission."""

    pass


class PlatformNotFoundError(PlatformError):
    """Raised when the requested resource does not exist."""

    pass


ACTIVE_STATUSES = ("active", "overdue")
HOLD_STATUSES = ("hold", "pending", "approved")


@dataclass
class RentalRecord:
    """A rental or hold as returned by the platform."""

    id: str
    book_title: str
    status: str
    book_id: Optional[str] = None
    owner_name: Optional[str] = None
    checkout_at: Optional[datetime] = None
    due_at: Optional[datetime] = None
    returned_at: Optional[datetime] = None
    hold_expiry: Optional[datetime] = None
    daily_rate: Optional[Decimal] = None

    @property
    def is_active(self) -> bool:
        """Check if the book is currently checked out."""
        return self.status in ACTIVE_STATUSES and self.returned_at is None

    @property
    def is_hold(self) -> bool:
        """Check if this is a hold or a request not yet checked out."""
        return self.status in HOLD_STATUSES and self.checkout_at is None

    @classmethod
    def from_api(cls, data: dict) -> "RentalRecord":
        """Build a record from platform JSON.

        Raises:
            InvalidInputError: If a date or rate in the payload is malformed
        """
        book = data.get("book") or {}
        if not isinstance(book, dict):
            book = {"_id": book}
        rental = data.get("rental") or {}
        publisher = data.get("publisher") or {}
        if not isinstance(publisher, dict):
            publisher = {}

        rate = (book.get("rental") or {}).get("pricePerDay")
        if rate is None:
            rate = book.get("dailyRate", book.get("rentPerDay"))

        checkout = rental.get("checkedOutDate") or rental.get("actualStartDate")
        status = rental.get("status") if checkout else None

        return cls(
            id=str(data.get("_id") or data.get("id") or ""),
            book_id=_optional_str(book.get("_id") or book.get("id")),
            book_title=book.get("title") or "Unknown Book",
            owner_name=publisher.get("fullName") or publisher.get("communityName"),
            status=status or data.get("status") or "unknown",
            checkout_at=_optional_instant(checkout, "checkedOutDate"),
            due_at=_optional_instant(rental.get("actualEndDate"), "actualEndDate"),
            returned_at=_optional_instant(rental.get("returnedDate"), "returnedDate"),
            hold_expiry=_optional_instant(data.get("holdExpiry"), "holdExpiry"),
            daily_rate=parse_rate(rate) if rate is not None else None,
        )


def _optional_str(value: Any) -> Optional[str]:
    return str(value) if value else None


def _optional_instant(value: Any, name: str) -> Optional[datetime]:
    if value in (None, ""):
        return None
    return parse_instant(value, name)


class RentalPlatformClient:
    """Client for the rental platform REST API."""

    DEFAULT_BASE_URL = "http://localhost:5000/api"

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: Optional[str] = None,
        timeout: int = 10,
        cache: Optional[ResponseCache] = None,
    ):
        """Initialize client.

        Args:
            base_url: API root, e.g. "https://library.example.com/api"
            token: Bearer token for authenticated endpoints
            timeout: Request timeout in seconds
            cache: Optional cache for GET responses
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.cache = cache
        self.skipped_records = 0
        self._session = requests.Session()
        self._session.headers.update({
            "Content-Type": "application/json",
            "User-Agent": "shelfshare/0.1.0",
        })
        self.set_token(token)

    def set_token(self, token: Optional[str]) -> None:
        """Set or clear the bearer token."""
        self.token = token
        if token:
            self._session.headers["Authorization"] = f"Bearer {token}"
        else:
            self._session.headers.pop("Authorization", None)

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
    ) -> Any:
        """Make a request with error handling and envelope unwrapping."""
        url = self._url(path)
        logger.debug("%s %s params=%s", method, url, params)
        try:
            response = self._session.request(
                method, url, params=params, json=json, timeout=self.timeout
            )
            response.raise_for_status()
        except requests.exceptions.Timeout:
            logger.warning("%s %s timed out", method, url)
            raise PlatformError("Request timed out")
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code
            message = _error_message(e.response) or f"HTTP error: {status}"
            logger.warning("%s %s failed with %s: %s", method, url, status, message)
            if status in (401, 403):
                raise PlatformAuthError(message, status)
            if status == 404:
                raise PlatformNotFoundError(message, status)
            raise PlatformError(message, status)
        except requests.exceptions.RequestException as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise PlatformError(f"Network error. Please check your connection. ({e})")

        try:
            body = response.json()
        except ValueError:
            raise PlatformError("Invalid JSON in response", response.status_code)

        if isinstance(body, dict):
            if body.get("success") is False:
                raise PlatformError(body.get("message") or "Server error occurred")
            if "data" in body:
                return body["data"]
        return body

    def _get(self, path: str, params: Optional[dict] = None) -> Any:
        """GET with optional caching."""
        key = None
        if self.cache is not None:
            query = "&".join(f"{k}={v}" for k, v in sorted((params or {}).items()))
            key = f"{_token_digest(self.token)}:{path}?{query}"
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug("Cache hit for %s", key)
                return cached

        data = self._request("GET", path, params=params)

        if key is not None:
            self.cache.set(key, data)
        return data

    def _post(self, path: str, json: Optional[dict] = None) -> Any:
        """POST; invalidates the cache since server state changed."""
        data = self._request("POST", path, json=json or {})
        if self.cache is not None:
            self.cache.clear()
        return data

    # ========================================================================
    # Borrower Rentals
    # ========================================================================

    def get_rentals(self) -> list[RentalRecord]:
        """Get the borrower's current rentals and holds.

        Records the platform sent with malformed dates or rates are logged
        and left out; their count is kept in ``skipped_records``.

        Returns:
            List of RentalRecord objects
        """
        data = self._get("/borrower/rentals")
        if isinstance(data, dict):
            data = data.get("rentals", [])

        records = []
        self.skipped_records = 0
        for item in data or []:
            if not isinstance(item, dict):
                logger.warning("Skipping rental entry that is not an object: %r", item)
                self.skipped_records += 1
                continue
            try:
                records.append(RentalRecord.from_api(item))
            except InvalidInputError as e:
                logger.warning(
                    "Skipping rental %s from platform: %s", item.get("_id") or item.get("id"), e
                )
                self.skipped_records += 1
        return records

    def get_rental_history(self, page: int = 1, limit: int = 20) -> dict:
        """Get the borrower's rental history with cost breakdowns.

        Args:
            page: Page number, starting at 1
            limit: Items per page

        Returns:
            Dict with "rentals", "summary" and "pagination"
        """
        return self._get("/rental/history", params={"page": page, "limit": limit})

    def get_rental_summary(self) -> dict:
        """Get the borrower's rental summary statistics."""
        return self._get("/rental/summary")

    def get_book(self, book_id: str) -> dict:
        """Get book details."""
        return self._get(f"/borrower/books/{book_id}")

    def get_late_fee_rate(self) -> Decimal:
        """Get the platform's late fee per day."""
        data = self._get("/rental/late-fee-rate")
        rate = data.get("rate") if isinstance(data, dict) else data
        try:
            return parse_rate(rate, "rate")
        except InvalidInputError as e:
            raise PlatformError(f"Invalid late fee rate from server: {e}")

    def return_book(self, request_id: str, return_date: Optional[datetime] = None) -> dict:
        """Return a checked out book.

        Args:
            request_id: Rental request ID
            return_date: Return instant (default: server time)

        Returns:
            Return details including late fees
        """
        payload = {}
        if return_date is not None:
            payload["returnDate"] = parse_instant(return_date, "return_date").isoformat()
        return self._post(f"/rental/return/{request_id}", json=payload)


def _token_digest(token: Optional[str]) -> str:
    """Short stable digest of a token, used in cache keys."""
    if not token:
        return "anonymous"
    return hashlib.sha256(token.encode()).hexdigest()[:16]


def _error_message(response: Optional[requests.Response]) -> Optional[str]:
    """Extract the server's error message from a failed response."""
    if response is None:
        return None
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("message") or body.get("error")
    return None
