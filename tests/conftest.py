"""Pytest configuration and shared fixtures.

This module provides fixtures for testing shelfshare, including an isolated
environment, a frozen clock, an in-memory cache and sample platform payloads.
"""

import os
from datetime import datetime, timezone
from typing import Generator

import pytest

from shelfshare.rentals.accrual import calculator
from shelfshare.rentals.cache import ResponseCache
from shelfshare.rentals.config import reset_config


FROZEN_NOW = datetime(2025, 1, 10, 12, 0, tzinfo=timezone.utc)


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch) -> Generator[None, None, None]:
    """Clear shelfshare settings and point the cache at a temp file."""
    for name in list(os.environ):
        if name.startswith("SHELFSHARE_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("SHELFSHARE_CACHE_PATH", str(tmp_path / "cache.db"))

    reset_config()
    yield
    reset_config()


@pytest.fixture
def frozen_clock(monkeypatch) -> datetime:
    """Freeze the calculator clock at FROZEN_NOW."""
    monkeypatch.setattr(calculator, "clock", lambda: FROZEN_NOW)
    return FROZEN_NOW


# ============================================================================
# Cache Fixtures
# ============================================================================


@pytest.fixture
def cache() -> ResponseCache:
    """Create an in-memory response cache."""
    return ResponseCache(":memory:", ttl=300)


# ============================================================================
# Sample Platform Payloads
# ============================================================================


@pytest.fixture
def active_rental_payload() -> dict:
    """A checked out rental as returned by GET /borrower/rentals."""
    return {
        "_id": "req-1",
        "status": "approved",
        "book": {
            "_id": "book-1",
            "title": "Dune",
            "author": "Frank Herbert",
            "rental": {"pricePerDay": 2.5},
        },
        "publisher": {"fullName": "Ada Lovelace", "communityName": "Maple Street"},
        "rental": {
            "status": "active",
            "checkedOutDate": "2025-01-01T00:00:00.000Z",
            "actualStartDate": "2025-01-01T00:00:00.000Z",
            "actualEndDate": "2025-01-08T00:00:00.000Z",
        },
    }


@pytest.fixture
def hold_payload() -> dict:
    """A hold that has not been converted to a rental."""
    return {
        "_id": "hold-1",
        "status": "hold",
        "book": {"_id": "book-2", "title": "Emma", "rental": {"pricePerDay": 1}},
        "publisher": {"fullName": "Grace Hopper"},
        "holdExpiry": "2025-01-10T15:20:00.000Z",
    }


# ============================================================================
# CLI Testing Fixtures
# ============================================================================


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner."""
    from typer.testing import CliRunner
    return CliRunner()


@pytest.fixture
def cli_app():
    """Get the CLI app for testing."""
    from shelfshare.rentals.cli import app
    return app
