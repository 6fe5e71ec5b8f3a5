"""
tests/conftest.py -- Shared test fixtures for the admin gate.

This module provides:
  - clock: a FakeClock that only moves when a test advances it
  - verifier: a StubVerifier that accepts exactly ADMIN_PASSWORD
  - make_client(**settings_overrides): TestClient factory over the real app
  - api_client: make_client() with default settings

Design: the real lifespan builds stores with the system clock and starts
background sweepers. _patch_lifespan() replaces it with one that calls
init_state() with the fake clock and stub verifier and starts no tasks, so
every test gets isolated stores and fully controlled time.

Clients are function-scoped (unlike a typical module-scoped client) because
the throttles are stateful: one test's failed logins must not lock out the next.

PRODUCTION must be unset/false before api.main is imported, otherwise
get_settings() refuses to start without SECRET_PASSWORD.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager

# CRITICAL: force development mode before any api/core import.
os.environ["PRODUCTION"] = "false"

import pytest
from fastapi.testclient import TestClient

from api.main import app, init_state
from core.config import Settings

ADMIN_PASSWORD = "correct-horse-battery"


class FakeClock:
    """Manually advanced clock. Starts at an arbitrary fixed epoch."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.current = start

    def now(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


class StubVerifier:
    """Accepts exactly one password and remembers what it was asked."""

    def __init__(self, secret: str = ADMIN_PASSWORD) -> None:
        self.secret = secret
        self.calls: list[str] = []

    def verify(self, candidate: str) -> bool:
        self.calls.append(candidate)
        return candidate == self.secret


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def verifier() -> StubVerifier:
    return StubVerifier()


def _patch_lifespan(settings: Settings, clock: FakeClock, verifier: StubVerifier):
    """Return a lifespan that wires isolated stores into app.state and runs no sweepers."""

    @asynccontextmanager
    async def test_lifespan(app):
        init_state(app, settings, clock=clock, verifier=verifier)
        yield

    return test_lifespan


@pytest.fixture
def make_client(clock: FakeClock, verifier: StubVerifier) -> Generator[Callable[..., TestClient], None, None]:
    """Yield a factory: make_client(**overrides) -> started TestClient.

    overrides are passed to Settings, e.g. make_client(rate_limit_max_requests=3).
    Only one client per test: each start rewires the shared app.state.
    """
    started: list[TestClient] = []

    def _make(base_url: str = "http://testserver", **overrides) -> TestClient:
        settings = Settings(secret_password=ADMIN_PASSWORD, **overrides)
        app.router.lifespan_context = _patch_lifespan(settings, clock, verifier)
        client = TestClient(app, base_url=base_url, raise_server_exceptions=True)
        client.__enter__()
        started.append(client)
        return client

    yield _make

    for client in started:
        client.__exit__(None, None, None)


@pytest.fixture
def api_client(make_client) -> TestClient:
    return make_client()
