"""
Shared fixtures for the cosched test suite.

``scheduler`` is bound to the test's running loop (use it from
``@pytest.mark.asyncio`` tests); ``blocking_scheduler`` owns a private loop
and is meant for the synchronous ``submit_blocking`` family.
"""

import asyncio

import pytest
import pytest_asyncio

from cosched import Scheduler, shutdown_scheduler


@pytest_asyncio.fixture
async def scheduler():
    sched = Scheduler(asyncio.get_running_loop())
    yield sched
    sched.close()


@pytest.fixture
def blocking_scheduler():
    sched = Scheduler()
    yield sched
    sched.close()


@pytest.fixture
def loop():
    event_loop = asyncio.new_event_loop()
    yield event_loop
    event_loop.close()


@pytest.fixture(autouse=True)
def _reset_default_scheduler():
    yield
    shutdown_scheduler()
