"""
Shared pytest fixtures.

Poller and command tests run against a real RelayState backed by a
mapping file in tmp_path, with the platforms replaced by fakes.
"""

from datetime import timedelta

import pytest

from tuberelay.core import Backoff, MappingStore, RelayState
from tuberelay.services.poller import VideoPoller
from tests.fakes import FakeClock, FakeNotifier, FakeVideoSource

CHECK_INTERVAL = timedelta(hours=2)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def map_path(tmp_path):
    return tmp_path / "channelMap.json"


@pytest.fixture
def store(map_path):
    return MappingStore(map_path)


@pytest.fixture
def backoff():
    return Backoff(
        default_seconds=CHECK_INTERVAL.total_seconds(),
        reset_after_seconds=2 * 60 * 60,
        max_seconds=24 * 60 * 60,
    )


@pytest.fixture
def state(store, backoff):
    return RelayState(store, backoff)


@pytest.fixture
def source():
    return FakeVideoSource()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def poller(state, source, notifier, clock):
    return VideoPoller(
        state,
        source,
        notifier,
        check_interval=CHECK_INTERVAL,
        poll_window=timedelta(hours=24),
        recent_window=timedelta(hours=2),
        recent_max_results=5,
        clock=clock,
    )
