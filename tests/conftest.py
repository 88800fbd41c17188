"""Global test fixtures for stopsignal."""

from __future__ import annotations

import pytest

from tests.helpers import RecordingScheduler, VirtualScheduler


@pytest.fixture
def recording_scheduler() -> RecordingScheduler:
    """Real-time scheduler that records every raw delay it issues."""
    return RecordingScheduler()


@pytest.fixture
def virtual_scheduler() -> VirtualScheduler:
    """Deterministic virtual-clock scheduler."""
    return VirtualScheduler()

