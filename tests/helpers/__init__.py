"""Shared test helpers for the stopsignal test suite."""

from __future__ import annotations

from tests.helpers.schedulers import RecordingScheduler, VirtualScheduler

__all__ = ["RecordingScheduler", "VirtualScheduler"]
