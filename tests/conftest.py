# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Global pytest fixtures shared across all test modules.

This module provides the fixtures every engine-level test builds on:
- An in-memory bus (FakeBus) with the adapter at Playback 1
- A fake clock so that bounded waits complete instantly
- An Engine wired to both, with a fixed wall-clock time
"""

import logging
from collections.abc import Generator
from datetime import datetime

import pytest

from cec_conformance.engine import Engine
from cec_conformance.utils.terminal import TerminalColors
from tests.mocks.fake_bus import FakeBus, FakeClock

# Wall-clock time seen by timer programming cases
FIXED_NOW = datetime(2025, 6, 15, 20, 0)


# =============================================================================
# Session-scoped fixtures (shared across all tests)
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def disable_colors() -> Generator[None, None, None]:
    """Make terminal output comparable as plain text.

    The colour switch is read from NO_COLOR when the terminal module is
    imported, which happens during collection, so the class attribute is
    patched directly.
    """
    monkey_patch = pytest.MonkeyPatch()
    monkey_patch.setattr(TerminalColors, "NO_COLOR", True)
    yield
    monkey_patch.undo()


# =============================================================================
# Function-scoped fixtures
# =============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def bus() -> FakeBus:
    return FakeBus()


@pytest.fixture
def engine(bus: FakeBus, clock: FakeClock) -> Engine:
    """Engine on the fake bus; ten second long timeout, fixed current time."""
    return Engine(
        bus,
        long_timeout_s=10,
        sleep=clock.sleep,
        clock=clock,
        now=lambda: FIXED_NOW,
    )


@pytest.fixture(autouse=True)
def reset_root_logger() -> Generator[None, None, None]:
    """Undo handler changes made by configure_logging in CLI tests."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
