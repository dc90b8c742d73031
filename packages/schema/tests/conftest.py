"""Pytest configuration for dataknobs_schema tests."""

import asyncio
import sys
from pathlib import Path

import pytest

# Add the package source to path for testing
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from dataknobs_schema import use_localizer  # noqa: E402


@pytest.fixture(scope="session")
def event_loop_policy():
    """Set the event loop policy for the test session."""
    return asyncio.DefaultEventLoopPolicy()


@pytest.fixture(autouse=True)
def reset_localizer():
    """Every test starts and ends with the source templates."""
    use_localizer(None)
    yield
    use_localizer(None)
