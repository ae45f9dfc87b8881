"""Shared pytest fixtures for changefx tests."""

import pytest

from changefx import _turn


@pytest.fixture(autouse=True)
def reset_turn_state():
    """Drop pending deliveries and scheduler overrides around each test."""
    _turn.reset()
    yield
    _turn.reset()
