"""Pytest fixtures for client tests."""

import pytest

from fake_endpoint import RecordingEndpoint


@pytest.fixture
def endpoint():
    """A fake endpoint answering 204."""
    return RecordingEndpoint()
