"""Shared fixtures for the Cider client tests."""

import json
from pathlib import Path
from typing import Any, Dict, Optional

import pytest

from cider.client import CiderClient
from cider.models import CiderConfig
from cider_mocks import BASE_URL, RecordingTransport


@pytest.fixture
def fixtures() -> Dict[str, Any]:
    """Load Cider API response fixtures from JSON file.

    Returns:
        Dictionary containing all fixture responses
    """
    fixtures_path = Path(__file__).parent / "fixtures" / "cider_responses.json"
    with open(fixtures_path, "r") as f:
        return json.load(f)


@pytest.fixture
def make_client():
    """Factory for a CiderClient wired to a RecordingTransport.

    Returns:
        Callable taking a request handler and an optional token, returning
        ``(client, transport)``
    """

    def factory(handler, token: Optional[str] = None):
        transport = RecordingTransport(handler)
        config = CiderConfig(base_url=BASE_URL, api_token=token)
        return CiderClient(config, transport=transport), transport

    return factory
