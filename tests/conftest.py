"""Pytest fixtures for WD Bridge tests."""
import pytest
import requests
from unittest.mock import Mock

from wdbridge.core.api import WDApi
from wdbridge.core.auth import WDAuth
from wdbridge.core.client import WDClient


def make_response(status_code=200, json_data=None, headers=None, text="", chunks=None):
    """Build a fake requests.Response."""
    response = Mock()
    response.status_code = status_code
    response.headers = headers or {}
    response.text = text
    response.json.return_value = json_data
    response.iter_content.return_value = iter(chunks or [])
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f"{status_code} Error", response=response
        )
    else:
        response.raise_for_status.return_value = None
    return response


@pytest.fixture
def response_factory():
    """Factory for fake HTTP responses."""
    return make_response


@pytest.fixture
def api():
    """WDApi double with no default behaviour."""
    return Mock(spec=WDApi)


@pytest.fixture
def auth():
    """WDAuth double whose re-authentication always succeeds."""
    return Mock(spec=WDAuth)


@pytest.fixture
def client(api, auth):
    """Client wired to the API and auth doubles, already logged in."""
    wd_client = WDClient("device", api=api, auth=auth)
    wd_client.session.replace_token("token")
    return wd_client


@pytest.fixture
def reporter():
    """Transfer event sink that records calls."""
    return Mock()
