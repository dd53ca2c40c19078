"""
Pytest configuration and shared fixtures for saltstream tests.

HTTP traffic goes through httpx.MockTransport backed by salt_api.SaltApiStub.
"""
import httpx
import pytest

from saltstream.config import Settings

from salt_api import SaltApiStub


@pytest.fixture
def settings():
    """Settings pointing at the fake Salt API."""
    return Settings(
        url="https://salt.test:8000/",
        user="salt",
        password="secret",
        eauth="pam",
        read_timeout=5.0,
        join_timeout=5.0,
    )


@pytest.fixture
def credentials(settings):
    return settings.credentials()


@pytest.fixture
def make_client():
    """Build httpx clients bound to a SaltApiStub; closed after the test."""
    clients = []

    def _make(stub: SaltApiStub) -> httpx.Client:
        client = httpx.Client(transport=httpx.MockTransport(stub))
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.close()
