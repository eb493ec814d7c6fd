import re
from typing import List

import pytest
from pytest_httpserver import HTTPServer

from neoaura.http.client import AuraHttpClient
from neoaura.reconciler.dispatcher import ActionDispatcher
from neoaura.reconciler.operations import ResourceOperations
from neoaura.reconciler.poller import CompletionPoller, PollSettings
from neoaura.testing.fake_api import FakeAuraApi


@pytest.fixture
def aura_api(httpserver: HTTPServer) -> FakeAuraApi:
    api = FakeAuraApi()
    httpserver.expect_request(re.compile("^/.*$")).respond_with_handler(api)
    return api


@pytest.fixture
def sleeps() -> List[float]:
    """Collects the durations of all (skipped) sleeps."""
    return []


@pytest.fixture
def aura_client(httpserver: HTTPServer, sleeps) -> AuraHttpClient:
    client = AuraHttpClient(
        base_url=httpserver.url_for("/"),
        timeout=5,
        max_attempts=3,
        retry_interval=15,
        sleep=sleeps.append,
    )
    yield client
    client.close()


@pytest.fixture
def poll_settings() -> PollSettings:
    return PollSettings(interval=5, timeout_minutes=1, settle_delay=60)


@pytest.fixture
def poller(aura_client, poll_settings, sleeps) -> CompletionPoller:
    return CompletionPoller(aura_client, poll_settings, sleep=sleeps.append)


@pytest.fixture
def dispatcher(aura_client) -> ActionDispatcher:
    return ActionDispatcher(aura_client)


@pytest.fixture
def operations(aura_client, dispatcher, poller) -> ResourceOperations:
    return ResourceOperations(aura_client, dispatcher=dispatcher, poller=poller)
