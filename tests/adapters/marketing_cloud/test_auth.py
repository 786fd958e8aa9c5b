from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

from campaignsync.adapters.http_resilience import BlockingSession, ResilientClient
from campaignsync.adapters.marketing_cloud import MarketingCloudAuth
from campaignsync.config import AuthConfig
from campaignsync.domain.errors import AuthError
from tests.support.marketing_cloud import TOKEN, FakeMarketingCloud

if TYPE_CHECKING:
    from collections.abc import Callable

    from campaignsync.config import IntegrationConfig, ResilienceConfig


def _auth(config: IntegrationConfig, cloud: FakeMarketingCloud) -> MarketingCloudAuth:
    return MarketingCloudAuth(config=config.auth, session=cloud.session(config.resilience))


def _session(
    resilience: ResilienceConfig,
    handler: Callable[[httpx.Request], httpx.Response],
) -> BlockingSession:
    def factory(config: ResilienceConfig) -> ResilientClient:
        return ResilientClient(config, transport=httpx.MockTransport(handler))

    return BlockingSession(resilience, client_factory=factory)


def test_acquire_posts_client_credentials(
    integration_config: IntegrationConfig,
    cloud: FakeMarketingCloud,
) -> None:
    credential = _auth(integration_config, cloud).acquire()

    assert credential.access_token == TOKEN
    assert cloud.token_requests == [
        {
            "grant_type": "client_credentials",
            "client_id": "client",
            "client_secret": "secret",
            "account_id": "5150",
        }
    ]


def test_acquire_omits_absent_account_id(integration_config: IntegrationConfig) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"access_token": "t", "soap_instance_url": "https://x/"})

    config = AuthConfig(
        client_id="client",
        client_secret="secret",
        auth_base_url="https://auth.example.test/",
    )
    with _session(integration_config.resilience, handler) as session:
        credential = MarketingCloudAuth(config=config, session=session).acquire()

    assert str(seen[0].url) == "https://auth.example.test/v2/token"
    assert b"account_id" not in seen[0].content
    assert credential.soap_instance_url == "https://x/"


def test_every_acquire_fetches_a_new_token(
    integration_config: IntegrationConfig,
    cloud: FakeMarketingCloud,
) -> None:
    auth = _auth(integration_config, cloud)

    auth.acquire()
    auth.acquire()

    assert len(cloud.token_requests) == 2


def test_non_success_status_raises_auth_error(
    integration_config: IntegrationConfig,
    cloud: FakeMarketingCloud,
) -> None:
    cloud.token_status = 401

    with pytest.raises(AuthError) as excinfo:
        _auth(integration_config, cloud).acquire()

    assert excinfo.value.status == 401
    assert excinfo.value.code == "auth_error"


@pytest.mark.parametrize(
    "payload",
    [{"unexpected": True}, {"access_token": "  "}, {"token_type": "Bearer"}],
)
def test_missing_token_raises_auth_error(
    integration_config: IntegrationConfig,
    cloud: FakeMarketingCloud,
    payload: dict[str, object],
) -> None:
    cloud.token_payload = payload

    with pytest.raises(AuthError, match="No access_token"):
        _auth(integration_config, cloud).acquire()


def test_network_failure_raises_auth_error(integration_config: IntegrationConfig) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    with _session(integration_config.resilience, handler) as session:
        auth = MarketingCloudAuth(config=integration_config.auth, session=session)
        with pytest.raises(AuthError, match="Token request failed"):
            auth.acquire()


def test_credential_repr_hides_token(
    integration_config: IntegrationConfig,
    cloud: FakeMarketingCloud,
) -> None:
    credential = _auth(integration_config, cloud).acquire()

    assert TOKEN not in repr(credential)
