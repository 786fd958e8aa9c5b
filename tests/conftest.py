from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from campaignsync.config import AuthConfig, IntegrationConfig, ResilienceConfig
from campaignsync.domain.fields import FieldSchema
from tests.support.fakes import FakeCredentials, ScriptedStore
from tests.support.marketing_cloud import AUTH_BASE, SOAP_URL, FakeMarketingCloud

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def schema() -> FieldSchema:
    return FieldSchema()


@pytest.fixture
def integration_config() -> IntegrationConfig:
    return IntegrationConfig(
        auth=AuthConfig(
            client_id="client",
            client_secret="secret",
            auth_base_url=AUTH_BASE,
            account_id="5150",
        ),
        data_extension_key="Ruleta_DE",
        soap_url=SOAP_URL,
        resilience=ResilienceConfig(name="marketing-cloud-test", timeout_seconds=5.0),
    )


@pytest.fixture
def cloud() -> Iterator[FakeMarketingCloud]:
    fake = FakeMarketingCloud()
    yield fake
    fake.close()


@pytest.fixture
def credentials() -> FakeCredentials:
    return FakeCredentials()


@pytest.fixture
def store() -> ScriptedStore:
    return ScriptedStore()
