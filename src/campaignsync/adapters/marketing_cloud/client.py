"""SOAP transport for data extension rows."""

from __future__ import annotations

from functools import partial
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from campaignsync.config.errors import ConfigurationError
from campaignsync.config.marketing_cloud import soap_url_from_instance
from campaignsync.domain.errors import TransportError

from .envelope import SoapAction, decode, encode_insert, encode_update

if TYPE_CHECKING:
    from collections.abc import Mapping

    from campaignsync.adapters.http_resilience import BlockingSession, ResilientClient
    from campaignsync.config.marketing_cloud import IntegrationConfig
    from campaignsync.domain.fields import FieldName, FieldSchema
    from campaignsync.domain.outcome import Outcome
    from campaignsync.domain.ports import Credential

log = getLogger(__name__)

_BODY_PREVIEW = 500


class SoapTransport:
    """Posts one envelope and returns the response body.

    A non-2xx status or a network failure raises :class:`TransportError`; a 2xx
    response is handed back untouched even when its envelope reports a failure.
    """

    def __init__(self, session: BlockingSession) -> None:
        self._session = session

    def post(self, url: str, envelope: str, *, action: SoapAction) -> tuple[int, str]:
        call = partial(self._post_async, url=url, envelope=envelope, action=action)
        return self._session.run(call)

    async def _post_async(
        self,
        client: ResilientClient,
        *,
        url: str,
        envelope: str,
        action: SoapAction,
    ) -> tuple[int, str]:
        headers = {"Content-Type": "text/xml; charset=utf-8", "SOAPAction": action.value}
        try:
            response = await client.post(url, content=envelope.encode("utf-8"), headers=headers)
        except httpx.HTTPError as exc:
            log.error("SOAP %s to %s failed: %s", action, url, exc)
            raise TransportError(f"SOAP {action} request failed: {exc}") from exc

        text = response.text
        if not response.is_success:
            log.error("SOAP %s answered %s", action, response.status_code)
            raise TransportError(
                f"SOAP error {response.status_code}: {text[:_BODY_PREVIEW]}",
                status=response.status_code,
                body=text,
            )
        return response.status_code, text


class DataExtensionClient:
    """Remote store adapter: encodes, sends and decodes single-row operations."""

    def __init__(
        self,
        *,
        config: IntegrationConfig,
        session: BlockingSession,
    ) -> None:
        self._config = config
        self._schema: FieldSchema = config.schema
        self._transport = SoapTransport(session)

    def insert(self, credential: Credential, values: Mapping[FieldName, str]) -> Outcome:
        envelope = encode_insert(
            credential.access_token,
            self._config.data_extension_key,
            list(self._schema.columns(values).items()),
        )
        return self._send(credential, envelope, SoapAction.CREATE)

    def update(
        self,
        credential: Credential,
        keys: Mapping[FieldName, str],
        values: Mapping[FieldName, str],
    ) -> Outcome:
        envelope = encode_update(
            credential.access_token,
            self._config.data_extension_key,
            list(self._schema.columns(keys).items()),
            list(self._schema.columns(values).items()),
        )
        return self._send(credential, envelope, SoapAction.UPDATE)

    def soap_url(self, credential: Credential) -> str:
        if self._config.soap_url:
            return self._config.soap_url
        if credential.soap_instance_url:
            return soap_url_from_instance(credential.soap_instance_url)
        raise ConfigurationError(
            "No SOAP endpoint: set SFMC_SOAP_BASE or SFMC_REST_BASE, "
            "or use a token that carries soap_instance_url"
        )

    def _send(self, credential: Credential, envelope: str, action: SoapAction) -> Outcome:
        url = self.soap_url(credential)
        status, body = self._transport.post(url, envelope, action=action)
        outcome = decode(body, http_status=status)
        log.debug(
            "SOAP %s: overall=%s message=%r request=%s",
            action,
            outcome.overall_status,
            outcome.status_message,
            outcome.request_id,
        )
        return outcome
