"""Client-credentials token exchange."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from campaignsync.domain.errors import AuthError
from campaignsync.domain.ports import Credential

from .schema import TokenRequest, TokenResponse

if TYPE_CHECKING:
    from campaignsync.adapters.http_resilience import BlockingSession, ResilientClient
    from campaignsync.config.marketing_cloud import AuthConfig

log = getLogger(__name__)


class MarketingCloudAuth:
    """Fetches a fresh bearer token on every call to :meth:`acquire`."""

    def __init__(
        self,
        *,
        config: AuthConfig,
        session: BlockingSession,
    ) -> None:
        self._config = config
        self._session = session

    def acquire(self) -> Credential:
        return self._session.run(self._acquire_async)

    async def _acquire_async(self, client: ResilientClient) -> Credential:
        request = TokenRequest(
            client_id=self._config.client_id,
            client_secret=self._config.client_secret,
            account_id=self._config.account_id,
        )
        url = self._config.token_url
        try:
            response = await client.post(url, json=request.model_dump(exclude_none=True))
        except httpx.HTTPError as exc:
            log.error("Token request to %s failed: %s", url, exc)
            raise AuthError(f"Token request failed: {exc}") from exc

        if not response.is_success:
            log.error("Token endpoint answered %s", response.status_code)
            raise AuthError(
                f"Token error: {response.status_code} {response.text}",
                status=response.status_code,
            )

        try:
            payload = TokenResponse.model_validate(response.json())
        except ValueError as exc:
            raise AuthError("No access_token", status=response.status_code) from exc

        log.debug("Acquired token (expires_in=%s)", payload.expires_in)
        return Credential(
            access_token=payload.access_token,
            soap_instance_url=payload.soap_instance_url,
        )

