"""Ports the reconciler drives; adapters implement them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .fields import FieldName
    from .outcome import Outcome


@dataclass(frozen=True, slots=True)
class Credential:
    """Bearer token for a single reconciliation. Never cached."""

    access_token: str = field(repr=False)
    soap_instance_url: str | None = None


@runtime_checkable
class CredentialProvider(Protocol):
    def acquire(self) -> Credential: ...


@runtime_checkable
class RemoteStore(Protocol):
    """Insert and update single rows of the remote data extension."""

    def insert(self, credential: Credential, values: Mapping[FieldName, str]) -> Outcome: ...

    def update(
        self,
        credential: Credential,
        keys: Mapping[FieldName, str],
        values: Mapping[FieldName, str],
    ) -> Outcome: ...


__all__ = ["Credential", "CredentialProvider", "RemoteStore"]
