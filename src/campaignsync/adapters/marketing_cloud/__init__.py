"""Public interface for the Marketing Cloud adapter."""

from __future__ import annotations

from .auth import MarketingCloudAuth
from .client import DataExtensionClient, SoapTransport
from .envelope import SoapAction, decode, encode_insert, encode_update, escape_xml
from .schema import TokenRequest, TokenResponse

__all__ = [
    "DataExtensionClient",
    "MarketingCloudAuth",
    "SoapAction",
    "SoapTransport",
    "TokenRequest",
    "TokenResponse",
    "decode",
    "encode_insert",
    "encode_update",
    "escape_xml",
]
