"""SOAP envelopes for data extension rows.

Encoding is plain string templating with every user-controlled value escaped.
Decoding is structural: it looks for the few elements we need by local name and
ignores everything else, since the partner API schema is not ours to validate.
"""

from __future__ import annotations

import re
from enum import StrEnum
from html import unescape
from typing import TYPE_CHECKING
from xml.etree import ElementTree as ET
from xml.sax.saxutils import escape

from campaignsync.domain.outcome import Outcome

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

type NameValue = tuple[str, str]

_ENTITIES = {'"': "&quot;", "'": "&apos;"}

_ENVELOPE = """<?xml version="1.0" encoding="UTF-8"?>
<soapenv:Envelope
  xmlns:soapenv="http://schemas.xmlsoap.org/soap/envelope/"
  xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
  xmlns:tns="http://exacttarget.com/wsdl/partnerAPI">
  <soapenv:Header>
    <fueloauth xmlns="http://exacttarget.com">{token}</fueloauth>
  </soapenv:Header>
  <soapenv:Body>
{body}
  </soapenv:Body>
</soapenv:Envelope>"""

_CREATE_BODY = """    <tns:CreateRequest>
      <tns:Options>
        <tns:SaveOptions>
          <tns:SaveOption>
            <tns:PropertyName>*</tns:PropertyName>
            <tns:SaveAction>AddOnly</tns:SaveAction>
          </tns:SaveOption>
        </tns:SaveOptions>
      </tns:Options>
      <tns:Objects xsi:type="tns:DataExtensionObject">
        <tns:CustomerKey>{customer_key}</tns:CustomerKey>
        <tns:Properties>
{properties}
        </tns:Properties>
      </tns:Objects>
    </tns:CreateRequest>"""

_UPDATE_BODY = """    <tns:UpdateRequest>
      <tns:Options/>
      <tns:Objects xsi:type="tns:DataExtensionObject">
        <tns:CustomerKey>{customer_key}</tns:CustomerKey>
        <tns:Keys>
{keys}
        </tns:Keys>
        <tns:Properties>
{properties}
        </tns:Properties>
      </tns:Objects>
    </tns:UpdateRequest>"""


class SoapAction(StrEnum):
    CREATE = "Create"
    UPDATE = "Update"


def escape_xml(value: object) -> str:
    return escape("" if value is None else str(value), _ENTITIES)


def _name_values(tag: str, items: Iterable[NameValue]) -> str:
    indent = " " * 10
    return "\n".join(
        f"{indent}<tns:{tag}><tns:Name>{escape_xml(name)}</tns:Name>"
        f"<tns:Value>{escape_xml(value)}</tns:Value></tns:{tag}>"
        for name, value in items
    )


def encode_insert(token: str, customer_key: str, properties: Sequence[NameValue]) -> str:
    """Build a CreateRequest that fails instead of overwriting an existing key."""

    body = _CREATE_BODY.format(
        customer_key=escape_xml(customer_key),
        properties=_name_values("Property", properties),
    )
    return _ENVELOPE.format(token=escape_xml(token), body=body)


def encode_update(
    token: str,
    customer_key: str,
    keys: Sequence[NameValue],
    properties: Sequence[NameValue],
) -> str:
    """Build an UpdateRequest matching on ``keys`` and setting ``properties``."""

    body = _UPDATE_BODY.format(
        customer_key=escape_xml(customer_key),
        keys=_name_values("Key", keys),
        properties=_name_values("Property", properties),
    )
    return _ENVELOPE.format(token=escape_xml(token), body=body)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _extract_tree(body: str) -> dict[str, list[str]]:
    root = ET.fromstring(body)  # noqa: S314
    found: dict[str, list[str]] = {}
    for element in root.iter():
        if not isinstance(element.tag, str):
            continue
        found.setdefault(_local_name(element.tag), []).append((element.text or "").strip())
    return found


def _extract_text(body: str, name: str) -> list[str]:
    pattern = re.compile(
        rf"<(?:[\w.-]+:)?{name}\b[^>]*>(.*?)</(?:[\w.-]+:)?{name}\s*>",
        re.DOTALL,
    )
    return [unescape(match.strip()) for match in pattern.findall(body)]


def decode(body: str, *, http_status: int = 200) -> Outcome:
    """Turn a response envelope into an :class:`Outcome`."""

    names = ("OverallStatus", "StatusMessage", "RequestID", "ErrorCode")
    try:
        tree = _extract_tree(body)
        found = {name: tree.get(name, []) for name in names}
    except ET.ParseError:
        found = {name: _extract_text(body, name) for name in names}

    def first(name: str) -> str:
        values = found[name]
        return values[0] if values else ""

    return Outcome.from_fields(
        overall_status=first("OverallStatus"),
        status_message=first("StatusMessage"),
        request_id=first("RequestID"),
        error_codes=[code for code in found["ErrorCode"] if code],
        http_status=http_status,
    )
