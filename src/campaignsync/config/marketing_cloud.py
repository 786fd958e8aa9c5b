"""Marketing Cloud integration configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field

from campaignsync.domain.event import DEFAULT_SOURCE
from campaignsync.domain.fields import FieldName, FieldSchema, FieldSchemaError
from campaignsync.domain.outcome import DUPLICATE_KEY_SIGNATURES

from .env import env_flag, env_float, env_list, optional_env_var, require_env_vars
from .errors import ConfigurationError
from .http_resilience import DEFAULT_TIMEOUT_SECONDS, RateLimit, ResilienceConfig

SOAP_SERVICE_PATH = "Service.asmx"


@dataclass(frozen=True, slots=True)
class AuthConfig:
    """Client identity exchanged for a bearer token."""

    client_id: str
    client_secret: str = field(repr=False)
    auth_base_url: str
    account_id: str | None = None

    @property
    def token_url(self) -> str:
        return f"{self.auth_base_url.rstrip('/')}/v2/token"


@dataclass(frozen=True, slots=True)
class IntegrationConfig:
    """Everything a reconciliation needs, built once at process start."""

    auth: AuthConfig
    data_extension_key: str
    schema: FieldSchema = field(default_factory=FieldSchema)
    soap_url: str | None = None
    winners_only: bool = False
    conflict_signatures: tuple[str, ...] = DUPLICATE_KEY_SIGNATURES
    event_source: str = DEFAULT_SOURCE
    resilience: ResilienceConfig = field(
        default_factory=lambda: ResilienceConfig(name="marketing-cloud")
    )

    def __post_init__(self) -> None:
        if not self.data_extension_key.strip():
            raise ConfigurationError("Target data extension key must not be blank")
        if not self.conflict_signatures:
            raise ConfigurationError("At least one conflict signature is required")


def soap_url_from_rest_base(rest_base: str) -> str:
    """Derive the SOAP endpoint from a tenant REST base URL."""

    return f"{rest_base.replace('rest.', 'soap.').rstrip('/')}/{SOAP_SERVICE_PATH}"


def soap_url_from_instance(instance_url: str) -> str:
    return f"{instance_url.rstrip('/')}/{SOAP_SERVICE_PATH}"


def parse_column_overrides(entries: tuple[str, ...]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for entry in entries:
        name, sep, column = entry.partition("=")
        if not sep or not name.strip() or not column.strip():
            raise ConfigurationError(f"Invalid field name override: {entry!r}")
        overrides[name.strip()] = column.strip()
    return overrides


def _timestamp_field() -> str | None:
    value = optional_env_var("SFMC_TIMESTAMP_FIELD")
    if value is None:
        return FieldName.TIMESTAMP.value
    return None if value.lower() == "none" else value


def get_integration_config() -> IntegrationConfig:
    values = require_env_vars(
        ("SFMC_CLIENT_ID", "SFMC_CLIENT_SECRET", "SFMC_AUTH_BASE", "SFMC_DE_KEY")
    )

    soap_url = optional_env_var("SFMC_SOAP_BASE")
    rest_base = optional_env_var("SFMC_REST_BASE")
    if soap_url is None and rest_base is not None:
        soap_url = soap_url_from_rest_base(rest_base)

    try:
        schema = FieldSchema.from_names(
            allowlist=env_list("SFMC_DE_FIELDS"),
            key_fields=env_list("SFMC_DE_KEY_FIELDS"),
            column_names=parse_column_overrides(env_list("SFMC_FIELD_NAMES") or ()),
            timestamp_field=_timestamp_field(),
        )
    except FieldSchemaError as exc:
        raise ConfigurationError(f"Invalid field configuration: {exc}") from exc

    calls_per_second = env_float("SFMC_MAX_CALLS_PER_SECOND")
    resilience = ResilienceConfig(
        name="marketing-cloud",
        timeout_seconds=env_float("SFMC_TIMEOUT_SECONDS", default=DEFAULT_TIMEOUT_SECONDS)
        or DEFAULT_TIMEOUT_SECONDS,
        ratelimit=(
            RateLimit(max_calls=1, per_seconds=1 / calls_per_second)
            if calls_per_second
            else None
        ),
    )

    return IntegrationConfig(
        auth=AuthConfig(
            client_id=values["SFMC_CLIENT_ID"],
            client_secret=values["SFMC_CLIENT_SECRET"],
            auth_base_url=values["SFMC_AUTH_BASE"],
            account_id=optional_env_var("SFMC_ACCOUNT_ID"),
        ),
        data_extension_key=values["SFMC_DE_KEY"],
        schema=schema,
        soap_url=soap_url,
        winners_only=env_flag("SFMC_WINNERS_ONLY"),
        conflict_signatures=env_list("SFMC_CONFLICT_SIGNATURES", separator="|")
        or DUPLICATE_KEY_SIGNATURES,
        event_source=optional_env_var("SFMC_EVENT_SOURCE") or DEFAULT_SOURCE,
        resilience=resilience,
    )
