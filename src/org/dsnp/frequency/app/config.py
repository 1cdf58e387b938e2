"""
Configuration Module for the DSNP Resolver

Settings are loaded with pydantic-settings from environment variables and an
optional .env file, and validated before anything touches the network. Any
validation failure surfaces as a ConfigError.

Shared resources for the HTTP driver are reached through typed AppKeys.
"""

from typing import Any, Final, Literal, Optional
import logging
from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from aiohttp import web

from org.dsnp.frequency.app.metrics import MetricsClient
from org.dsnp.frequency.chain.client import validate_provider_uri
from org.dsnp.frequency.errors import ConfigError
from org.dsnp.frequency.resolve.dsnp import FrequencyResolver
from org.dsnp.frequency.resolve.registry import DSNPDIDResolver

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Resolver settings.

    Environment variables map to fields by name, with aliases matching the
    variable names used by other DSNP tooling (FREQUENCY_NODE and
    FREQUENCY_NETWORK).
    """

    model_config = SettingsConfigDict(
        env_file=".env", extra="ignore", populate_by_name=True
    )

    frequency_node: str = Field(
        validation_alias=AliasChoices("frequency_node", "provider_uri")
    )
    """
    Websocket address of the Frequency node, e.g. wss://0.rpc.frequency.xyz.
    Set with FREQUENCY_NODE or PROVIDER_URI environment variables.
    """

    frequency_network: Literal["local", "testnet", "mainnet"]
    """
    Which Frequency network the node belongs to.
    Set with FREQUENCY_NETWORK environment variable.
    """

    schema_strategy: Literal["chain", "static"] = "chain"
    """
    How schema ids are found: "chain" looks them up by genesis hash, "static"
    uses the fixed table for frequency_network.
    Set with SCHEMA_STRATEGY environment variable.
    """

    debug: bool = False
    """
    Include error details in HTTP responses.
    Set with DEBUG=true environment variable.
    """

    http_port: int = Field(alias="port", default=5200)
    """
    HTTP port for the resolver driver.
    Set with PORT environment variable.
    """

    sentry_dsn: Optional[str] = None
    """
    Sentry DSN for error reporting. Optional, no error reporting if not set.
    Set with SENTRY_DSN environment variable.
    """

    metrics_backend: Literal["telegraf", "none"] = "none"
    """
    Metrics backend for the HTTP driver.
    Set with METRICS_BACKEND environment variable.
    """

    statsd_host: str = Field(alias="TELEGRAF_HOST", default="telegraf")
    statsd_port: int = Field(alias="TELEGRAF_PORT", default=8125)
    statsd_prefix: str = "dsnp_resolver"

    @field_validator("frequency_node")
    @classmethod
    def check_frequency_node(cls, v: str) -> str:
        try:
            return validate_provider_uri(v)
        except ConfigError as e:
            raise ValueError(str(e)) from e

    def create_resolver(self) -> FrequencyResolver:
        return FrequencyResolver(
            provider_uri=self.frequency_node,
            network=self.frequency_network,
            schema_strategy=self.schema_strategy,
        )


def load_settings(**overrides: Any) -> Settings:
    """Load settings from the environment, with keyword overrides.

    Raises:
        ConfigError: If a setting is missing or invalid
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigError(f"Invalid resolver configuration: {e}") from e


SettingsAppKey: Final = web.AppKey("settings", Settings)
"""AppKey for accessing the application settings"""

FrequencyResolverAppKey: Final = web.AppKey("frequency_resolver", FrequencyResolver)
"""AppKey for the resolver that owns the chain connection"""

DIDResolverAppKey: Final = web.AppKey("did_resolver", DSNPDIDResolver)
"""AppKey for the did:dsnp resolver used by request handlers"""

MetricsClientAppKey: Final = web.AppKey("metrics_client", MetricsClient)
"""AppKey for the metrics client"""
