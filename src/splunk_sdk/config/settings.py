"""Configuration settings for the Splunk SDK.

This module defines the connection settings used to build a
:class:`~splunk_sdk.context.Context`: server address, credentials,
timeouts and logging. Settings are loaded from ``SPLUNK_*``
environment variables and ``.env`` files.
"""

from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Connection settings loaded from environment variables.

    :param host: DNS name of the Splunk server
    :type host: str
    :param port: Management port of the Splunk server
    :type port: int
    :param scheme: Scheme used to reach the management port
    :type scheme: Literal["http", "https"]
    :param username: Account name; ``Context.from_settings`` logs in with it
    :type username: Optional[str]
    :param password: Password of ``username``
    :type password: Optional[str]
    :param verify_ssl: Verify the server certificate over https
    :type verify_ssl: bool
    :param connect_timeout: Connection timeout in seconds
    :type connect_timeout: float
    :param read_timeout: Read timeout in seconds
    :type read_timeout: float
    :param log_level: Logging level for the application
    :type log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    """

    model_config = SettingsConfigDict(
        env_prefix="SPLUNK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = Field("localhost", description="Splunk server host")
    port: int = Field(8089, description="Splunk management port")
    scheme: Literal["http", "https"] = Field(
        "https", description="Scheme for the management port"
    )

    username: Optional[str] = Field(None, description="Splunk account name")
    password: Optional[str] = Field(None, description="Splunk account password")

    verify_ssl: bool = Field(True, description="Verify server certificates")
    connect_timeout: float = Field(5.0, description="Connect timeout (seconds)")
    read_timeout: float = Field(30.0, description="Read timeout (seconds)")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", description="Logging level"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept log levels in any case.

        :param v: The configured log level
        :type v: str
        :return: Upper-cased log level
        :rtype: str
        """
        if isinstance(v, str):
            return v.upper()
        return v

    @property
    def has_credentials(self) -> bool:
        """Whether both username and password are configured.

        :return: True when login can be attempted
        :rtype: bool
        """
        return bool(self.username) and self.password is not None
