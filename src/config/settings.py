"""Service settings (environment variables or ``.env``)."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Course service settings.

    Every field can be overridden through an environment variable of the same
    name, case-insensitive (``CASSANDRA_HOSTS='["db1","db2"]'``).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="coursehub", description="Service name")
    app_version: str = Field(default="0.1.0", description="Service version")
    environment: Literal["development", "staging", "production", "testing"] = Field(
        default="development", description="Deployment environment"
    )
    debug: bool = Field(default=True, description="Expose OpenAPI docs")

    # Bearer tokens (issued by the identity service, verified here)
    auth_secret_key: str = Field(
        default="dev-jwt-secret-key-change-in-production-32chars!",
        min_length=32,
        description="Shared HMAC key used to verify access tokens",
    )
    auth_algorithm: str = Field(default="HS256", description="Token algorithm")
    auth_access_token_expire_minutes: int = Field(
        default=15, description="Lifetime of tokens minted by create_access_token"
    )

    # Cassandra
    cassandra_hosts: list[str] = Field(
        default=["localhost"], description="Contact points"
    )
    cassandra_port: int = Field(default=9042, description="Native protocol port")
    cassandra_keyspace: str = Field(
        default="coursehub", description="Keyspace holding every table"
    )
    cassandra_datacenter: str = Field(
        default="datacenter1", description="Local datacenter for routing/replication"
    )
    cassandra_replication_factor: int = Field(
        default=3, description="Replicas per datacenter outside development"
    )
    cassandra_username: str | None = Field(default=None, description="Login user")
    cassandra_password: str | None = Field(default=None, description="Login password")
    cassandra_protocol_version: int = Field(default=4, description="Protocol version")
    cassandra_connect_timeout: float = Field(
        default=10.0, description="Seconds to wait for the first connection"
    )
    cassandra_request_timeout: float = Field(
        default=10.0, description="Default per-statement timeout in seconds"
    )

    # Progress reports
    progress_recent_activity_limit: int = Field(
        default=10, ge=1, description="Completed items listed as recent activity"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="DEBUG", description="Minimum level emitted"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", description="Console output format"
    )
    log_include_caller_info: bool = Field(
        default=True, description="Add module/function/line to each event"
    )
    log_to_file: bool = Field(default=True, description="Write rotating log files")
    log_dir: str = Field(default="logs", description="Directory for log files")
    log_file_max_bytes: int = Field(
        default=10 * 1024 * 1024, description="Rotate after this many bytes"
    )
    log_file_backup_count: int = Field(
        default=5, description="Rotated files kept per log"
    )
    log_requests: bool = Field(
        default=True, description="Log HTTP request start/finish"
    )
    log_exclude_paths: list[str] = Field(
        default=["/health", "/health/live", "/health/ready"],
        description="Paths never logged by the request middleware",
    )

    # CORS
    cors_origins: list[str] = Field(default=["*"], description="Allowed origins")
    cors_allow_credentials: bool = Field(default=True, description="Allow credentials")
    cors_allow_methods: list[str] = Field(default=["*"], description="Allowed methods")
    cors_allow_headers: list[str] = Field(default=["*"], description="Allowed headers")
    cors_max_age: int = Field(default=600, description="Preflight cache seconds")

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_testing(self) -> bool:
        return self.environment == "testing"

    @property
    def cassandra_auth_configured(self) -> bool:
        """Both Cassandra credentials are set."""
        return bool(self.cassandra_username and self.cassandra_password)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
