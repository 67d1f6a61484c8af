"""
Configuration management for the HTTPProxy admission gate using Pydantic.
"""

from pathlib import Path
from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class ServerConfig(BaseSettings):
    """Web server configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PROXYGUARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    bind_address: str = "0.0.0.0"
    port: int = Field(default=8443, ge=1, le=65535)

    # TLS configuration
    tls_cert_path: Optional[Path] = None
    tls_key_path: Optional[Path] = None

    # Serve on a unix socket instead of TCP
    uds_path: Optional[str] = None

    debug: bool = False

    @field_validator("tls_cert_path", "tls_key_path")
    @classmethod
    def validate_paths(cls, v):
        """Validate that paths exist if specified."""
        if v is not None and not v.exists():
            raise ValueError(f"Path does not exist: {v}")
        return v

    def export_json(self) -> str:
        """Export configuration as JSON."""
        return self.model_dump_json(indent=2)


class AdmissionConfig(ServerConfig):
    """Main configuration for the admission gate."""

    # Ingress classes whose proxies are checked; empty means the default class
    ingress_classes: Annotated[List[str], NoDecode] = Field(default_factory=list)

    # Kubeconfig for running outside the cluster
    kubeconfig: Optional[Path] = None

    # Skip the candidate's own stored revision when scanning for conflicts
    ignore_own_revision: bool = False

    @field_validator("ingress_classes", mode="before")
    @classmethod
    def parse_ingress_classes(cls, v):
        """Parse comma-separated ingress class list from environment."""
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        return [c.strip() for c in v if c.strip()]


def load_config(**kwargs) -> AdmissionConfig:
    """Load configuration with environment variables and optional overrides."""
    overrides = {k: v for k, v in kwargs.items() if v is not None}
    return AdmissionConfig(**overrides)
