"""Application configuration using pydantic-settings.

Settings are read once at startup and turned into an immutable
SwapContext (see swaprelay.context); nothing else reads them globally.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # API
    # ======================
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=8080, description="Preferred API server port")

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug logging")

    # ======================
    # Chain
    # ======================
    rpc_url: str = Field(default="", description="EVM JSON-RPC endpoint")
    chain_id: int = Field(default=42161, description="EVM chain ID (Arbitrum One)")
    private_key: Optional[str] = Field(
        default=None, description="Hot wallet private key for server-side signing"
    )
    rpc_timeout: float = Field(default=30.0, description="JSON-RPC request timeout (seconds)")
    confirmation_timeout: float = Field(
        default=180.0, description="Max seconds to wait for a transaction receipt"
    )
    confirmation_poll_interval: float = Field(
        default=2.0, description="Seconds between receipt polls"
    )

    # ======================
    # ParaSwap
    # ======================
    paraswap_base: str = Field(
        default="https://apiv5.paraswap.io", description="ParaSwap API base URL"
    )
    paraswap_partner: Optional[str] = Field(
        default=None, description="Partner tag sent with transaction builds"
    )
    http_timeout: float = Field(default=30.0, description="ParaSwap HTTP timeout (seconds)")

    @property
    def has_signer(self) -> bool:
        """Check if server-side signing can be configured."""
        return bool(self.rpc_url and self.private_key)

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "api_host": self.api_host,
            "api_port": self.api_port,
            "chain_id": self.chain_id,
            "rpc_url": self._redact_url(self.rpc_url) if self.rpc_url else "(not set)",
            "private_key": "***" if self.private_key else "(not set)",
            "paraswap": {
                "base": self.paraswap_base,
                "partner": self.paraswap_partner or "(none)",
                "timeout": self.http_timeout,
            },
            "confirmation": {
                "timeout": self.confirmation_timeout,
                "poll_interval": self.confirmation_poll_interval,
            },
        }

    @staticmethod
    def _redact_url(url: str) -> str:
        """Redact credentials and the API-key path of an RPC URL."""
        if "://" not in url:
            return "***"
        proto, rest = url.split("://", 1)
        host = rest.split("/", 1)[0].split("?", 1)[0]
        # Hosted providers put the key in the path or query
        tail = "/***" if len(rest) > len(host) else ""
        if "@" in host:
            creds, host = host.rsplit("@", 1)
            user = creds.split(":", 1)[0]
            host = f"{user}:***@{host}"
        return f"{proto}://{host}{tail}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
