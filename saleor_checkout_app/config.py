"""Configuration management for the Saleor checkout app."""

from typing import Optional, List
from urllib.parse import urlparse
from pydantic import BaseModel, Field, ConfigDict


class SaleorConfig(BaseModel):
    """Saleor API configuration."""
    host_url: Optional[str] = Field(
        None,
        description="Saleor host URL (e.g., 'https://store.saleor.cloud'). When set, overrides delivery headers"
    )
    allowed_api_urls: List[str] = Field(
        default_factory=list,
        description="Saleor API URLs allowed to register the app (empty allows all)"
    )
    webhook_secret: Optional[str] = Field(None, description="Secret for legacy HMAC webhook signatures")
    request_timeout: float = Field(30.0, gt=0, description="Timeout for Saleor API calls in seconds")

    @property
    def api_url(self) -> Optional[str]:
        """GraphQL endpoint derived from host_url."""
        if not self.host_url:
            return None
        return self.host_url.rstrip("/") + "/graphql/"

    @property
    def domain(self) -> Optional[str]:
        """Host part of host_url, used for the saleor-domain header."""
        if not self.host_url:
            return None
        return urlparse(self.host_url).netloc or None


class AppInfoConfig(BaseModel):
    """App manifest information."""
    app_id: str = Field("saleor.app.checkout-completer", description="Unique app identifier")
    name: str = Field("Checkout Completer", description="App name shown in the dashboard")
    version: str = Field("0.1.0", description="App version")
    app_url: str = Field("http://localhost:8000", description="Public URL the app is reachable on")
    permissions: List[str] = Field(
        default_factory=lambda: ["HANDLE_CHECKOUTS", "MANAGE_ORDERS"],
        description="Saleor permissions requested by the app"
    )


class APLConfig(BaseModel):
    """Auth persistence layer configuration."""
    backend: str = Field("memory", pattern="^(memory|sqlite)$", description="APL backend: 'memory' or 'sqlite'")
    db_path: str = Field("apl.db", description="SQLite database path for the 'sqlite' backend")


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field("INFO", description="Log level name")
    filename: Optional[str] = Field(None, description="Log file (stderr when unset)")


class AppConfig(BaseModel):
    """Main configuration for the Saleor checkout app."""
    saleor: SaleorConfig = Field(default_factory=SaleorConfig)
    app: AppInfoConfig = Field(default_factory=AppInfoConfig)
    apl: APLConfig = Field(default_factory=APLConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "saleor": {
                    "host_url": "https://store.saleor.cloud",
                    "allowed_api_urls": ["https://store.saleor.cloud/graphql/"],
                    "request_timeout": 30.0
                },
                "app": {
                    "app_id": "saleor.app.checkout-completer",
                    "name": "Checkout Completer",
                    "version": "0.1.0",
                    "app_url": "https://checkout-app.example.com"
                },
                "apl": {
                    "backend": "sqlite",
                    "db_path": "apl.db"
                },
                "logging": {
                    "level": "INFO"
                }
            }
        }
    )
