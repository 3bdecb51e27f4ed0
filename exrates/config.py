"""Configuration management using Pydantic settings."""

from __future__ import annotations

import json
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Output sinks
    out_path: str = Field(default="./", alias="TICKER_OUT_PATH", description="Directory for rates/whitelist files")
    aws_s3_region: str = Field(default="", alias="AWS_S3_REGION")
    aws_s3_bucket: str = Field(default="", alias="AWS_S3_BUCKET")

    # BitcoinAverage credentials
    btcavg_pubkey: str = Field(default="", alias="TICKER_BTCAVG_PUBKEY")
    btcavg_privkey: str = Field(default="", alias="TICKER_BTCAVG_PRIVKEY")

    # CoinMarketCap configuration
    cmc_env: str = Field(default="pro", alias="TICKER_CMC_ENV", description="API host prefix (pro or sandbox)")
    cmc_api_key: str = Field(default="", alias="TICKER_CMC_APIKEY")
    cmc_page_size: int = Field(default=5000, alias="TICKER_CMC_PAGE_SIZE", description="Records per listing page")
    cmc_max_pages: int = Field(default=100, alias="TICKER_CMC_MAX_PAGES", description="Safety cap on listing pages")

    # Snapshot contents
    base_symbol: str = Field(default="BTC", alias="TICKER_BASE_SYMBOL", description="Reference unit valued at 1")
    required_symbols: Annotated[list[str], NoDecode] = Field(
        default=["BTC", "USD", "EUR", "ETH", "LTC", "BCH"],
        alias="TICKER_REQUIRED_SYMBOLS",
        description="Symbols a snapshot must contain to be published",
    )

    # Polling configuration
    poll_interval: int = Field(default=900, alias="TICKER_POLL_INTERVAL", description="Polling interval in seconds")
    http_timeout: float = Field(default=30.0, alias="TICKER_HTTP_TIMEOUT", description="Per-request timeout in seconds")

    # API URLs
    btcavg_base_url: str = "https://apiv2.bitcoinaverage.com"
    cmc_endpoint_template: str = "https://{env}-api.coinmarketcap.com/v1/cryptocurrency/listings/latest"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
        populate_by_name = True

    @field_validator("required_symbols", mode="before")
    @classmethod
    def split_symbols(cls, v):
        """Accept a JSON list or a comma-separated string (BTC,USD,EUR)."""
        if isinstance(v, str):
            text = v.strip()
            if text.startswith("["):
                return json.loads(text)
            return [s.strip() for s in text.split(",") if s.strip()]
        return v

    @property
    def s3_configured(self) -> bool:
        """Check if the S3 writer is configured."""
        return bool(self.aws_s3_region and self.aws_s3_bucket)

    @property
    def cmc_endpoint(self) -> str:
        """Get the CoinMarketCap listings URL for the configured environment."""
        return self.cmc_endpoint_template.format(env=self.cmc_env)


# Global settings instance
settings = Settings()
