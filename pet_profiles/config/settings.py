"""
Configuration management for the Pet Profiles service.
Loads settings from environment variables with sensible defaults.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from dotenv import load_dotenv

# Load .env from project root
PROJECT_ROOT = Path(__file__).parent.parent.parent
load_dotenv(PROJECT_ROOT / ".env")

PROFILE_SOURCES = ("segment", "customers")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "")
    if not raw:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ShopifyConfig:
    access_token: str = ""
    shop_domain: str = ""
    api_version: str = "2025-07"
    api_key: str = ""
    api_secret: str = ""
    timezone: str = "UTC"

    def __post_init__(self):
        self.access_token = os.getenv("SHOPIFY_ACCESS_TOKEN", self.access_token)
        self.shop_domain = os.getenv("SHOPIFY_SHOP_DOMAIN", self.shop_domain)
        self.api_version = os.getenv("SHOPIFY_API_VERSION", self.api_version)
        self.api_key = os.getenv("SHOPIFY_API_KEY", self.api_key)
        self.api_secret = os.getenv("SHOPIFY_API_SECRET", self.api_secret)
        self.timezone = os.getenv("SHOP_TIMEZONE", self.timezone)


@dataclass
class CollectionConfig:
    source: str = "segment"
    segment_name: str = "Pet Profile"
    segment_id: str = ""
    max_customers: int = 1000
    batch_size: int = 100

    def __post_init__(self):
        self.source = os.getenv("PROFILE_SOURCE", self.source).strip().lower()
        self.segment_name = os.getenv("PROFILE_SEGMENT_NAME", self.segment_name)
        self.segment_id = os.getenv("PROFILE_SEGMENT_ID", self.segment_id)
        max_customers_str = os.getenv("PROFILE_MAX_CUSTOMERS", "")
        if max_customers_str:
            self.max_customers = int(max_customers_str)
        batch_size_str = os.getenv("PROFILE_BATCH_SIZE", "")
        if batch_size_str:
            self.batch_size = int(batch_size_str)


@dataclass
class ExtensionConfig:
    """Merchant-adjustable settings of the customer-account profile block."""

    heading: str = ""
    show_weight: bool = True
    show_drug_usage: bool = True

    def __post_init__(self):
        self.heading = os.getenv("EXTENSION_HEADING", self.heading)
        self.show_weight = _env_bool("EXTENSION_SHOW_WEIGHT", self.show_weight)
        self.show_drug_usage = _env_bool("EXTENSION_SHOW_DRUG_USAGE", self.show_drug_usage)


@dataclass
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 8000
    cors_allow_origins: list = field(default_factory=lambda: ["*"])

    def __post_init__(self):
        self.host = os.getenv("HOST", self.host)
        port_str = os.getenv("PORT", "")
        if port_str:
            self.port = int(port_str)
        origins_str = os.getenv("CORS_ALLOW_ORIGINS", "")
        if origins_str:
            self.cors_allow_origins = [o.strip() for o in origins_str.split(",") if o.strip()]


@dataclass
class LoggingConfig:
    level: str = "INFO"
    log_file: str = ""

    def __post_init__(self):
        self.level = os.getenv("LOG_LEVEL", self.level)
        self.log_file = os.getenv("LOG_FILE", str(PROJECT_ROOT / "logs" / "pet_profiles.log"))


@dataclass
class Settings:
    shopify: ShopifyConfig = field(default_factory=ShopifyConfig)
    collection: CollectionConfig = field(default_factory=CollectionConfig)
    extension: ExtensionConfig = field(default_factory=ExtensionConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Rows per page in the admin profile table
    table_page_size: int = 50

    def validate(self) -> list[str]:
        """Validate required configuration. Returns list of missing items."""
        missing = []
        if not self.shopify.access_token:
            missing.append("SHOPIFY_ACCESS_TOKEN")
        if not self.shopify.shop_domain:
            missing.append("SHOPIFY_SHOP_DOMAIN")
        if not self.shopify.api_key:
            missing.append("SHOPIFY_API_KEY")
        if not self.shopify.api_secret:
            missing.append("SHOPIFY_API_SECRET")
        return missing


# Global settings singleton
settings = Settings()
