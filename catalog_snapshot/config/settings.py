"""
Catalog generator settings.

Configuration loaded from environment variables and an optional .env file.
"""
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from catalog_snapshot.internal.domain.errors import ConfigError


DEFAULT_EXCLUDE_PATTERNS = "tld,domain register,domain registration,domain transfer,domain renewal"


class Settings(BaseSettings):
    """Catalog generator configuration."""

    # Billing platform
    billing_base_url: str = "http://localhost"
    billing_api_key: str = ""
    billing_timeout: int = 25  # seconds
    billing_max_pages: int = 25
    billing_per_page: int = 100
    billing_strict_tls: bool = True
    billing_max_concurrency: int = 4

    # Output
    public_site_url: str = ""
    data_output: str = "./data.json"
    json_pretty: bool = True
    gen_show_errors: bool = False
    exclude_product_patterns: str = DEFAULT_EXCLUDE_PATTERNS

    # Branding overrides
    site_logo_url: str = ""
    site_logo_dark_url: str = ""
    site_favicon_url: str = ""
    site_header_bg_url: str = ""
    site_footer_bg_url: str = ""
    site_motto: str = ""
    site_brand_mark: str = ""

    # Logging and metrics
    log_level: str = "INFO"
    log_format: str = "json"
    metrics_textfile: Optional[str] = None  # node_exporter textfile path

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def get_exclude_patterns(self) -> List[str]:
        """
        Get the product exclusion patterns.

        Returns:
            Lowercased, non-empty patterns from the CSV setting.
        """
        return parse_patterns(self.exclude_product_patterns)

    def get_custom_assets(self) -> dict[str, str]:
        """
        Get asset URL overrides.

        Returns:
            Asset name -> URL for every override that is set.
        """
        assets = {
            "logo_url": self.site_logo_url,
            "logo_dark_url": self.site_logo_dark_url,
            "favicon_url": self.site_favicon_url,
            "header_bg_url": self.site_header_bg_url,
            "footer_bg_url": self.site_footer_bg_url,
        }
        return {name: url.strip() for name, url in assets.items() if url.strip()}

    def get_public_site_url(self) -> str:
        """Public site URL, defaulting to the billing URL."""
        return (self.public_site_url or self.billing_base_url).rstrip("/")

    def require_api_key(self) -> str:
        """
        Get the API secret.

        Returns:
            The configured secret.

        Raises:
            ConfigError: If no secret is configured.
        """
        api_key = self.billing_api_key.strip()
        if not api_key:
            raise ConfigError("BILLING_API_KEY is required (set it in the environment or pass --api-key)")
        return api_key


def parse_patterns(value: str) -> List[str]:
    """Split a comma-separated pattern list."""
    return [pattern.strip().lower() for pattern in value.split(",") if pattern.strip()]


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance.
    """
    return Settings()
