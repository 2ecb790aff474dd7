"""
Branding normalization: company profile, active theme and theme settings.
"""
from typing import Any, Mapping, Optional

from catalog_snapshot.internal.domain.billing import Branding

from .aliases import COMPANY_FIELDS, THEME_FIELDS, THEME_SETTING_FIELDS
from .fields import normalize_text, pick_first


PUBLIC_COMPANY_FIELDS = ("name", "email", "phone", "www", "address", "city", "country")

# Conventional asset paths inside a theme directory.
THEME_ASSET_PATHS = {
    "logo_url": "assets/logo.svg",
    "logo_dark_url": "assets/logo-dark.svg",
    "favicon_url": "assets/favicon.svg",
    "header_bg_url": "assets/header-bg.jpg",
    "footer_bg_url": "assets/footer-bg.jpg",
}

# Assets the company profile may define before theme settings apply.
COMPANY_ASSET_FIELDS = ("logo_url", "logo_dark_url", "favicon_url")


def _text(row: Any, keys: tuple[str, ...]) -> str:
    return normalize_text(pick_first(row, keys, ""))


def theme_asset_url(theme_url: str, asset_path: str) -> str:
    """Join a theme base URL and an asset path; empty without a theme URL."""
    if theme_url == "" or asset_path.strip("/") == "":
        return ""
    return f"{theme_url.rstrip('/')}/{asset_path.lstrip('/')}"


def normalize_branding(
    company: Optional[Mapping[str, Any]],
    theme: Optional[Mapping[str, Any]],
    theme_settings: Optional[Mapping[str, Any]],
    billing_base_url: str,
    motto: str = "",
    brand_mark: str = "",
) -> Branding:
    """
    Build the storefront branding block.

    Asset URLs resolve in order: company profile, theme settings, then the
    conventional path inside the active theme.

    Args:
        company: ``system/company`` result.
        theme: ``extension/theme`` result.
        theme_settings: Stored customizations of the active theme.
        billing_base_url: Client area URL.
        motto: Motto override; defaults to the company signature.
        brand_mark: Optional brand mark text.

    Returns:
        Branding with every member populated.
    """
    company = company or {}
    theme = theme or {}
    theme_settings = theme_settings or {}

    theme_url = _text(theme, THEME_FIELDS["url"])

    assets: dict[str, str] = {}
    for asset, path in THEME_ASSET_PATHS.items():
        value = ""
        if asset in COMPANY_ASSET_FIELDS:
            value = _text(company, COMPANY_FIELDS[asset])
        if value == "":
            value = _text(theme_settings, THEME_SETTING_FIELDS[asset])
        if value == "":
            value = theme_asset_url(theme_url, path)
        assets[asset] = value

    return Branding(
        company={field: _text(company, COMPANY_FIELDS[field]) for field in PUBLIC_COMPANY_FIELDS},
        motto=motto or _text(company, COMPANY_FIELDS["signature"]),
        brand_mark=brand_mark,
        clientarea_url=billing_base_url.rstrip("/"),
        theme={
            "name": _text(theme, THEME_FIELDS["name"]),
            "code": _text(theme, ("code",)),
            "version": _text(theme, THEME_FIELDS["version"]),
            "url": theme_url,
        },
        assets=assets,
        footer_content=_text(theme_settings, THEME_SETTING_FIELDS["footer_content"]),
    )


def theme_code(theme: Optional[Mapping[str, Any]]) -> str:
    """Code of the active theme, used to look up its stored settings."""
    return _text(theme or {}, THEME_FIELDS["code"])
