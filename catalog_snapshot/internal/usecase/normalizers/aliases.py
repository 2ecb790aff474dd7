"""
Upstream field aliases.

Each entry lists the key names different API versions use for the same
field, in priority order. Normalizers read these tables instead of
hard-coding key names.
"""

CATEGORY_FIELDS = {
    "id": ("id", "category_id"),
    "title": ("title", "name", "label"),
    "slug": ("slug",),
    "description": ("description",),
    "icon_url": ("icon_url", "icon"),
}

PRODUCT_FIELDS = {
    "id": ("id", "product_id"),
    "title": ("title", "name"),
    "description": ("description",),
    "type": ("type",),
    "status": ("status",),
    "slug": ("slug",),
    "order_url": ("order_url", "url"),
    "category_id": ("product_category_id", "category_id"),
    "icon_url": ("icon_url", "icon"),
    "hidden": ("hidden",),
    "setup": ("setup",),
    "stock_control": ("stock_control",),
    "quantity_in_stock": ("quantity_in_stock",),
    "allow_quantity_select": ("allow_quantity_select",),
    "pricing": ("pricing",),
    "addons": ("addons", "addon_ids"),
    "upgrades": ("upgrades",),
    "config": ("config",),
}

CURRENCY_FIELDS = {
    "code": ("code", "currency", "currency_code"),
    "is_default": ("default", "is_default"),
    "title": ("title", "name"),
    "sign": ("sign", "symbol"),
    "format": ("format",),
    "conversion_rate": ("conversion_rate", "rate"),
    "price_decimals": ("price_format", "decimals", "precision"),
    "enabled": ("enabled", "active", "status"),
}

GATEWAY_FIELDS = {
    "id": ("id", "gateway_id"),
    "code": ("gateway", "code"),
    "title": ("title", "name"),
    "enabled": ("enabled", "active"),
    "allow_single": ("allow_single",),
    "allow_recurrent": ("allow_recurrent",),
    "accepted_currencies": ("accepted_currencies",),
    "config": ("config",),
}

DOMAIN_TLD_FIELDS = {
    "id": ("id",),
    "tld": ("tld", "extension"),
    "enabled": ("active", "enabled", "status"),
    "allow_register": ("allow_register", "allow_registration", "registration_enabled"),
    "allow_transfer": ("allow_transfer", "transfer_enabled"),
    "min_years": ("min_years",),
    "register": ("price_registration", "register_price"),
    "renew": ("price_renew", "renew_price"),
    "transfer": ("price_transfer", "transfer_price"),
}

HOSTING_PLAN_FIELDS = {
    "id": ("id",),
    "name": ("name", "title"),
    "status": ("status",),
    "config": ("config",),
}

# Product config keys referencing a hosting plan.
HOSTING_PLAN_ID_REFS = ("plan_id", "hosting_plan_id", "hp_id", "service_hosting_hp_id")
HOSTING_PLAN_NAME_REFS = ("plan", "hosting_plan", "name")

PRICING_ENTRY_FIELDS = {
    "price": ("price", "value", "amount", "m_renewal_price"),
    "setup": ("setup", "setup_price", "setup_fee"),
    "enabled": ("enabled", "active", "status"),
}

COMPANY_FIELDS = {
    "name": ("name",),
    "email": ("email",),
    "phone": ("tel", "phone"),
    "www": ("www", "website"),
    "address": ("address_1", "address"),
    "city": ("city",),
    "country": ("country",),
    "signature": ("signature",),
    "logo_url": ("logo_url",),
    "logo_dark_url": ("logo_url_dark",),
    "favicon_url": ("favicon_url",),
}

THEME_FIELDS = {
    "code": ("code", "name"),
    "name": ("name",),
    "version": ("version",),
    "url": ("url",),
}

THEME_SETTING_FIELDS = {
    "logo_url": ("login_page_logo_url", "logo_url"),
    "logo_dark_url": ("logo_dark_url",),
    "favicon_url": ("favicon_url",),
    "header_bg_url": ("header_bg_url", "header_background"),
    "footer_bg_url": ("footer_bg_url", "footer_background"),
    "footer_content": ("footer_content", "footer_html"),
}
