"""
FOSSBilling API access: transport client and pagination harvester.
"""
from .client import (
    ADMIN_SCOPE,
    CLIENT_SCOPE,
    GUEST_SCOPE,
    BillingApiClient,
    encode_form,
    read_error_message,
)
from .pagination import as_list, fetch_paginated, read_pagination_meta

__all__ = [
    "ADMIN_SCOPE",
    "CLIENT_SCOPE",
    "GUEST_SCOPE",
    "BillingApiClient",
    "encode_form",
    "read_error_message",
    "as_list",
    "fetch_paginated",
    "read_pagination_meta",
]
