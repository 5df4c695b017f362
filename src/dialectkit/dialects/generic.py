"""
Fallback profile for backends without a dedicated profile.
"""

from __future__ import annotations

from .base import DatabaseProduct, DialectCapabilities
from .profile import ProductProfile

GENERIC_PROFILE = ProductProfile(
    product=DatabaseProduct.GENERIC,
    capabilities=DialectCapabilities(),
    default_quote_string='"',
)
