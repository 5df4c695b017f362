"""
Dialect capability model and detection.
"""

from .base import DatabaseProduct, Datatype, Dialect, DialectCapabilities, InlineStrategy, version_at_least
from .profile import DetectionProbe, ProductProfile, VersionGate
from .registry import (
    capabilities_for,
    detect_dialect,
    detect_dialect_for,
    dialect_for,
    normalize_product_name,
    profile_for,
)

__all__ = [
    "DatabaseProduct",
    "Datatype",
    "Dialect",
    "DialectCapabilities",
    "InlineStrategy",
    "DetectionProbe",
    "ProductProfile",
    "VersionGate",
    "capabilities_for",
    "detect_dialect",
    "detect_dialect_for",
    "dialect_for",
    "normalize_product_name",
    "profile_for",
    "version_at_least",
]
