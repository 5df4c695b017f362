"""
SQLite profile.
"""

from __future__ import annotations

from .base import DatabaseProduct, DialectCapabilities, InlineStrategy
from .profile import ProductProfile, VersionGate

SQLITE_PROFILE = ProductProfile(
    product=DatabaseProduct.SQLITE,
    capabilities=DialectCapabilities(
        allows_from_query=True,
        requires_alias_for_from_query=False,
        nulls_collate_last=False,
        supports_typed_temporal_literals=False,
        inline_strategy=InlineStrategy.UNION_ALL,
    ),
    name_markers=("sqlite",),
    version_gates=(
        VersionGate("supports_multi_value_in", "3.15"),
        VersionGate("supports_nulls_last_syntax", "3.30"),
    ),
)
