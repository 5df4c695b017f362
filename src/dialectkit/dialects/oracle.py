"""
Oracle profile.
"""

from __future__ import annotations

from .base import DatabaseProduct, DialectCapabilities, InlineStrategy
from .profile import ProductProfile

# Oracle rejects AS before a table alias and needs FROM dual for literal selects.
ORACLE_PROFILE = ProductProfile(
    product=DatabaseProduct.ORACLE,
    capabilities=DialectCapabilities(
        allows_as=False,
        allows_from_query=True,
        requires_alias_for_from_query=False,
        supports_multi_value_in=True,
        nulls_collate_last=True,
        supports_nulls_last_syntax=True,
        supports_grouping_sets=True,
        inline_strategy=InlineStrategy.UNION_ALL_FROM_DUAL,
    ),
    name_markers=("oracle",),
)
