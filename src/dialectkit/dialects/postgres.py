"""
PostgreSQL and Redshift profiles.
"""

from __future__ import annotations

from .base import DatabaseProduct, DialectCapabilities, InlineStrategy
from .profile import DetectionProbe, ProductProfile, VersionGate

POSTGRES_CAPABILITIES = DialectCapabilities(
    allows_from_query=True,
    requires_alias_for_from_query=True,
    allows_compound_count_distinct=False,
    supports_multi_value_in=True,
    nulls_collate_last=True,
    supports_nulls_last_syntax=True,
    supports_grouping_sets=True,
    inline_strategy=InlineStrategy.VALUES,
)

REDSHIFT_PROBE = DetectionProbe(
    name="redshift-version",
    product=DatabaseProduct.REDSHIFT,
    sql="select version()",
    result_marker="redshift",
)

POSTGRES_PROFILE = ProductProfile(
    product=DatabaseProduct.POSTGRESQL,
    capabilities=POSTGRES_CAPABILITIES,
    name_markers=("postgres",),
    version_gates=(
        VersionGate("supports_nulls_last_syntax", "8.3"),
        VersionGate("supports_grouping_sets", "9.5"),
    ),
    probes=(REDSHIFT_PROBE,),
)

# Redshift reports server_version 8.0.2 forever, so it takes no version gates.
REDSHIFT_PROFILE = ProductProfile(
    product=DatabaseProduct.REDSHIFT,
    capabilities=DialectCapabilities(
        allows_from_query=True,
        requires_alias_for_from_query=True,
        supports_multi_value_in=False,
        nulls_collate_last=True,
        supports_nulls_last_syntax=True,
        inline_strategy=InlineStrategy.UNION_ALL,
    ),
    name_markers=("redshift",),
)
