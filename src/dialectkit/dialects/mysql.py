"""
MySQL family profiles: MySQL, MariaDB and Infobright.

MariaDB and Infobright use the MySQL driver and report themselves as MySQL;
detection tells them apart with the probes declared here.
"""

from __future__ import annotations

from dataclasses import replace

from .base import DatabaseProduct, DialectCapabilities, InlineStrategy
from .profile import DetectionProbe, ProductProfile, VersionGate

MYSQL_CAPABILITIES = DialectCapabilities(
    allows_from_query=True,
    requires_alias_for_from_query=True,
    allows_compound_count_distinct=True,
    supports_multi_value_in=True,
    nulls_collate_last=False,
    supports_nulls_last_syntax=False,
    requires_order_by_alias=True,
    escapes_backslash_in_literals=True,
    null_key_function="ISNULL",
    inline_strategy=InlineStrategy.UNION_ALL,
)

# Derived tables in FROM arrived in MySQL 4.0.
MYSQL_VERSION_GATES = (VersionGate("allows_from_query", "4.0"),)

MARIADB_PROBE = DetectionProbe(
    name="mariadb-version",
    product=DatabaseProduct.MARIADB,
    version_marker="mariadb",
)

INFOBRIGHT_PROBE = DetectionProbe(
    name="infobright-brighthouse-engine",
    product=DatabaseProduct.INFOBRIGHT,
    sql="select * from INFORMATION_SCHEMA.engines where ENGINE = 'BRIGHTHOUSE'",
    min_version="5.1",
)

MYSQL_PROFILE = ProductProfile(
    product=DatabaseProduct.MYSQL,
    capabilities=MYSQL_CAPABILITIES,
    default_quote_string="`",
    name_markers=("mysql",),
    version_gates=MYSQL_VERSION_GATES,
    probes=(MARIADB_PROBE, INFOBRIGHT_PROBE),
)

MARIADB_PROFILE = ProductProfile(
    product=DatabaseProduct.MARIADB,
    capabilities=MYSQL_CAPABILITIES,
    default_quote_string="`",
    name_markers=("mariadb",),
)

INFOBRIGHT_PROFILE = ProductProfile(
    product=DatabaseProduct.INFOBRIGHT,
    capabilities=replace(
        MYSQL_CAPABILITIES,
        allows_compound_count_distinct=False,
        supports_group_by_expressions=False,
        requires_group_by_alias=True,
    ),
    default_quote_string="`",
    name_markers=("infobright",),
)
