"""
Capability registry mapping a detected (product, version) pair to a Dialect.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..adapters.base import DatabaseAdapter, close_quietly
from ..errors import DetectionError
from ..utils import get_logger
from .base import DatabaseProduct, Dialect, DialectCapabilities, version_at_least
from .generic import GENERIC_PROFILE
from .mysql import INFOBRIGHT_PROFILE, MARIADB_PROFILE, MYSQL_PROFILE
from .oracle import ORACLE_PROFILE
from .postgres import POSTGRES_PROFILE, REDSHIFT_PROFILE
from .profile import DetectionProbe, ProductProfile
from .sqlite import SQLITE_PROFILE

if TYPE_CHECKING:
    from ..adapters.datasource import DataSource

logger = get_logger("dialects.registry")

# Most specific first: "MySQL (Infobright)" must not normalize to MYSQL.
PROFILES: tuple[ProductProfile, ...] = (
    INFOBRIGHT_PROFILE,
    MARIADB_PROFILE,
    REDSHIFT_PROFILE,
    MYSQL_PROFILE,
    POSTGRES_PROFILE,
    ORACLE_PROFILE,
    SQLITE_PROFILE,
    GENERIC_PROFILE,
)

_BY_PRODUCT: dict[DatabaseProduct, ProductProfile] = {profile.product: profile for profile in PROFILES}


def profile_for(product: DatabaseProduct) -> ProductProfile:
    return _BY_PRODUCT[product]


def normalize_product_name(product_name: str | None) -> DatabaseProduct:
    normalized = (product_name or "").strip().lower()
    for profile in PROFILES:
        if any(marker in normalized for marker in profile.name_markers):
            return profile.product
    return DatabaseProduct.GENERIC


def capabilities_for(product: DatabaseProduct, version: str) -> DialectCapabilities:
    return profile_for(product).resolve_capabilities(version)


def dialect_for(
    product: DatabaseProduct | str,
    version: str = "",
    quote_string: str | None = None,
) -> Dialect:
    """
    Build a dialect for a known product without touching a connection.
    """

    if not isinstance(product, DatabaseProduct):
        product = normalize_product_name(product)
    profile = profile_for(product)
    return Dialect(
        product=product,
        version=version,
        quote_string=quote_string if quote_string and quote_string.strip() else profile.default_quote_string,
        capabilities=profile.resolve_capabilities(version),
    )


def probe_matches(probe: DetectionProbe, adapter: DatabaseAdapter, version: str) -> bool:
    """
    Evaluate one detection probe. Any failure counts as "no match".
    """

    if probe.min_version and not version_at_least(version, probe.min_version):
        return False
    if probe.version_marker and probe.version_marker.lower() not in version.lower():
        return False
    if probe.sql is None:
        return True

    cursor = None
    try:
        cursor = adapter.execute(probe.sql)
        row = cursor.fetchone()
    except Exception:
        logger.debug("Detection probe %s failed; treating as no match", probe.name, exc_info=True)
        return False
    finally:
        close_quietly(cursor, logger)
    if row is None:
        return False
    if probe.result_marker:
        return probe.result_marker.lower() in str(row[0]).lower()
    return True


def _reclassify(product: DatabaseProduct, adapter: DatabaseAdapter, version: str) -> DatabaseProduct:
    for probe in profile_for(product).probes:
        if probe_matches(probe, adapter, version):
            logger.info("Detection probe %s reclassified %s as %s", probe.name, product.value, probe.product.value)
            return probe.product
    return product


def detect_dialect(adapter: DatabaseAdapter) -> Dialect:
    """
    Detect the dialect of the backend behind a connected adapter.

    Metadata failures raise :class:`DetectionError`; probe failures never do.
    """

    context = "while detecting dialect"
    try:
        product_name = adapter.product_name()
        context = f"while detecting dialect for {product_name}"
        version = adapter.product_version() or ""
        product = _reclassify(normalize_product_name(product_name), adapter, version)
        quote_string = adapter.identifier_quote_string()
    except Exception as exc:
        raise DetectionError(context) from exc

    dialect = dialect_for(product, version, quote_string)
    logger.info(
        "Detected dialect %s %s (quote %r)",
        dialect.product.value,
        dialect.version,
        dialect.quote_string,
    )
    return dialect


def detect_dialect_for(data_source: "DataSource") -> Dialect:
    with data_source.acquire() as adapter:
        return detect_dialect(adapter)
