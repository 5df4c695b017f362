"""
Per-product capability profiles and detection probes.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from .base import DatabaseProduct, DialectCapabilities, version_at_least


@dataclass(frozen=True)
class VersionGate:
    """
    Sets ``flag`` to ``enabled`` from ``minimum`` onward and to its opposite before.
    """

    flag: str
    minimum: str
    enabled: bool = True

    def apply(self, capabilities: DialectCapabilities, version: str) -> DialectCapabilities:
        value = self.enabled if version_at_least(version, self.minimum) else not self.enabled
        return replace(capabilities, **{self.flag: value})


@dataclass(frozen=True)
class DetectionProbe:
    """
    Heuristic that reclassifies a product whose driver reports an ambiguous identity.

    A probe matches when every configured condition holds: the version is at
    least ``min_version``, the version string contains ``version_marker``, and
    ``sql`` returns a row (whose first column contains ``result_marker``).
    """

    name: str
    product: DatabaseProduct
    sql: str | None = None
    min_version: str | None = None
    version_marker: str | None = None
    result_marker: str | None = None


@dataclass(frozen=True)
class ProductProfile:
    product: DatabaseProduct
    capabilities: DialectCapabilities
    default_quote_string: str = '"'
    name_markers: tuple[str, ...] = ()
    version_gates: tuple[VersionGate, ...] = ()
    probes: tuple[DetectionProbe, ...] = ()

    def resolve_capabilities(self, version: str) -> DialectCapabilities:
        capabilities = self.capabilities
        for gate in self.version_gates:
            capabilities = gate.apply(capabilities, version)
        return capabilities
