"""
Connection and environment configuration for dialectkit.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional
from urllib.parse import parse_qs, urlencode, urlparse

from .errors import ConfigurationError

SLOW_QUERY_ENV = "DIALECTKIT_SLOW_QUERY_MS"
STATISTICS_PROVIDERS_ENV = "DIALECTKIT_STATISTICS_PROVIDERS"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class DSNConfig:
    driver: str
    username: Optional[str]
    password: Optional[str]
    host: Optional[str]
    port: Optional[int]
    database: Optional[str]
    path: str
    query: dict[str, str]

    def redacted(self) -> str:
        """
        Return the DSN with the password masked but structure preserved.
        """

        netloc = ""
        if self.username:
            netloc += self.username
            if self.password:
                netloc += ":***"
            netloc += "@"
        if self.host:
            netloc += self.host
        if self.port:
            netloc += f":{self.port}"

        result = f"{self.driver}://{netloc}{self.path or ''}"
        if self.query:
            result += f"?{urlencode(self.query)}"
        return result


def parse_dsn(dsn: str) -> DSNConfig:
    parsed = urlparse(dsn)
    query = {k: v[0] for k, v in parse_qs(parsed.query).items()}
    try:
        port = parsed.port
    except ValueError as exc:
        raise ConfigurationError(f"Invalid port in DSN {parsed.scheme}://...") from exc
    return DSNConfig(
        driver=parsed.scheme,
        username=parsed.username,
        password=parsed.password,
        host=parsed.hostname,
        port=port,
        database=parsed.path.lstrip("/") or None,
        path=parsed.path or "",
        query=query,
    )


def _parse_bool(value: str, *, key: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid boolean value for '{key}': {value!r}")


def _parse_float(value: str, *, key: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid float value for '{key}': {value!r}") from exc


def _parse_int(value: str, *, key: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid integer value for '{key}': {value!r}") from exc


@dataclass
class ConnectionConfig:
    """
    Normalized connection configuration for adapters.
    """

    url: str
    autocommit: bool = True
    timeout: float | None = None
    options: dict[str, Any] | None = None
    dsn: DSNConfig | None = None
    source: str | None = None

    @classmethod
    def from_dsn(cls, dsn: str, **kwargs: Any) -> "ConnectionConfig":
        """
        Build a connection config by parsing the DSN string.

        ``autocommit`` and ``timeout`` query parameters are lifted onto the
        config; everything else is passed to the driver as an option.
        Keyword arguments override what the DSN says.
        """

        parsed = parse_dsn(dsn)
        query = dict(parsed.query)

        autocommit = kwargs.pop("autocommit", None)
        if "autocommit" in query:
            parsed_autocommit = _parse_bool(query.pop("autocommit"), key="autocommit")
            if autocommit is None:
                autocommit = parsed_autocommit
        timeout = kwargs.pop("timeout", None)
        if "timeout" in query:
            parsed_timeout = _parse_float(query.pop("timeout"), key="timeout")
            if timeout is None:
                timeout = parsed_timeout

        options: dict[str, Any] = {}
        for key, value in query.items():
            options[key] = _parse_int(value, key=key) if key == "connect_timeout" else value
        options.update(kwargs.pop("options", None) or {})

        return cls(
            url=dsn,
            dsn=parsed,
            autocommit=True if autocommit is None else autocommit,
            timeout=timeout,
            options=options or None,
            **kwargs,
        )

    @classmethod
    def from_env(cls, env_var: str, **kwargs: Any) -> "ConnectionConfig":
        value = os.getenv(env_var)
        if not value:
            raise ConfigurationError(f"Environment variable {env_var} is not set")
        return cls.from_dsn(value, source=env_var, **kwargs)

    @property
    def scheme(self) -> str:
        if self.dsn:
            return self.dsn.driver.lower()
        return urlparse(self.url).scheme.lower()

    def redacted_dsn(self) -> str:
        if self.dsn:
            return self.dsn.redacted()
        return self.url

    def descriptive_label(self) -> str:
        redacted = self.redacted_dsn()
        if self.source:
            return f"{self.source} ({redacted})"
        return redacted


def resolve_slow_query_ms(default: int = 100, override: int | None = None) -> int:
    """
    Resolve the slow-statement logging threshold from an override or the environment.
    """

    if override is not None:
        return override
    value = os.getenv(SLOW_QUERY_ENV)
    if not value:
        return default
    return _parse_int(value, key=SLOW_QUERY_ENV)


def statistics_provider_names(
    product: str, environ: Mapping[str, str] | None = None
) -> list[str] | None:
    """
    Return the configured provider order for ``product``, or ``None`` if unset.

    ``DIALECTKIT_STATISTICS_PROVIDERS_<PRODUCT>`` wins over the global
    ``DIALECTKIT_STATISTICS_PROVIDERS``.
    """

    env = os.environ if environ is None else environ
    for key in (f"{STATISTICS_PROVIDERS_ENV}_{product.upper()}", STATISTICS_PROVIDERS_ENV):
        value = env.get(key)
        if value is None:
            continue
        names = [name.strip() for name in value.split(",") if name.strip()]
        if not names:
            raise ConfigurationError(f"{key} does not name any statistics provider")
        return names
    return None
