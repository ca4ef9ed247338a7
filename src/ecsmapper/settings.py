"""Runtime settings loaded from `.env` and environment variables."""

from __future__ import annotations

import asyncio
import ipaddress
import logging
import ssl
from dataclasses import dataclass
from fnmatch import fnmatch
from functools import lru_cache
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import httpx
from pydantic import Field, PrivateAttr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ecsmapper.exceptions import SettingsError

NoProxyNetwork = ipaddress.IPv4Network | ipaddress.IPv6Network
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NoProxyRules:
    """Parsed NO_PROXY entries.

    `example.com` matches the host and its subdomains, `.corp` only subdomains, `*` every
    host, shell-style patterns like `*.svc` are matched with fnmatch and CIDR blocks match
    IP literals.
    """

    match_all: bool = False
    hosts: tuple[str, ...] = ()
    suffixes: tuple[str, ...] = ()
    patterns: tuple[str, ...] = ()
    networks: tuple[NoProxyNetwork, ...] = ()

    @classmethod
    def parse(cls, no_proxy: str | None) -> NoProxyRules:
        """Parse a raw comma-separated NO_PROXY value.

        Args:
            no_proxy (str | None): Raw NO_PROXY value.

        Returns:
            NoProxyRules: Parsed rules, empty when the value is unset.
        """
        hosts: list[str] = []
        suffixes: list[str] = []
        patterns: list[str] = []
        networks: list[NoProxyNetwork] = []
        for raw_entry in (no_proxy or "").split(","):
            entry = raw_entry.strip().lower()
            if not entry:
                continue
            if entry == "*":
                return cls(match_all=True)
            try:
                networks.append(ipaddress.ip_network(entry, strict=False))
                continue
            except ValueError:
                pass

            host = _host_of(entry)
            if not host:
                continue
            if "*" in host:
                patterns.append(host)
            elif entry.startswith("."):
                suffixes.append(host)
            else:
                hosts.append(host)
        return cls(
            hosts=tuple(hosts),
            suffixes=tuple(suffixes),
            patterns=tuple(patterns),
            networks=tuple(networks),
        )

    def matches(self, host: str) -> bool:
        """Return whether `host` bypasses the proxy."""
        host = host.lower().strip("[]")
        if self.match_all:
            return True
        if any(host == name or host.endswith(f".{name}") for name in self.hosts):
            return True
        if any(host.endswith(f".{suffix}") for suffix in self.suffixes):
            return True
        if any(fnmatch(host, pattern) for pattern in self.patterns):
            return True
        try:
            address = ipaddress.ip_address(host)
        except ValueError:
            return False
        return any(address in network for network in self.networks)


def _host_of(entry: str) -> str:
    """Strip scheme, port, brackets and leading dot from a NO_PROXY entry."""
    target = entry if "://" in entry else f"//{entry}"
    hostname = urlparse(target).hostname or entry
    return hostname.strip("[]").removeprefix(".")


class Settings(BaseSettings):
    """Package settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    project_name: str = "ecsmapper"
    app_env: str = Field(
        default="dev",
        validation_alias="APP_ENV",
        description="Application environment, e.g. 'dev', 'prod'.",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level, e.g. 'INFO', 'DEBUG'.",
    )
    log_json: bool = Field(
        default=True,
        validation_alias="LOG_JSON",
        description="Enable JSON formatted logs.",
    )
    log_file: str | None = Field(
        default=None,
        validation_alias="LOG_FILE",
        description="File path for log output.",
    )

    api_base_url: str = Field(
        default="http://127.0.0.1:8082",
        validation_alias="ECSMAPPER_API_BASE_URL",
        description="Origin of the mapping service exposing /map-batch and /mappings.",
    )
    default_sourcetype: str = Field(
        default="pan_traffic",
        validation_alias="ECSMAPPER_SOURCETYPE",
        description="Sourcetype attached to every batch item.",
    )
    default_model: str = Field(
        default="gpt-4o-mini",
        validation_alias="ECSMAPPER_MODEL",
        description="Classifier model requested from /map-batch.",
    )
    default_limit: int = Field(
        default=5,
        ge=1,
        validation_alias="ECSMAPPER_LIMIT",
        description="Number of retrieval hints requested per field.",
    )
    page_size: int = Field(
        default=20,
        ge=1,
        validation_alias="ECSMAPPER_PAGE_SIZE",
        description="Rows fetched per /mappings page.",
    )
    max_depth: int = Field(
        default=2,
        ge=0,
        validation_alias="ECSMAPPER_MAX_DEPTH",
        description="Deepest nesting level walked when extracting field paths.",
    )
    export_dir: str = Field(
        default=".",
        validation_alias="ECSMAPPER_EXPORT_DIR",
        description="Directory receiving JSON and CSV exports.",
    )

    http_proxy: str | None = Field(default=None, validation_alias="HTTP_PROXY", description="HTTP proxy URL.")
    https_proxy: str | None = Field(
        default=None,
        validation_alias="HTTPS_PROXY",
        description="HTTPS proxy URL.",
    )
    all_proxy: str | None = Field(default=None, validation_alias="ALL_PROXY", description="All proxy URL.")
    no_proxy: str | None = Field(
        default=None,
        validation_alias="NO_PROXY",
        description="Comma-separated list of hosts to bypass proxy.",
    )

    cert_path: str | None = Field(
        default=None,
        validation_alias="CERT_PATH",
        description="Path to SSL certificate.",
    )
    timeout: float | None = Field(
        default=None,
        validation_alias="TIMEOUT",
        description="Request timeout in seconds. Unset keeps the httpx default.",
    )
    max_connections: int = Field(
        default=20,
        validation_alias="MAX_CONNECTIONS",
        description="Maximum number of concurrent connections.",
    )

    _no_proxy_rules: NoProxyRules = PrivateAttr(default_factory=NoProxyRules)
    _httpx_clients: dict[str, httpx.AsyncClient] = PrivateAttr(default_factory=dict)
    _close_tasks: set[asyncio.Task[None]] = PrivateAttr(default_factory=set)

    @field_validator("api_base_url")
    @classmethod
    def _validate_api_base_url(cls, value: str) -> str:
        """Require an http(s) origin and strip the trailing slash.

        Args:
            value (str): Raw base URL.

        Raises:
            ValueError: If the URL has no http(s) scheme or no host.

        Returns:
            str: Normalized base URL.
        """
        parsed = urlparse(value.strip())
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError("ECSMAPPER_API_BASE_URL must be an http(s) URL with a host")  # noqa: TRY003
        return value.strip().rstrip("/")

    def model_post_init(self, __context: object, /) -> None:
        """Initialize derived runtime settings."""
        self._no_proxy_rules = NoProxyRules.parse(self.no_proxy)
        self._initialize_httpx_clients()

    @property
    def no_proxy_rules(self) -> NoProxyRules:
        """Return parsed NO_PROXY rules."""
        return self._no_proxy_rules

    @property
    def httpx_clients(self) -> dict[str, httpx.AsyncClient]:
        """Return cached HTTPX clients."""
        return self._httpx_clients

    def should_bypass_proxy(self, target_url: str | None) -> bool:
        """Return whether the URL should bypass proxies."""
        return _is_no_proxy_target(target_url, self)

    def select_async_httpx_client(self, target_url: str | None) -> httpx.AsyncClient | None:
        """Return the async HTTPX client selected for target URL."""
        if not self._httpx_clients:
            return None
        key = "async_no_proxy" if self.should_bypass_proxy(target_url) else "async_proxy"
        return self._httpx_clients[key]

    def _initialize_httpx_clients(self) -> None:
        """Create and cache async HTTPX clients for proxy and no-proxy paths."""
        proxy_kwargs = build_httpx_client_kwargs(self)
        no_proxy_kwargs = build_httpx_client_kwargs(self, force_no_proxy=True)
        limits = httpx.Limits(max_connections=self.max_connections)

        self._httpx_clients = {
            "async_proxy": httpx.AsyncClient(**proxy_kwargs, limits=limits),
            "async_no_proxy": httpx.AsyncClient(**no_proxy_kwargs, limits=limits),
        }

    def close_httpx_clients(self) -> None:
        """Close cached async HTTPX clients (best effort)."""
        if not self._httpx_clients:
            return

        async_clients = (
            ("async_proxy", self._httpx_clients.get("async_proxy")),
            ("async_no_proxy", self._httpx_clients.get("async_no_proxy")),
        )

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self._aclose_async_clients(async_clients))
        else:
            task = loop.create_task(self._aclose_async_clients(async_clients))
            self._close_tasks.add(task)
            task.add_done_callback(self._on_close_task_done)

        self._httpx_clients = {}

    @staticmethod
    async def _aclose_async_clients(
        clients: tuple[tuple[str, object | None], ...],
    ) -> None:
        """Close async HTTPX clients with best effort."""
        for key, client in clients:
            if not isinstance(client, httpx.AsyncClient):
                continue
            try:
                await client.aclose()
            except Exception:
                logger.warning("Failed to close async HTTPX client", extra={"client_key": key})

    def _on_close_task_done(self, task: asyncio.Task[None]) -> None:
        """Handle completion of async close tasks."""
        self._close_tasks.discard(task)
        try:
            task.result()
        except Exception:
            logger.warning("Async HTTPX close task failed")


def build_ssl_context(settings: Settings) -> ssl.SSLContext:
    """Build a strict SSL context from settings.

    Args:
        settings (Settings): Runtime settings.

    Returns:
        ssl.SSLContext: Configured TLS context.
    """
    ssl_context = ssl.create_default_context(cafile=settings.cert_path)
    ssl_context.verify_mode = ssl.CERT_REQUIRED
    ssl_context.minimum_version = ssl.TLSVersion.TLSv1_2
    return ssl_context


def _is_no_proxy_target(target_url: str | None, settings: Settings) -> bool:
    if not target_url:
        return False
    hostname = urlparse(target_url).hostname
    if not hostname:
        return False
    return settings.no_proxy_rules.matches(hostname)


def build_httpx_client_kwargs(
    settings: Settings,
    *,
    target_url: str | None = None,
    force_no_proxy: bool = False,
) -> dict[str, Any]:
    """Build kwargs used for `httpx.AsyncClient`.

    The timeout is only passed when configured, otherwise httpx keeps its own default.

    Args:
        settings (Settings): Runtime settings.
        target_url (str | None): Optional target URL used for NO_PROXY evaluation.
        force_no_proxy (bool): If true, always build kwargs without proxy.

    Returns:
        dict[str, Any]: Arguments for client constructors.
    """
    proxy_url = settings.https_proxy or settings.http_proxy or settings.all_proxy

    kwargs: dict[str, Any] = {
        "verify": build_ssl_context(settings),
        "headers": {"Content-Type": "application/json"},
    }
    if settings.timeout is not None:
        kwargs["timeout"] = settings.timeout

    should_bypass = force_no_proxy or _is_no_proxy_target(target_url, settings)
    if proxy_url and not should_bypass:
        kwargs["proxy"] = proxy_url

    return kwargs


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance.

    Raises:
        SettingsError: If settings cannot be loaded or validated.

    Returns:
        Settings: The loaded settings instance.
    """
    try:
        return Settings()
    except Exception as exc:
        if _is_missing_settings_error(exc):
            ensure_env_file_exists()
            try:
                return Settings()
            except Exception as retry_exc:
                raise SettingsError(exc=retry_exc) from retry_exc
        raise SettingsError(exc=exc) from exc


def ensure_env_file_exists(
    *,
    env_path: Path = Path(".env"),
    template_path: Path = Path(".env.template"),
) -> None:
    """Create `.env` from template when missing.

    Args:
        env_path (Path): Target environment file path.
        template_path (Path): Template file path.
    """
    if env_path.exists() or not template_path.exists():
        return
    env_path.write_text(template_path.read_text(encoding="utf-8"), encoding="utf-8")
    logger.info(
        "Created environment file from template",
        extra={"env_path": str(env_path), "template_path": str(template_path)},
    )


def _is_missing_settings_error(exc: Exception) -> bool:
    if not isinstance(exc, ValidationError):
        return False
    return any(error.get("type") == "missing" for error in exc.errors())
