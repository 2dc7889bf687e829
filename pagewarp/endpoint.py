"""Parsing of the configured translation endpoint URL."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Mapping
from urllib.parse import unquote, urlsplit

from .errors import ConfigurationError


BEARER_PREFIX = "Bearer "
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class EndpointParameters:
    """Immutable record of everything extracted from an endpoint URL.

    The query string of the configured URL carries the connection settings:
    ``key`` (auth token), ``tc`` (translator code), ``pbc`` (prompt builder
    code) and ``org`` (client origin). The base URL without its query string is
    the POST target.
    """

    base_url: str
    token: str = ""
    translator_code: int = 0
    prompt_builder_code: int = 0
    client_origin: str | None = None

    @property
    def authorization(self) -> str:
        if self.token.startswith(BEARER_PREFIX):
            return self.token
        return f"{BEARER_PREFIX}{self.token}"

    def headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": self.authorization,
            "Accept": "*/*",
        }
        if self.client_origin:
            headers["X-Client-Origin"] = self.client_origin
        return headers

    def __repr__(self) -> str:
        return (
            f"EndpointParameters(base_url={self.base_url!r}, token='***', "
            f"translator_code={self.translator_code}, "
            f"prompt_builder_code={self.prompt_builder_code}, "
            f"client_origin={self.client_origin!r})"
        )


def _split_query(query: str) -> Dict[str, str]:
    """Decode ``a=b&c=d`` pairs; ``+`` is kept literally and only the first ``=`` splits."""

    params: Dict[str, str] = {}
    for pair in query.split("&"):
        if not pair:
            continue
        key, _, value = pair.partition("=")
        if not key:
            continue
        params[unquote(key)] = unquote(value)
    return params


def parse_code(raw: str | None) -> int:
    """Parse an integer code leniently; anything unusable becomes 0."""

    if not raw:
        return 0
    match = _LEADING_INT.match(raw.replace('"', ""))
    if not match:
        return 0
    return int(match.group(1))


def parse_endpoint(url: str) -> EndpointParameters:
    """Parse a configured endpoint URL into :class:`EndpointParameters`."""

    raw = (url or "").strip()
    base_url, _, query = raw.partition("?")
    parts = urlsplit(base_url)
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        raise ConfigurationError(
            f"Endpoint URL '{base_url}' must be an absolute http(s) URL."
        )

    params = _split_query(query)
    return EndpointParameters(
        base_url=base_url,
        token=params.get("key", ""),
        translator_code=parse_code(params.get("tc")),
        prompt_builder_code=parse_code(params.get("pbc")),
        client_origin=params.get("org") or None,
    )


def parse_endpoints(sources: Mapping[str, str]) -> Dict[str, EndpointParameters]:
    """Parse a mapping of source identifier to endpoint URL."""

    parsed: Dict[str, EndpointParameters] = {}
    for source, url in sources.items():
        try:
            parsed[source] = parse_endpoint(url)
        except ConfigurationError as exc:
            raise ConfigurationError(
                f"Source '{source}' has an invalid endpoint: {exc.message}"
            ) from exc
    return parsed
