"""Translation provider abstractions."""

from __future__ import annotations

import json
import sys
from abc import ABC, abstractmethod
from typing import Any, List, Tuple

from .endpoint import EndpointParameters
from .errors import (
    RESULT_ERROR,
    ConfigurationError,
    ProviderError,
    TransportError,
)
from .structures import BatchFailure, BatchResult, BatchSuccess, TranslationBatchRequest
from .transport import Transport, TransportRequest

SUCCESS_CODE = "S000000"


def _failure_message(payload: dict) -> str:
    for key in ("message", "debugMessage", "error", "msg"):
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value
    return "The endpoint returned a non-success status code."


def parse_batch_response(payload: Any) -> BatchResult:
    """Turn a raw endpoint reply into :class:`BatchSuccess` or :class:`BatchFailure`.

    Structural problems that make the reply unreadable raise
    :class:`ProviderError` directly.
    """

    if not isinstance(payload, dict):
        raise ProviderError("Endpoint response malformed: expected a JSON object.")

    code = payload.get("code")
    data = payload.get("data")
    if code != SUCCESS_CODE or data is None:
        return BatchFailure(
            code=str(code) if code else RESULT_ERROR,
            message=_failure_message(payload),
        )
    if not isinstance(data, dict):
        raise ProviderError("Endpoint response malformed: 'data' must be an object.")

    texts = data.get("texts")
    if not isinstance(texts, list):
        raise ProviderError("Endpoint response is missing the 'texts' list.")

    translations: List[Tuple[str, str]] = []
    for item in texts:
        if not isinstance(item, dict):
            raise ProviderError(
                "Endpoint response malformed: expected objects in 'texts'."
            )
        item_id = item.get("id")
        translated = item.get("translation")
        if translated is None:
            translated = ""
        if not isinstance(item_id, str) or not isinstance(translated, str):
            raise ProviderError(
                "Endpoint response malformed: missing fields in 'texts'."
            )
        translations.append((item_id, translated))

    return BatchSuccess(
        translations=tuple(translations),
        source_language=str(data.get("sourceLanguage") or ""),
        target_language=str(data.get("targetLanguage") or ""),
    )


class TranslationProvider(ABC):
    """Abstract adapter for translation providers."""

    name: str = "provider"

    @abstractmethod
    async def translate_batch(self, request: TranslationBatchRequest) -> BatchSuccess:
        """Translate the batch and return the successful reply."""


class EchoTranslationProvider(TranslationProvider):
    """A provider that returns the original text (useful for testing)."""

    name = "echo"

    def __init__(self, *, source_language: str = "auto") -> None:
        self.source_language = source_language

    async def translate_batch(self, request: TranslationBatchRequest) -> BatchSuccess:
        return BatchSuccess(
            translations=tuple(
                (fragment.fragment_id, fragment.content) for fragment in request.texts
            ),
            source_language=self.source_language,
            target_language=request.target_language,
        )


class CustomEndpointProvider(TranslationProvider):
    """Provider speaking the generic JSON batch contract over a transport."""

    def __init__(
        self,
        endpoint: EndpointParameters,
        transport: Transport,
        *,
        name: str = "custom",
        debug: bool = False,
    ) -> None:
        self.endpoint = endpoint
        self.transport = transport
        self.name = name
        self.debug = debug

    async def translate_batch(self, request: TranslationBatchRequest) -> BatchSuccess:
        body = request.to_payload()
        self._log_debug("provider.request.url", self.endpoint.base_url)
        self._log_debug("provider.request.payload", body)

        response = await self.transport.send(
            TransportRequest(
                url=self.endpoint.base_url,
                body=body,
                headers=self.endpoint.headers(),
            )
        )
        self._log_debug(
            "provider.response.raw",
            {"status": response.status, "ok": response.ok, "data": response.payload},
        )

        if not response.ok:
            self._raise_for_status(response.status, response.payload)

        result = parse_batch_response(response.payload)
        if isinstance(result, BatchFailure):
            raise ProviderError(
                f"Page translation failed: {result.message}",
                code=result.code,
            )
        self._log_debug("provider.response.translations", dict(result.translations))
        return result

    def _raise_for_status(self, status: int, payload: Any) -> None:
        """Fail an error status, keeping the provider's own error when it sent one."""

        if isinstance(payload, dict) and payload.get("code"):
            try:
                result = parse_batch_response(payload)
            except ProviderError:
                result = None
            if isinstance(result, BatchFailure):
                raise ProviderError(
                    f"Page translation failed: {result.message}",
                    code=result.code,
                )
        raise TransportError(
            f"Request to {self.endpoint.base_url} failed with status: {status}"
        )

    def _log_debug(self, label: str, payload: Any) -> None:
        """Emit structured debug information when enabled."""

        if not getattr(self, "debug", False):
            return
        try:
            if isinstance(payload, (dict, list)):
                message = json.dumps(payload, ensure_ascii=False, indent=2)
            else:
                message = str(payload)
        except (TypeError, ValueError):
            message = repr(payload)
        print(f"[pagewarp][provider-debug] {label}:\n{message}", file=sys.stderr)


def build_provider(
    kind: str | None,
    *,
    source: str | None = None,
    endpoint: EndpointParameters | None = None,
    transport: Transport | None = None,
    debug: bool = False,
) -> TranslationProvider:
    """Factory to create providers by name."""

    normalized = (kind or "custom").strip().lower()
    if normalized in {"echo", "noop", "mock"}:
        return EchoTranslationProvider()
    if endpoint is None or transport is None:
        raise ConfigurationError(
            f"Provider '{normalized}' needs an endpoint and a transport."
        )
    return CustomEndpointProvider(
        endpoint, transport, name=source or normalized, debug=debug
    )
