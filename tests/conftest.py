"""Shared fixtures for pagewarp tests."""

from __future__ import annotations

from typing import Any, List

import pytest

from pagewarp.configuration import PipelineConfig
from pagewarp.endpoint import parse_endpoint
from pagewarp.transport import Transport, TransportRequest, TransportResponse


ENDPOINT_URL = "https://translate.example.com/v1/batch?key=secret-token&tc=2&pbc=5"


def success_payload(
    translations: dict[str, str],
    *,
    source_language: str = "en",
    target_language: str = "zh-CN",
) -> dict[str, Any]:
    return {
        "code": "S000000",
        "data": {
            "texts": [
                {"id": item_id, "translation": text}
                for item_id, text in translations.items()
            ],
            "sourceLanguage": source_language,
            "targetLanguage": target_language,
        },
    }


class ScriptedTransport(Transport):
    """Replays canned responses and records every request."""

    def __init__(self, *responses: TransportResponse) -> None:
        self.responses: List[TransportResponse] = list(responses)
        self.requests: List[TransportRequest] = []

    async def send(self, request: TransportRequest) -> TransportResponse:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError("Unexpected extra request")
        return self.responses.pop(0)


def ok(payload: Any) -> TransportResponse:
    return TransportResponse(status=200, ok=True, payload=payload)


@pytest.fixture
def endpoint():
    return parse_endpoint(ENDPOINT_URL)


@pytest.fixture
def pipeline_config(endpoint):
    return PipelineConfig(
        sources={"custom-1": endpoint},
        preferred_language="en",
        second_preferred_language="fr",
    )
