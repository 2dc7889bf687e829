"""Tests for turning settings into pipeline parameters."""

from types import SimpleNamespace

import pytest

from pagewarp.configuration import (
    PipelineConfig,
    _env_layers,
    _format_validation_errors,
    _validate_settings,
)
from pagewarp.errors import ConfigurationError


def _settings(**overrides):
    values = dict(
        PAGEWARP_SOURCES={"work": "https://mt.example.com/batch?key=k&tc=1"},
        PAGEWARP_PREFERRED_LANGUAGE="zh",
        PAGEWARP_SECOND_PREFERRED_LANGUAGE="en",
        PAGEWARP_SHORT_CONTENT_THRESHOLD=3,
        PAGEWARP_REQUEST_TIMEOUT=12.5,
        PAGEWARP_CACHE_SIZE=64,
        PAGEWARP_PROVIDER_DEBUG=False,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


class TestPipelineConfig:
    def test_from_settings(self):
        config = PipelineConfig.from_settings(_settings())

        assert config.preferred_language == "zh-CN"
        assert config.second_preferred_language == "en"
        assert config.request_timeout == 12.5
        assert config.cache_size == 64
        endpoint = config.endpoint_for("work")
        assert endpoint.base_url == "https://mt.example.com/batch"
        assert endpoint.translator_code == 1

    def test_unknown_source(self):
        config = PipelineConfig.from_settings(_settings())

        with pytest.raises(ConfigurationError) as exc_info:
            config.endpoint_for("home")
        assert exc_info.value.code == "SOURCE_ERROR"

    def test_no_sources(self):
        config = PipelineConfig.from_settings(_settings(PAGEWARP_SOURCES=None))

        assert dict(config.sources) == {}


class TestValidateSettings:
    def test_valid(self):
        _validate_settings(_settings())

    def test_collects_all_problems(self):
        settings = _settings(
            PAGEWARP_PREFERRED_LANGUAGE="elvish",
            PAGEWARP_SOURCES={"bad": "not-a-url"},
            PAGEWARP_REQUEST_TIMEOUT=0,
        )

        with pytest.raises(ConfigurationError) as exc_info:
            _validate_settings(settings)

        message = exc_info.value.message
        assert "PAGEWARP_PREFERRED_LANGUAGE" in message
        assert "PAGEWARP_SOURCES" in message
        assert "PAGEWARP_REQUEST_TIMEOUT" in message


def test_format_validation_errors():
    text = _format_validation_errors(
        [
            {"path": ["PAGEWARP_CACHE_SIZE"], "message": "not an int", "source": "env:process"},
            {"path": None, "msg": "broken"},
        ]
    )

    assert text.splitlines() == [
        "Configuration validation errors detected:",
        "- PAGEWARP_CACHE_SIZE: not an int (source: env:process)",
        "- broken",
    ]


class TestEnvLayers:
    def test_only_schema_keys_with_dotenv_before_process(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("PAGEWARP_CACHE_SIZE=8\nUNRELATED_KEY=1\n")
        monkeypatch.setenv("PAGEWARP_PREFERRED_LANGUAGE", "fr")
        monkeypatch.setenv("UNRELATED_KEY", "2")

        sources = [source for _, source, _ in _env_layers(tmp_path)]

        assert not any("UNRELATED_KEY" in source for source in sources)
        assert sources.index("env:.env:PAGEWARP_CACHE_SIZE") < sources.index(
            "env:process:PAGEWARP_PREFERRED_LANGUAGE"
        )

    def test_no_dotenv_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PAGEWARP_CACHE_SIZE", "16")

        layers = list(_env_layers(tmp_path))

        assert ({"PAGEWARP_CACHE_SIZE": "16"}, "env:process:PAGEWARP_CACHE_SIZE", "env") in layers
        assert all(":.env:" not in source for _, source, _ in layers)
