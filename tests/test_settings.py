"""Tests for environment-driven settings."""

import pytest

from algraph.config import AnalyzerSettings, Neo4jSettings, load_analyzer_settings, load_settings


class TestNeo4jSettings:
    def test_required_variables(self):
        with pytest.raises(RuntimeError):
            load_settings()

    def test_load(self, monkeypatch):
        monkeypatch.setenv("ALGRAPH_NEO4J_URI", "bolt://db:7687")
        monkeypatch.setenv("ALGRAPH_NEO4J_USER", "neo4j")
        monkeypatch.setenv("ALGRAPH_NEO4J_PASSWORD", "secret")
        assert load_settings() == Neo4jSettings(uri="bolt://db:7687", username="neo4j", password="secret")


class TestAnalyzerSettings:
    def test_defaults(self):
        assert load_analyzer_settings() == AnalyzerSettings()

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("ALGRAPH_CODE_GLOB", "src/**/*.al")
        monkeypatch.setenv("ALGRAPH_IGNORE_DIRS", " .alpackages , test ,")
        monkeypatch.setenv("ALGRAPH_MAX_WORKERS", "3")
        monkeypatch.setenv("ALGRAPH_INCLUDE_REFERENCES", "yes")
        monkeypatch.setenv("ALGRAPH_DEBUG", "1")
        settings = load_analyzer_settings()
        assert settings.code_glob == "src/**/*.al"
        assert settings.ignore_dirs == (".alpackages", "test")
        assert settings.max_workers == 3
        assert settings.include_references is True
        assert settings.debug is True

    @pytest.mark.parametrize("value", ["many", "0"])
    def test_invalid_workers(self, monkeypatch, value):
        monkeypatch.setenv("ALGRAPH_MAX_WORKERS", value)
        with pytest.raises(ValueError):
            load_analyzer_settings()
