"""Tests for settings loading."""

from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

from brand_discovery.config import get_settings


def test_defaults_without_file(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test a missing YAML file yields defaults."""
    monkeypatch.delenv("SERPER_API_KEY", raising=False)

    settings = get_settings(Path("/nonexistent/config.yaml"))

    assert settings.discovery.max_queries_per_session == 100
    assert settings.discovery.min_confidence_threshold == 0.6
    assert settings.filter.similarity_threshold == 0.85
    assert settings.providers.requests_per_minute == 100
    assert settings.serper_api_key == ""
    assert settings.sessions_dir == Path("data") / "sessions"


def test_yaml_and_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test YAML sections override defaults and secrets come from the environment."""
    monkeypatch.setenv("SERPER_API_KEY", "serper-secret")
    monkeypatch.setenv("SLACK_WEBHOOK_URL", "https://hooks.slack.com/x")

    with TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "config.yaml"
        config_path.write_text(
            "discovery:\n"
            "  max_queries_per_session: 10\n"
            "  search_providers: [bing]\n"
            "  unknown_key: 1\n"
            "filter:\n"
            "  similarity_threshold: 0.9\n"
            "scoring:\n"
            "  brand_mention: 40\n"
            "paths:\n"
            f"  data_dir: {tmpdir}\n",
            encoding="utf-8",
        )

        settings = get_settings(config_path)

    assert settings.discovery.max_queries_per_session == 10
    assert settings.discovery.search_providers == ["bing"]
    assert not hasattr(settings.discovery, "unknown_key")
    assert settings.filter.similarity_threshold == 0.9
    assert settings.scoring.brand_mention == 40
    assert settings.paths.data_dir == Path(tmpdir)
    assert settings.serper_api_key == "serper-secret"
    assert settings.slack_webhook_url == "https://hooks.slack.com/x"
