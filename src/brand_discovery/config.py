"""Configuration management."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml


@dataclass
class DiscoveryConfig:
    """Session controller settings."""
    max_queries_per_session: int = 100
    min_confidence_threshold: float = 0.6
    enable_historical_analysis: bool = True
    search_providers: list[str] = field(default_factory=lambda: ["serper", "google", "bing"])
    respect_rate_limits: bool = True
    inter_query_delay: float = 2.0
    max_pattern_queries: int = 20


@dataclass
class FilterConfig:
    """Duplicate/variation filter settings."""
    similarity_threshold: float = 0.85
    similarity_sample_size: int = 1000
    max_variants: int = 50
    historical_url_limit: int = 20000


@dataclass
class ScoringConfig:
    """Additive risk score weights."""
    brand_mention: float = 30
    suspicious_keyword: float = 10
    brand_in_domain: float = 25
    suspicious_domain: float = 20
    historical_similarity_max: float = 20
    high_risk_path: float = 15
    risky_path: float = 10


@dataclass
class ProvidersConfig:
    """Search provider settings."""
    requests_per_minute: int = 100
    min_request_interval: float = 0.1
    timeout: float = 10.0
    country: str = "br"
    language: str = "pt"
    safe_search: bool = True
    exclude_sites: list[str] = field(default_factory=list)


@dataclass
class PathsConfig:
    """Path settings."""
    data_dir: Path = Path("data")


@dataclass
class Settings:
    """Application settings."""

    # API Keys (from environment only)
    serper_api_key: str = ""
    google_api_key: str = ""
    google_engine_id: str = ""
    bing_api_key: str = ""
    slack_webhook_url: Optional[str] = None

    # Config sections
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    filter: FilterConfig = field(default_factory=FilterConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    providers: ProvidersConfig = field(default_factory=ProvidersConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)

    @property
    def known_sites_dir(self) -> Path:
        return self.paths.data_dir / "known_sites"

    @property
    def history_dir(self) -> Path:
        return self.paths.data_dir / "history"

    @property
    def sessions_dir(self) -> Path:
        return self.paths.data_dir / "sessions"


def load_config(config_path: Path = Path("config.yaml")) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def get_settings(config_path: Path = Path("config.yaml")) -> Settings:
    """Get application settings from YAML config and environment."""
    config = load_config(config_path)

    settings = Settings(
        serper_api_key=os.getenv("SERPER_API_KEY", ""),
        google_api_key=os.getenv("GOOGLE_SEARCH_API_KEY", ""),
        google_engine_id=os.getenv("GOOGLE_SEARCH_ENGINE_ID", ""),
        bing_api_key=os.getenv("BING_SEARCH_API_KEY", ""),
        slack_webhook_url=os.getenv("SLACK_WEBHOOK_URL"),
    )

    # Apply YAML config
    for section in ("discovery", "filter", "scoring", "providers"):
        for key, value in (config.get(section) or {}).items():
            if hasattr(getattr(settings, section), key):
                setattr(getattr(settings, section), key, value)

    if "paths" in config:
        for key, value in (config["paths"] or {}).items():
            setattr(settings.paths, key, Path(value))

    return settings
