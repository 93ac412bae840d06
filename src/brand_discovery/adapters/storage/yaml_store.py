"""YAML-file stores: one artifact per known site, historical URL or session."""

import hashlib
import logging
import re
import uuid
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import yaml

from brand_discovery.core import (
    DiscoveryResult,
    KnownSite,
    KnownSiteConflictError,
    KnownSiteStore,
    SessionStore,
    extract_domain,
)

logger = logging.getLogger(__name__)


def _url_hash(url: str) -> str:
    return hashlib.md5(url.encode()).hexdigest()[:8]


def _safe_name(text: str) -> str:
    name = re.sub(r"[^\w\s.-]", "", text)
    name = re.sub(r"[-\s.]+", "-", name)
    return name[:50] or "site"


def _to_yaml_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _read_artifact(path: Path) -> Optional[dict]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError):
        logger.warning("Could not read artifact %s", path, exc_info=True)
        return None
    return data if isinstance(data, dict) else None


def _write_artifact(path: Path, data: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, allow_unicode=True, default_flow_style=False, sort_keys=False)


class YAMLKnownSiteStore(KnownSiteStore):
    """Known sites and historical violation URLs kept as YAML artifacts."""

    def __init__(self, known_sites_dir: Path, history_dir: Path) -> None:
        self.known_sites_dir = known_sites_dir
        self.history_dir = history_dir
        self.known_sites_dir.mkdir(parents=True, exist_ok=True)
        self.history_dir.mkdir(parents=True, exist_ok=True)

    async def list_known_sites(self) -> list[KnownSite]:
        sites = []
        for path in sorted(self.known_sites_dir.glob("*.yaml")):
            data = _read_artifact(path)
            if not data or not data.get("base_url"):
                continue
            base_url = str(data["base_url"])
            sites.append(KnownSite(base_url=base_url, domain=data.get("domain") or extract_domain(base_url)))
        return sites

    async def list_historical_urls(self, limit: int) -> list[str]:
        """Most recently recorded violation URLs first."""
        paths = sorted(self.history_dir.glob("*.yaml"), key=lambda p: p.stat().st_mtime, reverse=True)
        urls = []
        for path in paths:
            if len(urls) >= limit:
                break
            data = _read_artifact(path)
            if data and data.get("url"):
                urls.append(str(data["url"]))
        return urls

    async def create_known_site(self, result: DiscoveryResult, user_id: Optional[str] = None) -> None:
        path = self._site_path(result.url, result.domain)
        if path.exists():
            raise KnownSiteConflictError(result.url)

        _write_artifact(path, {
            "base_url": result.url,
            "domain": result.domain,
            "title": result.title,
            "category": result.category.value,
            "platform": result.platform.value,
            "risk_score": round(result.risk_score),
            "confidence": result.confidence,
            "keywords": list(result.keywords),
            "matching_patterns": list(result.matching_patterns),
            "discovery_method": result.discovery_method,
            "total_violations": 0,
            "added_by": user_id,
            "detected_at": result.detected_at.isoformat(),
        })

    async def add_historical_url(self, url: str, platform: Optional[str] = None) -> None:
        """Record a confirmed violation URL."""
        _write_artifact(self.history_dir / f"{_url_hash(url)}.yaml", {
            "url": url,
            "domain": extract_domain(url),
            "platform": platform,
            "date_recorded": date.today().isoformat(),
        })

    def _site_path(self, base_url: str, domain: str) -> Path:
        return self.known_sites_dir / f"{_safe_name(domain)}_{_url_hash(base_url)}.yaml"


class YAMLSessionStore(SessionStore):
    """Discovery session records, one YAML file per session."""

    def __init__(self, sessions_dir: Path) -> None:
        self.sessions_dir = sessions_dir
        self.sessions_dir.mkdir(parents=True, exist_ok=True)

    async def create_session(self, user_id: Optional[str], brand_profile_id: str) -> str:
        session_id = uuid.uuid4().hex
        _write_artifact(self._path(session_id), {
            "session_id": session_id,
            "user_id": user_id,
            "brand_profile_id": brand_profile_id,
            "status": "RUNNING",
            "started_at": datetime.now(timezone.utc).isoformat(),
        })
        return session_id

    async def update_session(self, session_id: str, updates: dict[str, Any]) -> None:
        path = self._path(session_id)
        record = _read_artifact(path) if path.exists() else None
        if record is None:
            record = {"session_id": session_id}
        record.update({key: _to_yaml_value(value) for key, value in updates.items()})
        record["updated_at"] = datetime.now(timezone.utc).isoformat()
        _write_artifact(path, record)

    async def get_session(self, session_id: str) -> Optional[dict[str, Any]]:
        path = self._path(session_id)
        if not path.exists():
            return None
        return _read_artifact(path)

    def _path(self, session_id: str) -> Path:
        return self.sessions_dir / f"session_{session_id}.yaml"
