"""File-based stores."""

from brand_discovery.adapters.storage.yaml_store import YAMLKnownSiteStore, YAMLSessionStore

__all__ = ["YAMLKnownSiteStore", "YAMLSessionStore"]
