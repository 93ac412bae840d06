"""Brand-protection discovery and deduplication pipeline."""
