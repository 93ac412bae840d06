"""Plausible alternate spellings of domains and URLs (typosquatting, mirrors)."""

import tldextract

VARIANT_TLDS = (".com", ".org", ".net", ".to", ".cc", ".me", ".tv", ".io")
COMMON_SUBDOMAINS = ("m", "mobile", "app", "api", "en")

# Bundled public suffix snapshot only, no network fetch
_EXTRACT = tldextract.TLDExtract(suffix_list_urls=())

# Confusable characters, applied one substitution at a time
HOMOGLYPHS: dict[str, tuple[str, ...]] = {
    "o": ("0",),
    "0": ("o",),
    "a": ("@",),
    "@": ("a",),
    "e": ("3",),
    "3": ("e",),
    "i": ("1",),
    "1": ("i", "l"),
    "s": ("$",),
    "$": ("s",),
    "l": ("1",),
    "g": ("9",),
    "9": ("g",),
}

DEFAULT_MAX_VARIANTS = 50


def split_domain(domain: str) -> tuple[str, str]:
    """Split a host into ``(name, ".suffix")`` on its public suffix.

    ``forum.example.com.br`` gives ``("forum.example", ".com.br")``. Hosts
    without a known suffix (``localhost``, IP addresses) keep an empty suffix.
    """
    parts = _EXTRACT(domain)
    if not parts.suffix or not parts.domain:
        return domain, ""
    name = f"{parts.subdomain}.{parts.domain}" if parts.subdomain else parts.domain
    return name, "." + parts.suffix


def generate_character_variants(label: str) -> list[str]:
    """Single-character homoglyph substitutions of `label`, in position order."""
    variants: list[str] = []
    for i, char in enumerate(label):
        for substitute in HOMOGLYPHS.get(char, ()):
            variant = label[:i] + substitute + label[i + 1:]
            if variant not in variants:
                variants.append(variant)
    return variants


def generate_domain_variants(domain: str, max_variants: int = DEFAULT_MAX_VARIANTS) -> list[str]:
    """Bounded, deterministic list of variants of a normalized domain.

    Order: ``www`` toggle, homoglyph substitutions of the registrable label,
    public suffix swaps, common subdomains. The domain itself is not included.
    """
    base = domain[4:] if domain.startswith("www.") else domain
    name, suffix = split_domain(base)
    prefix, _, label = name.rpartition(".")
    if prefix:
        prefix += "."

    candidates: list[str] = ["www." + base]
    candidates.extend(prefix + variant + suffix for variant in generate_character_variants(label))
    if suffix:
        candidates.extend(name + swapped for swapped in VARIANT_TLDS if swapped != suffix)
    candidates.extend(f"{sub}.{base}" for sub in COMMON_SUBDOMAINS)

    variants: list[str] = []
    seen = {domain, base}
    for candidate in candidates:
        if candidate in seen:
            continue
        seen.add(candidate)
        variants.append(candidate)
        if len(variants) >= max_variants:
            break
    return variants


def generate_url_variants(normalized_url: str, max_variants: int = DEFAULT_MAX_VARIANTS) -> list[str]:
    """Variants of a normalized URL: protocol/slash toggles and domain variants.

    The path is kept as-is and re-attached to every domain variant.
    """
    if "/" in normalized_url:
        domain, rest = normalized_url.split("/", 1)
        path = "/" + rest
    else:
        domain, path = normalized_url, ""

    candidates = [
        normalized_url + "/",
        "http://" + normalized_url,
        "https://" + normalized_url,
    ]
    candidates.extend(variant + path for variant in generate_domain_variants(domain, max_variants))

    variants: list[str] = []
    for candidate in candidates:
        if candidate != normalized_url and candidate not in variants:
            variants.append(candidate)
        if len(variants) >= max_variants:
            break
    return variants
