"""
Contact Form Site Permissions

Only sites listed in ALLOWED_SITES may submit the contact form.
An empty allowlist rejects every site.
"""


def parse_allowed_sites(raw):
    """
    Parse a comma-separated allowlist into a set of lower-cased site ids.

    Args:
        raw: Comma-separated string, an iterable of strings, or None

    Returns:
        frozenset of normalized site identifiers
    """
    if not raw:
        return frozenset()

    entries = raw.split(',') if isinstance(raw, str) else raw
    return frozenset(
        entry.strip().lower() for entry in entries if entry and entry.strip()
    )


def is_site_allowed(site, allowed_sites) -> bool:
    """
    Case-insensitive allowlist check against a set built by parse_allowed_sites.

    Missing or blank sites are never allowed.
    """
    if not site or not site.strip():
        return False
    return site.strip().lower() in allowed_sites
