"""
Supported Buddy regions and their API base URLs.
"""
from typing import Dict, Optional


# Fallback for configurations that predate region support
DEFAULT_BASE_URL = "https://api.buddy.works"

REGIONS: Dict[str, str] = {
    "EU": "https://api.eu.buddy.works",
    "US": "https://api.buddy.works",
}


def normalize_region(code: str) -> str:
    """Return the region code without surrounding whitespace."""
    return code.strip()


def get_region_url(code: str) -> Optional[str]:
    """
    Look up the API base URL for a region code.

    Args:
        code: Region code, matched exactly (e.g. 'EU', not 'eu')

    Returns:
        Base URL or None if the region is not supported
    """
    return REGIONS.get(normalize_region(code))


def supported_regions() -> list[str]:
    """Return the supported region codes in table order."""
    return list(REGIONS.keys())
