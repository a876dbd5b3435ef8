"""Per-provider tag key normalization.

GCP resource labels only accept lowercase letters, digits, ``_`` and ``-``
and must start with a letter. AWS tags are passed through unchanged.
"""

import re
from collections.abc import Callable

from kubeorch.utils.logging import get_logger

logger = get_logger(__name__)

_GCP_INVALID = re.compile(r"[^a-z0-9_-]")
_UNDERSCORE_RUN = re.compile(r"_+")

TAG_PREFIX = "tag_"
EMPTY_KEY = "tag"


def normalize_gcp_key(key: str) -> str:
    """Sanitize a tag key to the GCP label key rule set.

    Args:
        key: Raw tag key

    Returns:
        Sanitized key. Applying it twice yields the same result.
    """
    out = _GCP_INVALID.sub("_", key.lower())
    out = _UNDERSCORE_RUN.sub("_", out).strip("_")
    if not out:
        return EMPTY_KEY
    if not out[0].isalpha():
        out = TAG_PREFIX + out
    return out


def _identity(key: str) -> str:
    return key


_KEY_NORMALIZERS: dict[str, Callable[[str], str]] = {
    "gcp": normalize_gcp_key,
}


def normalize_tags(tags: dict[str, str] | None, provider: str) -> dict[str, str]:
    """Normalize tag keys for a provider. Values are never changed.

    Keys that collide after normalization keep the last value in input order.

    Args:
        tags: Raw tags
        provider: Provider identifier

    Returns:
        New dict with normalized keys
    """
    if not tags:
        return {}

    normalize = _KEY_NORMALIZERS.get(provider, _identity)
    result: dict[str, str] = {}
    for key, value in tags.items():
        new_key = normalize(key)
        if new_key in result:
            logger.warning(
                "tag_key_collision",
                provider=provider,
                original_key=key,
                normalized_key=new_key,
            )
        result[new_key] = value
    return result
