"""Name matching between Databank entities and SWAPI search results.

SWAPI's ``?search=`` is a loose substring search, so a query may return
several records. The best one is picked in this order:

1. exact name, ignoring case
2. substring in either direction, ignoring case
3. the first result (optional; can produce confidently wrong matches)
"""

from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple


class MatchKind(str, Enum):
    EXACT = "exact"
    PARTIAL = "partial"
    FALLBACK = "fallback"


def _normalize(name: Any) -> Optional[str]:
    if not isinstance(name, str):
        return None
    return name.strip().lower()


def find_match(
    target_name: str,
    candidates: Sequence[Dict[str, Any]],
    fallback_to_first: bool = True,
) -> Tuple[Optional[Dict[str, Any]], Optional[MatchKind]]:
    """Pick the best candidate for a name and report how it was chosen.

    Args:
        target_name: Name of the Databank entity
        candidates: SWAPI records, each with a ``name`` key
        fallback_to_first: Accept the first candidate when nothing matches

    Returns:
        Tuple of (candidate or None, MatchKind or None)
    """
    if not candidates:
        return None, None

    target = _normalize(target_name) or ""
    named = [(c, _normalize(c.get("name"))) for c in candidates if isinstance(c, dict)]

    for candidate, name in named:
        if name is not None and name == target:
            return candidate, MatchKind.EXACT

    if target:
        for candidate, name in named:
            if name and (target in name or name in target):
                return candidate, MatchKind.PARTIAL

    if fallback_to_first:
        return candidates[0], MatchKind.FALLBACK
    return None, None


def match_name(
    target_name: str,
    candidates: Sequence[Dict[str, Any]],
    fallback_to_first: bool = True,
) -> Optional[Dict[str, Any]]:
    """Return the best candidate for ``target_name`` or None."""
    candidate, _ = find_match(target_name, candidates, fallback_to_first)
    return candidate
