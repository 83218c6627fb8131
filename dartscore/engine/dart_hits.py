"""
WeDart - Dart Hit Statistics

Tracks which dart notations ("T20", "D16", "19", "BULL") a player hits,
feeding the "favorite darts" shortcuts of the input surface. None of this
affects scoring.

Weighting heuristic:
    - Each notation hit counts 1.0
    - A doubled/trebled notation also credits its bare number with 0.5
    - A bare single-digit number gets an extra 0.5 on itself
"""

import re
from typing import Iterable, Mapping

_MULTIPLIER_PREFIX = re.compile(r"[DT]")

DEFAULT_CURRENT_GAME_DARTS: tuple[str, ...] = ("T20", "20", "T19", "19", "D16")
DEFAULT_ALL_TIME_DARTS: tuple[str, ...] = ("T20", "T19", "D16", "20", "19")

# Common totals and the darts that usually produce them
COMMON_PATTERNS: dict[int, tuple[str, ...]] = {
    180: ("T20", "T20", "T20"),
    140: ("T20", "T20", "D10"),
    100: ("T20", "D20"),
    60: ("T20",),
    57: ("T19",),
    50: ("BULL",),
    45: ("T15",),
    41: ("T11", "D4"),
}

# Single darts worth trying first when inferring a turn
HIGH_VALUE_DARTS: tuple[tuple[int, str], ...] = (
    (60, "T20"),
    (57, "T19"),
    (54, "T18"),
    (51, "T17"),
    (50, "BULL"),
    (45, "T15"),
    (42, "T14"),
    (40, "D20"),
)


def base_number(notation: str) -> str:
    """Strip the double/treble marker from a notation ("T20" -> "20")."""
    return _MULTIPLIER_PREFIX.sub("", notation)


def merge_dart_hits(
    hits: Mapping[str, float],
    notations: Iterable[str],
) -> dict[str, float]:
    """
    Credit a sequence of notations to a hit table.

    Args:
        hits: Existing hit table (left untouched)
        notations: Notations thrown in one turn

    Returns:
        A new hit table with the weighted counts added
    """
    merged = dict(hits)
    for notation in notations:
        merged[notation] = merged.get(notation, 0) + 1
        base = base_number(notation)
        if notation == base:
            if len(base) == 1:
                merged[base] += 0.5
        else:
            merged[base] = merged.get(base, 0) + 0.5
    return merged


def merge_inferred_hits(
    hits: Mapping[str, float],
    notations: Iterable[str],
) -> dict[str, float]:
    """Like merge_dart_hits, without the single-digit boost (for guessed darts)."""
    merged = dict(hits)
    for notation in notations:
        merged[notation] = merged.get(notation, 0) + 1
        base = base_number(notation)
        if notation != base:
            merged[base] = merged.get(base, 0) + 0.5
    return merged


def infer_notations_from_score(score: int) -> list[str]:
    """
    Guess plausible darts for a turn total when none were entered.

    Returns:
        A list of notations, empty for a score of 0 or less
    """
    if score <= 0:
        return []
    if score in COMMON_PATTERNS:
        return list(COMMON_PATTERNS[score])

    result: list[str] = []
    remaining = score

    for value, notation in HIGH_VALUE_DARTS:
        if remaining >= value:
            result.append(notation)
            remaining -= value
            break

    while remaining >= 20:
        result.append("20")
        remaining -= 20
    if remaining > 0:
        result.append(str(remaining))

    return result


def combine_hits(*tables: Mapping[str, float]) -> dict[str, float]:
    """Sum several hit tables."""
    combined: dict[str, float] = {}
    for table in tables:
        for notation, count in table.items():
            combined[notation] = combined.get(notation, 0) + count
    return combined


def ranked_notations(hits: Mapping[str, float]) -> list[str]:
    """Notations with a positive count, most frequent first (stable on ties)."""
    positive = [(notation, count) for notation, count in hits.items() if count > 0]
    positive.sort(key=lambda item: item[1], reverse=True)
    return [notation for notation, _ in positive]


def current_game_favorites(
    game_hits: Mapping[str, float],
    recent_notations: Iterable[str],
    limit: int = 5,
) -> list[str]:
    """
    Favorite darts for the game in progress.

    Ranks the current game's hits plus the notations of the latest turn.
    When fewer than three are known, tops the list up with common defaults.
    """
    thrown = ranked_notations(game_hits)
    for notation in recent_notations:
        if notation not in thrown:
            thrown.append(notation)

    if len(thrown) >= 3:
        return thrown[:limit]

    result = list(thrown)
    for dart in DEFAULT_CURRENT_GAME_DARTS:
        if dart not in result and len(result) < limit:
            result.append(dart)
    return result


def all_time_favorites(
    lifetime_hits: Mapping[str, float],
    game_hits: Mapping[str, float] | None = None,
    limit: int = 5,
) -> list[str]:
    """Favorite darts from the lifetime record, falling back to the current game."""
    ranked = ranked_notations(lifetime_hits)
    if ranked:
        return ranked[:limit]
    if game_hits:
        ranked = ranked_notations(game_hits)
        if ranked:
            return ranked[:limit]
    return list(DEFAULT_ALL_TIME_DARTS[:limit])
