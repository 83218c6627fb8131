"""
WeDart - Input Validation Utilities

Configuration values are validated strictly and raise descriptive
ValueError exceptions. Scoring inputs are coerced instead: the engines
treat an absent or malformed count as 0 (a miss).
"""

from typing import Any


def coerce_count(value: Any) -> int:
    """
    Normalize a submitted count (hits, points, total score) to an int.

    Args:
        value: Raw value from the input surface, possibly None

    Returns:
        The integer value, or 0 when absent or not a whole number
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    return 0


def validate_game_type(game_type: Any) -> str:
    """
    Validate an X01 game type ("301", "501", "701" or a custom start).

    Args:
        game_type: Starting score as string or int

    Returns:
        The game type as a string of digits

    Raises:
        ValueError: If it is not a positive whole number
    """
    text = str(game_type).strip()
    if not text.isdigit() or int(text) <= 0:
        raise ValueError(f"Game type must be a positive whole number, got {game_type!r}.")
    return str(int(text))


def validate_total_legs(total_legs: Any) -> int:
    """
    Validate the number of legs in a match.

    Raises:
        ValueError: If it is not a positive integer
    """
    if isinstance(total_legs, bool) or not isinstance(total_legs, int):
        raise ValueError(f"Total legs must be an integer, got {type(total_legs).__name__}.")
    if total_legs < 1:
        raise ValueError(f"Total legs must be at least 1, got {total_legs}.")
    return total_legs
