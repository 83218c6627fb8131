"""
WeDart Session Helpers.

Caller-side collaborators of the engines: delayed turn advance and
cross-session resume.
"""

from dartscore.session.auto_advance import AutoAdvance
from dartscore.session.resume import (
    HALVE_IT_STATE_NAME,
    X01_STATE_NAME,
    restore_halve_it,
    restore_x01,
    save_halve_it,
    save_x01,
)

__all__ = [
    "AutoAdvance",
    "HALVE_IT_STATE_NAME",
    "X01_STATE_NAME",
    "restore_halve_it",
    "restore_x01",
    "save_halve_it",
    "save_x01",
]
