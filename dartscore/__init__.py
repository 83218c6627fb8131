"""
WeDart scoring core.

Scoring engines for X01 and Halve-It darts games, plus the player
directory, persisted state and session helpers that sit around them.
"""

__version__ = "0.1.0"
