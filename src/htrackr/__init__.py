"""
htrackr: a personal habit tracker for the command line.

Habits and their per-day completion entries live in a local SQLite file; the
`list` command renders a monthly grid of marked days.
"""

__version__ = "0.1.0"
