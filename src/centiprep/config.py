"""Configuration parameters for centiprep."""

from __future__ import annotations

DEFAULT_PARAMS = {
    "log10p": 4,
    "flank_size": 100,
}

SITE_COLUMNS = ["sequence_name", "start", "stop", "score", "p_value", "q_value"]
"""Columns every motif site table carries after reading a FIMO file."""

REGION_KEY = ["sequence_name", "start", "stop"]
"""Identity key of a site: no two selected sites share it."""
