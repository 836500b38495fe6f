"""Preprocessing of motif sites for TF footprinting."""

from centiprep.pp.sites import expand_windows, select_sites

__all__ = [
    "expand_windows",
    "select_sites",
]
