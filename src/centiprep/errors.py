"""Exceptions raised by the centiprep pipeline."""

from __future__ import annotations


class CentiprepError(Exception):
    """Base class for all centiprep errors."""


class FormatError(CentiprepError, ValueError):
    """A region identifier is not of the form ``chrom:start-end``."""


class NoSignificantMatchesError(CentiprepError):
    """No motif match passes the significance threshold."""


class NoOverlapError(CentiprepError):
    """No aligned read overlaps any of the motif windows."""


class ReconciliationError(CentiprepError):
    """Read sets and site metadata no longer correspond one to one."""
