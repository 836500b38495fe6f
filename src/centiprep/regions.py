"""Parse and format ``chrom:start-end`` region identifiers."""

from __future__ import annotations

import re

import pandas as pd

from centiprep.errors import FormatError
from centiprep.types import Region

# Windows are not clamped to chromosome bounds, so a start may be negative.
_COORDS = re.compile(r"(-?\d+)-(-?\d+)")


def parse_region(text: str) -> Region:
    """
    Parse a region identifier such as ``"chr1:123-456"``.

    The chromosome is everything before the first ``:``, so contig names
    containing further colons are not supported.

    Parameters
    ----------
    text
        Region identifier in ``chrom:start-end`` form.

    Returns
    -------
    The parsed Region.

    Examples
    --------
    >>> parse_region("chr1:95-125")
    Region(chrom='chr1', start=95, end=125)
    """
    chrom, sep, coords = text.partition(":")
    if not sep or not chrom:
        raise FormatError(f"Region {text!r} is not of the form 'chrom:start-end'")

    match = _COORDS.fullmatch(coords)
    if match is None:
        raise FormatError(f"Region {text!r} does not have two integer coordinates")

    try:
        return Region(chrom, int(match.group(1)), int(match.group(2)))
    except ValueError as e:
        raise FormatError(str(e)) from e


def format_region(region: Region) -> str:
    """Format a Region as ``chrom:start-end``, the inverse of :func:`parse_region`."""
    return f"{region.chrom}:{region.start}-{region.end}"


def region_from_row(row: pd.Series) -> Region:
    """Build a Region from a site table row with ``sequence_name``, ``start`` and ``stop``."""
    return Region(str(row["sequence_name"]), int(row["start"]), int(row["stop"]))
