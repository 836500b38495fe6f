"""Motif site selection and window expansion for read-start counting."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd

from centiprep.config import DEFAULT_PARAMS, REGION_KEY
from centiprep.errors import NoSignificantMatchesError


def select_sites(
    sites: pd.DataFrame,
    log10p: float = DEFAULT_PARAMS["log10p"],
    source: str | Path | None = None,
) -> pd.DataFrame:
    """
    Keep significant motif matches, one per genomic interval.

    This function performs the following steps:
    1. Keep matches with -log10(p-value) strictly greater than ``log10p``
    2. Tag each kept match with its position in the filtered table (``site_index``)
    3. Sort by (sequence_name, start, stop) and descending score
    4. Drop all but the first (highest scoring) match per interval

    A motif matched on both strands of the same interval, or several motifs
    matched at the same interval, therefore contribute a single site.

    Parameters
    ----------
    sites
        Site table as returned by :func:`centiprep.io.read_fimo`
    log10p
        Select matches with -log10(p-value) greater than this (default: 4)
    source
        Name of the file the table was read from, used in error messages

    Returns
    -------
    DataFrame with one row per distinct interval, sorted by coordinate

    Raises
    ------
    NoSignificantMatchesError
        If no match passes the threshold

    Examples
    --------
    >>> sites = cp.read_fimo("fimo.tsv")
    >>> selected = cp.pp.select_sites(sites, log10p=5)
    >>> selected[["sequence_name", "start", "stop"]].duplicated().any()
    False
    """
    missing_cols = [col for col in [*REGION_KEY, "score", "p_value"] if col not in sites.columns]
    if missing_cols:
        raise ValueError(f"Missing required columns in site table: {missing_cols}")

    # p-values of 0 give an infinite -log10 and always pass
    with np.errstate(divide="ignore"):
        neg_log10_p = -np.log10(sites["p_value"].to_numpy(dtype=float))
    selected = sites[neg_log10_p > log10p].copy()

    if selected.empty:
        raise NoSignificantMatchesError(f"No significant sites for '{source if source is not None else 'input'}'")

    selected["site_index"] = np.arange(len(selected))
    selected = selected.sort_values(
        [*REGION_KEY, "score"], ascending=[True, True, True, False], kind="mergesort"
    )
    selected = selected.drop_duplicates(subset=REGION_KEY, keep="first")

    return selected.reset_index(drop=True)


def expand_windows(sites: pd.DataFrame, flank_size: int = DEFAULT_PARAMS["flank_size"]) -> pd.DataFrame:
    """
    Widen every site by ``flank_size`` bases on both sides.

    Windows are not clamped to chromosome bounds. A window reaching past
    either end of its chromosome is kept and simply collects fewer reads.

    Parameters
    ----------
    sites
        Site table with ``start`` and ``stop`` columns
    flank_size
        Number of bases added upstream and downstream (default: 100)

    Returns
    -------
    Copy of the site table where ``start`` and ``stop`` describe the window.
    The motif span is kept in ``motif_start`` and ``motif_stop``.
    """
    if flank_size < 0:
        raise ValueError(f"flank_size must be non-negative, got {flank_size}")

    windows = sites.copy()
    windows["motif_start"] = windows["start"]
    windows["motif_stop"] = windows["stop"]
    windows["start"] = windows["start"] - flank_size
    windows["stop"] = windows["stop"] + flank_size
    return windows
