"""Readers for motif scan and bedGraph tables, and H5AD persistence of read-start matrices."""

from __future__ import annotations

import re
from pathlib import Path

import numpy as np
import pandas as pd
from anndata import read_h5ad

from centiprep.config import SITE_COLUMNS

_REQUIRED_FIMO_COLUMNS = [col for col in SITE_COLUMNS if col != "q_value"]


def _normalize_column(name: str) -> str:
    """Map FIMO headers (``#pattern name``, ``sequence name``, ``p-value``) to snake_case."""
    name = name.strip().lstrip("#").strip().lower()
    return re.sub(r"[\s.\-]+", "_", name)


def read_fimo(fimo_file: str | Path, **kwargs) -> pd.DataFrame:
    """
    Read a tab-delimited FIMO output file into a site table.

    Both the ``fimo.tsv`` layout of recent MEME suite releases and the older
    ``--text`` layout are accepted. Column names are converted to snake_case
    so that ``p-value`` becomes ``p_value`` and ``sequence name`` becomes
    ``sequence_name``. The provenance comment lines FIMO appends after the
    table are dropped.

    Parameters
    ----------
    fimo_file
        Path to the FIMO output file
    **kwargs
        Additional arguments passed to pandas.read_csv()

    Returns
    -------
    DataFrame with one row per motif match. Coordinates are 1-based and
    closed, exactly as reported by FIMO. A ``q_value`` column filled with
    NaN is added when the file has none.

    Examples
    --------
    >>> sites = read_fimo("fimo.tsv")
    >>> print(sites.columns.tolist()[:6])
    ['motif_id', 'motif_alt_id', 'sequence_name', 'start', 'stop', 'strand']
    """
    if not Path(fimo_file).exists():
        raise FileNotFoundError(f"FIMO file not found: {fimo_file}")

    # read everything as text: the trailing comment rows would otherwise
    # turn numeric chromosome names into floats
    kwargs.setdefault("dtype", str)
    sites = pd.read_csv(fimo_file, sep="\t", **kwargs)
    sites.columns = [_normalize_column(str(col)) for col in sites.columns]

    missing_cols = [col for col in _REQUIRED_FIMO_COLUMNS if col not in sites.columns]
    if missing_cols:
        raise ValueError(f"Missing required columns in '{fimo_file}': {missing_cols}")

    # trailing comment lines only fill the first column
    first_col = sites.columns[0]
    is_comment = sites[first_col].astype(str).str.startswith("#")
    sites = sites[~is_comment].dropna(subset=["sequence_name", "start", "stop"]).copy()

    sites["sequence_name"] = sites["sequence_name"].astype(str)
    sites["start"] = pd.to_numeric(sites["start"]).astype(np.int64)
    sites["stop"] = pd.to_numeric(sites["stop"]).astype(np.int64)
    sites["score"] = pd.to_numeric(sites["score"]).astype(float)
    sites["p_value"] = pd.to_numeric(sites["p_value"]).astype(float)
    if "q_value" not in sites.columns:
        sites["q_value"] = np.nan
    sites["q_value"] = pd.to_numeric(sites["q_value"], errors="coerce")

    return sites.reset_index(drop=True)


def read_bedgraph(filename: str | Path, **kwargs) -> pd.DataFrame:
    """
    Read a 4-column bedGraph file: chrom, start, end, score.

    bedGraph starts are 0-based and half-open. They are shifted by one on read
    so the returned table uses the same 1-based, closed coordinates as FIMO
    sites and region identifiers. ``track`` and ``browser`` header lines are
    skipped.

    Parameters
    ----------
    filename
        Path to the bedGraph file
    **kwargs
        Additional arguments passed to pandas.read_csv()

    Returns
    -------
    DataFrame with columns [chrom, start, end, score]

    Examples
    --------
    >>> signal = read_bedgraph("signal.bedGraph")
    >>> signal.iloc[0].tolist()
    ['chr1', 101, 150, 2.5]
    """
    if not Path(filename).exists():
        raise FileNotFoundError(f"bedGraph file not found: {filename}")

    dat = pd.read_csv(
        filename,
        sep="\t",
        header=None,
        names=["chrom", "start", "end", "score"],
        usecols=[0, 1, 2, 3],
        comment="#",
        dtype={"chrom": str},
        **kwargs,
    )
    is_header = dat["chrom"].str.startswith(("track", "browser"))
    dat = dat[~is_header].copy()

    dat["start"] = dat["start"].astype(np.int64) + 1
    dat["end"] = dat["end"].astype(np.int64)
    dat["score"] = dat["score"].astype(float)

    return dat.reset_index(drop=True)


def save_readstarts(
    mat: np.ndarray,
    regions: pd.DataFrame,
    filename: str | Path,
    flank_size: int | None = None,
    log10p: float | None = None,
    compression: str | None = None,
    **kwargs,
) -> None:
    """
    Save a read-start matrix and its site table to H5AD format.

    The pair is stored as an AnnData object (see
    :func:`centiprep.tl.create_readstart_adata`): the matrix in ``.X``, the
    site table in ``.obs`` and the per-column strand and offset in ``.var``.

    Parameters
    ----------
    mat
        Read-start matrix with shape (n_sites, 2 * window_length)
    regions
        Site table with one row per matrix row
    filename
        Path to the output H5AD file
    flank_size
        Flank used to build the windows, stored in ``.uns``
    log10p
        Significance threshold used to select the sites, stored in ``.uns``
    compression
        Compression algorithm to use (e.g., 'gzip', 'lzf')
    **kwargs
        Additional arguments passed to AnnData.write_h5ad()

    Examples
    --------
    >>> import centiprep as cp
    >>> mat, regions = cp.tl.centipede_data("sample.bam", "fimo.tsv")
    >>> cp.save_readstarts(mat, regions, "readstarts.h5ad", flank_size=100, compression="gzip")
    """
    from centiprep.tl.readstarts import create_readstart_adata

    adata = create_readstart_adata(mat, regions, flank_size=flank_size, log10p=log10p)
    adata.write_h5ad(filename, compression=compression, **kwargs)


def load_readstarts(filename: str | Path) -> tuple[np.ndarray, pd.DataFrame]:
    """
    Load a read-start matrix and its site table written by :func:`save_readstarts`.

    String columns that H5AD stores as categoricals are converted back to
    plain strings so the table matches the one that was saved; missing values stay NaN.

    Parameters
    ----------
    filename
        Path to the H5AD file to load

    Returns
    -------
    - Read-start matrix with shape (n_sites, 2 * window_length)
    - Site table with the same row order
    """
    adata = read_h5ad(filename)

    mat = np.asarray(adata.X)
    regions = adata.obs.copy()
    for col in regions.columns:
        if isinstance(regions[col].dtype, pd.CategoricalDtype):
            regions[col] = regions[col].astype(object).where(regions[col].notna(), np.nan)

    return mat, regions
