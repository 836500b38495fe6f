"""Read-start counting around motif sites."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path

import numba
import numpy as np
import pandas as pd
from anndata import AnnData
from tqdm import tqdm

from centiprep.bam import ensure_index, overlapping_reads
from centiprep.config import DEFAULT_PARAMS, REGION_KEY
from centiprep.errors import NoOverlapError, ReconciliationError
from centiprep.io import read_fimo
from centiprep.pp.sites import expand_windows, select_sites
from centiprep.regions import parse_region, region_from_row
from centiprep.types import AlignedRead, Region


@numba.njit
def _tabulate_read_starts(true_starts, is_reverse, start, end):
    """Histogram of read starts within [start, end], forward strand columns first."""
    length = end - start + 1
    row = np.zeros(2 * length, dtype=np.int64)
    for i in range(true_starts.shape[0]):
        pos = true_starts[i]
        if pos < start or pos > end:
            continue
        j = pos - start
        if is_reverse[i]:
            j += length
        row[j] += 1
    return row


def count_read_starts(window: Region, reads: Sequence[AlignedRead]) -> np.ndarray:
    """
    Count read starts at each position of a window, separately per strand.

    The start of a reverse strand read is its rightmost base, so it is
    shifted by the query width before counting. Reads starting outside the
    window are ignored.

    Parameters
    ----------
    window
        Window around a motif site (1-based, closed)
    reads
        Reads overlapping the window

    Returns
    -------
    Integer array of length ``2 * window.width``. Column ``i`` counts forward
    strand reads starting at ``window.start + i``, column ``i + window.width``
    counts reverse strand reads starting at the same position. A window
    without any read start gives a row of zeros.

    Examples
    --------
    >>> reads = [AlignedRead(95, "+", 10), AlignedRead(115, "-", 10)]
    >>> row = count_read_starts(Region("chr1", 95, 125), reads)
    >>> row.nonzero()[0].tolist()
    [0, 61]
    """
    true_starts = np.fromiter((read.true_start for read in reads), dtype=np.int64, count=len(reads))
    is_reverse = np.fromiter((read.is_reverse for read in reads), dtype=np.bool_, count=len(reads))
    return _tabulate_read_starts(true_starts, is_reverse, int(window.start), int(window.end))


def reconcile_reads(
    reads: Mapping[str, Sequence[AlignedRead]],
    windows: pd.DataFrame,
    source: str | Path | None = None,
) -> tuple[pd.DataFrame, list[Sequence[AlignedRead]]]:
    """
    Pair every queried read set with its site and sort both by coordinate.

    The region identifiers returned by the alignment query are parsed back
    into (sequence_name, start, stop) and joined with the window table on that
    key, which recovers the score, p-value, q-value and other site columns.
    Windows without any overlapping read are absent from ``reads`` and are
    dropped. The joined table is sorted by coordinate and the read sets are
    put in the same order.

    Parameters
    ----------
    reads
        Read sets keyed by ``chrom:start-end`` window identifier, in query order,
        as returned by :func:`centiprep.bam.overlapping_reads`
    windows
        Window table as returned by :func:`centiprep.pp.expand_windows`
    source
        Name of the motif file, used in error messages

    Returns
    -------
    - Site table indexed by window identifier. ``start`` and ``stop`` hold the
      motif span again; the window is in ``window_start`` and ``window_stop``.
    - Read sets in the same order as the table rows

    Raises
    ------
    NoOverlapError
        If ``reads`` is empty
    ReconciliationError
        If a read set matches no site, or a site matches several read sets
    """
    label = source if source is not None else "input"
    if not reads:
        raise NoOverlapError(f"No reads fall in sites from '{label}'")

    missing_cols = [col for col in ["motif_start", "motif_stop"] if col not in windows.columns]
    if missing_cols:
        raise ValueError(f"Missing required columns in window table: {missing_cols}")

    region_ids = list(reads.keys())
    read_sets = list(reads.values())
    parsed = [parse_region(region_id) for region_id in region_ids]

    queried = pd.DataFrame(
        {
            "sequence_name": [region.chrom for region in parsed],
            "start": np.array([region.start for region in parsed], dtype=np.int64),
            "stop": np.array([region.end for region in parsed], dtype=np.int64),
            "region": region_ids,
            "index": np.arange(len(parsed)),
        }
    )

    keys = windows.astype({"sequence_name": str, "start": np.int64, "stop": np.int64})
    regions = queried.merge(keys, on=REGION_KEY, how="inner")
    regions = regions.sort_values(REGION_KEY, kind="mergesort")

    ordered_reads = [read_sets[i] for i in regions["index"]]

    if len(regions) != len(read_sets) or regions["index"].duplicated().any():
        raise ReconciliationError(
            f"{len(regions)} regions and {len(read_sets)} read sets after matching reads to sites from '{label}'"
        )

    regions = regions.rename(
        columns={"start": "window_start", "stop": "window_stop", "motif_start": "start", "motif_stop": "stop"}
    )
    regions = regions.drop(columns="index").set_index("region")

    leading = [*REGION_KEY, "window_start", "window_stop"]
    regions = regions[leading + [col for col in regions.columns if col not in leading]]

    return regions, ordered_reads


def aggregate_read_starts(
    regions: pd.DataFrame,
    reads: Sequence[Sequence[AlignedRead]],
    source: str | Path | None = None,
) -> np.ndarray:
    """
    Stack the read-start rows of all windows into one matrix.

    Parameters
    ----------
    regions
        Site table as returned by :func:`reconcile_reads`
    reads
        Read sets in the same order as ``regions``
    source
        Name of the motif file, used in error messages

    Returns
    -------
    Matrix with shape (n_sites, 2 * window_length)
    """
    if len(regions) != len(reads):
        label = source if source is not None else "input"
        raise ReconciliationError(f"{len(regions)} regions and {len(reads)} read sets for sites from '{label}'")

    windows = zip(regions["sequence_name"], regions["window_start"], regions["window_stop"], strict=True)
    rows = [
        count_read_starts(Region(str(chrom), int(start), int(stop)), site_reads)
        for (chrom, start, stop), site_reads in tqdm(
            zip(windows, reads, strict=True), total=len(reads), desc="Counting read starts"
        )
    ]

    widths = {len(row) for row in rows}
    if len(widths) > 1:
        raise ValueError(
            f"Windows have different lengths {sorted(w // 2 for w in widths)}; select matches of a single motif"
        )

    return np.vstack(rows)


def centipede_data(
    bam_file: str | Path,
    fimo_file: str | Path,
    log10p: float = DEFAULT_PARAMS["log10p"],
    flank_size: int = DEFAULT_PARAMS["flank_size"],
    **kwargs,
) -> tuple[np.ndarray, pd.DataFrame]:
    """
    Count read starts at each position around every significant motif match.

    This function performs the following steps:
    1. Read the FIMO output and keep significant, distinct sites
    2. Widen every site by ``flank_size`` on both sides
    3. Index the BAM file if no index exists yet
    4. Fetch the reads overlapping each window
    5. Match read sets to sites and sort both by coordinate
    6. Count read starts per position and strand

    Parameters
    ----------
    bam_file
        A BAM file with mapped DNase-seq or ATAC-seq reads
    fimo_file
        A FIMO output file with motif matches
    log10p
        Select matches with -log10(p-value) greater than this (default: 4)
    flank_size
        Number of bases added on both sides of each match (default: 100)
    **kwargs
        Additional arguments passed to :func:`centiprep.io.read_fimo`

    Returns
    -------
    - Matrix with one row per site and ``2 * window_length`` columns, forward
      strand counts followed by reverse strand counts
    - Site table with the same row order, sorted by coordinate

    Examples
    --------
    >>> import centiprep as cp
    >>> mat, regions = cp.tl.centipede_data("sample.bam", "fimo.tsv", log10p=4, flank_size=100)
    >>> mat.shape[0] == len(regions)
    True
    """
    sites = read_fimo(fimo_file, **kwargs)
    sites = select_sites(sites, log10p=log10p, source=fimo_file)
    print(f"Selected {len(sites)} motif sites with -log10(p) > {log10p}")

    windows = expand_windows(sites, flank_size=flank_size)

    ensure_index(bam_file)
    reads = overlapping_reads(bam_file, [region_from_row(row) for _, row in windows.iterrows()])

    regions, ordered_reads = reconcile_reads(reads, windows, source=fimo_file)
    mat = aggregate_read_starts(regions, ordered_reads, source=fimo_file)

    print(f"Counted read starts for {mat.shape[0]}/{len(sites)} sites with overlapping reads")
    return mat, regions


def create_readstart_adata(
    mat: np.ndarray,
    regions: pd.DataFrame,
    flank_size: int | None = None,
    log10p: float | None = None,
) -> AnnData:
    """
    Wrap a read-start matrix and its site table in an AnnData object.

    Parameters
    ----------
    mat
        Read-start matrix with shape (n_sites, 2 * window_length)
    regions
        Site table with one row per matrix row
    flank_size
        Flank used to build the windows. When given, ``.var["motif_offset"]``
        holds each column's position relative to the motif start.
    log10p
        Significance threshold used to select the sites

    Returns
    -------
    AnnData object with:
    - .X: read-start counts
    - .obs: site table
    - .var["strand"]: "+" for the first half of the columns, "-" for the second
    - .var["offset"]: position within the window, starting at 0
    - .uns["centiprep"]: parameters used to build the matrix
    """
    if mat.shape[0] != len(regions):
        raise ReconciliationError(f"{mat.shape[0]} matrix rows and {len(regions)} regions")
    if mat.shape[1] % 2 != 0:
        raise ValueError(f"Read-start matrix must have an even number of columns, got {mat.shape[1]}")

    window_length = mat.shape[1] // 2
    offsets = np.tile(np.arange(window_length), 2)
    strands = np.repeat(["+", "-"], window_length)

    var_df = pd.DataFrame(
        {"strand": strands, "offset": offsets},
        index=[f"{strand}{offset}" for strand, offset in zip(strands, offsets, strict=True)],
    )
    if flank_size is not None:
        var_df["motif_offset"] = offsets - flank_size

    obs_df = regions.copy()
    obs_df.index = obs_df.index.astype(str)

    adata = AnnData(X=mat, obs=obs_df, var=var_df)
    adata.uns["centiprep"] = {
        key: value for key, value in (("flank_size", flank_size), ("log10p", log10p)) if value is not None
    }
    return adata
