"""Access to indexed BAM files through pysam."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import pysam
from tqdm import tqdm

from centiprep.regions import format_region
from centiprep.types import AlignedRead, Region


def ensure_index(bam_file: str | Path) -> Path:
    """
    Make sure a BAM index exists next to the BAM file, creating it if needed.

    Both ``sample.bam.bai`` and ``sample.bai`` are recognised. When neither
    exists ``sample.bam.bai`` is written with pysam.

    Parameters
    ----------
    bam_file
        Path to a coordinate-sorted BAM file

    Returns
    -------
    Path to the index file

    Raises
    ------
    FileNotFoundError
        If the BAM file does not exist, or indexing produced no index file
    """
    bam_path = Path(bam_file)
    if not bam_path.exists():
        raise FileNotFoundError(f"BAM file not found: {bam_file}")

    for index_path in (Path(f"{bam_path}.bai"), bam_path.with_suffix(".bai")):
        if index_path.exists():
            return index_path

    print("Indexing the BAM file... this may take several minutes.")
    pysam.index(str(bam_path))

    index_path = Path(f"{bam_path}.bai")
    if not index_path.exists():
        raise FileNotFoundError(f"Indexing did not produce {index_path}")
    return index_path


def _to_aligned_read(read: pysam.AlignedSegment) -> AlignedRead:
    """Keep the leftmost position (1-based), strand and query width of an alignment."""
    query_width = read.infer_query_length()
    if query_width is None:
        query_width = read.query_length
    return AlignedRead(
        position=read.reference_start + 1,
        strand="-" if read.is_reverse else "+",
        query_width=query_width,
    )


def overlapping_reads(bam_file: str | Path, regions: Iterable[Region]) -> dict[str, list[AlignedRead]]:
    """
    Fetch the aligned reads overlapping each region.

    Regions are queried in the given order and the result keeps that order.
    Regions are never clamped: a window on a contig missing from the BAM
    header, or lying entirely before the first base, simply gets no reads.

    Parameters
    ----------
    bam_file
        Path to an indexed BAM file (see :func:`ensure_index`)
    regions
        Regions to query, 1-based and closed

    Returns
    -------
    Dictionary mapping ``chrom:start-end`` identifiers to the reads
    overlapping that region. Regions without any overlapping read are left
    out.

    Examples
    --------
    >>> reads = overlapping_reads("sample.bam", [Region("chr1", 95, 125)])
    >>> reads["chr1:95-125"][0]
    AlignedRead(position=95, strand='+', query_width=36)
    """
    reads: dict[str, list[AlignedRead]] = {}

    with pysam.AlignmentFile(str(bam_file), "rb") as bam:
        contigs = set(bam.references)
        for region in tqdm(regions, desc="Fetching reads"):
            if region.chrom not in contigs or region.end < 1:
                continue

            # pysam takes 0-based, half-open bounds
            region_reads = [
                _to_aligned_read(read)
                for read in bam.fetch(region.chrom, max(region.start - 1, 0), region.end)
                if not read.is_unmapped
            ]
            if region_reads:
                reads[format_region(region)] = region_reads

    return reads
