"""Fixtures for testing centiprep."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
import pysam
import pytest

FIMO_HEADER = "motif_id\tmotif_alt_id\tsequence_name\tstart\tstop\tstrand\tscore\tp-value\tq-value\tmatched_sequence\n"

FIMO_ROWS = [
    # out of coordinate order on purpose
    "MA0139.1\tCTCF\tchr1\t300\t320\t+\t9.0\t1e-05\t0.05\tTGGCCACCAGGGGGCGCTAGT\n",
    "MA0139.1\tCTCF\tchr1\t100\t120\t+\t10.0\t1e-06\t0.01\tCCGCGNGGNGGCAGNNNNNNN\n",
    "MA0139.1\tCTCF\tchr1\t100\t120\t-\t8.0\t2e-06\t0.02\tNNNNNNNCTGCCNNCCNCGCG\n",
    "MA0139.1\tCTCF\tchr1\t500\t520\t+\t5.0\t0.001\t0.5\tTTGCCACCAGGGGGCGCTAAA\n",
    "MA0139.1\tCTCF\tchr2\t100\t120\t+\t12.0\t1e-07\t0.001\tCCACCAGGGGGCGCTAGTGGC\n",
]

FIMO_FOOTER = (
    "\n"
    "# FIMO (Find Individual Motif Occurrences): Version 5.5.0\n"
    "# The format of this file is described at https://meme-suite.org/meme/doc/fimo-output-format.html.\n"
    "# fimo --thresh 1e-4 MA0139.1.meme hg38.fa\n"
)


def write_bam(path: Path, reads: list[tuple[str, int, str, int]], contigs=(("chr1", 1000),)) -> Path:
    """
    Write a coordinate-sorted BAM file.

    Each read is given as (chrom, leftmost 1-based position, strand, length)
    and aligned without gaps.
    """
    header = {"HD": {"VN": "1.6", "SO": "coordinate"}, "SQ": [{"SN": name, "LN": length} for name, length in contigs]}
    contig_order = {name: i for i, (name, _) in enumerate(contigs)}

    with pysam.AlignmentFile(str(path), "wb", header=header) as out:
        for i, (chrom, position, strand, width) in enumerate(sorted(reads, key=lambda r: (contig_order[r[0]], r[1]))):
            segment = pysam.AlignedSegment(out.header)
            segment.query_name = f"read{i}"
            segment.query_sequence = "A" * width
            segment.flag = 16 if strand == "-" else 0
            segment.reference_name = chrom
            segment.reference_start = position - 1
            segment.mapping_quality = 60
            segment.cigartuples = [(0, width)]
            segment.query_qualities = pysam.qualitystring_to_array("I" * width)
            out.write(segment)
    return path


@pytest.fixture
def fimo_file(tmp_path):
    """FIMO output with a duplicated interval, an insignificant match and a site on a contig without reads."""
    path = tmp_path / "fimo.tsv"
    path.write_text(FIMO_HEADER + "".join(FIMO_ROWS) + FIMO_FOOTER)
    return path


@pytest.fixture
def insignificant_fimo_file(tmp_path):
    """FIMO output where no match reaches p < 1e-4."""
    path = tmp_path / "fimo_weak.tsv"
    path.write_text(
        FIMO_HEADER
        + "MA0139.1\tCTCF\tchr1\t100\t120\t+\t3.0\t0.01\t0.9\tCCGCGNGGNGGCAGNNNNNNN\n"
        + "MA0139.1\tCTCF\tchr1\t300\t320\t+\t4.0\t0.0002\t0.9\tTGGCCACCAGGGGGCGCTAGT\n"
    )
    return path


@pytest.fixture
def bam_file(tmp_path):
    """
    Small unindexed BAM file.

    With a flank of 5 the window around chr1:100-120 is chr1:95-125. It gets
    one forward read starting at 95 and one reverse read starting at 125
    (leftmost base 115, length 10). A reverse read ending one base too far
    right is not counted. The window chr1:295-325 only overlaps a read that
    starts before it.
    """
    reads = [
        ("chr1", 1, "+", 10),
        ("chr1", 95, "+", 10),
        ("chr1", 115, "-", 10),
        ("chr1", 116, "-", 10),
        ("chr1", 280, "+", 30),
    ]
    return write_bam(tmp_path / "sample.bam", reads)


@pytest.fixture
def distant_bam_file(tmp_path):
    """BAM file whose only reads are far away from every motif site."""
    return write_bam(tmp_path / "distant.bam", [("chr1", 900, "+", 10), ("chr1", 950, "-", 10)])


@pytest.fixture
def sites():
    """Site table as read from a FIMO file."""
    return pd.DataFrame(
        {
            "motif_id": ["MA0139.1"] * 5,
            "sequence_name": ["chr1", "chr1", "chr1", "chr2", "chr1"],
            "start": np.array([300, 100, 100, 50, 700], dtype=np.int64),
            "stop": np.array([320, 120, 120, 70, 720], dtype=np.int64),
            "strand": ["+", "+", "-", "+", "-"],
            "score": [9.0, 8.0, 10.0, 12.0, 2.0],
            "p_value": [1e-5, 2e-6, 1e-6, 1e-7, 0.01],
            "q_value": [0.05, 0.02, 0.01, 0.001, 0.9],
        }
    )


@pytest.fixture
def numeric_fimo_file(tmp_path):
    """FIMO output on Ensembl-style chromosome names, followed by the usual comment lines."""
    path = tmp_path / "fimo_ensembl.tsv"
    path.write_text(
        FIMO_HEADER
        + "MA0139.1\tCTCF\t1\t100\t120\t+\t10.0\t1e-06\t0.01\tCCGCGNGGNGGCAGNNNNNNN\n"
        + "MA0139.1\tCTCF\tX\t300\t320\t+\t9.0\t1e-05\t\tTGGCCACCAGGGGGCGCTAGT\n"
        + FIMO_FOOTER
    )
    return path


@pytest.fixture
def numeric_bam_file(tmp_path):
    """BAM file on contigs '1' and 'X' with one forward and one reverse read start around 1:100-120."""
    reads = [("1", 95, "+", 10), ("1", 115, "-", 10), ("X", 310, "+", 10)]
    return write_bam(tmp_path / "ensembl.bam", reads, contigs=(("1", 1000), ("X", 1000)))
