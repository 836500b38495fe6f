"""Custom data types for centiprep."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Region:
    """
    A genomic interval in 1-based, closed coordinates.

    Used as the lookup key between alignment queries and the site table.
    """

    chrom: str
    """Chromosome or contig name."""

    start: int
    """First base of the interval (1-based)."""

    end: int
    """Last base of the interval (1-based, inclusive)."""

    def __post_init__(self):
        """Validate interval bounds."""
        if self.end < self.start:
            raise ValueError(f"Region end ({self.end}) must not be smaller than start ({self.start})")

    @property
    def width(self) -> int:
        """Number of bases covered by the region."""
        return self.end - self.start + 1


@dataclass(frozen=True)
class AlignedRead:
    """
    The fields of one alignment record needed to locate its read start.

    ``position`` is the leftmost aligned base (1-based) whatever the strand.
    """

    position: int
    strand: str
    query_width: int

    def __post_init__(self):
        if self.strand not in ("+", "-"):
            raise ValueError(f"Strand must be '+' or '-', got {self.strand!r}")

    @property
    def is_reverse(self) -> bool:
        return self.strand == "-"

    @property
    def true_start(self) -> int:
        """5' end of the read: the right edge for reverse strand alignments."""
        if self.is_reverse:
            return self.position + self.query_width
        return self.position
