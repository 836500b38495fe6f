from importlib.metadata import version

from centiprep import pp, tl
from centiprep.bam import ensure_index, overlapping_reads
from centiprep.errors import (
    CentiprepError,
    FormatError,
    NoOverlapError,
    NoSignificantMatchesError,
    ReconciliationError,
)
from centiprep.io import load_readstarts, read_bedgraph, read_fimo, save_readstarts
from centiprep.regions import format_region, parse_region
from centiprep.types import AlignedRead, Region

__all__ = [
    "pp",
    "tl",
    "AlignedRead",
    "Region",
    "parse_region",
    "format_region",
    "read_fimo",
    "read_bedgraph",
    "save_readstarts",
    "load_readstarts",
    "ensure_index",
    "overlapping_reads",
    "CentiprepError",
    "FormatError",
    "NoOverlapError",
    "NoSignificantMatchesError",
    "ReconciliationError",
]

__version__ = version("centiprep")
