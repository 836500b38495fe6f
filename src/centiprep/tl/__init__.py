"""Analysis tools for centiprep."""

from centiprep.tl.readstarts import (
    aggregate_read_starts,
    centipede_data,
    count_read_starts,
    create_readstart_adata,
    reconcile_reads,
)

__all__ = [
    "aggregate_read_starts",
    "centipede_data",
    "count_read_starts",
    "create_readstart_adata",
    "reconcile_reads",
]
