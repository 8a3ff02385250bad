"""Memory subsystem — page tables, resident sets, and page replacement.

Re-exports public symbols so callers can write::

    from py_vmsim.memory import PageTable, ReplacementAlgorithm
"""

from py_vmsim.memory.entry import PageTableEntry
from py_vmsim.memory.page_table import PageTable, PageTableError, ReplacementHost
from py_vmsim.memory.replacement import (
    EmptyResidentSetError,
    ReplacementAlgorithm,
    resolve_algorithm,
    select_clock,
    select_fifo,
    select_random,
    select_victim_index,
)

__all__ = [
    "EmptyResidentSetError",
    "PageTable",
    "PageTableEntry",
    "PageTableError",
    "ReplacementAlgorithm",
    "ReplacementHost",
    "resolve_algorithm",
    "select_clock",
    "select_fifo",
    "select_random",
    "select_victim_index",
]
