"""Simulator configuration — the knobs of a simulation run.

A run is described by a handful of numbers: how much physical RAM there
is, how big a page is, how large each process's virtual address space
is, and how many RAM frames one process may hold before the
replacement algorithm has to evict something.

Configuration comes from keyword arguments (tests, the web UI) or from
``VMSIM_*`` environment variables, following the Unix convention that a
process is configured through ``KEY=VALUE`` string pairs::

    VMSIM_RAM_SIZE=65536
    VMSIM_PAGE_SIZE=4096
    VMSIM_VIRTUAL_ADDRESS_SPACE=65536
    VMSIM_MAX_RAM_PAGES=4
    VMSIM_REPLACEMENT=clock
    VMSIM_TEST_MODE=1
    VMSIM_SEED=42
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from py_vmsim.memory.replacement import ReplacementAlgorithm

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_RAM_SIZE = 65536
DEFAULT_PAGE_SIZE = 4096
DEFAULT_VIRTUAL_ADDRESS_SPACE = 65536
DEFAULT_MAX_RAM_PAGES = 4

_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "off", ""})


class ConfigError(ValueError):
    """Raise when a configuration value is invalid."""


@dataclass(frozen=True)
class SimulatorConfig:
    """Immutable settings for one simulation run.

    Attributes:
        ram_size: Physical RAM in bytes.
        page_size: Page (and frame) size in bytes.
        virtual_address_space: Size of each process's address space in bytes.
        max_ram_pages_per_process: Frames one process may hold at once.
        replacement_algorithm: Victim selection policy.
        test_mode: Promote replacement diagnostics to INFO level.
        seed: Seed for the Random policy (None = nondeterministic).

    """

    ram_size: int = DEFAULT_RAM_SIZE
    page_size: int = DEFAULT_PAGE_SIZE
    virtual_address_space: int = DEFAULT_VIRTUAL_ADDRESS_SPACE
    max_ram_pages_per_process: int = DEFAULT_MAX_RAM_PAGES
    replacement_algorithm: ReplacementAlgorithm = ReplacementAlgorithm.CLOCK
    test_mode: bool = False
    seed: int | None = None

    def __post_init__(self) -> None:
        """Validate sizes and normalise the algorithm name."""
        for name in ("ram_size", "page_size", "virtual_address_space", "max_ram_pages_per_process"):
            value = getattr(self, name)
            if value <= 0:
                msg = f"{name} must be positive, got {value}"
                raise ConfigError(msg)
        for name in ("ram_size", "virtual_address_space"):
            value = getattr(self, name)
            if value % self.page_size:
                msg = f"{name} ({value}) is not a multiple of page_size ({self.page_size})"
                raise ConfigError(msg)
        try:
            algorithm = ReplacementAlgorithm(str(self.replacement_algorithm).lower())
        except ValueError:
            msg = f"Unknown replacement algorithm: {self.replacement_algorithm!r}"
            raise ConfigError(msg) from None
        # Frozen dataclass: bypass __setattr__ to store the normalised value
        object.__setattr__(self, "replacement_algorithm", algorithm)

    @property
    def total_frames(self) -> int:
        """Return the number of physical frames in RAM."""
        return self.ram_size // self.page_size

    @property
    def virtual_pages(self) -> int:
        """Return the number of pages in a virtual address space."""
        return self.virtual_address_space // self.page_size

    def replace(self, **changes: Any) -> SimulatorConfig:
        """Return a validated copy with *changes* applied."""
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> SimulatorConfig:
        """Build a config from ``VMSIM_*`` variables.

        Args:
            env: Variables to read (defaults to the process environment).

        Raises:
            ConfigError: If a variable cannot be parsed.

        """
        source = os.environ if env is None else env
        kwargs: dict[str, Any] = {}
        int_vars = {
            "VMSIM_RAM_SIZE": "ram_size",
            "VMSIM_PAGE_SIZE": "page_size",
            "VMSIM_VIRTUAL_ADDRESS_SPACE": "virtual_address_space",
            "VMSIM_MAX_RAM_PAGES": "max_ram_pages_per_process",
            "VMSIM_SEED": "seed",
        }
        for var, field in int_vars.items():
            if var in source:
                kwargs[field] = _parse_int(var, source[var])
        if "VMSIM_REPLACEMENT" in source:
            kwargs["replacement_algorithm"] = source["VMSIM_REPLACEMENT"]
        if "VMSIM_TEST_MODE" in source:
            kwargs["test_mode"] = _parse_bool("VMSIM_TEST_MODE", source["VMSIM_TEST_MODE"])
        return cls(**kwargs)


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        msg = f"{name} must be an integer, got {raw!r}"
        raise ConfigError(msg) from None


def _parse_bool(name: str, raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in _TRUE_STRINGS:
        return True
    if lowered in _FALSE_STRINGS:
        return False
    msg = f"{name} must be a boolean, got {raw!r}"
    raise ConfigError(msg)
