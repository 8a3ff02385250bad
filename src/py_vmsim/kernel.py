"""The simulated operating system — owner of RAM, processes, and the log.

The operating system is the driver around the page tables.  It holds
the pieces a single page table cannot own itself:

    - **Configuration** — page size, RAM size, per-process frame limit,
      and the replacement algorithm every page table asks for when it
      has to evict.
    - **Physical frames** — a free list shared by all processes.
    - **The log** — the diagnostic sink page tables write to.
    - **The random source** — one seeded generator, so a run with the
      Random policy can be replayed exactly.
    - **The process table** — PID to process.

Only the log and the replacement algorithm are visible to a page
table; everything else is used by processes while they handle their
own page faults.
"""

from __future__ import annotations

import random
from collections import deque
from itertools import count

from py_vmsim.config import SimulatorConfig
from py_vmsim.logging import Logger, LogLevel
from py_vmsim.process import Process


class OperatingSystem:
    """Drive a simulation: hand out frames, create and end processes.

    Args:
        config: Settings for this run (defaults to ``SimulatorConfig()``).

    """

    def __init__(self, config: SimulatorConfig | None = None) -> None:
        """Create an operating system with all frames free and no processes."""
        self._config = config if config is not None else SimulatorConfig()
        self._replacement_algorithm: object = self._config.replacement_algorithm
        self._logger = Logger()
        self._rng = random.Random(self._config.seed)
        # Lowest frame numbers are handed out first
        self._free_frames: deque[int] = deque(range(self._config.total_frames))
        self._processes: dict[int, Process] = {}
        self._pid_counter = count(start=1)
        self._logger.log(
            LogLevel.INFO,
            f"RAM: {self._config.total_frames} frames of {self._config.page_size} bytes, "
            f"policy: {self._config.replacement_algorithm}",
            source="kernel",
        )

    @property
    def config(self) -> SimulatorConfig:
        """Return the configuration of this run."""
        return self._config

    @property
    def logger(self) -> Logger:
        """Return the simulation log."""
        return self._logger

    @property
    def rng(self) -> random.Random:
        """Return the random source shared by all page tables."""
        return self._rng

    # -- What page tables ask for -------------------------------------------

    @property
    def replacement_algorithm(self) -> object:
        """Return the replacement algorithm page tables should use."""
        return self._replacement_algorithm

    @replacement_algorithm.setter
    def replacement_algorithm(self, value: object) -> None:
        """Switch the replacement algorithm for all later evictions."""
        self._replacement_algorithm = value
        self._logger.log(LogLevel.INFO, f"Replacement algorithm set to {value}", source="kernel")

    def test_out(self, message: str) -> None:
        """Record a diagnostic line from the replacement code.

        In test mode the line is logged at INFO so it shows up in the
        normal log view; otherwise it is kept at DEBUG.
        """
        level = LogLevel.INFO if self._config.test_mode else LogLevel.DEBUG
        self._logger.log(level, message, source="replacement")

    # -- Physical frames ---------------------------------------------------------

    @property
    def free_frame_count(self) -> int:
        """Return the number of unallocated frames."""
        return len(self._free_frames)

    def allocate_frame(self) -> int | None:
        """Take a free frame, or return None if RAM is full."""
        if not self._free_frames:
            return None
        return self._free_frames.popleft()

    def free_frame(self, frame: int) -> None:
        """Return *frame* to the free list.

        Raises:
            ValueError: If the frame does not exist or is already free.

        """
        if not 0 <= frame < self._config.total_frames:
            msg = f"Frame {frame} does not exist"
            raise ValueError(msg)
        if frame in self._free_frames:
            msg = f"Frame {frame} is already free"
            raise ValueError(msg)
        self._free_frames.append(frame)

    # -- Processes -------------------------------------------------------------------

    def create_process(self, *, name: str = "") -> Process:
        """Create a process with an empty page table."""
        pid = next(self._pid_counter)
        process = Process(pid=pid, name=name or f"proc{pid}", system=self)
        self._processes[pid] = process
        self._logger.log(LogLevel.INFO, f"Created process {process.name}", source="kernel", pid=pid)
        return process

    def process(self, pid: int) -> Process:
        """Return the process with *pid*.

        Raises:
            KeyError: If no such process exists.

        """
        if pid not in self._processes:
            msg = f"No process with pid {pid}"
            raise KeyError(msg)
        return self._processes[pid]

    def processes(self) -> list[Process]:
        """Return all live processes ordered by PID."""
        return [self._processes[pid] for pid in sorted(self._processes)]

    def terminate_process(self, pid: int) -> None:
        """End a process, give back its frames, and drop its page table.

        Raises:
            KeyError: If no such process exists.

        """
        process = self.process(pid)
        released = process.release()
        del self._processes[pid]
        self._logger.log(
            LogLevel.INFO,
            f"Terminated process {process.name}, freed {released} frames",
            source="kernel",
            pid=pid,
        )
