"""Flask application factory for the simulator dashboard.

The ``create_app`` function builds an operating system from a config
and returns a Flask app with JSON endpoints for driving it:

- ``GET /api/status`` — configuration and live processes.
- ``POST /api/processes`` — create a process.
- ``GET /api/processes/<pid>`` — page table, resident set, and stats.
- ``POST /api/processes/<pid>/access`` — read or write an address.
- ``GET /api/log`` — the simulation log.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING, Any

from flask import Flask, Response, jsonify, request

from py_vmsim.config import SimulatorConfig
from py_vmsim.kernel import OperatingSystem
from py_vmsim.logging import LogLevel
from py_vmsim.process import OutOfMemoryError, PageFaultError

if TYPE_CHECKING:
    from py_vmsim.process import Process

_HTTP_CREATED = 201
_HTTP_BAD_REQUEST = 400
_HTTP_NOT_FOUND = 404
_HTTP_CONFLICT = 409


def _process_summary(process: Process) -> dict[str, Any]:
    return {
        "pid": process.pid,
        "name": process.name,
        "pages": process.page_table.size,
        "resident": process.page_table.resident_size,
    }


def _process_detail(process: Process) -> dict[str, Any]:
    table = process.page_table
    return {
        **_process_summary(process),
        "entries": [entry.to_dict() for entry in table.entries()],
        "resident_set": list(table.resident),
        "clock_hand": table.clock_hand,
        "stats": asdict(process.stats),
    }


def create_app(config: SimulatorConfig | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config: Simulator settings (defaults to ``VMSIM_*`` variables).

    Returns:
        A configured Flask application ready to serve.

    """
    system = OperatingSystem(config if config is not None else SimulatorConfig.from_env())

    app = Flask(__name__)

    def _lookup(pid: int) -> Process | None:
        try:
            return system.process(pid)
        except KeyError:
            return None

    @app.route("/api/status")
    def status() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the configuration and the live processes."""
        cfg = system.config
        return jsonify(
            {
                "config": {
                    "ram_size": cfg.ram_size,
                    "page_size": cfg.page_size,
                    "virtual_address_space": cfg.virtual_address_space,
                    "max_ram_pages_per_process": cfg.max_ram_pages_per_process,
                    "replacement_algorithm": str(system.replacement_algorithm),
                    "test_mode": cfg.test_mode,
                },
                "free_frames": system.free_frame_count,
                "processes": [_process_summary(p) for p in system.processes()],
            }
        )

    @app.route("/api/processes", methods=["POST"])
    def create_process() -> tuple[Response, int]:  # pyright: ignore[reportUnusedFunction]
        """Create a process.  Optional JSON body: ``{"name": "..."}``."""
        data = request.get_json(silent=True) or {}
        process = system.create_process(name=str(data.get("name", "")))
        return jsonify(_process_summary(process)), _HTTP_CREATED

    @app.route("/api/processes/<int:pid>")
    def process_detail(pid: int) -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Return one process's page table and paging stats."""
        process = _lookup(pid)
        if process is None:
            return jsonify({"error": f"No process with pid {pid}"}), _HTTP_NOT_FOUND
        return jsonify(_process_detail(process))

    @app.route("/api/processes/<int:pid>/access", methods=["POST"])
    def access(pid: int) -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Read or write one virtual address.

        Expects JSON body: ``{"address": 1234, "write": false}``

        """
        process = _lookup(pid)
        if process is None:
            return jsonify({"error": f"No process with pid {pid}"}), _HTTP_NOT_FOUND
        data = request.get_json(silent=True)
        address = data.get("address") if isinstance(data, dict) else None
        if not isinstance(address, int) or isinstance(address, bool):
            return jsonify({"error": "Missing or invalid 'address' field"}), _HTTP_BAD_REQUEST

        try:
            if data.get("write", False):
                entry = process.write(address)
            else:
                entry = process.read(address)
        except PageFaultError as e:
            return jsonify({"error": str(e)}), _HTTP_BAD_REQUEST
        except OutOfMemoryError as e:
            return jsonify({"error": str(e)}), _HTTP_CONFLICT
        return jsonify({"entry": entry.to_dict(), "stats": asdict(process.stats)})

    @app.route("/api/log")
    def log() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the log, INFO and above unless ``?level=debug``."""
        level_name = request.args.get("level", "info").upper()
        min_level = LogLevel.__members__.get(level_name, LogLevel.INFO)
        return jsonify({"lines": system.logger.lines(min_level=min_level)})

    return app


def main() -> None:
    """Run the dashboard development server.

    This is the ``py-vmsim-web`` console entry point.
    """
    app = create_app()
    app.run(debug=True, port=8080)
