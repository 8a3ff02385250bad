"""Browser dashboard for the simulator.

This package provides a Flask application that exposes a running
simulation over HTTP.  It is an **optional** extra — install with::

    pip install py-vmsim[web]

The ``create_app`` factory in ``app.py`` builds an operating system and
serves JSON endpoints for creating processes, issuing memory accesses,
and inspecting page tables and the log.
"""
