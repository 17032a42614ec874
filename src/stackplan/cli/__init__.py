"""
CLI commands for stackplan.

Command modules are imported lazily by ``stackplan.cli.main``.
"""
