"""
Spec Repos — Manage local mirrors of specification repositories.

Clones, updates, removes and lists the spec-repo mirrors kept under a
single registry directory, and lints their podspecs for health.
"""

__version__ = "1.4.0"
