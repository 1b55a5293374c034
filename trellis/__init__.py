"""Trellis - hierarchical, file-backed work tracking for autonomous agents."""

__version__ = "0.1.0"
