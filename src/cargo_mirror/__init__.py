"""Fetch locked crates from a mirror, verified against the local Cargo index."""

__version__ = "0.1.0"
