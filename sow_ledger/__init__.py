"""Baseline and change-request reconstruction for SOW contracts."""

__version__ = "1.0.0"
