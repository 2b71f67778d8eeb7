"""Availarr: media-server availability and request orchestration."""

__version__ = "0.1.0"
