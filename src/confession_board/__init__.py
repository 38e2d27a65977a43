"""Confession Board: anonymous confession sharing service."""

__version__ = "0.1.0"
