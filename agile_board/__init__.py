"""Agile board - a client and command line board for an agile work-tracking gateway."""

__version__ = "0.1.0"
