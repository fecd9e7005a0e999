"""Parallel bisection of an integer range against an external command."""

__version__ = "0.1.0"
