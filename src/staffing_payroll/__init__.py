"""Salary and employment rules engine for a security staffing company."""

__version__ = "1.0.0"
