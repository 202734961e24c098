"""Thin async client for hospitality front desk and housekeeping operations."""

__version__ = "0.1.0"
