"""
Query layer for owners and cousins lookups.
"""

from colabnet.query.engine import QueryEngine

__all__ = ["QueryEngine"]
