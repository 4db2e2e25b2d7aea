"""
Storage layer for FinTrack.

Provides the append-only event journal and the in-memory repositories the
services persist aggregates through.
"""

__all__ = ["event_store", "repositories"]
