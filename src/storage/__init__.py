"""
Storage module for Stitchbook
Local JSON document persistence
"""

from .record_store import RecordStore

__all__ = ['RecordStore']
