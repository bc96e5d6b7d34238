"""
Access gate for Stitchbook (single shared passphrase)
"""

from .access_gate import AccessGate, AdminSession, require_admin

__all__ = ['AccessGate', 'AdminSession', 'require_admin']
