"""
Design catalog module for Stitchbook
"""

from .models import Design, Fabric, Material
from .design_catalog import DesignCatalog

__all__ = ['Design', 'Fabric', 'Material', 'DesignCatalog']
