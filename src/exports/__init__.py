"""
Exports module for Stitchbook
Renders bills to downloadable PDF and CSV files
"""

from .bill_exporter import BillExporter

__all__ = ['BillExporter']
