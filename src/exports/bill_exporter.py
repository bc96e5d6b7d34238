"""
Bill Exporter
=============

Renders a bill snapshot (as produced by Bill.to_dict) to a downloadable
invoice PDF or CSV named after the bill number.

Output table: S.N | DESIGN NO. | QTY | PRICE | AMOUNT
Followed by SUBTOTAL, GST and a highlighted TOTAL row.

The exporter never mutates the bill; `export` wraps rendering in a bounded
wait and reports every failure as ExportError without retrying.
"""
from __future__ import annotations

import asyncio
import csv
import os
from datetime import datetime
from typing import Dict, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import (
    SimpleDocTemplate,
    Table,
    TableStyle,
    Paragraph,
    Spacer,
)

import config
from billing.gst_calculation import format_money
from errors import ExportError
from utils.logger import get_logger

SUPPORTED_FORMATS = ('pdf', 'csv')


class BillExporter:
    """Generates invoice PDFs and CSVs from bill snapshots"""

    def __init__(self, output_dir: str = None, timeout_seconds: float = None,
                 shop_name: str = None, currency_symbol: str = None):
        self.output_dir = output_dir or config.EXPORT_FOLDER
        self.timeout_seconds = timeout_seconds or config.EXPORT_TIMEOUT_SECONDS
        self.shop_name = shop_name or config.SHOP_NAME
        self.currency_symbol = currency_symbol or config.CURRENCY_SYMBOL
        self.logger = get_logger()
        os.makedirs(self.output_dir, exist_ok=True)

    def _output_path(self, bill: Dict, ext: str) -> str:
        return os.path.join(self.output_dir, f"{bill['billNumber']}.{ext}")

    def generate_pdf(self, bill: Dict, output_path: Optional[str] = None) -> str:
        """
        Generate an invoice PDF from a bill snapshot

        Args:
            bill: Bill dictionary (billNumber, date, customerName, items,
                gstPercentage, subtotal, gstAmount, total)
            output_path: Optional custom output path

        Returns:
            Absolute path to the generated PDF
        """
        pdf_path = output_path or self._output_path(bill, 'pdf')

        doc = SimpleDocTemplate(
            pdf_path,
            pagesize=A4,
            leftMargin=15 * mm,
            rightMargin=15 * mm,
            topMargin=15 * mm,
            bottomMargin=15 * mm,
            title=bill['billNumber'],
        )

        styles = getSampleStyleSheet()
        elements = []

        # ── Header ──────────────────────────────────────────────────
        title_style = ParagraphStyle(
            "InvoiceTitle",
            parent=styles["Heading1"],
            fontSize=18,
            alignment=TA_LEFT,
            spaceAfter=2,
            textColor=colors.HexColor("#1a1a2e"),
        )
        shop_style = ParagraphStyle(
            "ShopName",
            parent=styles["Normal"],
            fontSize=10,
            textColor=colors.HexColor("#555555"),
            spaceAfter=10,
        )
        meta_style = ParagraphStyle(
            "Meta",
            parent=styles["Normal"],
            fontSize=10,
            alignment=TA_RIGHT,
            textColor=colors.HexColor("#333333"),
        )

        header = Table(
            [[
                [Paragraph("<b>Invoice</b>", title_style),
                 Paragraph(escape(self.shop_name), shop_style)],
                Paragraph(
                    f"<b>Bill No:</b> {escape(bill['billNumber'])}<br/>"
                    f"<b>Date:</b> {escape(str(bill.get('date', '')))}",
                    meta_style,
                ),
            ]],
            colWidths=[110 * mm, 70 * mm],
        )
        header.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))
        elements.append(header)

        customer = bill.get('customerName') or 'N/A'
        elements.append(Paragraph(f"<b>Customer:</b> {escape(customer)}", styles["Normal"]))
        elements.append(Spacer(1, 6 * mm))

        # ── Table ───────────────────────────────────────────────────
        cur = self.currency_symbol
        table_data = [["S.N", "DESIGN NO.", "QTY", f"PRICE ({cur})", f"AMOUNT ({cur})"]]

        items = bill.get('items', [])
        for idx, item in enumerate(items, 1):
            table_data.append([
                str(idx),
                item.get('designNumber') or '-',
                str(item.get('quantity', '')),
                format_money(float(item.get('price', 0))),
                format_money(float(item.get('amount', 0))),
            ])

        gst_pct = float(bill.get('gstPercentage', 0))
        table_data.append(["", "", "", "SUBTOTAL", format_money(float(bill['subtotal']))])
        table_data.append(["", "", "", f"GST ({gst_pct:g}%)", format_money(float(bill['gstAmount']))])
        table_data.append(["", "", "", "TOTAL", format_money(float(bill['total']))])

        # A4 = 210mm, minus 30mm margins = 180mm usable
        col_widths = [14 * mm, 66 * mm, 20 * mm, 40 * mm, 40 * mm]
        table = Table(table_data, colWidths=col_widths, repeatRows=1)

        num_data_rows = len(items)
        first_summary_row = num_data_rows + 1
        total_row_idx = num_data_rows + 3

        style_commands = [
            # Header row
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#1a1a2e")),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, 0), 9),
            ("ALIGN", (0, 0), (-1, 0), "CENTER"),
            ("BOTTOMPADDING", (0, 0), (-1, 0), 6),
            ("TOPPADDING", (0, 0), (-1, 0), 6),

            # Data rows
            ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
            ("FONTSIZE", (0, 1), (-1, -1), 9),
            ("ALIGN", (0, 1), (0, -1), "CENTER"),
            ("ALIGN", (2, 1), (2, -1), "CENTER"),
            ("ALIGN", (3, 1), (-1, -1), "RIGHT"),
            ("GRID", (0, 0), (-1, num_data_rows), 0.5, colors.HexColor("#cccccc")),

            # Summary rows
            ("FONTNAME", (3, first_summary_row), (-1, -1), "Helvetica-Bold"),
            ("LINEABOVE", (3, first_summary_row), (-1, first_summary_row), 1, colors.HexColor("#1a1a2e")),

            # Total row
            ("BACKGROUND", (3, total_row_idx), (-1, total_row_idx), colors.HexColor("#FFF176")),
            ("FONTSIZE", (3, total_row_idx), (-1, total_row_idx), 11),
            ("TOPPADDING", (0, total_row_idx), (-1, total_row_idx), 6),
            ("BOTTOMPADDING", (0, total_row_idx), (-1, total_row_idx), 6),
        ]

        for i in range(1, num_data_rows + 1):
            if i % 2 == 0:
                style_commands.append(("BACKGROUND", (0, i), (-1, i), colors.HexColor("#f5f5f5")))

        table.setStyle(TableStyle(style_commands))
        elements.append(table)

        # ── Footer ──────────────────────────────────────────────────
        elements.append(Spacer(1, 8 * mm))
        footer_style = ParagraphStyle(
            "Footer",
            parent=styles["Normal"],
            fontSize=7,
            textColor=colors.HexColor("#999999"),
            alignment=TA_CENTER,
        )
        elements.append(Paragraph(
            f"Generated by {escape(self.shop_name)} | {datetime.now().strftime('%d %b %Y %H:%M')}",
            footer_style,
        ))

        doc.build(elements)
        return os.path.abspath(pdf_path)

    def generate_csv(self, bill: Dict, output_path: Optional[str] = None) -> str:
        """
        Generate an invoice CSV from a bill snapshot

        Returns:
            Absolute path to the generated CSV file
        """
        csv_path = output_path or self._output_path(bill, 'csv')

        with open(csv_path, 'w', newline='', encoding='utf-8-sig') as csvfile:
            writer = csv.writer(csvfile)

            writer.writerow(['Bill No', bill['billNumber']])
            writer.writerow(['Date', bill.get('date', '')])
            writer.writerow(['Customer', bill.get('customerName', '')])
            writer.writerow([])

            writer.writerow(['S.N', 'Design No.', 'Qty',
                             f'Price ({self.currency_symbol})', f'Amount ({self.currency_symbol})'])
            for idx, item in enumerate(bill.get('items', []), 1):
                writer.writerow([
                    idx,
                    item.get('designNumber', ''),
                    item.get('quantity', ''),
                    f"{float(item.get('price', 0)):.2f}",
                    f"{float(item.get('amount', 0)):.2f}",
                ])

            writer.writerow([])
            writer.writerow(['', '', '', 'Subtotal', f"{float(bill['subtotal']):.2f}"])
            writer.writerow(['', '', '', f"GST ({float(bill.get('gstPercentage', 0)):g}%)",
                             f"{float(bill['gstAmount']):.2f}"])
            writer.writerow(['', '', '', 'Total', f"{float(bill['total']):.2f}"])

        return os.path.abspath(csv_path)

    def render(self, bill: Dict, fmt: str = 'pdf', output_path: Optional[str] = None) -> str:
        """Synchronous render in the requested format."""
        if fmt == 'pdf':
            return self.generate_pdf(bill, output_path)
        if fmt == 'csv':
            return self.generate_csv(bill, output_path)
        raise ExportError(f"Unsupported export format: {fmt}. Allowed: {', '.join(SUPPORTED_FORMATS)}")

    async def export(self, bill: Dict, fmt: str = 'pdf', output_path: Optional[str] = None) -> str:
        """
        Render a bill snapshot off the event loop with a bounded wait.

        Returns:
            Path to the generated file.

        Raises:
            ExportError: unsupported format, render failure, or timeout.
        """
        if fmt not in SUPPORTED_FORMATS:
            raise ExportError(f"Unsupported export format: {fmt}. Allowed: {', '.join(SUPPORTED_FORMATS)}")

        bill_number = bill.get('billNumber', '?')
        try:
            path = await asyncio.wait_for(
                asyncio.to_thread(self.render, bill, fmt, output_path),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            self.logger.error(f"Export of {bill_number} timed out", component="Export")
            raise ExportError(f"Export timed out after {self.timeout_seconds:g}s")
        except ExportError:
            raise
        except Exception as e:
            self.logger.error(f"Export of {bill_number} failed: {e}", component="Export", exc_info=True)
            raise ExportError(f"Error generating {fmt.upper()}: {e}") from e

        self.logger.log_export(bill_number, fmt, path)
        return path
