"""Statement generator for MilkBook.

This module turns a statement filter into the account statement shown on
the Statements page and exported as PDF, CSV or Excel files. The output
formats share one StatementPresentation so the totals and columns always
agree.
"""
import csv
import logging
import os
from xml.sax.saxutils import escape

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont, TTFError
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from xlsxwriter.exceptions import FileCreateError

from src.config import (
    ALL_CUSTOMERS_LABEL, CURRENCY_SYMBOL_FALLBACK, DATE_FORMAT_STORAGE,
    EXPORT_FILE_PREFIX, PDF_MARGIN_MM
)
from src.data_structures import (
    StatementColumns, StatementConfig, StatementDocument, StatementFilter,
    StatementPresentation, StatementTable, Transaction
)
from src.result import Result, ErrorType
from src.services.summary_calculator import SummaryCalculator
from src.services.transaction_aggregator import TransactionAggregator

logger = logging.getLogger(__name__)

_PDF_FONT_NAME = "StatementSans"
_PDF_BOLD_FONT_NAME = "StatementSans-Bold"

# Description takes whatever width is left
_PDF_COLUMN_WIDTHS = {
    StatementColumns.DATE.header: 24 * mm,
    StatementColumns.CUSTOMER.header: 36 * mm,
    StatementColumns.BILLED.header: 26 * mm,
    StatementColumns.PAID.header: 26 * mm,
}


class StatementGenerator:
    """Builds account statements and writes them to PDF, CSV and Excel files."""

    def __init__(self, db_manager, config: StatementConfig = None):
        """Initialize StatementGenerator.

        Args:
            db_manager: DatabaseManager instance for data access.
            config: Optional StatementConfig. Defaults to the settings stored
                in the database.
        """
        self.db = db_manager
        self.config = config or StatementConfig.from_settings(db_manager)
        self.aggregator = TransactionAggregator(db_manager)
        self._pdf_font = None

    @staticmethod
    def build_filename(statement_filter: StatementFilter, extension: str) -> str:
        return f"{EXPORT_FILE_PREFIX}-{statement_filter.date_from}-to-{statement_filter.date_to}.{extension}"

    def _customer_label(self, statement_filter: StatementFilter) -> str:
        if not statement_filter.has_customer:
            return ALL_CUSTOMERS_LABEL
        customer = self.db.get_customer(statement_filter.customer_id)
        return customer.name if customer else ALL_CUSTOMERS_LABEL

    def prepare(self, statement_filter: StatementFilter) -> StatementPresentation:
        """Aggregate, total and lay out the statement for a filter."""
        transactions = self.aggregator.aggregate(statement_filter)
        cfg = self.config
        from_display = cfg.format_date(statement_filter.date_from, cfg.display_date_format)
        to_display = cfg.format_date(statement_filter.date_to, cfg.display_date_format)

        return StatementPresentation(
            statement_filter=statement_filter,
            customer_name=self._customer_label(statement_filter),
            period_display=f"{from_display} to {to_display}",
            columns=StatementColumns.for_filter(statement_filter),
            transactions=transactions,
            summary=SummaryCalculator.summarize(transactions),
        )

    def _cells(self, tx: Transaction, presentation: StatementPresentation, date_format, amount):
        values = {
            "date": self.config.format_date(tx.date, date_format),
            "customer": tx.customer_name,
            "description": tx.description,
            "billed": amount(tx.billed),
            "paid": amount(tx.paid),
        }
        return [values[col.key] for col in presentation.columns]

    # ------------------------------------------------------------------
    # Table view
    # ------------------------------------------------------------------
    def render_table(self, presentation: StatementPresentation) -> StatementTable:
        cfg = self.config
        rows = [
            self._cells(tx, presentation, cfg.display_date_format, cfg.money_or_placeholder)
            for tx in presentation.transactions
        ]
        return StatementTable(
            headers=presentation.headers,
            alignments=[col.align for col in presentation.columns],
            rows=rows,
        )

    # ------------------------------------------------------------------
    # PDF document
    # ------------------------------------------------------------------
    def render_document(self, presentation: StatementPresentation, currency_symbol: str = None) -> StatementDocument:
        """Lay out the PDF content without touching any PDF library."""
        cfg = self.config
        symbol = currency_symbol if currency_symbol is not None else cfg.currency_symbol

        header_lines = [f"Period: {presentation.period_display}"]
        if presentation.statement_filter.has_customer:
            header_lines.append(f"Customer: {presentation.customer_name}")

        summary = presentation.summary
        body = [
            self._cells(tx, presentation, cfg.document_date_format,
                        lambda value: cfg.money_or_placeholder(value, symbol))
            for tx in presentation.transactions
        ]
        return StatementDocument(
            organization=cfg.organization_name,
            title=cfg.title,
            header_lines=header_lines,
            head=presentation.headers,
            body=body,
            alignments=[col.align for col in presentation.columns],
            footer_lines=[
                f"Total Amount: {cfg.money(summary.total_billed, symbol)}",
                f"Received Amount: {cfg.money(summary.total_paid, symbol)}",
                f"Pending Amount: {cfg.money(summary.pending, symbol)}",
            ],
            filename=self.build_filename(presentation.statement_filter, "pdf"),
        )

    def _resolve_pdf_font(self):
        """Register a Unicode font for the currency glyph.

        Returns:
            Tuple of (regular font, bold font, currency symbol).
        """
        if self._pdf_font is None:
            self._pdf_font = ("Helvetica", "Helvetica-Bold", CURRENCY_SYMBOL_FALLBACK)
            for path, bold_path in self.config.font_candidates:
                if not os.path.exists(path):
                    continue
                try:
                    pdfmetrics.registerFont(TTFont(_PDF_FONT_NAME, path))
                except TTFError as e:
                    logger.warning("Could not load PDF font %s: %s", path, e)
                    continue
                self._pdf_font = (_PDF_FONT_NAME, self._register_bold(bold_path), self.config.currency_symbol)
                break
        return self._pdf_font

    @staticmethod
    def _register_bold(bold_path):
        """Register the bold face, or return the regular font name when unavailable."""
        if not bold_path or not os.path.exists(bold_path):
            return _PDF_FONT_NAME
        try:
            pdfmetrics.registerFont(TTFont(_PDF_BOLD_FONT_NAME, bold_path))
        except TTFError as e:
            logger.warning("Could not load bold PDF font %s: %s", bold_path, e)
            return _PDF_FONT_NAME
        return _PDF_BOLD_FONT_NAME

    def _write_pdf(self, document: StatementDocument, path: str, font: str, bold_font: str):
        styles = getSampleStyleSheet()
        org_style = ParagraphStyle('Org', parent=styles['Normal'], fontName=bold_font, fontSize=20, leading=24)
        title_style = ParagraphStyle('Title', parent=styles['Normal'], fontName=font, fontSize=14, leading=18)
        info_style = ParagraphStyle('Info', parent=styles['Normal'], fontName=font, fontSize=10, leading=14)
        cell_style = ParagraphStyle('Cell', parent=styles['Normal'], fontName=font, fontSize=9, leading=11)
        total_style = ParagraphStyle('Total', parent=styles['Normal'], fontName=font, fontSize=12, leading=16)
        pending_style = ParagraphStyle('Pending', parent=total_style, fontName=bold_font, fontSize=14, leading=20)

        elements = [
            Paragraph(escape(document.organization), org_style),
            Spacer(1, 2 * mm),
            Paragraph(escape(document.title), title_style),
            Spacer(1, 3 * mm),
        ]
        elements.extend(Paragraph(escape(line), info_style) for line in document.header_lines)
        elements.append(Spacer(1, 6 * mm))

        desc_idx = document.head.index(StatementColumns.DESCRIPTION.header)
        data = [document.head]
        for row in document.body:
            row = list(row)
            row[desc_idx] = Paragraph(escape(row[desc_idx]), cell_style)
            data.append(row)

        style = [
            ('FONT', (0, 0), (-1, -1), font, 9),
            ('FONT', (0, 0), (-1, 0), bold_font, 9),
            ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor(self.config.header_color)),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('GRID', (0, 0), (-1, -1), 0.25, colors.HexColor('#D1D5DB')),
            ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#F3F4F6')]),
        ]
        for idx, align in enumerate(document.alignments):
            if align == "right":
                style.append(('ALIGN', (idx, 0), (idx, -1), 'RIGHT'))

        available = A4[0] - 2 * PDF_MARGIN_MM * mm
        widths = [_PDF_COLUMN_WIDTHS.get(header) for header in document.head]
        widths[desc_idx] = available - sum(w for w in widths if w)

        table = Table(data, colWidths=widths, repeatRows=1)
        table.setStyle(TableStyle(style))
        elements.append(table)
        elements.append(Spacer(1, 8 * mm))

        *totals, pending = document.footer_lines
        elements.extend(Paragraph(escape(line), total_style) for line in totals)
        elements.append(Spacer(1, 2 * mm))
        elements.append(Paragraph(escape(pending), pending_style))

        margin = PDF_MARGIN_MM * mm
        doc = SimpleDocTemplate(path, pagesize=A4, leftMargin=margin, rightMargin=margin,
                                topMargin=margin, bottomMargin=margin,
                                title=f"{document.title} - {document.organization}")
        doc.build(elements)

    def export_pdf(self, presentation: StatementPresentation, folder: str) -> Result:
        """Write the statement PDF into folder.

        Returns:
            Result with the written file path.
        """
        font, bold_font, symbol = self._resolve_pdf_font()
        document = self.render_document(presentation, currency_symbol=symbol)
        path = os.path.join(folder, document.filename)
        try:
            self._write_pdf(document, path, font, bold_font)
        except OSError as e:
            logger.error("PDF export to %s failed: %s", path, e)
            return Result.fail(f"PDF Export Failed: {e}", ErrorType.EXPORT)
        logger.info("Statement PDF written to %s", path)
        return Result.ok(path)

    # ------------------------------------------------------------------
    # CSV
    # ------------------------------------------------------------------
    def render_delimited_text(self, presentation: StatementPresentation) -> str:
        """Serialize the statement as fully quoted CSV.

        Layout: header row, one row per transaction, a blank row, and a
        totals row. Amounts are always written with two decimals.
        """
        def plain(value):
            return f"{value:.2f}"

        rows = [
            self._cells(tx, presentation, DATE_FORMAT_STORAGE, plain)
            for tx in presentation.transactions
        ]
        summary = presentation.summary
        total_row = [""] * (len(presentation.columns) - 3)
        total_row.extend(["Total", plain(summary.total_billed), plain(summary.total_paid)])

        options = dict(index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")
        body = pd.DataFrame(rows, columns=presentation.headers).to_csv(**options)
        totals = pd.DataFrame([total_row]).to_csv(header=False, **options)
        return body + "\n" + totals

    def export_csv(self, presentation: StatementPresentation, folder: str) -> Result:
        path = os.path.join(folder, self.build_filename(presentation.statement_filter, "csv"))
        content = self.render_delimited_text(presentation)
        try:
            with open(path, 'w', encoding='utf-8', newline='') as f:
                f.write(content)
        except OSError as e:
            logger.error("CSV export to %s failed: %s", path, e)
            return Result.fail(f"CSV Export Failed: {e}", ErrorType.EXPORT)
        logger.info("Statement CSV written to %s", path)
        return Result.ok(path)

    # ------------------------------------------------------------------
    # Excel
    # ------------------------------------------------------------------
    def export_excel(self, presentation: StatementPresentation, folder: str) -> Result:
        """Write the statement as a formatted Excel workbook."""
        cfg = self.config
        path = os.path.join(folder, self.build_filename(presentation.statement_filter, "xlsx"))
        columns = presentation.columns
        last_col = len(columns) - 1
        summary = presentation.summary

        try:
            with pd.ExcelWriter(path, engine='xlsxwriter') as writer:
                workbook = writer.book
                worksheet = workbook.add_worksheet("Statement")

                title_fmt = workbook.add_format({'bold': True, 'font_size': 16})
                period_fmt = workbook.add_format({'italic': True, 'font_size': 10})
                header_fmt = workbook.add_format({
                    'bold': True, 'bg_color': cfg.header_color, 'font_color': 'white', 'border': 1
                })
                cell_fmt = workbook.add_format({'border': 1, 'text_wrap': True, 'valign': 'top'})
                money_fmt = workbook.add_format({
                    'border': 1, 'valign': 'top', 'num_format': f'"{cfg.currency_symbol}"#,##0.00'
                })
                total_fmt = workbook.add_format({
                    'bold': True, 'border': 1, 'bg_color': '#F0F0F0',
                    'num_format': f'"{cfg.currency_symbol}"#,##0.00'
                })

                worksheet.merge_range(0, 0, 0, last_col, cfg.organization_name, title_fmt)
                worksheet.merge_range(1, 0, 1, last_col, cfg.title, period_fmt)
                worksheet.merge_range(2, 0, 2, last_col, f"Period: {presentation.period_display}", period_fmt)
                if presentation.statement_filter.has_customer:
                    worksheet.merge_range(3, 0, 3, last_col, f"Customer: {presentation.customer_name}", period_fmt)

                for col, column in enumerate(columns):
                    worksheet.write(5, col, column.header, header_fmt)
                    worksheet.set_column(col, col, 45 if column.key == "description" else 16)

                row_idx = 6
                for tx in presentation.transactions:
                    values = {
                        "date": cfg.format_date(tx.date, cfg.document_date_format),
                        "customer": tx.customer_name,
                        "description": tx.description,
                        "billed": tx.billed,
                        "paid": tx.paid,
                    }
                    for col, column in enumerate(columns):
                        value = values[column.key]
                        worksheet.write(row_idx, col, value, money_fmt if column.align == "right" else cell_fmt)
                    row_idx += 1

                row_idx += 1
                worksheet.write(row_idx, last_col - 2, "Total", total_fmt)
                worksheet.write(row_idx, last_col - 1, summary.total_billed, total_fmt)
                worksheet.write(row_idx, last_col, summary.total_paid, total_fmt)
                worksheet.write(row_idx + 1, last_col - 2, "Pending", total_fmt)
                worksheet.write(row_idx + 1, last_col - 1, summary.pending, total_fmt)
        except (OSError, FileCreateError) as e:
            logger.error("Excel export to %s failed: %s", path, e)
            return Result.fail(f"Excel Export Failed: {e}", ErrorType.EXPORT)

        logger.info("Statement workbook written to %s", path)
        return Result.ok(path)
