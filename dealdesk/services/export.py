"""
Deal export to CSV and PDF.

Each selected section becomes a small table (title, header, rows). The
CSV writer emits one block per table separated by a blank line; the PDF
writer lays them out with reportlab platypus.
"""

import csv
import io
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from dealdesk.models import Deal
from dealdesk.schemas.export import ExportRequest, NotesFilter
from dealdesk.utils.formatting import (
    format_currency,
    format_date,
    format_percent,
    or_na,
)

logger = logging.getLogger(__name__)

BRAND_COLOR = colors.HexColor("#1f2937")


@dataclass
class SectionTable:
    title: str
    header: List[str]
    rows: List[List[str]] = field(default_factory=list)


def _deal_info(deal: Deal) -> SectionTable:
    return SectionTable(
        title="Deal Information",
        header=["Field", "Value"],
        rows=[
            ["Deal Name", or_na(deal.name)],
            ["Brand", or_na(deal.brand.name if deal.brand else None)],
            ["Stage", or_na(deal.stage)],
            ["Status", or_na(deal.status)],
            ["Division", or_na(deal.division)],
            ["Industry", or_na(deal.industry)],
            ["Start Date", format_date(deal.start_date)],
            ["Close Date", format_date(deal.close_date)],
        ],
    )


def _owner_contract(deal: Deal) -> SectionTable:
    return SectionTable(
        title="Owner & Contract",
        header=["Field", "Value"],
        rows=[
            ["Owner", or_na(deal.owner.name if deal.owner else None)],
            ["Owner Cost Center", or_na(deal.owner_cost_center)],
            ["Licence Holder", or_na(deal.licence_holder_name)],
            ["Company Reference", or_na(deal.company_reference)],
            ["CLM Contract Number", or_na(deal.clm_contract_number)],
            ["Contract Start", format_date(deal.contract_start_date)],
            ["Contract End", format_date(deal.contract_end_date)],
        ],
    )


def _financial(deal: Deal) -> SectionTable:
    schedules = [s for p in deal.products for s in p.schedules]
    return SectionTable(
        title="Financial Summary",
        header=["Field", "Value"],
        rows=[
            ["Deal Amount", format_currency(deal.amount)],
            ["Contract Amount", format_currency(deal.contract_amount)],
            ["Commission %", format_percent(deal.split_percent)],
            ["Total Revenue", format_currency(sum(s.revenue for s in schedules))],
            ["Total Talent Amount", format_currency(sum(s.talent_amount for s in schedules))],
            ["Total Commission", format_currency(sum(s.commission_amount for s in schedules))],
        ],
    )


def _products(deal: Deal) -> SectionTable:
    table = SectionTable(
        title="Products & Schedules",
        header=["Product", "Schedule Date", "Revenue", "Split %", "Talent", "Commission", "Status", "Splits"],
    )
    for product in deal.products:
        if not product.schedules:
            table.rows.append([or_na(product.name), "N/A", "N/A", "N/A", "N/A", "N/A", "N/A", ""])
        for schedule in product.schedules:
            splits = "; ".join(
                f"{s.agent_name} {format_percent(s.split_percent)}" for s in schedule.splits
            )
            table.rows.append([
                or_na(product.name),
                format_date(schedule.schedule_date),
                format_currency(schedule.revenue),
                format_percent(schedule.split_percent),
                format_currency(schedule.talent_amount),
                format_currency(schedule.commission_amount),
                schedule.payment_status.value,
                splits,
            ])
    return table


def _payments(deal: Deal) -> SectionTable:
    return SectionTable(
        title="Payments",
        header=["Payment #", "Date", "Amount", "Status", "Method"],
        rows=[
            [
                or_na(p.payment_number),
                format_date(p.payment_date),
                format_currency(p.payment_amount),
                or_na(p.payment_status),
                or_na(p.payment_method),
            ]
            for p in deal.payments
        ],
    )


def _notes(deal: Deal, notes_filter: NotesFilter) -> SectionTable:
    notes = deal.notes
    if notes_filter.category:
        notes = [n for n in notes if n.category.value == notes_filter.category]
    if notes_filter.status:
        notes = [n for n in notes if n.status == notes_filter.status]
    return SectionTable(
        title="Notes",
        header=["Date", "Category", "Status", "Title", "Content"],
        rows=[
            [format_date(n.created_at), n.category.value, n.status, n.title, n.content]
            for n in sorted(notes, key=lambda n: n.created_at, reverse=True)
        ],
    )


def _attachments(deal: Deal) -> SectionTable:
    return SectionTable(
        title="Attachments",
        header=["File Name", "Type", "Size (bytes)", "Uploaded"],
        rows=[
            [a.file_name, a.file_type, str(a.file_size), format_date(a.created_at)]
            for a in deal.attachments
        ],
    )


def _timeline(deal: Deal) -> SectionTable:
    return SectionTable(
        title="Activity Timeline",
        header=["Date", "Type", "Title", "Description"],
        rows=[
            [format_date(a.created_at), a.activity_type, a.title, a.description or ""]
            for a in sorted(deal.activities, key=lambda a: (a.created_at, a.id), reverse=True)
        ],
    )


def build_sections(deal: Deal, request: ExportRequest) -> List[SectionTable]:
    """Tables for the selected sections, in a fixed order."""
    sections = request.sections
    tables = []
    if sections.deal_info:
        tables.append(_deal_info(deal))
    if sections.owner_contract:
        tables.append(_owner_contract(deal))
    if sections.financial:
        tables.append(_financial(deal))
    if sections.products:
        tables.append(_products(deal))
    if sections.payments:
        tables.append(_payments(deal))
    if sections.notes:
        tables.append(_notes(deal, request.notes_filter))
    if sections.attachments:
        tables.append(_attachments(deal))
    if sections.timeline:
        tables.append(_timeline(deal))
    return tables


def render_csv(tables: List[SectionTable]) -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    for index, table in enumerate(tables):
        if index:
            writer.writerow([])
        writer.writerow([table.title])
        writer.writerow(table.header)
        writer.writerows(table.rows)
    return buffer.getvalue().encode("utf-8")


def render_pdf(deal: Deal, tables: List[SectionTable], request: ExportRequest) -> bytes:
    margin = 12 * mm
    pagesize = landscape(A4) if request.pdf_options.orientation == "landscape" else A4
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=pagesize,
        leftMargin=margin,
        rightMargin=margin,
        topMargin=margin,
        bottomMargin=margin,
        title=f"{deal.name} export",
    )
    styles = getSampleStyleSheet()
    cell_style = styles["BodyText"]

    elements = []
    if request.pdf_options.include_branding:
        elements.append(Paragraph("<b>DealDesk</b>", styles["Title"]))
    elements.append(Paragraph(_escape(deal.name), styles["Heading1"]))
    elements.append(
        Paragraph(
            f"Exported {format_date(datetime.now(timezone.utc))}",
            styles["Normal"],
        )
    )
    elements.append(Spacer(1, 8))

    for table in tables:
        elements.append(Paragraph(table.title, styles["Heading2"]))
        if not table.rows:
            elements.append(Paragraph("No records.", styles["Normal"]))
            elements.append(Spacer(1, 6))
            continue
        data = [table.header] + [
            [Paragraph(_escape(cell), cell_style) for cell in row] for row in table.rows
        ]
        grid = Table(data, repeatRows=1)
        grid.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), BRAND_COLOR),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, 0), 9),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ]))
        elements.append(grid)
        elements.append(Spacer(1, 8))

    doc.build(elements)
    return buffer.getvalue()


def _escape(text: str) -> str:
    # Paragraph parses a mini-markup
    return (text or "").replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def export_deal(deal: Deal, request: ExportRequest) -> bytes:
    """Render the selected sections of a fully loaded deal."""
    tables = build_sections(deal, request)
    logger.info(
        "Exporting deal %s as %s (%s)",
        deal.id,
        request.format,
        ", ".join(t.title for t in tables),
    )
    if request.format == "csv":
        return render_csv(tables)
    return render_pdf(deal, tables, request)
