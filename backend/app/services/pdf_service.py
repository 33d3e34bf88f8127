"""
Prescription PDF Generation Service
Creates a printable prescription with clinic, patient and medicine details
"""
from io import BytesIO
from datetime import datetime, timezone
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import inch
from reportlab.lib import colors
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.enums import TA_CENTER, TA_RIGHT

from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.unit_of_work import load_prescription
from app.models.prescription import Prescription
from app.services.quantity_presenter import EMPTY_QUANTITY, format_item_quantity


def format_print_date(value: Optional[datetime] = None) -> str:
    """dd/mm/yyyy in UTC, so every host prints the same date."""
    value = value or datetime.now(timezone.utc)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%d/%m/%Y")


def format_age(age: Optional[int]) -> str:
    return EMPTY_QUANTITY if age is None else str(age)


def _text(value) -> str:
    return escape(str(value)) if value not in (None, "") else EMPTY_QUANTITY


def generate_prescription_pdf(db: Session, prescription_id: int) -> BytesIO:
    """
    Generate PDF for a saved prescription

    Args:
        db: Database session
        prescription_id: ID of the prescription to print

    Returns:
        BytesIO buffer containing PDF data

    Raises:
        ValueError: if the prescription does not exist
    """
    prescription = load_prescription(db, prescription_id)
    if not prescription:
        raise ValueError(f"Prescription {prescription_id} not found")
    return render_prescription_pdf(prescription)


def render_prescription_pdf(prescription: Prescription) -> BytesIO:
    patient = prescription.patient

    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, topMargin=0.5*inch, bottomMargin=0.5*inch)

    elements = []
    styles = getSampleStyleSheet()

    title_style = ParagraphStyle(
        'ClinicTitle',
        parent=styles['Heading1'],
        fontSize=20,
        textColor=colors.HexColor('#1a56db'),
        alignment=TA_CENTER,
        spaceAfter=6
    )

    heading_style = ParagraphStyle(
        'SectionHeading',
        parent=styles['Heading2'],
        fontSize=13,
        textColor=colors.HexColor('#1f2937'),
        spaceAfter=6
    )

    normal_style = ParagraphStyle(
        'PrescriptionNormal',
        parent=styles['Normal'],
        fontSize=10,
        textColor=colors.HexColor('#374151')
    )

    # Clinic header
    elements.append(Paragraph(escape(settings.CLINIC_NAME), title_style))
    if settings.CLINIC_ADDRESS:
        elements.append(Paragraph(escape(settings.CLINIC_ADDRESS), ParagraphStyle(
            'ClinicAddress', parent=normal_style, alignment=TA_CENTER
        )))
    elements.append(Spacer(1, 0.3*inch))

    # Patient and prescription info
    info_data = [
        [
            Paragraph(f"<b>Name:</b> {_text(patient.name)}<br/>"
                      f"<b>Age:</b> {format_age(patient.age)}<br/>"
                      f"<b>Phone:</b> {_text(patient.phone)}", normal_style),
            Paragraph(f"<b>Prescription No.:</b> {_text(prescription.number)}<br/>"
                      f"<b>Date:</b> {format_print_date(prescription.created_at)}", normal_style)
        ]
    ]
    info_table = Table(info_data, colWidths=[3.5*inch, 3*inch])
    info_table.setStyle(TableStyle([
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('TOPPADDING', (0, 0), (-1, -1), 6),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
    ]))
    elements.append(info_table)
    elements.append(Spacer(1, 0.2*inch))

    if prescription.symptoms:
        elements.append(Paragraph("<b>Symptoms:</b>", heading_style))
        elements.append(Paragraph(escape(prescription.symptoms), normal_style))
        elements.append(Spacer(1, 0.2*inch))

    # Medicines
    elements.append(Paragraph("<b>Rx</b>", heading_style))
    items_data = [
        [Paragraph("<b>#</b>", normal_style),
         Paragraph("<b>Medicine</b>", normal_style),
         Paragraph("<b>Dosage</b>", normal_style),
         Paragraph("<b>Quantity</b>", normal_style)]
    ]
    for index, item in enumerate(prescription.items, 1):
        items_data.append([
            Paragraph(str(index), normal_style),
            Paragraph(escape(item.med_name), normal_style),
            Paragraph(_text(item.dosage), normal_style),
            Paragraph(escape(format_item_quantity(item)), normal_style),
        ])

    items_table = Table(items_data, colWidths=[0.4*inch, 2.8*inch, 1.8*inch, 1.5*inch])
    items_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#f3f4f6')),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.HexColor('#1f2937')),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 8),
        ('TOPPADDING', (0, 0), (-1, 0), 8),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#fafafa')]),
        ('TOPPADDING', (0, 1), (-1, -1), 6),
        ('BOTTOMPADDING', (0, 1), (-1, -1), 6),
    ]))
    elements.append(items_table)
    elements.append(Spacer(1, 0.8*inch))

    # Footer
    footer_style = ParagraphStyle(
        'Footer',
        parent=styles['Normal'],
        fontSize=8,
        textColor=colors.grey,
        alignment=TA_CENTER
    )
    elements.append(Paragraph("Doctor's signature", ParagraphStyle(
        'Signature', parent=normal_style, alignment=TA_RIGHT
    )))
    elements.append(Spacer(1, 0.3*inch))
    elements.append(Paragraph(f"Printed on {format_print_date()}", footer_style))

    doc.build(elements)

    buffer.seek(0)
    return buffer
