from __future__ import annotations

import base64
import binascii
import io
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from .. import config
from ..models import OtherEmployment, PersonalRecord
from .blocks import Block, BulletList, ImageBlock, LabelValue, SectionHeader, TwoColumnPair
from .engine import PaginationEngine, Placement
from .formatting import format_number, format_value, join_values
from .naming import file_name, personnel_number
from .primitives import PageGeometry, RenderContext


logger = logging.getLogger(__name__)

SIGNATURE_WIDTH = 80.0
SIGNATURE_HEIGHT = 25.0


@dataclass
class RenderedDocument:
    pdf: bytes
    file_name: str
    page_count: int
    placements: List[Placement] = field(default_factory=list)


def decode_signature(data_url: Optional[str]) -> Optional[ImageReader]:
    """Decode a `data:image/...;base64,` URL (or bare base64) into an image, or None."""
    if not data_url:
        return None
    payload = data_url.split(",", 1)[1] if "," in data_url else data_url
    # MIME-wrapped base64 carries line breaks
    payload = "".join(payload.split())
    try:
        raw = base64.b64decode(payload, validate=True)
        reader = ImageReader(io.BytesIO(raw))
        reader.getSize()
    except (binascii.Error, ValueError, OSError):
        logger.warning("Signature image could not be decoded; rendering without it", exc_info=True)
        return None
    return reader


def load_logo() -> Optional[ImageReader]:
    if config.LOGO_PATH is None:
        return None
    try:
        return ImageReader(str(config.LOGO_PATH))
    except OSError:
        logger.warning("Logo %s could not be loaded", config.LOGO_PATH, exc_info=True)
        return None


def _field_or_pair(label1: str, value1: str, label2: str, value2: str) -> List[Block]:
    """A pair when both values exist, otherwise only the present one."""
    if value1 and value2:
        return [TwoColumnPair(label1, value1, label2, value2)]
    blocks: List[Block] = []
    if value1:
        blocks.append(LabelValue(label1, value1))
    if value2:
        blocks.append(LabelValue(label2, value2))
    return blocks


def _address(record: PersonalRecord) -> str:
    city_line = " ".join(part for part in [record.postal_code, record.city] if part)
    return join_values([record.street_address or "", city_line])


def _employment_entry(index: int, emp: OtherEmployment) -> str:
    parts: List[str] = []
    if emp.company:
        parts.append(f"Unternehmen: {emp.company}")
    if emp.start_date or emp.end_date:
        start = format_value("start_date", emp.start_date) if emp.start_date else ""
        end = format_value("end_date", emp.end_date) if emp.end_date else "Aktuell"
        parts.append(f"Zeitraum: {start} - {end}")
    if emp.hours_per_week:
        parts.append(f"Stunden/Woche: {format_number(emp.hours_per_week)}")
    if emp.monthly_income:
        parts.append(f"Monatseinkommen: {format_number(emp.monthly_income)}€")
    return f"Eintrag {index}: {' | '.join(parts)}"


def _personal_section(record: PersonalRecord) -> List[Block]:
    blocks: List[Block] = [SectionHeader("Persönliche Angaben")]
    if record.user_id:
        blocks.append(LabelValue("Personalnummer", personnel_number(record.user_id)))
    blocks.append(TwoColumnPair("Vorname", record.first_name, "Nachname", record.last_name))
    if record.birth_name:
        blocks.append(LabelValue("Geburtsname", record.birth_name))
    blocks.append(
        TwoColumnPair(
            "Geburtsdatum",
            format_value("date_of_birth", record.date_of_birth),
            "Geschlecht",
            format_value("gender", record.gender),
        )
    )
    marital = format_value("marital_status", record.marital_status)
    nationality = format_value("nationality", record.nationality)
    if record.birth_place or record.birth_country:
        birthplace = join_values([record.birth_place or "", record.birth_country or ""])
        blocks.append(TwoColumnPair("Geburtsort", birthplace, "Familienstand", marital))
        blocks.append(LabelValue("Staatsangehörigkeit", nationality))
    else:
        blocks.append(TwoColumnPair("Familienstand", marital, "Staatsangehörigkeit", nationality))
    blocks.append(LabelValue("Adresse", _address(record)))
    return blocks


def _employment_section(record: PersonalRecord) -> List[Block]:
    blocks: List[Block] = [
        SectionHeader("Beschäftigungsdaten"),
        TwoColumnPair(
            "Berufsbezeichnung",
            format_value("job_title", record.job_title),
            "Eintrittsdatum",
            format_value("start_date", record.start_date),
        ),
        LabelValue("Art der Beschäftigung", format_value("employment_type", record.employment_type)),
    ]
    if record.employment_type_other:
        blocks.append(LabelValue("Sonstige Angabe", record.employment_type_other))

    special: List[str] = []
    if record.is_marginal_employment:
        special.append("Geringfügige Beschäftigung")
    if record.has_other_employment or record.has_additional_employment:
        special.append("Weitere Beschäftigung")
    if special:
        blocks.append(LabelValue("Besonderheiten", join_values(special)))
    return blocks


def _additional_employment_section(record: PersonalRecord) -> List[Block]:
    if not (record.has_additional_employment and record.other_employment_details):
        return []
    blocks: List[Block] = [SectionHeader("Weitere Beschäftigungen")]
    for idx, emp in enumerate(record.other_employment_details, start=1):
        blocks.append(BulletList((_employment_entry(idx, emp),)))
    return blocks


def _banking_section(record: PersonalRecord) -> List[Block]:
    return [
        SectionHeader("Bankverbindung"),
        TwoColumnPair("IBAN", record.iban or "", "BIC", record.bic or ""),
    ]


def _education_section(record: PersonalRecord) -> List[Block]:
    school = format_value("highest_school_degree", record.highest_school_degree)
    qualification = format_value(
        "highest_professional_qualification", record.highest_professional_qualification
    )
    if not (school or qualification):
        return []
    blocks: List[Block] = [SectionHeader("Bildungsabschlüsse")]
    if school and qualification:
        blocks.append(TwoColumnPair("Schulabschluss", school, "Berufsqualifikation", qualification))
    else:
        blocks.extend(
            _field_or_pair("Höchster Schulabschluss", school, "Höchste berufliche Qualifikation", qualification)
        )
    return blocks


def _tax_section(record: PersonalRecord) -> List[Block]:
    if not (
        record.tax_id or record.tax_class_factor or record.child_allowances or record.religious_affiliation
    ):
        return []
    blocks: List[Block] = [SectionHeader("Steuerliche Angaben")]
    blocks.extend(_field_or_pair("Steuer-ID", record.tax_id or "", "Steuerklasse", record.tax_class_factor or ""))
    # zero allowances are still shown once the section exists
    allowances = format_value("child_allowances", record.child_allowances)
    blocks.extend(
        _field_or_pair("Kinderfreibeträge", allowances, "Konfession", record.religious_affiliation or "")
    )
    return blocks


def _social_insurance_section(record: PersonalRecord) -> List[Block]:
    if not (record.social_insurance_number or record.health_insurance_company):
        return []
    return [SectionHeader("Sozialversicherung")] + _field_or_pair(
        "Sozialversicherungsnummer",
        record.social_insurance_number or "",
        "Krankenkasse",
        record.health_insurance_company or "",
    )


def _signature_section(record: PersonalRecord, signature: Optional[ImageReader]) -> List[Block]:
    if signature is None:
        return []
    caption = None
    if record.signature_date:
        caption = f"Unterschrieben am: {format_value('signature_date', record.signature_date)}"
    return [
        SectionHeader("Unterschrift"),
        ImageBlock(signature, SIGNATURE_WIDTH, SIGNATURE_HEIGHT, caption),
    ]


def build_blocks(record: PersonalRecord, signature: Optional[ImageReader] = None) -> List[Block]:
    """Block stream for a record, in fixed section order. Absent sections produce nothing."""
    blocks: List[Block] = []
    blocks.extend(_personal_section(record))
    blocks.extend(_employment_section(record))
    blocks.extend(_additional_employment_section(record))
    blocks.extend(_banking_section(record))
    blocks.extend(_education_section(record))
    blocks.extend(_tax_section(record))
    blocks.extend(_social_insurance_section(record))
    blocks.extend(_signature_section(record, signature))
    return blocks


def render_document(
    record: PersonalRecord,
    today: Optional[date] = None,
    logo: Optional[ImageReader] = None,
    geometry: Optional[PageGeometry] = None,
) -> RenderedDocument:
    today = today or date.today()
    geometry = geometry or PageGeometry()
    signature = decode_signature(record.signature_data_url)
    blocks = build_blocks(record, signature)

    buffer = io.BytesIO()
    canv = canvas.Canvas(buffer, pagesize=(geometry.width * mm, geometry.height * mm))
    canv.setTitle(f"{config.DOCUMENT_TITLE} {record.first_name} {record.last_name}")
    ctx = RenderContext(
        canv=canv,
        style=config.load_style_preset(),
        geometry=geometry,
        logo=logo if logo is not None else load_logo(),
        created=today,
    )
    engine = PaginationEngine(ctx)
    for block in blocks:
        engine.place(block)
    page_count = engine.finish()
    canv.save()

    logger.info("Rendered %s page(s) for %s", page_count, record.user_id or record.last_name)
    return RenderedDocument(
        pdf=buffer.getvalue(),
        file_name=file_name(record, today=today),
        page_count=page_count,
        placements=list(engine.placements),
    )


def render_pdf_bytes(record: PersonalRecord, today: Optional[date] = None) -> bytes:
    return render_document(record, today=today).pdf
