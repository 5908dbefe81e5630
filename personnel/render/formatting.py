from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Dict, Iterable, Type


class CodedLabel(str, Enum):
    """Stored code with its German display label attached."""

    def __new__(cls, code: str, label: str) -> "CodedLabel":
        obj = str.__new__(cls, code)
        obj._value_ = code
        obj.label = label
        return obj


class MaritalStatus(CodedLabel):
    LEDIG = ("ledig", "Ledig")
    VERHEIRATET = ("verheiratet", "Verheiratet")
    GESCHIEDEN = ("geschieden", "Geschieden")
    VERWITWET = ("verwitwet", "Verwitwet")
    LEBENSPARTNERSCHAFT = ("eingetragene_lebenspartnerschaft", "Eingetragene Lebenspartnerschaft")


class Gender(CodedLabel):
    MAENNLICH = ("männlich", "Männlich")
    WEIBLICH = ("weiblich", "Weiblich")
    DIVERS = ("divers", "Divers")
    UNBESTIMMT = ("unbestimmt", "Unbestimmt")


class EmploymentType(CodedLabel):
    HAUPTBESCHAEFTIGUNG = ("hauptbeschäftigung", "Hauptbeschäftigung")
    NEBENBESCHAEFTIGUNG = ("nebenbeschäftigung", "Nebenbeschäftigung")


class SchoolDegree(CodedLabel):
    ABITUR = ("abitur_fachabitur", "Abitur/Fachabitur")
    MITTLERE_REIFE = ("mittlere_reife", "Mittlere Reife")
    HAUPTSCHULE = ("hauptschule_volksschule", "Hauptschule/Volksschule")
    OHNE = ("ohne_schulabschluss", "Ohne Schulabschluss")


class ProfessionalQualification(CodedLabel):
    PROMOTION = ("promotion", "Promotion")
    MASTER = ("diplom_magister_master_staatsexamen", "Diplom/Magister/Master/Staatsexamen")
    BACHELOR = ("bachelor", "Bachelor")
    MEISTER = ("meister_techniker_fachschule", "Meister/Techniker/Fachschule")
    BERUFSAUSBILDUNG = ("anerkannte_berufsausbildung", "Anerkannte Berufsausbildung")
    OHNE = ("ohne_berufsausbildung", "Ohne Berufsausbildung")


FIELD_DOMAINS: Dict[str, Type[CodedLabel]] = {
    "marital_status": MaritalStatus,
    "gender": Gender,
    "employment_type": EmploymentType,
    "highest_school_degree": SchoolDegree,
    "highest_professional_qualification": ProfessionalQualification,
}

DATE_FIELDS = {
    "date_of_birth",
    "start_date",
    "end_date",
    "signature_date",
}

DATE_FORMAT = "%d.%m.%Y"
LIST_SEPARATOR = ", "


def format_label(field_key: str, code: str) -> str:
    domain = FIELD_DOMAINS.get(field_key)
    if domain is None:
        return code
    try:
        return domain(code).label
    except ValueError:
        return code


def format_date(raw) -> str:
    """dd.MM.yyyy for anything date-like; unparseable input comes back as-is."""
    if isinstance(raw, datetime):
        return raw.strftime(DATE_FORMAT)
    if isinstance(raw, date):
        return raw.strftime(DATE_FORMAT)
    text = str(raw)
    try:
        parsed = datetime.fromisoformat(text.strip())
    except ValueError:
        return text
    return parsed.strftime(DATE_FORMAT)


def format_number(raw) -> str:
    if isinstance(raw, bool):
        return str(raw)
    if isinstance(raw, (int, float)):
        return f"{raw:g}".replace(".", ",")
    return str(raw)


def join_values(values: Iterable[str]) -> str:
    return LIST_SEPARATOR.join(v for v in values if v)


def format_value(field_key: str, raw) -> str:
    if raw is None:
        return ""
    if isinstance(raw, (list, tuple)):
        return join_values(format_value(field_key, item) for item in raw)
    if field_key in DATE_FIELDS:
        return format_date(raw)
    if isinstance(raw, (int, float)):
        return format_number(raw)
    text = str(raw)
    if not text:
        return ""
    return format_label(field_key, text)
