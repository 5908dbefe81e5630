from __future__ import annotations

from datetime import date, datetime

from personnel.render.formatting import (
    EmploymentType,
    Gender,
    MaritalStatus,
    format_date,
    format_label,
    format_value,
)


def test_enum_codes_map_to_labels() -> None:
    assert format_value("marital_status", "eingetragene_lebenspartnerschaft") == "Eingetragene Lebenspartnerschaft"
    assert format_value("gender", "männlich") == "Männlich"
    assert format_value("highest_school_degree", "abitur_fachabitur") == "Abitur/Fachabitur"
    assert format_value("highest_professional_qualification", "bachelor") == "Bachelor"
    assert MaritalStatus("ledig").label == "Ledig"
    assert Gender.DIVERS.label == "Divers"


def test_unknown_code_passes_through() -> None:
    assert format_label("gender", "alien") == "alien"
    assert format_value("marital_status", "kompliziert") == "kompliziert"
    assert format_value("job_title", "DJ") == "DJ"


def test_dates_render_german_style() -> None:
    assert format_value("date_of_birth", "1990-05-17") == "17.05.1990"
    assert format_value("start_date", "2024-03-01T08:30:00") == "01.03.2024"
    assert format_date(date(2001, 1, 2)) == "02.01.2001"
    assert format_date(datetime(2001, 1, 2, 13, 45)) == "02.01.2001"


def test_unparseable_date_returns_raw_string() -> None:
    assert format_value("date_of_birth", "not-a-date") == "not-a-date"
    assert format_date("31.02.2020") == "31.02.2020"


def test_list_values_join_with_comma() -> None:
    raw = [EmploymentType.HAUPTBESCHAEFTIGUNG.value, "nebenbeschäftigung", "werkstudent"]
    assert format_value("employment_type", raw) == "Hauptbeschäftigung, Nebenbeschäftigung, werkstudent"


def test_numbers_and_missing_values() -> None:
    assert format_value("child_allowances", 0.5) == "0,5"
    assert format_value("child_allowances", 2.0) == "2"
    assert format_value("tax_id", None) == ""
    assert format_value("tax_id", "") == ""
