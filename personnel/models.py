from __future__ import annotations

from datetime import date, datetime, timezone
from typing import List, Optional, Union

from sqlmodel import Field, SQLModel, Session, create_engine

from . import config


DateLike = Union[str, date]


class OtherEmployment(SQLModel):
    company: Optional[str] = None
    start_date: Optional[DateLike] = None
    end_date: Optional[DateLike] = None
    hours_per_week: Optional[Union[int, float, str]] = None
    monthly_income: Optional[Union[int, float, str]] = None


class PersonalRecord(SQLModel):
    """Input record for one personnel document. Read-only to the renderer."""

    user_id: Optional[str] = None
    first_name: str
    last_name: str
    birth_name: Optional[str] = None
    birth_place: Optional[str] = None
    birth_country: Optional[str] = None
    date_of_birth: DateLike
    street_address: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    marital_status: Optional[str] = None
    gender: Optional[str] = None
    nationality: Optional[str] = None
    iban: Optional[str] = None
    bic: Optional[str] = None
    start_date: Optional[DateLike] = None
    job_title: Optional[str] = None
    employment_type: Optional[Union[str, List[str]]] = None
    employment_type_other: Optional[str] = None
    has_other_employment: bool = False
    has_additional_employment: bool = False
    other_employment_details: List[OtherEmployment] = Field(default_factory=list)
    is_marginal_employment: bool = False
    highest_school_degree: Optional[str] = None
    highest_professional_qualification: Optional[str] = None
    tax_id: Optional[str] = None
    tax_class_factor: Optional[str] = None
    child_allowances: Optional[float] = None
    religious_affiliation: Optional[str] = None
    health_insurance_company: Optional[str] = None
    social_insurance_number: Optional[str] = None
    signature_data_url: Optional[str] = None
    signature_date: Optional[DateLike] = None
    is_complete: bool = False


class DocumentArtifact(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: Optional[str] = Field(default=None, index=True)
    file_name: str
    path: str
    page_count: int
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


engine = create_engine(f"sqlite:///{config.DB_PATH}")


def reset_engine() -> None:
    global engine
    engine = create_engine(f"sqlite:///{config.DB_PATH}")


def init_db() -> None:
    config.OUT_DIR.mkdir(parents=True, exist_ok=True)
    SQLModel.metadata.create_all(engine)


def get_session() -> Session:
    return Session(engine, expire_on_commit=False)
