# backend/rentals/schemas.py
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, create_model, field_validator
from sqlalchemy import JSON, String

from .models import Property

VisitType = Literal["renovation-end", "contract-end", "scheduled-visit", "ipc-update"]


# -------------------- Properties --------------------

class PropertyCreate(BaseModel):
    """Known columns are typed; any other column name is checked by the router."""

    model_config = ConfigDict(extra="allow")

    property_unique_id: str = Field(min_length=1, max_length=80)
    address: Optional[str] = None
    city: Optional[str] = None
    area_cluster: Optional[str] = None
    property_asset_type: Optional[str] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    square_meters: Optional[float] = None
    rental_type: Optional[str] = None
    announcement_price: Optional[float] = None
    current_stage: Optional[str] = None
    admin_name: Optional[str] = None


READ_ONLY_PROPERTY_COLUMNS = frozenset({"id", "property_unique_id", "created_at", "updated_at"})


def _column_field(column) -> tuple[Any, Any]:
    if isinstance(column.type, JSON):
        return (Optional[Any], None)
    if isinstance(column.type, String) and column.type.length:
        return (Optional[str], Field(default=None, max_length=column.type.length))
    return (Optional[column.type.python_type], None)


# Typed from the table so every writable column is checked, including the
# room and custom-document columns PropertyCreate leaves untyped.
PropertyUpdate = create_model(
    "PropertyUpdate",
    __config__=ConfigDict(extra="forbid"),
    **{
        c.name: _column_field(c)
        for c in Property.__table__.columns
        if c.name not in READ_ONLY_PROPERTY_COLUMNS
    },
)


class SectionReview(BaseModel):
    isCorrect: Optional[bool] = None
    reviewed: bool = False
    comments: Optional[str] = None
    submittedComments: Optional[str] = None
    snapshot: Optional[dict[str, Any]] = None
    hasIssue: bool = False


class SectionReviewIn(BaseModel):
    isCorrect: Optional[bool] = None
    comments: Optional[str] = None
    submittedComments: Optional[str] = None


class SectionReviewsOut(BaseModel):
    propertyId: str
    reviews: dict[str, SectionReview]
    completeness: dict[str, bool]
    allComplete: bool


# -------------------- Tasks --------------------

class TaskUpsert(BaseModel):
    phase: str = Field(min_length=1)
    task_type: str = Field(min_length=1)
    is_completed: Optional[bool] = None
    task_data: Optional[dict[str, Any]] = None


class TaskOut(BaseModel):
    id: int
    property_id: str
    phase: str
    task_type: str
    is_completed: bool
    completed_at: Optional[datetime] = None
    task_data: Optional[dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


# -------------------- Visits --------------------

class VisitCreate(BaseModel):
    visit_date: datetime
    visit_type: VisitType
    notes: Optional[str] = None
    created_by: Optional[str] = None


class VisitUpdate(BaseModel):
    visit_date: Optional[datetime] = None
    visit_type: Optional[VisitType] = None
    notes: Optional[str] = None


class VisitOut(BaseModel):
    id: int
    property_id: str
    visit_date: datetime
    visit_type: str
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


# -------------------- Tenant / Rental --------------------

class TenantUpsert(BaseModel):
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    nif: Optional[str] = None


class TenantOut(TenantUpsert):
    id: int
    property_id: str
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class RentalUpsert(BaseModel):
    rent_price: Optional[float] = None
    start_date: Optional[date] = None
    duration: Optional[str] = None
    security_deposit: Optional[float] = None
    legal_contract_url: Optional[str] = None


class RentalOut(RentalUpsert):
    id: int
    property_id: str
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


# -------------------- Leads --------------------

class LeadCreate(BaseModel):
    leads_unique_id: str = Field(min_length=1, max_length=80)
    name: str = Field(min_length=1)
    phone: Optional[str] = None
    email: Optional[str] = None
    zone: Optional[str] = None
    nationality: Optional[str] = None
    current_phase: Optional[str] = None
    employment_status: Optional[str] = None
    employment_contract_type: Optional[str] = None
    average_income: Optional[float] = None
    number_of_occupants: Optional[int] = None


class LeadUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    zone: Optional[str] = None
    nationality: Optional[str] = None
    current_phase: Optional[str] = None
    days_in_phase: Optional[int] = None
    needs_update: Optional[bool] = None
    employment_status: Optional[str] = None
    employment_contract_type: Optional[str] = None
    average_income: Optional[float] = None
    number_of_occupants: Optional[int] = None


class LeadOut(BaseModel):
    id: int
    leads_unique_id: str
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    zone: Optional[str] = None
    nationality: Optional[str] = None
    current_phase: Optional[str] = None
    days_in_phase: int = 0
    needs_update: bool = False
    employment_status: Optional[str] = None
    employment_contract_type: Optional[str] = None
    average_income: Optional[float] = None
    number_of_occupants: Optional[int] = None
    identity_doc_url: Optional[str] = None
    laboral_financial_docs: Optional[dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class LeadPropertyAssign(BaseModel):
    properties_unique_id: str = Field(min_length=1)
    current_status: Optional[str] = None


class LeadPropertyPatch(BaseModel):
    scheduled_visit_date: Optional[datetime] = None
    current_status: Optional[str] = None

    @field_validator("scheduled_visit_date", mode="before")
    @classmethod
    def _blank_is_null(cls, v: Any) -> Any:
        return None if v == "" else v


class LeadsPropertyOut(BaseModel):
    id: int
    leads_unique_id: str
    properties_unique_id: str
    scheduled_visit_date: Optional[datetime] = None
    current_status: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


# -------------------- Documents --------------------

class PropertyDocumentDelete(BaseModel):
    fieldName: str = Field(min_length=1)
    propertyId: str = Field(min_length=1)
    fileUrl: str = Field(min_length=1)
    roomIndex: Optional[int] = None


class LeadDocumentDelete(BaseModel):
    fileUrl: str = Field(min_length=1)
    fieldType: Optional[str] = None
    fieldKey: Optional[str] = None


class UploadOut(BaseModel):
    success: bool
    url: str


# -------------------- Admin users --------------------

class AdminUserCreate(BaseModel):
    email: str = Field(min_length=3)
    password: str = Field(min_length=6)
    role: Literal["supply_admin", "supply_analyst", "supply_partner"]
    property_id: Optional[str] = None


class UserRoleOut(BaseModel):
    id: int
    user_id: str
    email: Optional[str] = None
    role: str
    property_id: Optional[str] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


# -------------------- Events --------------------

class WorkflowEventOut(BaseModel):
    id: int
    property_id: Optional[str] = None
    actor: Optional[str] = None
    event_type: str
    payload: dict[str, Any] = Field(default_factory=dict)
    request_id: Optional[str] = None
    created_at: datetime


class AuditEventOut(BaseModel):
    id: int
    actor: Optional[str] = None
    action: str
    entity_type: str
    entity_id: str
    before: Optional[dict[str, Any]] = None
    after: Optional[dict[str, Any]] = None
    request_id: Optional[str] = None
    created_at: datetime
