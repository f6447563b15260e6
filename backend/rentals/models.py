# backend/rentals/models.py
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base


# -----------------------------
# Properties
# -----------------------------
class Property(Base):
    __tablename__ = "properties"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    property_unique_id: Mapped[str] = mapped_column(String(80), nullable=False, unique=True, index=True)

    # descriptive
    address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(120), nullable=True, index=True)
    area_cluster: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    property_asset_type: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)
    bedrooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    bathrooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    square_meters: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    rental_type: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)
    announcement_price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    target_rent_price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    monthly_rent: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    pics_urls: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)

    # workflow
    current_stage: Mapped[Optional[str]] = mapped_column(String(80), nullable=True, index=True)
    days_in_stage: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    analyst_status: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    rentals_analyst: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    needs_update: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # property management info
    admin_name: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    keys_location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # technical / legal documents
    doc_energy_cert: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    doc_renovation_files: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    doc_purchase_contract: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    doc_land_registry_note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # client
    client_full_name: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    client_email: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    client_phone: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    client_iban: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    client_identity_doc_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    client_bank_certificate_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # supplies
    doc_contract_electricity: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    doc_contract_water: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    doc_contract_gas: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    doc_bill_electricity: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    doc_bill_water: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    doc_bill_gas: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # insurance + management plan
    home_insurance_type: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    home_insurance_policy_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    property_management_plan: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    property_management_plan_contract_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    property_manager: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)

    # custom documents: [{title, url, createdAt}]
    custom_legal_documents: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    custom_insurance_documents: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    custom_supplies_documents: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    custom_technical_documents: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    client_custom_identity_documents: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    client_custom_financial_documents: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    client_custom_other_documents: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    property_custom_other_documents: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)

    # marketing photos (bedrooms/bathrooms hold one list per room)
    marketing_photos_common_areas: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    marketing_photos_entry_hallways: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    marketing_photos_bedrooms: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    marketing_photos_living_room: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    marketing_photos_bathrooms: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    marketing_photos_kitchen: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    marketing_photos_exterior: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    marketing_photos_garage: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    marketing_photos_storage: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    marketing_photos_terrace: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)

    # incident photos
    incident_photos_common_areas: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    incident_photos_entry_hallways: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    incident_photos_bedrooms: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    incident_photos_living_room: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    incident_photos_bathrooms: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    incident_photos_kitchen: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    incident_photos_exterior: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    incident_photos_garage: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    incident_photos_storage: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    incident_photos_terrace: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)

    # tenant quick-access copy (source of truth is property_tenants)
    tenant_full_name: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    tenant_email: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    tenant_phone: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    tenant_nif: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)

    # {sectionId: {isCorrect, reviewed, comments, submittedComments, snapshot, hasIssue}}
    prophero_section_reviews: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


class PropertyTask(Base):
    __tablename__ = "property_tasks"
    __table_args__ = (
        UniqueConstraint("property_id", "phase", "task_type", name="uq_property_tasks_property_phase_type"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    property_id: Mapped[str] = mapped_column(
        String(80), ForeignKey("properties.property_unique_id", ondelete="CASCADE"), index=True, nullable=False
    )
    phase: Mapped[str] = mapped_column(String(80), nullable=False)
    task_type: Mapped[str] = mapped_column(String(80), nullable=False)
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    task_data: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


class PropertyVisit(Base):
    __tablename__ = "property_visits"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    property_id: Mapped[str] = mapped_column(
        String(80), ForeignKey("properties.property_unique_id", ondelete="CASCADE"), index=True, nullable=False
    )
    visit_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    visit_type: Mapped[str] = mapped_column(String(40), nullable=False)  # renovation-end|contract-end|scheduled-visit|ipc-update
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_by: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


class PropertyTenant(Base):
    __tablename__ = "property_tenants"
    __table_args__ = (UniqueConstraint("property_id", name="uq_property_tenants_property"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    property_id: Mapped[str] = mapped_column(
        String(80), ForeignKey("properties.property_unique_id", ondelete="CASCADE"), index=True, nullable=False
    )
    full_name: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    nif: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


class PropertyRental(Base):
    __tablename__ = "property_rentals"
    __table_args__ = (UniqueConstraint("property_id", name="uq_property_rentals_property"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    property_id: Mapped[str] = mapped_column(
        String(80), ForeignKey("properties.property_unique_id", ondelete="CASCADE"), index=True, nullable=False
    )
    rent_price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    duration: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    security_deposit: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    legal_contract_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


# -----------------------------
# Leads
# -----------------------------
class Lead(Base):
    __tablename__ = "leads"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    leads_unique_id: Mapped[str] = mapped_column(String(80), nullable=False, unique=True, index=True)

    name: Mapped[str] = mapped_column(String(160), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    zone: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    nationality: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)

    current_phase: Mapped[Optional[str]] = mapped_column(String(80), nullable=True, index=True)
    days_in_phase: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    needs_update: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    employment_status: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    employment_contract_type: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    average_income: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    number_of_occupants: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    identity_doc_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # {obligatory: {fieldKey: url}, complementary: [{type, title, url, createdAt}]}
    laboral_financial_docs: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


class LeadsProperty(Base):
    __tablename__ = "leads_properties"
    __table_args__ = (
        UniqueConstraint("leads_unique_id", "properties_unique_id", name="uq_leads_properties_lead_property"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    leads_unique_id: Mapped[str] = mapped_column(
        String(80), ForeignKey("leads.leads_unique_id", ondelete="CASCADE"), index=True, nullable=False
    )
    properties_unique_id: Mapped[str] = mapped_column(
        String(80), ForeignKey("properties.property_unique_id", ondelete="CASCADE"), index=True, nullable=False
    )
    scheduled_visit_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    current_status: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


# -----------------------------
# Access + event log
# -----------------------------
class UserRole(Base):
    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "role", "property_id", name="uq_user_roles_user_role_property"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(80), nullable=False, index=True)
    email: Mapped[Optional[str]] = mapped_column(String(200), nullable=True, index=True)
    role: Mapped[str] = mapped_column(String(40), nullable=False)  # supply_admin|supply_analyst|supply_partner
    property_id: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


class WorkflowEvent(Base):
    __tablename__ = "workflow_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    property_id: Mapped[Optional[str]] = mapped_column(String(80), nullable=True, index=True)
    actor: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    event_type: Mapped[str] = mapped_column(String(80), nullable=False, index=True)
    payload_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    request_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


class AuditEvent(Base):
    __tablename__ = "audit_events"
    __table_args__ = (Index("ix_audit_events_entity", "entity_type", "entity_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    actor: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    action: Mapped[str] = mapped_column(String(80), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(80), nullable=False)
    entity_id: Mapped[str] = mapped_column(String(80), nullable=False)

    before_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    after_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    request_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
