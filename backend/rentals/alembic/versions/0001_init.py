"""init schema

Revision ID: 0001_init
Revises:
Create Date: 2026-10-17
"""
from alembic import op
import sqlalchemy as sa


revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None

ROOMS = (
    "common_areas",
    "entry_hallways",
    "bedrooms",
    "living_room",
    "bathrooms",
    "kitchen",
    "exterior",
    "garage",
    "storage",
    "terrace",
)

CUSTOM_DOC_COLUMNS = (
    "custom_legal_documents",
    "custom_insurance_documents",
    "custom_supplies_documents",
    "custom_technical_documents",
    "client_custom_identity_documents",
    "client_custom_financial_documents",
    "client_custom_other_documents",
    "property_custom_other_documents",
)


def _property_fk():
    return sa.ForeignKey("properties.property_unique_id", ondelete="CASCADE")


def upgrade():
    op.create_table(
        "properties",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("property_unique_id", sa.String(length=80), nullable=False, unique=True),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("city", sa.String(length=120), nullable=True),
        sa.Column("area_cluster", sa.String(length=120), nullable=True),
        sa.Column("property_asset_type", sa.String(length=60), nullable=True),
        sa.Column("bedrooms", sa.Integer(), nullable=True),
        sa.Column("bathrooms", sa.Integer(), nullable=True),
        sa.Column("square_meters", sa.Float(), nullable=True),
        sa.Column("rental_type", sa.String(length=60), nullable=True),
        sa.Column("announcement_price", sa.Float(), nullable=True),
        sa.Column("target_rent_price", sa.Float(), nullable=True),
        sa.Column("monthly_rent", sa.Float(), nullable=True),
        sa.Column("pics_urls", sa.JSON(), nullable=True),
        sa.Column("current_stage", sa.String(length=80), nullable=True),
        sa.Column("days_in_stage", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(length=40), nullable=True),
        sa.Column("analyst_status", sa.String(length=40), nullable=True),
        sa.Column("rentals_analyst", sa.String(length=160), nullable=True),
        sa.Column("needs_update", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("admin_name", sa.String(length=160), nullable=True),
        sa.Column("keys_location", sa.String(length=255), nullable=True),
        sa.Column("doc_energy_cert", sa.Text(), nullable=True),
        sa.Column("doc_renovation_files", sa.JSON(), nullable=True),
        sa.Column("doc_purchase_contract", sa.Text(), nullable=True),
        sa.Column("doc_land_registry_note", sa.Text(), nullable=True),
        sa.Column("client_full_name", sa.String(length=160), nullable=True),
        sa.Column("client_email", sa.String(length=200), nullable=True),
        sa.Column("client_phone", sa.String(length=40), nullable=True),
        sa.Column("client_iban", sa.String(length=64), nullable=True),
        sa.Column("client_identity_doc_url", sa.Text(), nullable=True),
        sa.Column("client_bank_certificate_url", sa.Text(), nullable=True),
        sa.Column("doc_contract_electricity", sa.Text(), nullable=True),
        sa.Column("doc_contract_water", sa.Text(), nullable=True),
        sa.Column("doc_contract_gas", sa.Text(), nullable=True),
        sa.Column("doc_bill_electricity", sa.Text(), nullable=True),
        sa.Column("doc_bill_water", sa.Text(), nullable=True),
        sa.Column("doc_bill_gas", sa.Text(), nullable=True),
        sa.Column("home_insurance_type", sa.String(length=80), nullable=True),
        sa.Column("home_insurance_policy_url", sa.Text(), nullable=True),
        sa.Column("property_management_plan", sa.String(length=80), nullable=True),
        sa.Column("property_management_plan_contract_url", sa.Text(), nullable=True),
        sa.Column("property_manager", sa.String(length=160), nullable=True),
        *[sa.Column(name, sa.JSON(), nullable=True) for name in CUSTOM_DOC_COLUMNS],
        *[sa.Column(f"marketing_photos_{room}", sa.JSON(), nullable=True) for room in ROOMS],
        *[sa.Column(f"incident_photos_{room}", sa.JSON(), nullable=True) for room in ROOMS],
        sa.Column("tenant_full_name", sa.String(length=160), nullable=True),
        sa.Column("tenant_email", sa.String(length=200), nullable=True),
        sa.Column("tenant_phone", sa.String(length=40), nullable=True),
        sa.Column("tenant_nif", sa.String(length=40), nullable=True),
        sa.Column("prophero_section_reviews", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_properties_property_unique_id", "properties", ["property_unique_id"], unique=False)
    op.create_index("ix_properties_city", "properties", ["city"], unique=False)
    op.create_index("ix_properties_current_stage", "properties", ["current_stage"], unique=False)

    op.create_table(
        "property_tasks",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("property_id", sa.String(length=80), _property_fk(), nullable=False),
        sa.Column("phase", sa.String(length=80), nullable=False),
        sa.Column("task_type", sa.String(length=80), nullable=False),
        sa.Column("is_completed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("task_data", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("property_id", "phase", "task_type", name="uq_property_tasks_property_phase_type"),
    )
    op.create_index("ix_property_tasks_property_id", "property_tasks", ["property_id"], unique=False)

    op.create_table(
        "property_visits",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("property_id", sa.String(length=80), _property_fk(), nullable=False),
        sa.Column("visit_date", sa.DateTime(), nullable=False),
        sa.Column("visit_type", sa.String(length=40), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(length=200), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_property_visits_property_id", "property_visits", ["property_id"], unique=False)

    op.create_table(
        "property_tenants",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("property_id", sa.String(length=80), _property_fk(), nullable=False),
        sa.Column("full_name", sa.String(length=160), nullable=True),
        sa.Column("email", sa.String(length=200), nullable=True),
        sa.Column("phone", sa.String(length=40), nullable=True),
        sa.Column("nif", sa.String(length=40), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("property_id", name="uq_property_tenants_property"),
    )
    op.create_index("ix_property_tenants_property_id", "property_tenants", ["property_id"], unique=False)

    op.create_table(
        "property_rentals",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("property_id", sa.String(length=80), _property_fk(), nullable=False),
        sa.Column("rent_price", sa.Float(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("duration", sa.String(length=40), nullable=True),
        sa.Column("security_deposit", sa.Float(), nullable=True),
        sa.Column("legal_contract_url", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("property_id", name="uq_property_rentals_property"),
    )
    op.create_index("ix_property_rentals_property_id", "property_rentals", ["property_id"], unique=False)

    op.create_table(
        "leads",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("leads_unique_id", sa.String(length=80), nullable=False, unique=True),
        sa.Column("name", sa.String(length=160), nullable=False),
        sa.Column("phone", sa.String(length=40), nullable=True),
        sa.Column("email", sa.String(length=200), nullable=True),
        sa.Column("zone", sa.String(length=120), nullable=True),
        sa.Column("nationality", sa.String(length=80), nullable=True),
        sa.Column("current_phase", sa.String(length=80), nullable=True),
        sa.Column("days_in_phase", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("needs_update", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("employment_status", sa.String(length=80), nullable=True),
        sa.Column("employment_contract_type", sa.String(length=80), nullable=True),
        sa.Column("average_income", sa.Float(), nullable=True),
        sa.Column("number_of_occupants", sa.Integer(), nullable=True),
        sa.Column("identity_doc_url", sa.Text(), nullable=True),
        sa.Column("laboral_financial_docs", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_leads_leads_unique_id", "leads", ["leads_unique_id"], unique=False)
    op.create_index("ix_leads_current_phase", "leads", ["current_phase"], unique=False)

    op.create_table(
        "leads_properties",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "leads_unique_id",
            sa.String(length=80),
            sa.ForeignKey("leads.leads_unique_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("properties_unique_id", sa.String(length=80), _property_fk(), nullable=False),
        sa.Column("scheduled_visit_date", sa.DateTime(), nullable=True),
        sa.Column("current_status", sa.String(length=80), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("leads_unique_id", "properties_unique_id", name="uq_leads_properties_lead_property"),
    )
    op.create_index("ix_leads_properties_leads_unique_id", "leads_properties", ["leads_unique_id"], unique=False)
    op.create_index(
        "ix_leads_properties_properties_unique_id", "leads_properties", ["properties_unique_id"], unique=False
    )

    op.create_table(
        "user_roles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=80), nullable=False),
        sa.Column("email", sa.String(length=200), nullable=True),
        sa.Column("role", sa.String(length=40), nullable=False),
        sa.Column("property_id", sa.String(length=80), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("user_id", "role", "property_id", name="uq_user_roles_user_role_property"),
    )
    op.create_index("ix_user_roles_user_id", "user_roles", ["user_id"], unique=False)
    op.create_index("ix_user_roles_email", "user_roles", ["email"], unique=False)

    op.create_table(
        "workflow_events",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("property_id", sa.String(length=80), nullable=True),
        sa.Column("actor", sa.String(length=200), nullable=True),
        sa.Column("event_type", sa.String(length=80), nullable=False),
        sa.Column("payload_json", sa.Text(), nullable=True),
        sa.Column("request_id", sa.String(length=128), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_workflow_events_property_id", "workflow_events", ["property_id"], unique=False)
    op.create_index("ix_workflow_events_event_type", "workflow_events", ["event_type"], unique=False)

    op.create_table(
        "audit_events",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("actor", sa.String(length=200), nullable=True),
        sa.Column("action", sa.String(length=80), nullable=False),
        sa.Column("entity_type", sa.String(length=80), nullable=False),
        sa.Column("entity_id", sa.String(length=80), nullable=False),
        sa.Column("before_json", sa.Text(), nullable=True),
        sa.Column("after_json", sa.Text(), nullable=True),
        sa.Column("request_id", sa.String(length=128), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_audit_events_entity", "audit_events", ["entity_type", "entity_id"], unique=False)


def downgrade():
    op.drop_table("audit_events")
    op.drop_table("workflow_events")
    op.drop_table("user_roles")
    op.drop_table("leads_properties")
    op.drop_table("leads")
    op.drop_table("property_rentals")
    op.drop_table("property_tenants")
    op.drop_table("property_visits")
    op.drop_table("property_tasks")
    op.drop_table("properties")
