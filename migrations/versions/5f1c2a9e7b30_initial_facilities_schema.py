"""initial_facilities_schema

Creates the facilities-management schema:
  - hotels, users, locations                        property & people
  - assets                                          asset registry
  - ppm_schedules, ppm_tasks                        preventive maintenance
  - work_orders (+ comments, status history, SLA)   work orders
  - assignment_rules                                auto-assignment
  - certificates, safety_incidents, training_records

Tables are created conditionally so databases that already received them via
db.create_all() in development can be stamped forward.

Revision ID: 5f1c2a9e7b30
Revises:
Create Date: 2026-10-19 09:12:44.518203
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect as sa_inspect


# revision identifiers, used by Alembic.
revision = '5f1c2a9e7b30'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade():
    bind = op.get_bind()
    existing = set(sa_inspect(bind).get_table_names())

    # ── Property & people ─────────────────────────────────────────────────
    if "hotels" not in existing:
        op.create_table(
            "hotels",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("name", sa.String(length=200), nullable=False),
            sa.Column("address", sa.String(length=500), nullable=True),
            sa.Column("phone", sa.String(length=50), nullable=True),
            sa.Column("email", sa.String(length=255), nullable=True),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            *_timestamps(),
            sa.PrimaryKeyConstraint("id"),
        )

    if "users" not in existing:
        op.create_table(
            "users",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("hotel_id", sa.Integer(), nullable=True),
            sa.Column("name", sa.String(length=200), nullable=False),
            sa.Column("email", sa.String(length=255), nullable=False),
            sa.Column(
                "role", sa.String(length=20), nullable=False, server_default="STAFF",
                comment="STAFF | TECHNICIAN | MANAGER | ADMIN",
            ),
            sa.Column(
                "employee_id", sa.String(length=50), nullable=True,
                comment="External staff number used by compliance records",
            ),
            sa.Column("phone", sa.String(length=50), nullable=True),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            *_timestamps(),
            sa.ForeignKeyConstraint(["hotel_id"], ["hotels.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("email"),
            sa.UniqueConstraint("employee_id"),
        )
        op.create_index("ix_users_hotel_id", "users", ["hotel_id"])

    if "locations" not in existing:
        op.create_table(
            "locations",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("hotel_id", sa.Integer(), nullable=False),
            sa.Column("name", sa.String(length=200), nullable=False),
            sa.Column(
                "type", sa.String(length=50), nullable=False, server_default="ROOM",
                comment="BUILDING | FLOOR | ROOM | AREA | PLANT",
            ),
            sa.Column("parent_id", sa.Integer(), nullable=True),
            sa.Column("qr_code", sa.String(length=100), nullable=True),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            *_timestamps(),
            sa.ForeignKeyConstraint(["hotel_id"], ["hotels.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["parent_id"], ["locations.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("qr_code"),
        )
        op.create_index("ix_locations_hotel_id", "locations", ["hotel_id"])
        op.create_index("ix_locations_parent_id", "locations", ["parent_id"])

    # ── Assets ────────────────────────────────────────────────────────────
    if "assets" not in existing:
        op.create_table(
            "assets",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("hotel_id", sa.Integer(), nullable=True),
            sa.Column("location_id", sa.Integer(), nullable=False),
            sa.Column("name", sa.String(length=200), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("category", sa.String(length=100), nullable=False),
            sa.Column("qr_code", sa.String(length=64), nullable=False),
            sa.Column("status", sa.String(length=30), nullable=False, server_default="OPERATIONAL"),
            sa.Column("condition", sa.String(length=20), nullable=False, server_default="EXCELLENT"),
            sa.Column("purchase_date", sa.DateTime(timezone=True), nullable=False),
            sa.Column("warranty_expiry", sa.DateTime(timezone=True), nullable=True),
            sa.Column("expected_lifespan", sa.Integer(), nullable=True, comment="Months"),
            sa.Column("manufacturer", sa.String(length=200), nullable=True),
            sa.Column("model", sa.String(length=200), nullable=True),
            sa.Column("serial_number", sa.String(length=200), nullable=True),
            sa.Column("cost", sa.Numeric(precision=12, scale=2), nullable=True),
            *_timestamps(),
            sa.ForeignKeyConstraint(["hotel_id"], ["hotels.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["location_id"], ["locations.id"], ondelete="RESTRICT"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("qr_code"),
        )
        op.create_index("ix_assets_hotel_id", "assets", ["hotel_id"])
        op.create_index("ix_assets_location_id", "assets", ["location_id"])

    # ── Preventive maintenance ────────────────────────────────────────────
    if "ppm_schedules" not in existing:
        op.create_table(
            "ppm_schedules",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("hotel_id", sa.Integer(), nullable=False),
            sa.Column("name", sa.String(length=200), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column(
                "frequency", sa.String(length=20), nullable=False,
                comment="DAILY | WEEKLY | MONTHLY | QUARTERLY | YEARLY",
            ),
            sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
            sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            *_timestamps(),
            sa.ForeignKeyConstraint(["hotel_id"], ["hotels.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_ppm_schedules_hotel_id", "ppm_schedules", ["hotel_id"])
        op.create_index("ix_ppm_schedules_start_date", "ppm_schedules", ["start_date"])

    if "ppm_tasks" not in existing:
        op.create_table(
            "ppm_tasks",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("schedule_id", sa.Integer(), nullable=False),
            sa.Column("asset_id", sa.Integer(), nullable=True),
            sa.Column("assigned_to_id", sa.Integer(), nullable=True),
            sa.Column("title", sa.String(length=300), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("due_date", sa.DateTime(timezone=True), nullable=False),
            sa.Column(
                "status", sa.String(length=20), nullable=False, server_default="SCHEDULED",
                comment="SCHEDULED | COMPLETED | OVERDUE | CANCELLED",
            ),
            *_timestamps(),
            sa.ForeignKeyConstraint(["schedule_id"], ["ppm_schedules.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["asset_id"], ["assets.id"], ondelete="SET NULL"),
            sa.ForeignKeyConstraint(["assigned_to_id"], ["users.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_ppm_tasks_schedule_id", "ppm_tasks", ["schedule_id"])
        op.create_index("ix_ppm_tasks_due_date", "ppm_tasks", ["due_date"])

    # ── Work orders ───────────────────────────────────────────────────────
    if "work_orders" not in existing:
        op.create_table(
            "work_orders",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("hotel_id", sa.Integer(), nullable=False),
            sa.Column("title", sa.String(length=300), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="LOGGED"),
            sa.Column("priority", sa.String(length=20), nullable=False, server_default="MEDIUM"),
            sa.Column("category", sa.String(length=100), nullable=False),
            sa.Column("location_id", sa.Integer(), nullable=True),
            sa.Column("asset_id", sa.Integer(), nullable=True),
            sa.Column("created_by_id", sa.Integer(), nullable=False),
            sa.Column("assigned_to_id", sa.Integer(), nullable=True),
            sa.Column("technician_notes", sa.Text(), nullable=True),
            sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            *_timestamps(),
            sa.ForeignKeyConstraint(["hotel_id"], ["hotels.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["location_id"], ["locations.id"], ondelete="SET NULL"),
            sa.ForeignKeyConstraint(["asset_id"], ["assets.id"], ondelete="SET NULL"),
            sa.ForeignKeyConstraint(["created_by_id"], ["users.id"], ondelete="RESTRICT"),
            sa.ForeignKeyConstraint(["assigned_to_id"], ["users.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
        )
        for column in ("hotel_id", "status", "priority", "location_id", "asset_id",
                       "created_by_id", "assigned_to_id", "created_at"):
            op.create_index(f"ix_work_orders_{column}", "work_orders", [column])

    if "work_order_comments" not in existing:
        op.create_table(
            "work_order_comments",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("work_order_id", sa.Integer(), nullable=False),
            sa.Column("content", sa.Text(), nullable=False),
            sa.Column("author", sa.String(length=200), nullable=False),
            sa.Column("type", sa.String(length=20), nullable=False, server_default="comment"),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.ForeignKeyConstraint(["work_order_id"], ["work_orders.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_work_order_comments_work_order_id", "work_order_comments", ["work_order_id"])

    if "work_order_status_history" not in existing:
        op.create_table(
            "work_order_status_history",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("work_order_id", sa.Integer(), nullable=False),
            sa.Column("status", sa.String(length=20), nullable=False),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("user_id", sa.Integer(), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.ForeignKeyConstraint(["work_order_id"], ["work_orders.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(
            "ix_work_order_status_history_work_order_id", "work_order_status_history", ["work_order_id"],
        )

    if "work_order_slas" not in existing:
        op.create_table(
            "work_order_slas",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("work_order_id", sa.Integer(), nullable=False),
            sa.Column("category", sa.String(length=100), nullable=False),
            sa.Column("priority", sa.String(length=20), nullable=False),
            sa.Column("expected_response_time", sa.Integer(), nullable=False, comment="Minutes"),
            sa.Column("expected_resolution_time", sa.Integer(), nullable=False, comment="Minutes"),
            sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("is_overdue", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.ForeignKeyConstraint(["work_order_id"], ["work_orders.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("work_order_id"),
        )

    if "assignment_rules" not in existing:
        op.create_table(
            "assignment_rules",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("hotel_id", sa.Integer(), nullable=False),
            sa.Column("name", sa.String(length=200), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("category", sa.String(length=100), nullable=False),
            sa.Column("priority", sa.String(length=20), nullable=True),
            sa.Column("location_id", sa.Integer(), nullable=True),
            sa.Column("assignee_id", sa.Integer(), nullable=False),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            *_timestamps(),
            sa.ForeignKeyConstraint(["hotel_id"], ["hotels.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["location_id"], ["locations.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["assignee_id"], ["users.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_assignment_rules_hotel_id", "assignment_rules", ["hotel_id"])

    # ── Safety & compliance ───────────────────────────────────────────────
    if "certificates" not in existing:
        op.create_table(
            "certificates",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("employee_id", sa.Integer(), nullable=False),
            sa.Column("title", sa.String(length=300), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("category", sa.String(length=100), nullable=False),
            sa.Column("issued_by", sa.String(length=200), nullable=False),
            sa.Column("issued_date", sa.DateTime(timezone=True), nullable=False),
            sa.Column("expiry_date", sa.DateTime(timezone=True), nullable=False),
            sa.Column("document_url", sa.String(length=1000), nullable=True),
            sa.Column("reminder_sent", sa.Boolean(), nullable=False, server_default=sa.false()),
            *_timestamps(),
            sa.ForeignKeyConstraint(["employee_id"], ["users.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_certificates_employee_id", "certificates", ["employee_id"])
        op.create_index("ix_certificates_expiry_date", "certificates", ["expiry_date"])

    if "safety_incidents" not in existing:
        op.create_table(
            "safety_incidents",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("title", sa.String(length=300), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("severity", sa.String(length=20), nullable=False, server_default="MEDIUM"),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="OPEN"),
            sa.Column("location_id", sa.Integer(), nullable=False),
            sa.Column("reported_by_id", sa.Integer(), nullable=False),
            sa.Column("reported_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("actions", sa.JSON(), nullable=True, comment="Follow-up actions taken"),
            *_timestamps(),
            sa.ForeignKeyConstraint(["location_id"], ["locations.id"], ondelete="RESTRICT"),
            sa.ForeignKeyConstraint(["reported_by_id"], ["users.id"], ondelete="RESTRICT"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_safety_incidents_reported_at", "safety_incidents", ["reported_at"])

    if "training_records" not in existing:
        op.create_table(
            "training_records",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("employee_id", sa.Integer(), nullable=False),
            sa.Column("certificate_id", sa.Integer(), nullable=True),
            sa.Column("title", sa.String(length=300), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("category", sa.String(length=100), nullable=False),
            sa.Column("completion_date", sa.DateTime(timezone=True), nullable=True),
            sa.Column("score", sa.Float(), nullable=True),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="SCHEDULED"),
            *_timestamps(),
            sa.ForeignKeyConstraint(["employee_id"], ["users.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["certificate_id"], ["certificates.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_training_records_employee_id", "training_records", ["employee_id"])


def downgrade():
    for table in (
        "training_records", "safety_incidents", "certificates",
        "assignment_rules", "work_order_slas", "work_order_status_history",
        "work_order_comments", "work_orders", "ppm_tasks", "ppm_schedules",
        "assets", "locations", "users", "hotels",
    ):
        op.drop_table(table)
