"""create customers, cars and rentals

Revision ID: a3c91e7f2b10
Revises:
Create Date: 2026-10-18

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = "a3c91e7f2b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


CAR_STATUSES = ("AVAILABLE", "RENTED", "MAINTENANCE", "UNAVAILABLE")
RENTAL_STATUSES = ("ACTIVE", "COMPLETED", "CANCELLED")


def upgrade() -> None:
    bind = op.get_bind()
    insp = inspect(bind)
    existing_tables = set(insp.get_table_names())

    def _has_index(table: str, name: str) -> bool:
        try:
            return any(ix.get("name") == name for ix in insp.get_indexes(table))
        except Exception:
            return False

    if "customers" not in existing_tables:
        op.create_table(
            "customers",
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("first_name", sa.Text(), nullable=False),
            sa.Column("last_name", sa.Text(), nullable=False),
            sa.Column("email", sa.Text(), nullable=False),
            sa.Column("phone", sa.Text(), nullable=True),
            sa.Column("address", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=False), nullable=False, server_default=sa.func.current_timestamp()),
            sa.Column("updated_at", sa.DateTime(timezone=False), nullable=False, server_default=sa.func.current_timestamp()),
            sa.UniqueConstraint("email", name="uq_customers_email"),
        )
        existing_tables.add("customers")

    if "cars" not in existing_tables:
        op.create_table(
            "cars",
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("brand", sa.Text(), nullable=False),
            sa.Column("model", sa.Text(), nullable=False),
            sa.Column("year", sa.Integer(), nullable=False),
            sa.Column("license_plate", sa.Text(), nullable=False),
            sa.Column("color", sa.Text(), nullable=True),
            sa.Column("mileage", sa.Integer(), nullable=False, server_default="0"),
            sa.Column(
                "status",
                sa.Enum(*CAR_STATUSES, name="car_status"),
                nullable=False,
                server_default="AVAILABLE",
            ),
            sa.Column("created_at", sa.DateTime(timezone=False), nullable=False, server_default=sa.func.current_timestamp()),
            sa.Column("updated_at", sa.DateTime(timezone=False), nullable=False, server_default=sa.func.current_timestamp()),
            sa.UniqueConstraint("license_plate", name="uq_cars_license_plate"),
            sa.CheckConstraint("mileage >= 0", name="ck_cars_mileage_non_negative"),
        )
        existing_tables.add("cars")

    if "rentals" not in existing_tables:
        op.create_table(
            "rentals",
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("customer_id", sa.Integer(), nullable=False),
            sa.Column("car_id", sa.Integer(), nullable=False),
            sa.Column("start_date", sa.DateTime(timezone=False), nullable=False, server_default=sa.func.current_timestamp()),
            sa.Column("end_date", sa.DateTime(timezone=False), nullable=True),
            sa.Column("start_mileage", sa.Integer(), nullable=False),
            sa.Column("end_mileage", sa.Integer(), nullable=True),
            sa.Column(
                "status",
                sa.Enum(*RENTAL_STATUSES, name="rental_status"),
                nullable=False,
                server_default="ACTIVE",
            ),
            sa.Column("created_at", sa.DateTime(timezone=False), nullable=False, server_default=sa.func.current_timestamp()),
            sa.Column("updated_at", sa.DateTime(timezone=False), nullable=False, server_default=sa.func.current_timestamp()),
            sa.ForeignKeyConstraint(["customer_id"], ["customers.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["car_id"], ["cars.id"], ondelete="RESTRICT"),
        )
        existing_tables.add("rentals")

    insp = inspect(op.get_bind())
    if not _has_index("customers", "uq_customers_email_lower"):
        op.create_index("uq_customers_email_lower", "customers", [sa.text("lower(email)")], unique=True)
    if not _has_index("customers", "idx_customers_last_name"):
        op.create_index("idx_customers_last_name", "customers", ["last_name"])
    if not _has_index("cars", "idx_cars_status"):
        op.create_index("idx_cars_status", "cars", ["status"])
    for idx_name, cols in (
        ("idx_rentals_customer_id_status", ["customer_id", "status"]),
        ("idx_rentals_car_id", ["car_id"]),
    ):
        if not _has_index("rentals", idx_name):
            op.create_index(idx_name, "rentals", cols)


def downgrade() -> None:
    op.drop_index("idx_rentals_car_id", table_name="rentals")
    op.drop_index("idx_rentals_customer_id_status", table_name="rentals")
    op.drop_table("rentals")

    op.drop_index("idx_cars_status", table_name="cars")
    op.drop_table("cars")

    op.drop_index("idx_customers_last_name", table_name="customers")
    op.drop_index("uq_customers_email_lower", table_name="customers")
    op.drop_table("customers")

    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        sa.Enum(name="rental_status").drop(bind, checkfirst=True)
        sa.Enum(name="car_status").drop(bind, checkfirst=True)
