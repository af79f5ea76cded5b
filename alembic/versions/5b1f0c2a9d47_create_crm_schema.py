"""create_crm_schema

Revision ID: 5b1f0c2a9d47
Revises: 
Create Date: 2026-10-19 09:12:44.518230
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5b1f0c2a9d47'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    # USERS
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=True),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("role", sa.String(length=10), nullable=False, server_default="user"),
        sa.Column("reset_token_hash", sa.String(), nullable=True),
        sa.Column("reset_token_expires_at", sa.DateTime(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.CheckConstraint(
            "role IN ('owner', 'admin', 'user', 'blocked')",
            name="ck_users_role_valid",
        ),
    )
    op.create_index("ix_users_id", "users", ["id"], unique=False)
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # CUSTOMERS
    op.create_table(
        "customer",
        sa.Column("custno", sa.String(length=15), primary_key=True),
        sa.Column("custname", sa.String(length=100), nullable=False),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("payterm", sa.String(length=10), nullable=True),
        sa.CheckConstraint(
            "payterm IS NULL OR payterm IN ('30D', '45D', 'COD')",
            name="ck_customer_payterm_valid",
        ),
    )
    op.create_index("ix_customer_custno", "customer", ["custno"], unique=False)
    op.create_index("ix_customer_custname", "customer", ["custname"], unique=False)

    # EMPLOYEES
    op.create_table(
        "employee",
        sa.Column("empno", sa.String(length=15), primary_key=True),
        sa.Column("firstname", sa.String(length=50), nullable=True),
        sa.Column("lastname", sa.String(length=50), nullable=True),
    )
    op.create_index("ix_employee_empno", "employee", ["empno"], unique=False)

    # PRODUCTS
    op.create_table(
        "product",
        sa.Column("prodcode", sa.String(length=15), primary_key=True),
        sa.Column("description", sa.String(length=255), nullable=False),
        sa.Column("unit", sa.String(length=20), nullable=True),
    )
    op.create_index("ix_product_prodcode", "product", ["prodcode"], unique=False)

    # PRICE HISTORY
    op.create_table(
        "pricehist",
        sa.Column(
            "prodcode",
            sa.String(length=15),
            sa.ForeignKey("product.prodcode", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("effdate", sa.Date(), primary_key=True),
        sa.Column("unitprice", sa.Numeric(10, 2), nullable=False),
        sa.CheckConstraint("unitprice >= 0", name="ck_pricehist_unitprice_non_negative"),
    )
    op.create_index(
        "ix_pricehist_prodcode_effdate",
        "pricehist",
        ["prodcode", "effdate"],
        unique=False,
    )

    # SALES
    op.create_table(
        "sales",
        sa.Column("transno", sa.String(length=15), primary_key=True),
        sa.Column("salesdate", sa.Date(), nullable=False),
        sa.Column("custno", sa.String(length=15), sa.ForeignKey("customer.custno"), nullable=False),
        sa.Column("empno", sa.String(length=15), sa.ForeignKey("employee.empno"), nullable=True),
    )
    op.create_index("ix_sales_transno", "sales", ["transno"], unique=False)
    op.create_index("ix_sales_salesdate", "sales", ["salesdate"], unique=False)
    op.create_index("ix_sales_custno", "sales", ["custno"], unique=False)
    op.create_index(
        "ix_sales_custno_salesdate",
        "sales",
        ["custno", "salesdate"],
        unique=False,
    )

    # SALE DETAILS
    op.create_table(
        "salesdetail",
        sa.Column(
            "transno",
            sa.String(length=15),
            sa.ForeignKey("sales.transno", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "prodcode",
            sa.String(length=15),
            sa.ForeignKey("product.prodcode"),
            primary_key=True,
        ),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.CheckConstraint("quantity >= 0", name="ck_salesdetail_quantity_non_negative"),
    )
    op.create_index("ix_salesdetail_prodcode", "salesdetail", ["prodcode"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_index("ix_salesdetail_prodcode", table_name="salesdetail")
    op.drop_table("salesdetail")
    op.drop_index("ix_sales_custno_salesdate", table_name="sales")
    op.drop_index("ix_sales_custno", table_name="sales")
    op.drop_index("ix_sales_salesdate", table_name="sales")
    op.drop_index("ix_sales_transno", table_name="sales")
    op.drop_table("sales")
    op.drop_index("ix_pricehist_prodcode_effdate", table_name="pricehist")
    op.drop_table("pricehist")
    op.drop_index("ix_product_prodcode", table_name="product")
    op.drop_table("product")
    op.drop_index("ix_employee_empno", table_name="employee")
    op.drop_table("employee")
    op.drop_index("ix_customer_custname", table_name="customer")
    op.drop_index("ix_customer_custno", table_name="customer")
    op.drop_table("customer")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_id", table_name="users")
    op.drop_table("users")
