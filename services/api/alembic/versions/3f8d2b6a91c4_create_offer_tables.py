"""create_offer_tables

Revision ID: 3f8d2b6a91c4
Revises:
Create Date: 2026-10-17
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3f8d2b6a91c4"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

json_document = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def _dimensions() -> list[sa.Column]:
    return [
        sa.Column("length", sa.Numeric(), nullable=True),
        sa.Column("height", sa.Numeric(), nullable=True),
        sa.Column("width", sa.Numeric(), nullable=True),
        sa.Column("weight", sa.Numeric(), nullable=True),
        sa.Column("metragem", sa.Numeric(), nullable=True),
        sa.Column("metragem_type", sa.String(length=50), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "offers",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("canonical_id", sa.String(length=36), nullable=False),
        sa.Column("status", sa.String(length=100), nullable=True),
        sa.Column("company_name", sa.String(length=255), nullable=True),
        sa.Column("logo_url", sa.Text(), nullable=True),
        sa.Column("document", json_document, nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_offers_canonical_id"), "offers", ["canonical_id"], unique=True)

    op.create_table(
        "cavaletes",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("offer_id", sa.String(length=36), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(length=255), nullable=False),
        sa.Column("block", sa.String(length=255), nullable=False),
        sa.Column("material_name", sa.String(length=255), nullable=True),
        sa.Column("thickness_name", sa.String(length=255), nullable=True),
        sa.Column("classification", sa.String(length=255), nullable=True),
        sa.Column("finish", sa.String(length=255), nullable=True),
        *_dimensions(),
        sa.Column("item_count", sa.Integer(), nullable=False),
        sa.Column("primary_image", json_document, nullable=True),
        sa.Column("approved", sa.Boolean(), nullable=False),
        sa.Column("imported", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["offer_id"], ["offers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("offer_id", "code", "block", name="uq_cavaletes_offer_code_block"),
    )
    op.create_index(op.f("ix_cavaletes_offer_id"), "cavaletes", ["offer_id"], unique=False)
    op.create_index(op.f("ix_cavaletes_code"), "cavaletes", ["code"], unique=False)
    op.create_index(op.f("ix_cavaletes_material_name"), "cavaletes", ["material_name"], unique=False)
    op.create_index(op.f("ix_cavaletes_approved"), "cavaletes", ["approved"], unique=False)

    op.create_table(
        "items",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("cavalete_id", sa.String(length=36), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(length=255), nullable=False),
        sa.Column("block", sa.String(length=255), nullable=False),
        sa.Column("thickness_name", sa.String(length=255), nullable=True),
        sa.Column("classification", sa.String(length=255), nullable=True),
        sa.Column("finish", sa.String(length=255), nullable=True),
        *_dimensions(),
        sa.Column("approved", sa.Boolean(), nullable=False),
        sa.Column("imported", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["cavalete_id"], ["cavaletes.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_items_cavalete_id"), "items", ["cavalete_id"], unique=False)
    op.create_index(op.f("ix_items_code"), "items", ["code"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_items_code"), table_name="items")
    op.drop_index(op.f("ix_items_cavalete_id"), table_name="items")
    op.drop_table("items")
    op.drop_index(op.f("ix_cavaletes_approved"), table_name="cavaletes")
    op.drop_index(op.f("ix_cavaletes_material_name"), table_name="cavaletes")
    op.drop_index(op.f("ix_cavaletes_code"), table_name="cavaletes")
    op.drop_index(op.f("ix_cavaletes_offer_id"), table_name="cavaletes")
    op.drop_table("cavaletes")
    op.drop_index(op.f("ix_offers_canonical_id"), table_name="offers")
    op.drop_table("offers")
