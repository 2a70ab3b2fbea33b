"""create listings

Revision ID: 001_create_listings
Revises:
Create Date: 2025-01-01 00:00:00.000000
"""
from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ARRAY, UUID

from alembic import op

revision: str = "001_create_listings"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

BUCKET = "listing-images"


def upgrade() -> None:
    op.create_table(
        "listings",
        sa.Column(
            "id",
            UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("user_id", UUID(as_uuid=True), nullable=False),
        sa.Column("nomenclature", sa.String(256), nullable=False),
        sa.Column("classification", sa.String(128), nullable=True),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("narrative", sa.Text(), nullable=True),
        sa.Column("image_urls", ARRAY(sa.Text()), nullable=False),
        sa.Column(
            "provenance_certified", sa.Boolean(), nullable=False, server_default=sa.true()
        ),
        sa.Column(
            "logistics_provided", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.CheckConstraint("length(btrim(nomenclature)) > 0", name="ck_listings_nomenclature"),
        sa.CheckConstraint("price >= 0", name="ck_listings_price"),
        sa.CheckConstraint(
            "narrative IS NULL OR char_length(narrative) <= 500", name="ck_listings_narrative"
        ),
        sa.CheckConstraint(
            "cardinality(image_urls) BETWEEN 1 AND 10", name="ck_listings_image_urls"
        ),
    )
    op.create_index("ix_listings_user_id_created_at", "listings", ["user_id", "created_at"])

    # Owner scoping is enforced by the database, not the client
    op.execute("ALTER TABLE listings ENABLE ROW LEVEL SECURITY")
    op.execute(
        "CREATE POLICY listings_select_own ON listings FOR SELECT "
        "USING (auth.uid() = user_id)"
    )
    op.execute(
        "CREATE POLICY listings_insert_own ON listings FOR INSERT "
        "WITH CHECK (auth.uid() = user_id)"
    )
    op.execute(
        "CREATE POLICY listings_delete_own ON listings FOR DELETE "
        "USING (auth.uid() = user_id)"
    )

    # Public bucket; uploads only into the caller's own folder
    op.execute(
        f"INSERT INTO storage.buckets (id, name, public) VALUES ('{BUCKET}', '{BUCKET}', true) "
        "ON CONFLICT (id) DO NOTHING"
    )
    op.execute(
        "CREATE POLICY listing_images_insert_own ON storage.objects FOR INSERT "
        f"WITH CHECK (bucket_id = '{BUCKET}' AND (storage.foldername(name))[1] = auth.uid()::text)"
    )
    op.execute(
        "CREATE POLICY listing_images_delete_own ON storage.objects FOR DELETE "
        f"USING (bucket_id = '{BUCKET}' AND (storage.foldername(name))[1] = auth.uid()::text)"
    )


def downgrade() -> None:
    op.execute("DROP POLICY IF EXISTS listing_images_delete_own ON storage.objects")
    op.execute("DROP POLICY IF EXISTS listing_images_insert_own ON storage.objects")
    op.drop_index("ix_listings_user_id_created_at", table_name="listings")
    op.drop_table("listings")
