"""Add products.tags_text for per-tag search

Revision ID: 8c2e4b7a9d31
Revises: 3f9a1c2d7b10
Create Date: 2026-10-18 15:20:07.512843

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# Revision identifiers used by Alembic
revision: str = '8c2e4b7a9d31'
down_revision: Union[str, Sequence[str], None] = '3f9a1c2d7b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


products = sa.table(
    'products',
    sa.column('id', sa.Integer()),
    sa.column('tags', sa.JSON()),
    sa.column('tags_text', sa.String()),
)


def upgrade() -> None:
    """Upgrade schema."""
    with op.batch_alter_table('products') as batch_op:
        batch_op.add_column(sa.Column('tags_text', sa.String(), nullable=False, server_default=''))

    # Backfill from the JSON tags of existing listings
    conn = op.get_bind()
    for row in conn.execute(sa.select(products.c.id, products.c.tags)).fetchall():
        cleaned = [" ".join(str(tag).split()) for tag in (row.tags or [])]
        text = "\n" + "\n".join(cleaned) + "\n" if cleaned else ""
        conn.execute(products.update().where(products.c.id == row.id).values(tags_text=text))


def downgrade() -> None:
    """Downgrade schema."""
    with op.batch_alter_table('products') as batch_op:
        batch_op.drop_column('tags_text')
