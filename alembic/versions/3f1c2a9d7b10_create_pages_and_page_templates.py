"""Create pages and page_templates tables

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


page_template_category = sa.Enum('cv', 'landing', 'links', 'other', name='page_template_category')


def upgrade() -> None:
    """Create page_templates and pages."""
    op.create_table(
        'page_templates',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.Column('slug', sa.String(length=50), nullable=False),
        sa.Column('thumbnail_url', sa.String(length=500), nullable=True),
        sa.Column('category', page_template_category, nullable=False, server_default='other'),
        sa.Column('content_json', JSONB(), nullable=False, server_default=sa.text("'{\"blocks\": []}'::jsonb")),
        sa.Column('default_title', sa.String(length=255), nullable=True),
        sa.Column('is_premium', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_page_templates_slug', 'page_templates', ['slug'], unique=True)

    op.create_table(
        'pages',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('owner_id', sa.String(length=255), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=100), nullable=False),
        sa.Column('content_json', JSONB(), nullable=False, server_default=sa.text("'{\"blocks\": []}'::jsonb")),
        sa.Column('template_id', UUID(as_uuid=True), nullable=True),
        sa.Column('is_published', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('remove_branding', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['template_id'], ['page_templates.id'], ondelete='SET NULL'),
    )
    op.create_index('ix_pages_slug', 'pages', ['slug'], unique=True)
    op.create_index('ix_pages_owner_id', 'pages', ['owner_id'])


def downgrade() -> None:
    """Drop pages and page_templates."""
    op.drop_index('ix_pages_owner_id', table_name='pages')
    op.drop_index('ix_pages_slug', table_name='pages')
    op.drop_table('pages')
    op.drop_index('ix_page_templates_slug', table_name='page_templates')
    op.drop_table('page_templates')
    page_template_category.drop(op.get_bind(), checkfirst=True)
