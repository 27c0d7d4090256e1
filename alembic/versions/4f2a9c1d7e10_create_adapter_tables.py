"""create_adapter_tables

Revision ID: 4f2a9c1d7e10
Revises:
Create Date: 2026-10-17 09:12:41.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from platform_adapter.db.db_base import JSON


# revision identifiers, used by Alembic.
revision: str = '4f2a9c1d7e10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'tokens',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('shop_id', sa.String(100), nullable=False),
        sa.Column('access_token', sa.Text(), nullable=False),
        sa.Column('refresh_token', sa.Text(), nullable=True),
        sa.Column('token_type', sa.String(50), nullable=False, server_default='Bearer'),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_tokens_shop_id', 'tokens', ['shop_id'], unique=True)

    op.create_table(
        'trusted_services',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('api_key', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('allowed_actions', JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_trusted_services_api_key', 'trusted_services', ['api_key'], unique=True)

    op.create_table(
        'field_mappings',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('platform_id', sa.String(50), nullable=False, server_default='default'),
        sa.Column('entity_type', sa.String(50), nullable=False),
        sa.Column('source_field', sa.String(255), nullable=False),
        sa.Column('target_field', sa.String(255), nullable=False),
        sa.Column('transform', sa.String(50), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            'platform_id', 'entity_type', 'source_field', name='uq_field_mapping_source'
        ),
    )
    op.create_index('ix_field_mappings_platform_id', 'field_mappings', ['platform_id'])
    op.create_index('ix_field_mappings_entity_type', 'field_mappings', ['entity_type'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_field_mappings_entity_type', table_name='field_mappings')
    op.drop_index('ix_field_mappings_platform_id', table_name='field_mappings')
    op.drop_table('field_mappings')
    op.drop_index('ix_trusted_services_api_key', table_name='trusted_services')
    op.drop_table('trusted_services')
    op.drop_index('ix_tokens_shop_id', table_name='tokens')
    op.drop_table('tokens')
