"""Boarding records

Revision ID: 0002
Revises: 0001
Create Date: 2025-10-19 10:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '0002'
down_revision: str | None = '0001'
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade database schema."""
    op.create_table('boarding_records',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('sale_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('operator_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('vessel_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('route_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('travel_date', sa.Date(), nullable=False),
        sa.Column('departure_time', sa.String(length=5), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('recorded_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['sale_id'], ['sales.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['operator_id'], ['operators.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['vessel_id'], ['vessels.id']),
        sa.ForeignKeyConstraint(['route_id'], ['routes.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('sale_id')
    )
    op.create_index(op.f('ix_boarding_records_status'), 'boarding_records', ['status'], unique=False)
    op.create_index(
        'ix_boarding_records_departure',
        'boarding_records',
        ['vessel_id', 'travel_date', 'departure_time'],
        unique=False
    )


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_index('ix_boarding_records_departure', table_name='boarding_records')
    op.drop_index(op.f('ix_boarding_records_status'), table_name='boarding_records')
    op.drop_table('boarding_records')
