"""Initial ticketing schema

Revision ID: 0001
Revises:
Create Date: 2025-10-19 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade database schema."""
    # Create routes table
    op.create_table('routes',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('name', sa.String(length=160), nullable=False),
        sa.Column('origin_port', sa.String(length=120), nullable=False),
        sa.Column('destination_port', sa.String(length=120), nullable=False),
        sa.Column('price_amount', sa.Integer(), nullable=False),
        sa.Column('price_currency', sa.String(length=3), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('price_amount >= 0', name='ck_route_price_amount_non_negative'),
        sa.CheckConstraint('length(price_currency) = 3', name='ck_route_price_currency_length'),
        sa.CheckConstraint('origin_port != destination_port', name='ck_route_ports_differ'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_routes_name'), 'routes', ['name'], unique=True)
    op.create_index(op.f('ix_routes_active'), 'routes', ['active'], unique=False)

    # Create vessels table
    op.create_table('vessels',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('vessel_type', sa.String(length=60), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('capacity > 0', name='ck_vessel_capacity_positive'),
        sa.CheckConstraint('length(name) > 0', name='ck_vessel_name_not_empty'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_vessels_name'), 'vessels', ['name'], unique=True)
    op.create_index(op.f('ix_vessels_status'), 'vessels', ['status'], unique=False)

    # Create vessel_assignments table
    op.create_table('vessel_assignments',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('route_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('vessel_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('departure_times', sa.JSON(), nullable=False),
        sa.Column('operating_days', sa.JSON(), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['route_id'], ['routes.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['vessel_id'], ['vessels.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('route_id', 'vessel_id', name='uq_vessel_assignment_route_vessel')
    )
    op.create_index(op.f('ix_vessel_assignments_route_id'), 'vessel_assignments', ['route_id'], unique=False)
    op.create_index(op.f('ix_vessel_assignments_vessel_id'), 'vessel_assignments', ['vessel_id'], unique=False)
    op.create_index(op.f('ix_vessel_assignments_active'), 'vessel_assignments', ['active'], unique=False)

    # Create clients table
    op.create_table('clients',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('dni', sa.String(length=20), nullable=False),
        sa.Column('first_name', sa.String(length=120), nullable=False),
        sa.Column('last_name', sa.String(length=120), nullable=False),
        sa.Column('phone', sa.String(length=30), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('nationality', sa.String(length=60), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('length(dni) > 0', name='ck_client_dni_not_empty'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_clients_dni'), 'clients', ['dni'], unique=True)

    # Create sales table
    op.create_table('sales',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('sale_number', sa.String(length=32), nullable=False),
        sa.Column('client_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('route_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('vessel_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('seller_ref', sa.String(length=128), nullable=False),
        sa.Column('embarkation_port', sa.String(length=120), nullable=False),
        sa.Column('origin_port', sa.String(length=120), nullable=False),
        sa.Column('destination_port', sa.String(length=120), nullable=False),
        sa.Column('travel_date', sa.Date(), nullable=False),
        sa.Column('departure_time', sa.String(length=5), nullable=False),
        sa.Column('boarding_time', sa.String(length=5), nullable=False),
        sa.Column('passenger_count', sa.Integer(), nullable=False),
        sa.Column('unit_price_amount', sa.Integer(), nullable=False),
        sa.Column('total_amount', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('payment_type', sa.String(length=10), nullable=False),
        sa.Column('payment_methods', sa.JSON(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('passenger_count > 0', name='ck_sale_passenger_count_positive'),
        sa.CheckConstraint('unit_price_amount >= 0', name='ck_sale_unit_price_non_negative'),
        sa.CheckConstraint('total_amount = unit_price_amount * passenger_count', name='ck_sale_total_matches'),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.ForeignKeyConstraint(['route_id'], ['routes.id']),
        sa.ForeignKeyConstraint(['vessel_id'], ['vessels.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_sales_sale_number'), 'sales', ['sale_number'], unique=True)
    op.create_index(op.f('ix_sales_client_id'), 'sales', ['client_id'], unique=False)
    op.create_index(op.f('ix_sales_status'), 'sales', ['status'], unique=False)
    op.create_index(
        'ix_sales_departure_instance',
        'sales',
        ['route_id', 'vessel_id', 'travel_date', 'departure_time'],
        unique=False
    )

    # Create sale_annulments table
    op.create_table('sale_annulments',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('sale_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('kind', sa.String(length=10), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('refund_amount', sa.Integer(), nullable=True),
        sa.Column('seats_released', sa.Integer(), nullable=False),
        sa.Column('actor', sa.String(length=128), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('seats_released > 0', name='ck_annulment_seats_released_positive'),
        sa.CheckConstraint('refund_amount IS NULL OR refund_amount > 0', name='ck_annulment_refund_amount_positive'),
        sa.ForeignKeyConstraint(['sale_id'], ['sales.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('sale_id')
    )

    # Create operators table
    op.create_table('operators',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('full_name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('assigned_vessel_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('assigned_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['assigned_vessel_id'], ['vessels.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_operators_email'), 'operators', ['email'], unique=True)
    op.create_index(op.f('ix_operators_status'), 'operators', ['status'], unique=False)
    op.create_index(op.f('ix_operators_assigned_vessel_id'), 'operators', ['assigned_vessel_id'], unique=False)


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table('operators')
    op.drop_table('sale_annulments')
    op.drop_table('sales')
    op.drop_table('clients')
    op.drop_table('vessel_assignments')
    op.drop_table('vessels')
    op.drop_table('routes')
