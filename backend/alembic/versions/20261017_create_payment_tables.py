"""create clients, client_payments and agency_settings

Revision ID: 20261017_payments
Revises:
Create Date: 2026-10-17 00:00:00.000000
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = '20261017_payments'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'clients',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('contract_number', sa.String(64), nullable=False),
        sa.Column('first_name', sa.String(), nullable=True),
        sa.Column('last_name', sa.String(), nullable=True),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('total_amount', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('total_paid', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('advance_payment', sa.Numeric(10, 2), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_clients_contract_number', 'clients', ['contract_number'], unique=True)
    # Lookups are case-insensitive
    op.create_index('ix_clients_contract_number_lower', 'clients', [sa.text('lower(contract_number)')])

    op.create_table(
        'client_payments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('client_id', sa.Integer(), sa.ForeignKey('clients.id', ondelete='CASCADE'), nullable=False),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('payment_method', sa.String(50), nullable=False, server_default='online'),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_client_payments_client_id', 'client_payments', ['client_id'])

    op.create_table(
        'agency_settings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('payment_mode', sa.String(20), nullable=False, server_default='production'),
        sa.Column('mp_commission_percentage', sa.Numeric(6, 3), nullable=True),
        sa.Column('mp_fixed_fee', sa.Numeric(10, 2), nullable=True),
        sa.Column('advance_payment_amount', sa.Numeric(10, 2), nullable=True),
        sa.Column('mp_public_key', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )


def downgrade() -> None:
    op.drop_table('agency_settings')
    op.drop_index('ix_client_payments_client_id', table_name='client_payments')
    op.drop_table('client_payments')
    op.drop_index('ix_clients_contract_number_lower', table_name='clients')
    op.drop_index('ix_clients_contract_number', table_name='clients')
    op.drop_table('clients')
