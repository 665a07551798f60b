"""Initial migration

Revision ID: 001
Revises:
Create Date: 2024-01-01 00:00:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Los enums se guardan como VARCHAR para que el esquema funcione igual en SQLite
    op.create_table(
        'multisend_transactions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('sender_address', sa.String(length=255), nullable=False),
        sa.Column('recipients', sa.JSON(), nullable=False),
        sa.Column('total_amount', sa.String(length=78), nullable=False),
        sa.Column('token_type', sa.String(length=6), nullable=False),
        sa.Column('token_address', sa.String(length=42), nullable=True),
        sa.Column('token_symbol', sa.String(length=32), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('transaction_hashes', sa.JSON(), nullable=False),
        sa.Column('failed_addresses', sa.JSON(), nullable=False),
        sa.Column('gas_used', sa.String(length=78), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        op.f('ix_multisend_transactions_sender_address'),
        'multisend_transactions',
        ['sender_address'],
        unique=False,
    )

    op.create_table(
        'deployments',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('contract_type', sa.String(length=7), nullable=False),
        sa.Column('contract_name', sa.String(length=255), nullable=False),
        sa.Column('contract_symbol', sa.String(length=32), nullable=False),
        sa.Column('total_supply', sa.String(length=78), nullable=True),
        sa.Column('base_uri', sa.String(length=512), nullable=True),
        sa.Column('token_image', sa.String(length=512), nullable=True),
        sa.Column('ipfs_hash', sa.String(length=128), nullable=True),
        sa.Column('contract_address', sa.String(length=42), nullable=True),
        sa.Column('transaction_hash', sa.String(length=66), nullable=True),
        sa.Column('deployer_address', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=8), nullable=False),
        sa.Column('constructor_args', sa.JSON(), nullable=True),
        sa.Column('compiled_bytecode', sa.Text(), nullable=True),
        sa.Column('abi', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_deployments_deployer_address'), 'deployments', ['deployer_address'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_deployments_deployer_address'), table_name='deployments')
    op.drop_table('deployments')

    op.drop_index(op.f('ix_multisend_transactions_sender_address'), table_name='multisend_transactions')
    op.drop_table('multisend_transactions')
