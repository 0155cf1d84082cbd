"""add policy reconciliation tables

Revision ID: 5f1c2a9d7e31
Revises:
Create Date: 2026-10-18 09:12:44.101532

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5f1c2a9d7e31'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('policy_records',
    sa.Column('id', sa.UUID(), nullable=False),
    sa.Column('owner_id', sa.String(), nullable=True),
    sa.Column('insurer', sa.String(), nullable=True),
    sa.Column('policy_number', sa.String(), nullable=True),
    sa.Column('insured_name', sa.String(), nullable=True),
    sa.Column('premium', sa.Numeric(precision=14, scale=2), nullable=True, comment='Annual premium'),
    sa.Column('monthly_amount', sa.Numeric(precision=14, scale=2), nullable=True),
    sa.Column('start_date', sa.Date(), nullable=True),
    sa.Column('end_date', sa.Date(), nullable=True),
    sa.Column('deductible', sa.Numeric(precision=14, scale=2), nullable=True),
    sa.Column('revision', sa.Integer(), nullable=False, comment='Compare-and-swap revision, bumped on every write'),
    sa.Column('extraction_quality', sa.Integer(), nullable=True, comment='Quality score (0-100) of the last reconciliation'),
    sa.Column('source_reliability', sa.String(), nullable=True, comment='Reliability tier: high, medium, low'),
    sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
    sa.PrimaryKeyConstraint('id'),
    comment='Authoritative reconciled policy records'
    )
    op.create_index(op.f('ix_policy_records_owner_id'), 'policy_records', ['owner_id'], unique=False)
    op.create_index(op.f('ix_policy_records_policy_number'), 'policy_records', ['policy_number'], unique=False)

    op.create_table('policy_confirmed_fields',
    sa.Column('id', sa.UUID(), nullable=False),
    sa.Column('record_id', sa.UUID(), nullable=False),
    sa.Column('field_name', sa.String(), nullable=False, comment='Logical field name, e.g. policyNumber'),
    sa.Column('field_value', sa.Text(), nullable=False, comment='Confirmed value in canonical text form'),
    sa.Column('confirmed_by', sa.String(), nullable=True),
    sa.Column('confirmed_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.ForeignKeyConstraint(['record_id'], ['policy_records.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('record_id', 'field_name', name='uq_policy_confirmed_fields_record_field'),
    comment='Field values locked by a human against automated overwrite'
    )
    op.create_index(op.f('ix_policy_confirmed_fields_record_id'), 'policy_confirmed_fields', ['record_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f('ix_policy_confirmed_fields_record_id'), table_name='policy_confirmed_fields')
    op.drop_table('policy_confirmed_fields')
    op.drop_index(op.f('ix_policy_records_policy_number'), table_name='policy_records')
    op.drop_index(op.f('ix_policy_records_owner_id'), table_name='policy_records')
    op.drop_table('policy_records')
