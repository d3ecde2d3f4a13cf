"""Create invite_codes and invite_claims tables

Revision ID: 3f1b7c2a9d40
Revises:
Create Date: 2026-10-16 09:12:31.402115

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1b7c2a9d40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the invite code ledger and the claim store.

    - invite_codes: one row per code; uses only grows, max_uses null means unbounded
    - invite_claims: redemption attempts; expired rows stay and are simply ignored
    """
    op.create_table(
        'invite_codes',
        sa.Column('code', sa.String(), primary_key=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('max_uses', sa.Integer(), nullable=True),
        sa.Column('uses', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text("(now() at time zone 'utc')")),
        sa.CheckConstraint('max_uses IS NULL OR uses <= max_uses', name='ck_invite_codes_uses_within_max'),
    )
    op.create_table(
        'invite_claims',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('code', sa.String(), sa.ForeignKey('invite_codes.code'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text("(now() at time zone 'utc')")),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('consumed_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_invite_claims_email_created_at', 'invite_claims', ['email', 'created_at'])
    op.create_index('ix_invite_claims_email_code', 'invite_claims', ['email', 'code'])


def downgrade() -> None:
    op.drop_index('ix_invite_claims_email_code', table_name='invite_claims')
    op.drop_index('ix_invite_claims_email_created_at', table_name='invite_claims')
    op.drop_table('invite_claims')
    op.drop_table('invite_codes')
