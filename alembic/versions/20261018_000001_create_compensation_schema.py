"""Create compensation engine schema

Revision ID: 20261018_000001
Revises: 
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261018_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

MONEY = sa.DECIMAL(18, 2)


def upgrade() -> None:
    # Participants (binary referral tree + income buckets)
    op.create_table(
        'participants',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('referred_by', sa.Integer(), nullable=True),
        sa.Column('position', sa.String(5), nullable=True, comment='Leg under the sponsor: left or right'),
        sa.Column('placed_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('direct_referral_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('pairs', sa.Integer(), nullable=False, server_default='0',
                  comment='Pairs formed at this node and consumed by matching'),
        sa.Column('total_pairs', sa.Integer(), nullable=False, server_default='0',
                  comment='Lifetime paid pairs (milestone source)'),
        sa.Column('referral_income', MONEY, nullable=False, server_default='0'),
        sa.Column('matching_income', MONEY, nullable=False, server_default='0'),
        sa.Column('reward_income', MONEY, nullable=False, server_default='0'),
        sa.Column('investment_referral_income', MONEY, nullable=False, server_default='0'),
        sa.Column('investment_referral_principal_income', MONEY, nullable=False, server_default='0'),
        sa.Column('investment_referral_return_income', MONEY, nullable=False, server_default='0'),
        sa.Column('investment_income', MONEY, nullable=False, server_default='0'),
        sa.Column('referral_investment_principal', MONEY, nullable=False, server_default='0',
                  comment='Downline principal behind one-time investment bonuses'),
        sa.Column('total_investment', MONEY, nullable=False, server_default='0'),
        sa.Column('wallet_balance', MONEY, nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('pairs >= 0', name='check_participant_pairs_non_negative'),
        sa.CheckConstraint('total_pairs >= 0', name='check_participant_total_pairs_non_negative'),
        sa.ForeignKeyConstraint(['referred_by'], ['participants.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_participants_referred_by', 'participants', ['referred_by'])
    op.create_index('idx_participants_sponsor_position', 'participants', ['referred_by', 'position'])

    # Investments
    op.create_table(
        'investments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('participant_id', sa.Integer(), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('lock_in_months', sa.Integer(), nullable=False, server_default='24'),
        sa.Column('months_paid', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('last_roi_period', sa.String(7), nullable=True, comment='YYYY-MM of the last ROI payout'),
        sa.Column('is_locked', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('withdrawal_restriction', MONEY, nullable=False, server_default='0',
                  comment='Principal that cannot be withdrawn while locked'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('amount > 0', name='check_investment_amount_positive'),
        sa.CheckConstraint('months_paid >= 0 AND months_paid <= lock_in_months',
                           name='check_investment_months_paid_range'),
        sa.ForeignKeyConstraint(['participant_id'], ['participants.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_investments_participant_id', 'investments', ['participant_id'])
    op.create_index('ix_investments_active', 'investments', ['active'])
    op.create_index('idx_investments_active', 'investments', ['active', 'last_roi_period'])

    # Deferred monthly investment bonuses
    op.create_table(
        'pending_bonuses',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        sa.Column('investor_id', sa.Integer(), nullable=False),
        sa.Column('investment_id', sa.Integer(), nullable=True,
                  comment='Release group key; NULL for legacy rows'),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('awarded', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('awarded_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_release_period', sa.String(7), nullable=True,
                  comment="YYYY-MM of the group's last release"),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('month >= 1 AND month <= 6', name='check_pending_bonus_month_range'),
        sa.ForeignKeyConstraint(['owner_id'], ['participants.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['investor_id'], ['participants.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['investment_id'], ['investments.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_pending_bonuses_owner_awarded', 'pending_bonuses', ['owner_id', 'awarded'])
    op.create_index('idx_pending_bonuses_group', 'pending_bonuses', ['owner_id', 'investment_id', 'month'])

    # History ledger
    op.create_table(
        'history_entries',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('participant_id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(40), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='completed'),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['participant_id'], ['participants.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_history_participant_type', 'history_entries', ['participant_id', 'type'])
    op.create_index('idx_history_created', 'history_entries', ['created_at'])

    # Payment slips
    op.create_table(
        'payment_slips',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('participant_id', sa.Integer(), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('income_processed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('amount > 0', name='check_payment_slip_amount_positive'),
        sa.ForeignKeyConstraint(['participant_id'], ['participants.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_payment_slips_participant_status', 'payment_slips', ['participant_id', 'status'])

    # Matching pairs paid per day
    op.create_table(
        'daily_pair_counts',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('participant_id', sa.Integer(), nullable=False),
        sa.Column('day', sa.Date(), nullable=False),
        sa.Column('count', sa.Integer(), nullable=False, server_default='0'),
        sa.ForeignKeyConstraint(['participant_id'], ['participants.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('participant_id', 'day', name='uq_daily_pair_counts_day')
    )
    op.create_index('ix_daily_pair_counts_day', 'daily_pair_counts', ['day'])

    # Milestone awards
    op.create_table(
        'awarded_rewards',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('participant_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(50), nullable=False),
        sa.Column('pairs_threshold', sa.Integer(), nullable=False),
        sa.Column('amount', MONEY, nullable=True),
        sa.Column('prize', sa.String(100), nullable=True),
        sa.Column('awarded_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['participant_id'], ['participants.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('participant_id', 'name', name='uq_awarded_rewards_name')
    )
    op.create_index('ix_awarded_rewards_participant_id', 'awarded_rewards', ['participant_id'])


def downgrade() -> None:
    op.drop_index('ix_awarded_rewards_participant_id', 'awarded_rewards')
    op.drop_table('awarded_rewards')

    op.drop_index('ix_daily_pair_counts_day', 'daily_pair_counts')
    op.drop_table('daily_pair_counts')

    op.drop_index('idx_payment_slips_participant_status', 'payment_slips')
    op.drop_table('payment_slips')

    op.drop_index('idx_history_created', 'history_entries')
    op.drop_index('idx_history_participant_type', 'history_entries')
    op.drop_table('history_entries')

    op.drop_index('idx_pending_bonuses_group', 'pending_bonuses')
    op.drop_index('idx_pending_bonuses_owner_awarded', 'pending_bonuses')
    op.drop_table('pending_bonuses')

    op.drop_index('idx_investments_active', 'investments')
    op.drop_index('ix_investments_active', 'investments')
    op.drop_index('ix_investments_participant_id', 'investments')
    op.drop_table('investments')

    op.drop_index('idx_participants_sponsor_position', 'participants')
    op.drop_index('ix_participants_referred_by', 'participants')
    op.drop_table('participants')
