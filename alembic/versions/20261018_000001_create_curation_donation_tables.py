"""Create curation donation tables

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


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_name', sa.String(255), nullable=False),
        sa.Column('display_name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('eth_address', sa.String(42), nullable=True),
        sa.Column('telegram_id', sa.BigInteger(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_name'),
        sa.UniqueConstraint('telegram_id'),
    )
    op.create_index('ix_user_eth_address', 'user', ['eth_address'], unique=True)

    op.create_table(
        'article',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('author_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(255), nullable=False),
        sa.Column('data_hash', sa.String(255), nullable=True),
        sa.Column('media_hash', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['author_id'], ['user.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_article_author_id', 'article', ['author_id'])
    op.create_index('ix_article_data_hash', 'article', ['data_hash'])

    op.create_table(
        'transaction',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('state', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('remark', sa.String(255), nullable=True),
        sa.Column('purpose', sa.String(50), nullable=False),
        sa.Column('currency', sa.String(10), nullable=False),
        sa.Column('provider', sa.String(20), nullable=False),
        sa.Column('provider_tx_id', sa.String(255), nullable=True),
        sa.Column('sender_id', sa.Integer(), nullable=True),
        sa.Column('recipient_id', sa.Integer(), nullable=False),
        sa.Column('target_id', sa.Integer(), nullable=True),
        sa.Column('target_type', sa.String(50), nullable=True),
        sa.Column('amount', sa.DECIMAL(18, 8), nullable=False),
        sa.Column('supersedes_id', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['sender_id'], ['user.id'], ),
        sa.ForeignKeyConstraint(['recipient_id'], ['user.id'], ),
        sa.ForeignKeyConstraint(['supersedes_id'], ['transaction.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_transaction_state', 'transaction', ['state'])
    op.create_index('ix_transaction_provider_tx_id', 'transaction', ['provider_tx_id'])
    op.create_index('ix_transaction_sender_id', 'transaction', ['sender_id'])
    op.create_index('ix_transaction_recipient_id', 'transaction', ['recipient_id'])

    op.create_table(
        'blockchain_transaction',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('chain', sa.String(20), nullable=False),
        sa.Column('tx_hash', sa.String(66), nullable=False),
        sa.Column('from_address', sa.String(42), nullable=True),
        sa.Column('to_address', sa.String(42), nullable=True),
        sa.Column('block_number', sa.BigInteger(), nullable=True),
        sa.Column('state', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('transaction_id', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['transaction_id'], ['transaction.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('chain', 'tx_hash', name='uq_blockchain_transaction_chain_tx_hash'),
    )
    op.create_index('ix_blockchain_transaction_tx_hash', 'blockchain_transaction', ['tx_hash'])
    op.create_index('ix_blockchain_transaction_transaction_id', 'blockchain_transaction', ['transaction_id'])

    op.create_table(
        'blockchain_curation_event',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('blockchain_transaction_id', sa.Integer(), nullable=False),
        sa.Column('contract_address', sa.String(42), nullable=False),
        sa.Column('curator_address', sa.String(42), nullable=False),
        sa.Column('creator_address', sa.String(42), nullable=False),
        sa.Column('token_address', sa.String(42), nullable=False),
        sa.Column('amount', sa.String(78), nullable=False),
        sa.Column('uri', sa.Text(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['blockchain_transaction_id'], ['blockchain_transaction.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('blockchain_transaction_id'),
    )
    op.create_index('ix_blockchain_curation_event_curator_address', 'blockchain_curation_event', ['curator_address'])
    op.create_index('ix_blockchain_curation_event_creator_address', 'blockchain_curation_event', ['creator_address'])

    op.create_table(
        'blockchain_sync_record',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('chain_id', sa.Integer(), nullable=False),
        sa.Column('contract_address', sa.String(42), nullable=False),
        sa.Column('block_number', sa.BigInteger(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('chain_id', 'contract_address', name='uq_blockchain_sync_record_chain_contract'),
    )

    op.create_table(
        'payment_verification_job',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('transaction_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('attempt_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('max_attempts', sa.Integer(), nullable=False),
        sa.Column('next_attempt_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_error', sa.Text(), nullable=True),
        sa.Column('outcome', sa.String(20), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['transaction_id'], ['transaction.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('transaction_id'),
    )
    op.create_index('ix_payment_verification_job_status', 'payment_verification_job', ['status'])
    op.create_index('ix_payment_verification_job_next_attempt_at', 'payment_verification_job', ['next_attempt_at'])


def downgrade() -> None:
    op.drop_index('ix_payment_verification_job_next_attempt_at', 'payment_verification_job')
    op.drop_index('ix_payment_verification_job_status', 'payment_verification_job')
    op.drop_table('payment_verification_job')

    op.drop_table('blockchain_sync_record')

    op.drop_index('ix_blockchain_curation_event_creator_address', 'blockchain_curation_event')
    op.drop_index('ix_blockchain_curation_event_curator_address', 'blockchain_curation_event')
    op.drop_table('blockchain_curation_event')

    op.drop_index('ix_blockchain_transaction_transaction_id', 'blockchain_transaction')
    op.drop_index('ix_blockchain_transaction_tx_hash', 'blockchain_transaction')
    op.drop_table('blockchain_transaction')

    op.drop_index('ix_transaction_recipient_id', 'transaction')
    op.drop_index('ix_transaction_sender_id', 'transaction')
    op.drop_index('ix_transaction_provider_tx_id', 'transaction')
    op.drop_index('ix_transaction_state', 'transaction')
    op.drop_table('transaction')

    op.drop_index('ix_article_data_hash', 'article')
    op.drop_index('ix_article_author_id', 'article')
    op.drop_table('article')

    op.drop_index('ix_user_eth_address', 'user')
    op.drop_table('user')
