"""initial service desk schema

Revision ID: 3c7d2a91b0e4
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c7d2a91b0e4'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
	return [
		sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
		sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
	]


def upgrade() -> None:
	"""Upgrade schema."""
	op.create_table(
		'users',
		sa.Column('id', sa.Integer(), nullable=False),
		sa.Column('email', sa.String(), nullable=False),
		sa.Column('name', sa.String(), nullable=False),
		sa.Column('role', sa.String(length=16), nullable=False),
		sa.Column('hashed_password', sa.String(), nullable=False),
		sa.Column('is_active', sa.Boolean(), nullable=True),
		*_timestamps(),
		sa.PrimaryKeyConstraint('id')
	)
	op.create_index('ix_users_id', 'users', ['id'], unique=False)
	op.create_index('ix_users_email', 'users', ['email'], unique=True)
	op.create_index('ix_users_role', 'users', ['role'], unique=False)

	op.create_table(
		'jobs',
		sa.Column('id', sa.Integer(), nullable=False),
		sa.Column('external_number', sa.String(length=50), nullable=True),
		sa.Column('client_id', sa.Integer(), nullable=False),
		sa.Column('technician_id', sa.Integer(), nullable=True),
		sa.Column('service_type', sa.String(length=32), nullable=True),
		sa.Column('title', sa.String(length=255), nullable=True),
		sa.Column('description', sa.Text(), nullable=True),
		sa.Column('status', sa.String(length=16), nullable=False),
		sa.Column('priority', sa.SmallInteger(), nullable=False),
		sa.Column('scheduled_date', sa.Date(), nullable=True),
		sa.Column('address', sa.Text(), nullable=True),
		sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
		*_timestamps(),
		sa.ForeignKeyConstraint(['client_id'], ['users.id'], ondelete='CASCADE'),
		sa.ForeignKeyConstraint(['technician_id'], ['users.id']),
		sa.PrimaryKeyConstraint('id')
	)
	op.create_index('ix_jobs_id', 'jobs', ['id'], unique=False)
	op.create_index('ix_jobs_external_number', 'jobs', ['external_number'], unique=True)
	op.create_index('ix_jobs_client_id', 'jobs', ['client_id'], unique=False)
	op.create_index('ix_jobs_technician_id', 'jobs', ['technician_id'], unique=False)
	op.create_index('ix_jobs_status', 'jobs', ['status'], unique=False)

	op.create_table(
		'invoices',
		sa.Column('id', sa.Integer(), nullable=False),
		sa.Column('external_number', sa.String(length=50), nullable=True),
		sa.Column('client_id', sa.Integer(), nullable=False),
		sa.Column('job_id', sa.Integer(), nullable=True),
		sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
		sa.Column('currency', sa.String(length=3), nullable=False),
		sa.Column('description', sa.Text(), nullable=True),
		sa.Column('status', sa.String(length=24), nullable=False),
		sa.Column('issued_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
		sa.Column('due_date', sa.Date(), nullable=True),
		sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
		sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
		sa.Column('payment_method', sa.String(length=64), nullable=True),
		sa.Column('payment_note', sa.Text(), nullable=True),
		sa.Column('payment_reported_at', sa.DateTime(timezone=True), nullable=True),
		sa.ForeignKeyConstraint(['client_id'], ['users.id'], ondelete='CASCADE'),
		sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], ondelete='SET NULL'),
		sa.PrimaryKeyConstraint('id')
	)
	op.create_index('ix_invoices_id', 'invoices', ['id'], unique=False)
	op.create_index('ix_invoices_external_number', 'invoices', ['external_number'], unique=True)
	op.create_index('ix_invoices_client_id', 'invoices', ['client_id'], unique=False)
	op.create_index('ix_invoices_job_id', 'invoices', ['job_id'], unique=False)
	op.create_index('ix_invoices_status', 'invoices', ['status'], unique=False)

	op.create_table(
		'reports',
		sa.Column('id', sa.Integer(), nullable=False),
		sa.Column('job_id', sa.Integer(), nullable=False),
		sa.Column('technician_id', sa.Integer(), nullable=False),
		sa.Column('description', sa.Text(), nullable=True),
		*_timestamps(),
		sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], ondelete='CASCADE'),
		sa.ForeignKeyConstraint(['technician_id'], ['users.id']),
		sa.PrimaryKeyConstraint('id')
	)
	op.create_index('ix_reports_id', 'reports', ['id'], unique=False)
	op.create_index('ix_reports_job_id', 'reports', ['job_id'], unique=False)
	op.create_index('ix_reports_technician_id', 'reports', ['technician_id'], unique=False)

	op.create_table(
		'report_photos',
		sa.Column('id', sa.Integer(), nullable=False),
		sa.Column('report_id', sa.Integer(), nullable=False),
		sa.Column('file_path', sa.String(length=512), nullable=False),
		sa.Column('original_name', sa.String(length=255), nullable=True),
		sa.ForeignKeyConstraint(['report_id'], ['reports.id'], ondelete='CASCADE'),
		sa.PrimaryKeyConstraint('id')
	)
	op.create_index('ix_report_photos_id', 'report_photos', ['id'], unique=False)
	op.create_index('ix_report_photos_report_id', 'report_photos', ['report_id'], unique=False)

	op.create_table(
		'request_logs',
		sa.Column('id', sa.Integer(), nullable=False),
		sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
		sa.Column('correlation_id', sa.String(length=64), nullable=False),
		sa.Column('direction', sa.String(length=16), nullable=False),
		sa.Column('method', sa.String(length=16), nullable=True),
		sa.Column('path_template', sa.String(length=512), nullable=True),
		sa.Column('raw_path', sa.String(length=512), nullable=True),
		sa.Column('status_code', sa.Integer(), nullable=True),
		sa.Column('duration_ms', sa.Integer(), nullable=False),
		sa.Column('client_ip', sa.String(length=64), nullable=True),
		sa.Column('auth_type', sa.String(length=16), nullable=True),
		sa.Column('actor_id', sa.Integer(), nullable=True),
		sa.Column('actor_role', sa.String(length=16), nullable=True),
		sa.Column('provider', sa.String(length=64), nullable=True),
		sa.Column('operation', sa.String(length=64), nullable=True),
		sa.Column('target', sa.String(length=256), nullable=True),
		sa.Column('error_code', sa.String(length=64), nullable=True),
		sa.PrimaryKeyConstraint('id')
	)
	op.create_index('ix_request_logs_id', 'request_logs', ['id'], unique=False)
	op.create_index('ix_request_logs_created_at', 'request_logs', ['created_at'], unique=False)
	op.create_index('ix_request_logs_correlation_id', 'request_logs', ['correlation_id'], unique=False)
	op.create_index('ix_request_logs_path_template', 'request_logs', ['path_template'], unique=False)
	op.create_index('ix_request_logs_status_code', 'request_logs', ['status_code'], unique=False)
	op.create_index('ix_request_logs_actor_id', 'request_logs', ['actor_id'], unique=False)
	op.create_index('ix_request_logs_provider', 'request_logs', ['provider'], unique=False)


def downgrade() -> None:
	"""Downgrade schema."""
	op.drop_table('request_logs')
	op.drop_table('report_photos')
	op.drop_table('reports')
	op.drop_table('invoices')
	op.drop_table('jobs')
	op.drop_table('users')
