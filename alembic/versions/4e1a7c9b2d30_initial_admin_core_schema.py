"""initial admin core schema

Revision ID: 4e1a7c9b2d30
Revises:
Create Date: 2026-10-12 09:41:27.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4e1a7c9b2d30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    # companies table
    op.create_table(
        'companies',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('domain', sa.String(length=255), nullable=False),
        sa.Column('contact_email', sa.String(length=255), nullable=True),
        sa.Column('contact_phone', sa.String(length=50), nullable=True),
        sa.Column('is_customer', sa.Boolean(), nullable=False),
        sa.Column('is_archived', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_companies_name', 'companies', ['name'], unique=False)
    op.create_index('ix_companies_domain', 'companies', ['domain'], unique=False)

    # admin_users table
    op.create_table(
        'admin_users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=50), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )
    op.create_index('ix_admin_users_user_id', 'admin_users', ['user_id'], unique=True)

    # racks table
    op.create_table(
        'racks',
        sa.Column('id', sa.String(length=50), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('area', sa.String(length=100), nullable=True),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('occupied', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('occupied >= 0', name='racks_occupied_non_negative'),
        sa.CheckConstraint('occupied <= capacity', name='racks_capacity_check'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_racks_name', 'racks', ['name'], unique=False)

    # storage_requests table
    op.create_table(
        'storage_requests',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('company_id', sa.String(length=36), nullable=False),
        sa.Column('reference_id', sa.String(length=100), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('user_email', sa.String(length=255), nullable=True),
        sa.Column('submitted_by', sa.String(length=255), nullable=True),
        sa.Column('contact_email', sa.String(length=255), nullable=True),
        sa.Column('contact_phone', sa.String(length=50), nullable=True),
        sa.Column('pipe_type', sa.String(length=100), nullable=True),
        sa.Column('pipe_grade', sa.String(length=100), nullable=True),
        sa.Column('outer_diameter', sa.Numeric(precision=8, scale=3), nullable=True),
        sa.Column('connection_type', sa.String(length=100), nullable=True),
        sa.Column('total_joints_estimate', sa.Integer(), nullable=True),
        sa.Column('storage_start_date', sa.Date(), nullable=True),
        sa.Column('estimated_duration_months', sa.Integer(), nullable=True),
        sa.Column('special_handling', sa.Text(), nullable=True),
        sa.Column('assigned_rack_ids', sa.JSON(), nullable=True),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('approved_by', sa.String(length=36), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejected_by', sa.String(length=36), nullable=True),
        sa.Column('rejected_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('reference_id')
    )
    op.create_index('ix_storage_requests_company_id', 'storage_requests', ['company_id'], unique=False)
    op.create_index('ix_storage_requests_status', 'storage_requests', ['status'], unique=False)

    # trucking_loads table
    op.create_table(
        'trucking_loads',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('storage_request_id', sa.String(length=36), nullable=False),
        sa.Column('direction', sa.String(length=10), nullable=False),
        sa.Column('sequence_number', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('scheduled_slot_start', sa.DateTime(timezone=True), nullable=True),
        sa.Column('scheduled_slot_end', sa.DateTime(timezone=True), nullable=True),
        sa.Column('total_joints_planned', sa.Integer(), nullable=True),
        sa.Column('total_joints_completed', sa.Integer(), nullable=True),
        sa.Column('total_weight_lbs_planned', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('total_weight_lbs_completed', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('trucking_company', sa.String(length=255), nullable=True),
        sa.Column('contact_name', sa.String(length=255), nullable=True),
        sa.Column('contact_phone', sa.String(length=50), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['storage_request_id'], ['storage_requests.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_trucking_loads_storage_request_id', 'trucking_loads', ['storage_request_id'], unique=False)
    op.create_index('ix_trucking_loads_direction', 'trucking_loads', ['direction'], unique=False)
    op.create_index('ix_trucking_loads_status', 'trucking_loads', ['status'], unique=False)

    # trucking_documents table
    op.create_table(
        'trucking_documents',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('trucking_load_id', sa.String(length=36), nullable=False),
        sa.Column('file_name', sa.String(length=255), nullable=False),
        sa.Column('storage_path', sa.String(length=500), nullable=False),
        sa.Column('document_type', sa.String(length=50), nullable=True),
        sa.Column('parsed_payload', sa.JSON(), nullable=True),
        sa.Column('uploaded_by', sa.String(length=255), nullable=True),
        sa.Column('uploaded_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['trucking_load_id'], ['trucking_loads.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_trucking_documents_trucking_load_id', 'trucking_documents', ['trucking_load_id'], unique=False)

    # inventory table
    op.create_table(
        'inventory',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('company_id', sa.String(length=36), nullable=False),
        sa.Column('storage_request_id', sa.String(length=36), nullable=False),
        sa.Column('trucking_load_id', sa.String(length=36), nullable=True),
        sa.Column('rack_id', sa.String(length=50), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('length_ft', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('weight_lbs', sa.Numeric(precision=10, scale=2), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['storage_request_id'], ['storage_requests.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['trucking_load_id'], ['trucking_loads.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['rack_id'], ['racks.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_inventory_company_id', 'inventory', ['company_id'], unique=False)
    op.create_index('ix_inventory_storage_request_id', 'inventory', ['storage_request_id'], unique=False)
    op.create_index('ix_inventory_trucking_load_id', 'inventory', ['trucking_load_id'], unique=False)
    op.create_index('ix_inventory_rack_id', 'inventory', ['rack_id'], unique=False)
    op.create_index('ix_inventory_status', 'inventory', ['status'], unique=False)

    # admin_audit_log table (append-only)
    op.create_table(
        'admin_audit_log',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('admin_user_id', sa.String(length=36), nullable=False),
        sa.Column('action', sa.String(length=100), nullable=False),
        sa.Column('entity_type', sa.String(length=100), nullable=False),
        sa.Column('entity_id', sa.String(length=50), nullable=False),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_admin_audit_log_admin_user_id', 'admin_audit_log', ['admin_user_id'], unique=False)
    op.create_index('ix_admin_audit_log_action', 'admin_audit_log', ['action'], unique=False)
    op.create_index('ix_admin_audit_log_entity_type', 'admin_audit_log', ['entity_type'], unique=False)
    op.create_index('ix_admin_audit_log_entity_id', 'admin_audit_log', ['entity_id'], unique=False)
    op.create_index('ix_admin_audit_log_created_at', 'admin_audit_log', ['created_at'], unique=False)

    # notification_queue table
    op.create_table(
        'notification_queue',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('type', sa.String(length=100), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('attempts', sa.Integer(), nullable=False),
        sa.Column('last_attempt_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_error', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_notification_queue_type', 'notification_queue', ['type'], unique=False)
    op.create_index('ix_notification_queue_status', 'notification_queue', ['status'], unique=False)
    op.create_index('ix_notification_queue_created_at', 'notification_queue', ['created_at'], unique=False)


def downgrade() -> None:
    op.drop_table('notification_queue')
    op.drop_table('admin_audit_log')
    op.drop_table('inventory')
    op.drop_table('trucking_documents')
    op.drop_table('trucking_loads')
    op.drop_table('storage_requests')
    op.drop_table('racks')
    op.drop_table('admin_users')
    op.drop_table('companies')
