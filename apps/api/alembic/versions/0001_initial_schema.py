"""initial schema: organizations, access control, shift configuration, availability

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ENUM, JSONB, UUID


# revision identifiers, used by Alembic.
revision: str = '0001_initial'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


ORGANIZATION_CATEGORIES = (
    'hospital', 'care_home', 'education', 'healthcare', 'social_services', 'retail',
    'service_provider', 'software_company', 'manufacturing', 'logistics', 'construction',
    'financial', 'hospitality', 'professional_services', 'other',
)

# Shared types are created once up front; columns reference them without re-creating.
organization_category = ENUM(*ORGANIZATION_CATEGORIES, name='organization_category', create_type=False)
legacy_organization_type = ENUM('agency', 'home', 'other', name='legacy_organization_type', create_type=False)
record_status = ENUM('active', 'superseded', 'deleted', name='record_status', create_type=False)
availability_period = ENUM('day', 'night', 'both', name='availability_period', create_type=False)
rule_type = ENUM(
    'rest_period', 'max_consecutive_shifts', 'max_hours_period', 'min_hours_period',
    'qualification_requirement', 'staffing_level', 'time_between_shifts', 'overtime_threshold', 'custom',
    name='rule_type', create_type=False,
)
rule_severity = ENUM('warning', 'error', 'info', name='rule_severity', create_type=False)
rule_scope = ENUM('organization', 'department', 'role', 'staff', 'shift_type', name='rule_scope', create_type=False)

ENUMS = (
    organization_category, legacy_organization_type, record_status, availability_period,
    rule_type, rule_severity, rule_scope,
)


def _lifecycle_columns():
    return [
        sa.Column('status', record_status, nullable=False, server_default='active'),
        sa.Column('status_changed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('status_changed_by', UUID(as_uuid=True), nullable=True),
    ]


def _timestamps(updated=True):
    columns = [sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False)]
    if updated:
        columns.append(sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False))
    return columns


def _org_fk(nullable=False):
    return [
        sa.Column('organization_id', UUID(as_uuid=True), nullable=nullable),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.organization_id'], ondelete='CASCADE'),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()
    for enum_type in ENUMS:
        enum_type.create(bind, checkfirst=True)

    op.create_table(
        'organizations',
        sa.Column('organization_id', UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('category', organization_category, nullable=False, server_default='other'),
        sa.Column('legacy_type', legacy_organization_type, nullable=True),
        sa.Column('timezone', sa.String(), nullable=False, server_default='Europe/London'),
        sa.Column('settings', JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('organization_id'),
    )

    op.create_table(
        'users',
        sa.Column('user_id', UUID(as_uuid=True), nullable=False),
        *_org_fk(),
        sa.Column('first_name', sa.String(), nullable=False),
        sa.Column('last_name', sa.String(), nullable=False, server_default=''),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=True),
        sa.Column('timezone', sa.String(), nullable=False, server_default='Europe/London'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('user_id'),
        sa.UniqueConstraint('email'),
    )
    op.create_index(op.f('ix_users_organization_id'), 'users', ['organization_id'], unique=False)

    op.create_table(
        'permissions',
        sa.Column('permission_id', UUID(as_uuid=True), nullable=False),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('subject', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('permission_id'),
        sa.UniqueConstraint('action', 'subject', name='uq_permissions_action_subject'),
    )

    op.create_table(
        'roles',
        sa.Column('role_id', UUID(as_uuid=True), nullable=False),
        *_org_fk(nullable=True),
        sa.Column('key', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('is_system_role', sa.Boolean(), nullable=False, server_default='false'),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('role_id'),
        sa.UniqueConstraint('organization_id', 'key', name='uq_roles_organization_key'),
    )
    op.create_index(op.f('ix_roles_organization_id'), 'roles', ['organization_id'], unique=False)

    op.create_table(
        'role_permissions',
        sa.Column('role_id', UUID(as_uuid=True), nullable=False),
        sa.Column('permission_id', UUID(as_uuid=True), nullable=False),
        sa.Column('conditions', JSONB(), nullable=True),
        sa.ForeignKeyConstraint(['role_id'], ['roles.role_id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['permission_id'], ['permissions.permission_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('role_id', 'permission_id'),
    )

    op.create_table(
        'user_roles',
        sa.Column('user_id', UUID(as_uuid=True), nullable=False),
        sa.Column('role_id', UUID(as_uuid=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.user_id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['role_id'], ['roles.role_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('user_id', 'role_id'),
    )

    op.create_table(
        'shift_types',
        sa.Column('shift_type_id', UUID(as_uuid=True), nullable=False),
        *_org_fk(),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', organization_category, nullable=False),
        sa.Column('default_timing', JSONB(), nullable=True),
        sa.Column('color', sa.String(), nullable=True),
        sa.Column('icon', sa.String(), nullable=True),
        sa.Column('applicable_days', JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('metadata', JSONB(), nullable=True),
        *_lifecycle_columns(),
        *_timestamps(),
        sa.PrimaryKeyConstraint('shift_type_id'),
        sa.UniqueConstraint('organization_id', 'name', name='uq_shift_types_organization_name'),
    )
    op.create_index(op.f('ix_shift_types_organization_id'), 'shift_types', ['organization_id'], unique=False)
    op.create_index(op.f('ix_shift_types_status'), 'shift_types', ['status'], unique=False)

    op.create_table(
        'shift_templates',
        sa.Column('shift_template_id', UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', organization_category, nullable=False),
        sa.Column('sub_category', sa.String(), nullable=True),
        sa.Column('default_timing', JSONB(), nullable=False),
        sa.Column('applicable_days', JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('color', sa.String(), nullable=False, server_default='#3B82F6'),
        sa.Column('icon', sa.String(), nullable=False, server_default='clock'),
        sa.Column('qualification_requirements', JSONB(), nullable=True),
        sa.Column('default_payment_method', sa.String(), nullable=False, server_default='hourly'),
        sa.Column('default_payment_config', JSONB(), nullable=True),
        sa.Column('metadata', JSONB(), nullable=True),
        sa.Column('is_system', sa.Boolean(), nullable=False, server_default='true'),
        *_lifecycle_columns(),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('shift_template_id'),
        sa.UniqueConstraint('name', 'category', name='uq_shift_templates_name_category'),
    )
    op.create_index(op.f('ix_shift_templates_category'), 'shift_templates', ['category'], unique=False)
    op.create_index(op.f('ix_shift_templates_status'), 'shift_templates', ['status'], unique=False)

    op.create_table(
        'shift_payment_configs',
        sa.Column('payment_config_id', UUID(as_uuid=True), nullable=False),
        *_org_fk(),
        sa.Column('shift_type_id', UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('payment_method', sa.String(), nullable=False),
        sa.Column('parameters', JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column('currency', sa.String(), nullable=False),
        sa.Column('effective_from', sa.Date(), nullable=False),
        sa.Column('effective_to', sa.Date(), nullable=True),
        *_lifecycle_columns(),
        *_timestamps(),
        sa.ForeignKeyConstraint(['shift_type_id'], ['shift_types.shift_type_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('payment_config_id'),
    )
    op.create_index(op.f('ix_shift_payment_configs_organization_id'), 'shift_payment_configs', ['organization_id'], unique=False)
    op.create_index(op.f('ix_shift_payment_configs_shift_type_id'), 'shift_payment_configs', ['shift_type_id'], unique=False)
    op.create_index(op.f('ix_shift_payment_configs_status'), 'shift_payment_configs', ['status'], unique=False)
    op.create_index(
        'uq_shift_payment_configs_active',
        'shift_payment_configs',
        ['organization_id', 'shift_type_id'],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
    )

    op.create_table(
        'staff_rates',
        sa.Column('staff_rate_id', UUID(as_uuid=True), nullable=False),
        *_org_fk(),
        sa.Column('user_id', UUID(as_uuid=True), nullable=False),
        sa.Column('shift_type_id', UUID(as_uuid=True), nullable=True),
        sa.Column('payment_config_id', UUID(as_uuid=True), nullable=True),
        sa.Column('payment_method', sa.String(), nullable=True),
        sa.Column('override_rate', sa.Numeric(12, 2), nullable=True),
        sa.Column('bonus_rate', sa.Numeric(12, 2), nullable=True),
        sa.Column('custom_rate_params', JSONB(), nullable=True),
        sa.Column('effective_from', sa.Date(), nullable=False),
        sa.Column('effective_to', sa.Date(), nullable=True),
        *_lifecycle_columns(),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.user_id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['shift_type_id'], ['shift_types.shift_type_id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['payment_config_id'], ['shift_payment_configs.payment_config_id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('staff_rate_id'),
    )
    op.create_index(op.f('ix_staff_rates_organization_id'), 'staff_rates', ['organization_id'], unique=False)
    op.create_index(op.f('ix_staff_rates_user_id'), 'staff_rates', ['user_id'], unique=False)
    op.create_index(op.f('ix_staff_rates_status'), 'staff_rates', ['status'], unique=False)

    op.create_table(
        'employee_availability',
        sa.Column('availability_id', UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', UUID(as_uuid=True), nullable=False),
        *_org_fk(),
        sa.Column('effective_from', sa.Date(), nullable=False),
        sa.Column('effective_to', sa.Date(), nullable=True),
        sa.Column('is_recurring', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_by', UUID(as_uuid=True), nullable=True),
        sa.Column('updated_by', UUID(as_uuid=True), nullable=True),
        *_lifecycle_columns(),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.user_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('availability_id'),
    )
    op.create_index(op.f('ix_employee_availability_user_id'), 'employee_availability', ['user_id'], unique=False)
    op.create_index(op.f('ix_employee_availability_organization_id'), 'employee_availability', ['organization_id'], unique=False)
    op.create_index(op.f('ix_employee_availability_status'), 'employee_availability', ['status'], unique=False)

    op.create_table(
        'availability_entries',
        sa.Column('entry_id', UUID(as_uuid=True), nullable=False),
        sa.Column('availability_id', UUID(as_uuid=True), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('period', availability_period, nullable=False),
        sa.ForeignKeyConstraint(['availability_id'], ['employee_availability.availability_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('entry_id'),
    )
    op.create_index(op.f('ix_availability_entries_availability_id'), 'availability_entries', ['availability_id'], unique=False)

    op.create_table(
        'scheduling_rules',
        sa.Column('rule_id', UUID(as_uuid=True), nullable=False),
        *_org_fk(nullable=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('rule_type', rule_type, nullable=False),
        sa.Column('severity', rule_severity, nullable=False, server_default='warning'),
        sa.Column('scope', rule_scope, nullable=False, server_default='organization'),
        sa.Column('scope_entity_id', UUID(as_uuid=True), nullable=True),
        sa.Column('category', organization_category, nullable=True),
        sa.Column('parameters', JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column('conditions', JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('is_system', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('effective_from', sa.Date(), nullable=True),
        sa.Column('effective_to', sa.Date(), nullable=True),
        sa.Column('metadata', JSONB(), nullable=True),
        *_lifecycle_columns(),
        *_timestamps(),
        sa.PrimaryKeyConstraint('rule_id'),
    )
    op.create_index(op.f('ix_scheduling_rules_organization_id'), 'scheduling_rules', ['organization_id'], unique=False)
    op.create_index(op.f('ix_scheduling_rules_status'), 'scheduling_rules', ['status'], unique=False)

    op.create_table(
        'shift_rotation_patterns',
        sa.Column('pattern_id', UUID(as_uuid=True), nullable=False),
        *_org_fk(),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', organization_category, nullable=False),
        sa.Column('department_id', UUID(as_uuid=True), nullable=True),
        sa.Column('sequence', JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('breaks', JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('cycle_length', sa.Integer(), nullable=False),
        sa.Column('repeat_indefinitely', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('max_repetitions', sa.Integer(), nullable=True),
        sa.Column('applicable_staff', JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('applicable_roles', JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('effective_from', sa.Date(), nullable=True),
        sa.Column('effective_to', sa.Date(), nullable=True),
        sa.Column('is_system', sa.Boolean(), nullable=False, server_default='false'),
        *_lifecycle_columns(),
        *_timestamps(),
        sa.PrimaryKeyConstraint('pattern_id'),
    )
    op.create_index(op.f('ix_shift_rotation_patterns_organization_id'), 'shift_rotation_patterns', ['organization_id'], unique=False)
    op.create_index(op.f('ix_shift_rotation_patterns_status'), 'shift_rotation_patterns', ['status'], unique=False)

    op.create_table(
        'device_tokens',
        sa.Column('device_token_id', UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', UUID(as_uuid=True), nullable=False),
        sa.Column('token', sa.String(), nullable=False),
        sa.Column('platform', sa.String(), nullable=True),
        *_lifecycle_columns(),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.user_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('device_token_id'),
        sa.UniqueConstraint('token'),
    )
    op.create_index(op.f('ix_device_tokens_user_id'), 'device_tokens', ['user_id'], unique=False)
    op.create_index(op.f('ix_device_tokens_status'), 'device_tokens', ['status'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    for table in (
        'device_tokens',
        'shift_rotation_patterns',
        'scheduling_rules',
        'availability_entries',
        'employee_availability',
        'staff_rates',
        'shift_payment_configs',
        'shift_templates',
        'shift_types',
        'user_roles',
        'role_permissions',
        'roles',
        'permissions',
        'users',
        'organizations',
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for enum_type in reversed(ENUMS):
        enum_type.drop(bind, checkfirst=True)
