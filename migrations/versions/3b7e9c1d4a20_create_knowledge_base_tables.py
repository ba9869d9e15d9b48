"""create knowledge base governance tables

Revision ID: 3b7e9c1d4a20
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '3b7e9c1d4a20'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ALLOWED_SCOPE_VALUES = ('education_only', 'generic_info', 'escalation_required')
RULE_VERSION_STATUS_VALUES = ('draft', 'approved')
RISK_LEVEL_VALUES = ('low', 'medium', 'high')
REVIEW_ROLE_VALUES = ('curator', 'expert')
REVIEW_TASK_STATUS_VALUES = ('open', 'decided')
REVIEW_DECISION_VALUES = ('approve', 'reject')
AUDIT_EVENT_VALUES = (
    'RULE_CREATED', 'RULE_VERSION_CREATED', 'RULE_VERSION_APPROVED',
    'SNAPSHOT_PUBLISHED', 'CHANGE_CANDIDATE_CREATED',
    'REVIEW_TASK_CREATED', 'REVIEW_DECIDED',
)


def upgrade() -> None:
    op.create_table(
        'snapshots',
        sa.Column('id', sa.UUID(), primary_key=True),
        sa.Column('jurisdiction', sa.String(), nullable=False),
        sa.Column('as_of_date', sa.Date(), nullable=False),
        sa.Column('included_rule_version_ids', postgresql.JSONB(), nullable=False),
        sa.Column('published_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_snapshots_jurisdiction', 'snapshots', ['jurisdiction'])

    op.create_table(
        'user_contexts',
        sa.Column('project_id', sa.String(), primary_key=True),
        sa.Column('locale', sa.String(), nullable=False),
        sa.Column('jurisdiction', sa.String(), nullable=False),
        sa.Column('allowed_scope', postgresql.ENUM(*ALLOWED_SCOPE_VALUES, name='allowedscope'), nullable=False),
        sa.Column('kb_snapshot_id', sa.UUID(), sa.ForeignKey('snapshots.id'), nullable=True),
    )

    op.create_table(
        'rules',
        sa.Column('id', sa.UUID(), primary_key=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('project_id', sa.String(), nullable=False),
        sa.Column('jurisdiction', sa.String(), nullable=False),
        sa.Column('topic_key', sa.String(), nullable=False),
    )
    op.create_index('ix_rules_project_id', 'rules', ['project_id'])

    op.create_table(
        'rule_versions',
        sa.Column('id', sa.UUID(), primary_key=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('rule_id', sa.UUID(), sa.ForeignKey('rules.id'), nullable=False),
        sa.Column('jurisdiction', sa.String(), nullable=False),
        sa.Column('topic_key', sa.String(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('status', postgresql.ENUM(*RULE_VERSION_STATUS_VALUES, name='ruleversionstatus'), nullable=False),
        sa.Column('source_refs', postgresql.JSONB(), nullable=False),
        sa.Column('approved_by', sa.String(), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('rule_id', 'version', name='uq_rule_versions_rule_id_version'),
    )
    op.create_index('ix_rule_versions_rule_id', 'rule_versions', ['rule_id'])
    op.create_index('ix_rule_versions_jurisdiction_status', 'rule_versions', ['jurisdiction', 'status'])

    op.create_table(
        'change_candidates',
        sa.Column('id', sa.UUID(), primary_key=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('project_id', sa.String(), nullable=False),
        sa.Column('jurisdiction', sa.String(), nullable=False),
        sa.Column('detected_at', sa.DateTime(), nullable=False),
        sa.Column('diff_summary', sa.Text(), nullable=False),
        sa.Column('risk_level', postgresql.ENUM(*RISK_LEVEL_VALUES, name='risklevel'), nullable=False),
        sa.Column('proposed_rule_version_ids', postgresql.JSONB(), nullable=False),
    )
    op.create_index('ix_change_candidates_project_id', 'change_candidates', ['project_id'])
    op.create_index('ix_change_candidates_jurisdiction', 'change_candidates', ['jurisdiction'])

    op.create_table(
        'review_tasks',
        sa.Column('id', sa.UUID(), primary_key=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('change_candidate_id', sa.UUID(), sa.ForeignKey('change_candidates.id'), nullable=False),
        sa.Column('status', postgresql.ENUM(*REVIEW_TASK_STATUS_VALUES, name='reviewtaskstatus'), nullable=False),
        sa.Column('assigned_role', postgresql.ENUM(*REVIEW_ROLE_VALUES, name='reviewrole'), nullable=False),
        sa.Column('decision', postgresql.ENUM(*REVIEW_DECISION_VALUES, name='reviewdecision'), nullable=True),
        sa.Column('decided_at', sa.DateTime(), nullable=True),
        sa.Column('decided_by', sa.String(), nullable=True),
    )
    op.create_index('ix_review_tasks_change_candidate_id', 'review_tasks', ['change_candidate_id'])
    op.create_index('ix_review_tasks_status', 'review_tasks', ['status'])

    op.create_table(
        'audit_events',
        sa.Column('id', sa.UUID(), primary_key=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('project_id', sa.String(), nullable=True),
        sa.Column('event_type', postgresql.ENUM(*AUDIT_EVENT_VALUES, name='auditeventtype'), nullable=False),
        sa.Column('actor', sa.String(), nullable=True),
        sa.Column('subject_id', sa.UUID(), nullable=True),
        sa.Column('subject_type', sa.String(), nullable=True),
        sa.Column('detail', postgresql.JSONB(), nullable=True),
    )
    op.create_index('ix_audit_events_project_id', 'audit_events', ['project_id'])


def downgrade() -> None:
    op.drop_index('ix_audit_events_project_id', table_name='audit_events')
    op.drop_table('audit_events')
    op.drop_index('ix_review_tasks_status', table_name='review_tasks')
    op.drop_index('ix_review_tasks_change_candidate_id', table_name='review_tasks')
    op.drop_table('review_tasks')
    op.drop_index('ix_change_candidates_jurisdiction', table_name='change_candidates')
    op.drop_index('ix_change_candidates_project_id', table_name='change_candidates')
    op.drop_table('change_candidates')
    op.drop_index('ix_rule_versions_jurisdiction_status', table_name='rule_versions')
    op.drop_index('ix_rule_versions_rule_id', table_name='rule_versions')
    op.drop_table('rule_versions')
    op.drop_index('ix_rules_project_id', table_name='rules')
    op.drop_table('rules')
    op.drop_table('user_contexts')
    op.drop_index('ix_snapshots_jurisdiction', table_name='snapshots')
    op.drop_table('snapshots')
    for enum_name in (
        'auditeventtype', 'reviewdecision', 'reviewrole', 'reviewtaskstatus',
        'risklevel', 'ruleversionstatus', 'allowedscope',
    ):
        op.execute(f"DROP TYPE IF EXISTS {enum_name}")
