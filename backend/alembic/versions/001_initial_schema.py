"""Species catalog schema: users, species, comments, audit_log

Revision ID: 001
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

KINGDOMS = ('Animalia', 'Plantae', 'Fungi', 'Protista', 'Archaea', 'Bacteria')


def upgrade() -> None:
    # Users table
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('display_name', sa.String(100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # Species table
    op.create_table(
        'species',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('scientific_name', sa.String(200), nullable=False),
        sa.Column('common_name', sa.String(200), nullable=True),
        sa.Column('kingdom', sa.Enum(*KINGDOMS, name='kingdom'), nullable=False),
        sa.Column('total_population', sa.Integer(), nullable=True),
        sa.Column('image', sa.String(1000), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('author', sa.String(36), nullable=False),
        sa.CheckConstraint('total_population IS NULL OR total_population >= 1', name='ck_species_total_population'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_species_id', 'species', ['id'])
    op.create_index('ix_species_scientific_name', 'species', ['scientific_name'])
    op.create_index('ix_species_author', 'species', ['author'])

    # Comments table, removed together with their species
    op.create_table(
        'comments',
        sa.Column('commentid', sa.Integer(), nullable=False),
        sa.Column('species_id', sa.Integer(), nullable=False),
        sa.Column('time_made', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('other_sugs', sa.Text(), nullable=False, server_default=''),
        sa.Column('author', sa.String(36), nullable=True),
        sa.ForeignKeyConstraint(['species_id'], ['species.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('commentid')
    )
    op.create_index('ix_comments_commentid', 'comments', ['commentid'])
    op.create_index('ix_comments_species_id', 'comments', ['species_id'])
    op.create_index('ix_comments_author', 'comments', ['author'])

    # Audit log table
    op.create_table(
        'audit_log',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('user_id', sa.String(36), nullable=True),
        sa.Column('entity_type', sa.String(20), nullable=False),
        sa.Column('entity_id', sa.Integer(), nullable=False),
        sa.Column('species_id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(20), nullable=False),
        sa.Column('diff_json', sa.JSON(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_audit_log_id', 'audit_log', ['id'])
    op.create_index('ix_audit_log_timestamp', 'audit_log', ['timestamp'])
    op.create_index('ix_audit_log_species_id', 'audit_log', ['species_id'])


def downgrade() -> None:
    op.drop_table('audit_log')
    op.drop_table('comments')
    op.drop_table('species')
    sa.Enum(name='kingdom').drop(op.get_bind(), checkfirst=True)
    op.drop_table('users')
