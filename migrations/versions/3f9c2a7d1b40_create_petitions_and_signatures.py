"""Create petition types, petitions, signatures and settings

Revision ID: 3f9c2a7d1b40
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f9c2a7d1b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'petition_types',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('require_signature_full_address', sa.Boolean(), nullable=False,
                  server_default=sa.false()),
        sa.Column('require_person_born_at', sa.Boolean(), nullable=False,
                  server_default=sa.false()),
        sa.Column('required_minimum_age', sa.Integer(), nullable=True),
        sa.Column('require_person_birth_city', sa.Boolean(), nullable=False,
                  server_default=sa.false()),
        sa.Column('country_code', sa.String(length=2), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'petitions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('petition_type_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['petition_type_id'], ['petition_types.id']),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'signatures',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('petition_id', sa.Integer(), nullable=False),
        sa.Column('unique_key', sa.String(length=255), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('street', sa.String(length=255), nullable=True),
        sa.Column('street_number', sa.String(length=255), nullable=True),
        sa.Column('street_number_suffix', sa.String(length=255), nullable=True),
        sa.Column('postal_code', sa.String(length=255), nullable=True),
        sa.Column('city', sa.String(length=255), nullable=True),
        sa.Column('function', sa.String(length=255), nullable=True),
        sa.Column('country_code', sa.String(length=2), nullable=True),
        sa.Column('birth_date', sa.Date(), nullable=True),
        sa.Column('birth_city', sa.String(length=255), nullable=True),
        sa.Column('dutch_citizen', sa.Boolean(), nullable=True),
        sa.Column('subscribe_to_updates', sa.Boolean(), nullable=True),
        sa.Column('signed_at', sa.DateTime(), nullable=True),
        sa.Column('confirmed_at', sa.DateTime(), nullable=True),
        sa.Column('confirmed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('visible', sa.Boolean(), nullable=True),
        sa.Column('special', sa.Boolean(), nullable=True),
        sa.Column('signature_remote_addr', sa.String(length=255), nullable=True),
        sa.Column('signature_remote_browser', sa.String(length=255), nullable=True),
        sa.Column('confirmation_remote_addr', sa.String(length=255), nullable=True),
        sa.Column('confirmation_remote_browser', sa.String(length=255), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('reminders_sent', sa.Integer(), nullable=True),
        sa.Column('last_reminder_sent_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['petition_id'], ['petitions.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email', 'petition_id', name='uq_signatures_email_petition'),
    )
    with op.batch_alter_table('signatures', schema=None) as batch_op:
        batch_op.create_index('ix_signatures_petition_id', ['petition_id'], unique=False)
        batch_op.create_index('ix_signatures_unique_key', ['unique_key'], unique=True)

    op.create_table(
        'settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('key', sa.String(length=100), nullable=False),
        sa.Column('value', sa.Text(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('settings', schema=None) as batch_op:
        batch_op.create_index('ix_settings_key', ['key'], unique=True)


def downgrade():
    with op.batch_alter_table('settings', schema=None) as batch_op:
        batch_op.drop_index('ix_settings_key')
    op.drop_table('settings')

    with op.batch_alter_table('signatures', schema=None) as batch_op:
        batch_op.drop_index('ix_signatures_unique_key')
        batch_op.drop_index('ix_signatures_petition_id')
    op.drop_table('signatures')

    op.drop_table('petitions')
    op.drop_table('petition_types')
