from alembic import op
import sqlalchemy as sa

revision = '0002_add_sustainability_suggestions'
down_revision = '0001_init'
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'sustainability_suggestions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('shipment_id', sa.String(36), sa.ForeignKey('shipments.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.String(64), nullable=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=False),
        sa.Column('carbon_savings', sa.Float, nullable=False),
        sa.Column('cost_savings', sa.Float, nullable=True),
        sa.Column('implemented', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_sustainability_suggestions_shipment_id', 'sustainability_suggestions', ['shipment_id'])

def downgrade():
    op.drop_table('sustainability_suggestions')
