from alembic import op
import sqlalchemy as sa

revision = '0001_init'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'shipments',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('tracking_id', sa.String(20), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('origin', sa.String(200), nullable=False),
        sa.Column('destination', sa.String(200), nullable=False),
        sa.Column('transport_type', sa.String(20), nullable=False),
        sa.Column('product_type', sa.String(100), nullable=False),
        sa.Column('quantity', sa.Integer, nullable=False),
        sa.Column('weight', sa.Float, nullable=True),
        sa.Column('distance_km', sa.Float, nullable=False),
        sa.Column('carbon_footprint', sa.Float, nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('planned_departure_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('estimated_arrival_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('actual_arrival_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('customer_id', sa.String(64), nullable=False),
        sa.Column('assigned_driver_id', sa.String(64), nullable=True),
        sa.Column('verification_ref', sa.String(100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "(status = 'delivered' AND actual_arrival_date IS NOT NULL) OR "
            "(status <> 'delivered' AND actual_arrival_date IS NULL)",
            name='ck_shipments_arrival_matches_status',
        ),
    )
    op.create_index('ix_shipments_tracking_id', 'shipments', ['tracking_id'], unique=True)
    op.create_index('ix_shipments_status', 'shipments', ['status'])
    op.create_index('ix_shipments_customer_id', 'shipments', ['customer_id'])
    op.create_index('ix_shipments_assigned_driver_id', 'shipments', ['assigned_driver_id'])

    op.create_table(
        'delivery_updates',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('shipment_id', sa.String(36), sa.ForeignKey('shipments.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('location', sa.String(200), nullable=False),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('temperature', sa.Float, nullable=True),
        sa.Column('humidity', sa.Float, nullable=True),
        sa.Column('shock_detected', sa.Boolean, nullable=True),
        sa.Column('latitude', sa.Float, nullable=True),
        sa.Column('longitude', sa.Float, nullable=True),
        sa.Column('battery_level', sa.Float, nullable=True),
        sa.Column('recorded_by', sa.String(64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('verification_ref', sa.String(100), nullable=True),
    )
    op.create_index('ix_delivery_updates_shipment_id', 'delivery_updates', ['shipment_id'])
    op.create_index('ix_delivery_updates_created_at', 'delivery_updates', ['created_at'])

    op.create_table(
        'reviews',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('shipment_id', sa.String(36), sa.ForeignKey('shipments.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('rating', sa.Integer, nullable=False),
        sa.Column('comment', sa.Text, nullable=True),
        sa.Column('approved', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('verification_ref', sa.String(100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('shipment_id', 'user_id', name='uq_reviews_shipment_user'),
        sa.CheckConstraint('rating BETWEEN 1 AND 5', name='ck_reviews_rating_range'),
    )
    op.create_index('ix_reviews_shipment_id', 'reviews', ['shipment_id'])

def downgrade():
    op.drop_table('reviews')
    op.drop_table('delivery_updates')
    op.drop_table('shipments')
