"""create_kitchen_tickets_and_queues

Revision ID: 3f1c9a7e2b10
Revises:
Create Date: 2026-10-17 09:12:40.118204+00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f1c9a7e2b10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create kitchen_tickets table
    op.create_table(
        'kitchen_tickets',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('order_id', sa.Uuid(), nullable=False),
        sa.Column('store_id', sa.Uuid(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('priority', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('notes', sa.String(2000), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_reason', sa.String(500), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='0'),
    )
    op.create_index('ix_kitchen_tickets_order_id', 'kitchen_tickets', ['order_id'], unique=True)
    op.create_index('ix_kitchen_tickets_store_id', 'kitchen_tickets', ['store_id'])
    op.create_index('ix_kitchen_tickets_status', 'kitchen_tickets', ['status'])
    op.create_index('ix_kitchen_tickets_priority', 'kitchen_tickets', ['priority'])
    op.create_index('ix_kitchen_tickets_created_at', 'kitchen_tickets', ['created_at'])

    # Create kitchen_ticket_lines table
    op.create_table(
        'kitchen_ticket_lines',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('ticket_id', sa.Uuid(), nullable=False),
        sa.Column('order_line_id', sa.Uuid(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('product_name', sa.String(255), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('notes', sa.String(1000), nullable=True),
        sa.Column('preparation_time', sa.Integer(), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['ticket_id'], ['kitchen_tickets.id']),
    )
    op.create_index('ix_kitchen_ticket_lines_ticket_id', 'kitchen_ticket_lines', ['ticket_id'])
    op.create_index('ix_kitchen_ticket_lines_order_line_id', 'kitchen_ticket_lines', ['order_line_id'])
    op.create_index('ix_kitchen_ticket_lines_product_id', 'kitchen_ticket_lines', ['product_id'])
    op.create_index('ix_kitchen_ticket_lines_status', 'kitchen_ticket_lines', ['status'])

    # Create kitchen_queues table
    op.create_table(
        'kitchen_queues',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('store_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_kitchen_queues_store_id', 'kitchen_queues', ['store_id'])
    op.create_index('ix_kitchen_queues_is_active', 'kitchen_queues', ['is_active'])

    # Create kitchen_queue_assignments table
    op.create_table(
        'kitchen_queue_assignments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('queue_id', sa.Uuid(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['queue_id'], ['kitchen_queues.id']),
        sa.UniqueConstraint('queue_id', 'product_id', name='uq_queue_assignment_queue_product'),
    )
    op.create_index('ix_kitchen_queue_assignments_queue_id', 'kitchen_queue_assignments', ['queue_id'])
    op.create_index('ix_kitchen_queue_assignments_product_id', 'kitchen_queue_assignments', ['product_id'])


def downgrade() -> None:
    op.drop_table('kitchen_queue_assignments')
    op.drop_table('kitchen_queues')
    op.drop_table('kitchen_ticket_lines')
    op.drop_table('kitchen_tickets')
