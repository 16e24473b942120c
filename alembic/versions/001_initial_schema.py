"""Initial schema: users, services, bookings, booking items, reviews,
support requests, gallery

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-18

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

user_role = sa.Enum('USER', 'ADMIN', name='userrole')
booking_status = sa.Enum('PENDING', 'CONFIRMED', 'IN_PROGRESS', 'COMPLETED', 'CANCELLED', name='bookingstatus')
support_category = sa.Enum('TECHNICAL', 'BILLING', 'GENERAL', 'COMPLAINT', 'FEEDBACK', name='supportcategory')
support_priority = sa.Enum('LOW', 'MEDIUM', 'HIGH', 'URGENT', name='supportpriority')
support_status = sa.Enum('OPEN', 'IN_PROGRESS', 'RESOLVED', 'CLOSED', name='supportstatus')
gallery_category = sa.Enum(
    'WASHING_MACHINE', 'REFRIGERATOR', 'GEYSER', 'WATER_PURIFIER', 'MICROWAVE', 'AC',
    'INTERIOR', 'ELECTRICAL_SERVICE', 'HOME_MAINTENANCE', 'WALL_PAINTING', 'CCTV',
    'AC_ADVANCED_PIPING',
    name='gallerycategory',
)
gallery_section = sa.Enum('APPLIANCE_SERVICES', 'HOME_REPAIR', name='gallerysection')
media_type = sa.Enum('IMAGE', 'VIDEO', name='mediatype')


def timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(50), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(20), nullable=True, unique=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        *timestamps(),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_created_at', 'users', ['created_at'])

    op.create_table(
        'services',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('category', sa.String(50), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('price_min', sa.Numeric(10, 2), nullable=False),
        sa.Column('price_max', sa.Numeric(10, 2), nullable=False),
        sa.Column('currency', sa.String(10), nullable=False),
        sa.Column('thumbnail_url', sa.String(500), nullable=True),
        sa.Column('duration', sa.String(50), nullable=False),
        sa.Column('features', sa.JSON(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('popularity', sa.Integer(), nullable=False),
        sa.Column('average_rating', sa.Numeric(3, 2), nullable=False),
        sa.Column('rating_count', sa.Integer(), nullable=False),
        sa.Column('total_bookings', sa.Integer(), nullable=False),
        *timestamps(),
    )
    op.create_index('ix_services_id', 'services', ['id'])
    op.create_index('ix_services_name', 'services', ['name'])
    op.create_index('ix_services_category', 'services', ['category'])
    op.create_index('ix_services_is_active', 'services', ['is_active'])
    op.create_index('ix_services_created_at', 'services', ['created_at'])
    # Case-insensitive name uniqueness
    op.create_index('uq_services_name_lower', 'services', [sa.text('lower(name)')], unique=True)

    op.create_table(
        'bookings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('booking_code', sa.String(20), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(50), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(20), nullable=False),
        sa.Column('address', sa.JSON(), nullable=False),
        sa.Column('location', sa.JSON(), nullable=True),
        sa.Column('service_date', sa.Date(), nullable=False),
        sa.Column('time_slot', sa.String(50), nullable=False),
        sa.Column('work_description', sa.Text(), nullable=True),
        sa.Column('status', booking_status, nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('estimated_cost', sa.Numeric(10, 2), nullable=True),
        sa.Column('actual_cost', sa.Numeric(10, 2), nullable=True),
        sa.Column('technician_notes', sa.String(500), nullable=True),
        sa.Column('admin_notes', sa.String(500), nullable=True),
        sa.Column('technician_name', sa.String(100), nullable=True),
        sa.Column('technician_phone', sa.String(20), nullable=True),
        sa.Column('technician_email', sa.String(255), nullable=True),
        sa.Column('technician_assigned_at', sa.DateTime(), nullable=True),
        sa.Column('technician_assigned_by_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('has_technician', sa.Boolean(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=True),
        sa.Column('feedback', sa.String(500), nullable=True),
        sa.Column('admin_reply', sa.String(1000), nullable=True),
        sa.Column('admin_reply_at', sa.DateTime(), nullable=True),
        sa.Column('admin_notified', sa.Boolean(), nullable=False),
        sa.Column('customer_notified', sa.Boolean(), nullable=False),
        sa.Column('technician_notified', sa.Boolean(), nullable=False),
        sa.Column('last_notification_sent_at', sa.DateTime(), nullable=True),
        *timestamps(),
    )
    op.create_index('ix_bookings_id', 'bookings', ['id'])
    op.create_index('ix_bookings_booking_code', 'bookings', ['booking_code'], unique=True)
    op.create_index('ix_bookings_user_id', 'bookings', ['user_id'])
    op.create_index('ix_bookings_service_date', 'bookings', ['service_date'])
    op.create_index('ix_bookings_status', 'bookings', ['status'])
    op.create_index('ix_bookings_created_at', 'bookings', ['created_at'])

    op.create_table(
        'booking_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('booking_id', sa.Integer(), sa.ForeignKey('bookings.id', ondelete='CASCADE'), nullable=False),
        sa.Column('service_id', sa.Integer(), sa.ForeignKey('services.id', ondelete='SET NULL'), nullable=True),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('service_name', sa.String(100), nullable=False),
        sa.Column('category', sa.String(50), nullable=False),
        sa.Column('estimated_price', sa.String(50), nullable=True),
    )
    op.create_index('ix_booking_items_id', 'booking_items', ['id'])
    op.create_index('ix_booking_items_booking_id', 'booking_items', ['booking_id'])
    op.create_index('ix_booking_items_service_id', 'booking_items', ['service_id'])

    op.create_table(
        'reviews',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('booking_id', sa.Integer(), sa.ForeignKey('bookings.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('customer_name', sa.String(50), nullable=False),
        sa.Column('service_category', sa.String(50), nullable=False),
        sa.Column('service_name', sa.String(100), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('feedback', sa.String(1000), nullable=False),
        sa.Column('is_approved', sa.Boolean(), nullable=False),
        sa.Column('is_displayed_on_homepage', sa.Boolean(), nullable=False),
        sa.Column('reply_text', sa.String(500), nullable=True),
        sa.Column('replied_by_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('replied_at', sa.DateTime(), nullable=True),
        *timestamps(),
    )
    op.create_index('ix_reviews_id', 'reviews', ['id'])
    op.create_index('ix_reviews_user_id', 'reviews', ['user_id'])
    op.create_index('ix_reviews_created_at', 'reviews', ['created_at'])

    op.create_table(
        'support_requests',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(50), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('subject', sa.String(100), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('category', support_category, nullable=False),
        sa.Column('priority', support_priority, nullable=False),
        sa.Column('status', support_status, nullable=False),
        sa.Column('assigned_to_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('admin_notes', sa.String(1000), nullable=True),
        sa.Column('resolved_at', sa.DateTime(), nullable=True),
        sa.Column('resolved_by_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *timestamps(),
    )
    op.create_index('ix_support_requests_id', 'support_requests', ['id'])
    op.create_index('ix_support_requests_email', 'support_requests', ['email'])
    op.create_index('ix_support_requests_priority', 'support_requests', ['priority'])
    op.create_index('ix_support_requests_status', 'support_requests', ['status'])
    op.create_index('ix_support_requests_created_at', 'support_requests', ['created_at'])

    op.create_table(
        'gallery_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(100), nullable=False),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('category', gallery_category, nullable=False),
        sa.Column('section', gallery_section, nullable=False),
        sa.Column('media_type', media_type, nullable=False),
        sa.Column('file_name', sa.String(255), nullable=False),
        sa.Column('file_url', sa.String(500), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=False),
        sa.Column('mime_type', sa.String(100), nullable=False),
        sa.Column('uploaded_by_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('view_count', sa.Integer(), nullable=False),
        *timestamps(),
    )
    op.create_index('ix_gallery_items_id', 'gallery_items', ['id'])
    op.create_index('ix_gallery_items_category', 'gallery_items', ['category'])
    op.create_index('ix_gallery_items_is_active', 'gallery_items', ['is_active'])
    op.create_index('ix_gallery_items_created_at', 'gallery_items', ['created_at'])


def downgrade():
    op.drop_table('gallery_items')
    op.drop_table('support_requests')
    op.drop_table('reviews')
    op.drop_table('booking_items')
    op.drop_table('bookings')
    op.drop_table('services')
    op.drop_table('users')

    bind = op.get_bind()
    for enum in (media_type, gallery_section, gallery_category, support_status,
                 support_priority, support_category, booking_status, user_role):
        enum.drop(bind, checkfirst=True)
