"""private chat tables

Revision ID: chat_0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = 'chat_0001'
down_revision = None
branch_labels = None
depends_on = None

def upgrade() -> None:
    # One row per unordered pair of participants
    op.create_table('chat_rooms',
        sa.Column('id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('participant_key', sa.String(length=80), nullable=False),
        sa.Column('last_updated', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('participant_key')
    )
    op.create_index(op.f('ix_chat_rooms_id'), 'chat_rooms', ['id'])
    op.create_index(op.f('ix_chat_rooms_last_updated'), 'chat_rooms', ['last_updated'])
    op.create_index(op.f('ix_chat_rooms_created_at'), 'chat_rooms', ['created_at'])

    op.create_table('chat_members',
        sa.Column('id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('chat_room_id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('member_id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('member_type', sa.String(length=10), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['chat_room_id'], ['chat_rooms.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('chat_room_id', 'member_id', name='uq_chat_member')
    )
    op.create_index(op.f('ix_chat_members_id'), 'chat_members', ['id'])
    op.create_index(op.f('ix_chat_members_chat_room_id'), 'chat_members', ['chat_room_id'])
    op.create_index(op.f('ix_chat_members_member_id'), 'chat_members', ['member_id'])
    op.create_index(op.f('ix_chat_members_created_at'), 'chat_members', ['created_at'])

    op.create_table('chat_messages',
        sa.Column('id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('chat_room_id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('sender_id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['chat_room_id'], ['chat_rooms.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_chat_message_room_time', 'chat_messages', ['chat_room_id', 'created_at'])
    op.create_index(op.f('ix_chat_messages_id'), 'chat_messages', ['id'])
    op.create_index(op.f('ix_chat_messages_chat_room_id'), 'chat_messages', ['chat_room_id'])
    op.create_index(op.f('ix_chat_messages_sender_id'), 'chat_messages', ['sender_id'])
    op.create_index(op.f('ix_chat_messages_created_at'), 'chat_messages', ['created_at'])

def downgrade() -> None:
    op.drop_index(op.f('ix_chat_messages_created_at'), table_name='chat_messages')
    op.drop_index(op.f('ix_chat_messages_sender_id'), table_name='chat_messages')
    op.drop_index(op.f('ix_chat_messages_chat_room_id'), table_name='chat_messages')
    op.drop_index(op.f('ix_chat_messages_id'), table_name='chat_messages')
    op.drop_index('idx_chat_message_room_time', table_name='chat_messages')
    op.drop_table('chat_messages')

    op.drop_index(op.f('ix_chat_members_created_at'), table_name='chat_members')
    op.drop_index(op.f('ix_chat_members_member_id'), table_name='chat_members')
    op.drop_index(op.f('ix_chat_members_chat_room_id'), table_name='chat_members')
    op.drop_index(op.f('ix_chat_members_id'), table_name='chat_members')
    op.drop_table('chat_members')

    op.drop_index(op.f('ix_chat_rooms_created_at'), table_name='chat_rooms')
    op.drop_index(op.f('ix_chat_rooms_last_updated'), table_name='chat_rooms')
    op.drop_index(op.f('ix_chat_rooms_id'), table_name='chat_rooms')
    op.drop_table('chat_rooms')
