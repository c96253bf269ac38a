"""Baseline migration - core Campra tables

Revision ID: 0001_baseline
Revises:
Create Date: 2023-11-01

Creates the tables that existed before the tracked column/constraint
deltas: users, schools, notes, instance meta, drive, emojis, decorations,
channels, messaging, and the background job queue.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from campra.db.migration_utils import has_table


# revision identifiers, used by Alembic.
revision: str = '0001_baseline'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


JSON = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _id() -> sa.Column:
    return sa.Column('id', sa.String(32), primary_key=True)


def _created_at() -> sa.Column:
    return sa.Column('createdAt', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def _flag(name: str, default: bool = False) -> sa.Column:
    return sa.Column(name, sa.Boolean(), server_default=sa.true() if default else sa.false(), nullable=False)


def upgrade() -> None:
    """Create the core tables."""

    # ==========================================================================
    # Schools
    # ==========================================================================
    if not has_table('schools'):
        op.create_table(
            'schools',
            _id(),
            _created_at(),
            sa.Column('updatedAt', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.Column('name', sa.String(256), nullable=False),
            sa.Column('domain', sa.String(256), nullable=False, unique=True),
            sa.Column('type', sa.String(32), server_default='high_school', nullable=False),
            sa.Column('location', sa.String(512), nullable=True),
            sa.Column('description', sa.String(2048), nullable=True),
            sa.Column('logoUrl', sa.String(512), nullable=True),
            sa.Column('websiteUrl', sa.String(512), nullable=True),
            _flag('isActive', default=True),
            _flag('isDemo'),
        )
        op.create_index('IDX_schools_type', 'schools', ['type'])
        op.create_index('IDX_schools_isActive', 'schools', ['isActive'])
        op.create_index('IDX_schools_isDemo', 'schools', ['isDemo'])

    # ==========================================================================
    # Users
    # ==========================================================================
    if not has_table('user'):
        op.create_table(
            'user',
            _id(),
            _created_at(),
            sa.Column('username', sa.String(128), nullable=False),
            sa.Column('usernameLower', sa.String(128), nullable=False, unique=True),
            sa.Column('name', sa.String(128), nullable=True),
            sa.Column('host', sa.String(512), nullable=True),
            sa.Column('token', sa.String(16), nullable=True, unique=True),
            _flag('isAdmin'),
            _flag('isModerator'),
            _flag('isSchoolAdmin'),
            sa.Column('schoolId', sa.String(32), sa.ForeignKey('schools.id', ondelete='SET NULL'), nullable=True),
            sa.Column('adminForSchoolId', sa.String(32), nullable=True),
        )

    # ==========================================================================
    # Instance meta (singleton)
    # ==========================================================================
    if not has_table('meta'):
        op.create_table(
            'meta',
            _id(),
            sa.Column('name', sa.String(128), nullable=True),
            sa.Column('description', sa.String(1024), nullable=True),
            _flag('enableContentModeration'),
            sa.Column('iffyApiKey', sa.String(256), nullable=True),
            _flag('autoHideInappropriateContent', default=True),
            _flag('useObjectStorage'),
            sa.Column('objectStorageBaseUrl', sa.String(512), nullable=True),
            sa.Column('objectStorageBucket', sa.String(512), nullable=True),
            sa.Column('objectStoragePrefix', sa.String(512), nullable=True),
            sa.Column('objectStorageEndpoint', sa.String(512), nullable=True),
            sa.Column('objectStorageRegion', sa.String(512), nullable=True),
            sa.Column('objectStoragePort', sa.Integer(), nullable=True),
            sa.Column('objectStorageAccessKey', sa.String(512), nullable=True),
            sa.Column('objectStorageSecretKey', sa.String(512), nullable=True),
            _flag('objectStorageUseSSL', default=True),
        )

    # ==========================================================================
    # Notes
    # ==========================================================================
    if not has_table('note'):
        op.create_table(
            'note',
            _id(),
            _created_at(),
            sa.Column('userId', sa.String(32), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
            sa.Column('text', sa.Text(), nullable=True),
            sa.Column('cw', sa.String(512), nullable=True),
            sa.Column('visibility', sa.String(16), server_default='public', nullable=False),
            _flag('isHidden'),
        )
        op.create_index('IDX_note_userId', 'note', ['userId'])

    # ==========================================================================
    # Drive
    # ==========================================================================
    if not has_table('drive_folder'):
        op.create_table(
            'drive_folder',
            _id(),
            _created_at(),
            sa.Column('name', sa.String(128), nullable=False),
            sa.Column('userId', sa.String(32), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=True),
            sa.Column('parentId', sa.String(32), sa.ForeignKey('drive_folder.id', ondelete='SET NULL'), nullable=True),
        )

    if not has_table('drive_file'):
        op.create_table(
            'drive_file',
            _id(),
            _created_at(),
            sa.Column('userId', sa.String(32), sa.ForeignKey('user.id', ondelete='SET NULL'), nullable=True),
            sa.Column('userHost', sa.String(512), nullable=True),
            sa.Column('md5', sa.String(32), nullable=False),
            sa.Column('name', sa.String(256), nullable=False),
            sa.Column('type', sa.String(128), nullable=False),
            sa.Column('size', sa.BigInteger(), nullable=False),
            sa.Column('comment', sa.String(512), nullable=True),
            sa.Column('blurhash', sa.String(128), nullable=True),
            sa.Column('properties', JSON, nullable=False),
            _flag('storedInternal'),
            sa.Column('url', sa.String(512), nullable=False),
            sa.Column('thumbnailUrl', sa.String(512), nullable=True),
            sa.Column('webpublicUrl', sa.String(512), nullable=True),
            sa.Column('webpublicType', sa.String(128), nullable=True),
            sa.Column('accessKey', sa.String(256), nullable=True),
            sa.Column('thumbnailAccessKey', sa.String(256), nullable=True),
            sa.Column('webpublicAccessKey', sa.String(256), nullable=True),
            sa.Column('uri', sa.String(512), nullable=True),
            _flag('isLink'),
            _flag('isSensitive'),
            sa.Column('folderId', sa.String(32), sa.ForeignKey('drive_folder.id', ondelete='SET NULL'), nullable=True),
        )
        op.create_index('IDX_drive_file_userId', 'drive_file', ['userId'])
        op.create_index('IDX_drive_file_folderId', 'drive_file', ['folderId'])

    # ==========================================================================
    # Emojis & decorations
    # ==========================================================================
    if not has_table('emoji'):
        op.create_table(
            'emoji',
            _id(),
            sa.Column('updatedAt', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
            sa.Column('name', sa.String(128), nullable=False),
            sa.Column('host', sa.String(128), nullable=True),
            sa.Column('category', sa.String(128), nullable=True),
            sa.Column('originalUrl', sa.String(512), nullable=False),
            sa.Column('publicUrl', sa.String(512), server_default='', nullable=False),
            sa.Column('type', sa.String(64), nullable=True),
            sa.Column('aliases', JSON, nullable=False),
        )
        op.create_index('IDX_emoji_name_host', 'emoji', ['name', 'host'], unique=True)
        op.create_index('IDX_emoji_host', 'emoji', ['host'])

    if not has_table('decoration'):
        op.create_table(
            'decoration',
            _id(),
            sa.Column('updatedAt', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
            sa.Column('name', sa.String(128), nullable=False),
            sa.Column('host', sa.String(128), nullable=True),
            sa.Column('category', sa.String(128), nullable=True),
            sa.Column('originalUrl', sa.String(512), nullable=False),
            sa.Column('publicUrl', sa.String(512), server_default='', nullable=False),
            sa.Column('type', sa.String(64), nullable=True),
            sa.Column('aliases', JSON, nullable=False),
            _flag('isPlus'),
            _flag('isMPlus'),
            sa.Column('credit', sa.String(32), nullable=True),
        )
        op.create_index('IDX_decoration_name_host', 'decoration', ['name', 'host'], unique=True)

    # ==========================================================================
    # Channels
    # ==========================================================================
    if not has_table('channel'):
        op.create_table(
            'channel',
            _id(),
            _created_at(),
            sa.Column('userId', sa.String(32), sa.ForeignKey('user.id', ondelete='SET NULL'), nullable=True),
            sa.Column('name', sa.String(128), nullable=False),
            sa.Column('description', sa.String(2048), nullable=True),
        )

    if not has_table('channel_invitation'):
        op.create_table(
            'channel_invitation',
            _id(),
            _created_at(),
            sa.Column('channelId', sa.String(32), sa.ForeignKey('channel.id', ondelete='CASCADE'), nullable=False),
            sa.Column('userId', sa.String(32), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        )
        op.create_index('IDX_channel_invitation_userId', 'channel_invitation', ['userId'])

    # ==========================================================================
    # Messaging
    # ==========================================================================
    if not has_table('user_group'):
        op.create_table(
            'user_group',
            _id(),
            _created_at(),
            sa.Column('name', sa.String(256), nullable=False),
            sa.Column('userId', sa.String(32), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        )

    if not has_table('messaging_message'):
        op.create_table(
            'messaging_message',
            _id(),
            _created_at(),
            sa.Column('userId', sa.String(32), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
            sa.Column('recipientId', sa.String(32), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=True),
            sa.Column('groupId', sa.String(32), sa.ForeignKey('user_group.id', ondelete='CASCADE'), nullable=True),
            sa.Column('text', sa.Text(), nullable=True),
            sa.Column('fileId', sa.String(32), sa.ForeignKey('drive_file.id', ondelete='CASCADE'), nullable=True),
            _flag('isRead'),
            sa.Column('reads', JSON, nullable=False),
            sa.Column('replyId', sa.String(32), sa.ForeignKey('messaging_message.id', ondelete='SET NULL'), nullable=True),
            sa.Column('reactionCounts', JSON, nullable=True),
            _flag('isDeleted'),
        )
        op.create_index('IDX_messaging_message_userId', 'messaging_message', ['userId'])
        op.create_index('IDX_messaging_message_recipientId', 'messaging_message', ['recipientId'])
        op.create_index('IDX_messaging_message_groupId', 'messaging_message', ['groupId'])

    if not has_table('messaging_message_reaction'):
        op.create_table(
            'messaging_message_reaction',
            _id(),
            _created_at(),
            sa.Column('messageId', sa.String(32), sa.ForeignKey('messaging_message.id', ondelete='CASCADE'), nullable=False),
            sa.Column('userId', sa.String(32), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
            sa.Column('reaction', sa.String(260), nullable=False),
        )
        op.create_index(
            'IDX_messaging_message_reaction_message_user',
            'messaging_message_reaction',
            ['messageId', 'userId'],
        )

    # ==========================================================================
    # Background jobs
    # ==========================================================================
    if not has_table('job'):
        op.create_table(
            'job',
            _id(),
            sa.Column('job_type', sa.String(50), nullable=False),
            sa.Column('payload', JSON, nullable=False),
            sa.Column('run_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.Column('status', sa.String(20), server_default='pending', nullable=False),
            sa.Column('attempts', sa.Integer(), server_default='0', nullable=False),
            sa.Column('max_attempts', sa.Integer(), server_default='3', nullable=False),
            sa.Column('last_error', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
            sa.Column('idempotency_key', sa.String(255), nullable=True),
        )
        op.create_index('idx_job_pending', 'job', ['status', 'run_at'])
        op.create_index(
            'uq_job_idempotency',
            'job',
            ['idempotency_key'],
            unique=True,
            postgresql_where=sa.text('idempotency_key IS NOT NULL'),
            sqlite_where=sa.text('idempotency_key IS NOT NULL'),
        )


def downgrade() -> None:
    """Drop the core tables (reverse dependency order)."""
    for table in (
        'job',
        'messaging_message_reaction',
        'messaging_message',
        'user_group',
        'channel_invitation',
        'channel',
        'decoration',
        'emoji',
        'drive_file',
        'drive_folder',
        'note',
        'meta',
        'user',
        'schools',
    ):
        if has_table(table):
            op.drop_table(table)
