"""Messaging message packs."""

from __future__ import annotations

from sqlalchemy.orm import Session

from campra.db.models import Meta, MessagingMessage, MessagingMessageReaction, User, UserGroup
from campra.repositories import drive_files, users
from campra.repositories.refs import ById, Loaded, Ref, resolve
from campra.schemas.messaging import MessagingMessagePacked, UserGroupPacked
from campra.services import meta_service
from campra.utils.dates import isoformat_utc


def pack_group(db: Session, ref: Ref) -> UserGroupPacked:
    group = resolve(db, UserGroup, ref)
    return UserGroupPacked(
        id=group.id,
        created_at=isoformat_utc(group.created_at),
        name=group.name,
        owner_id=group.user_id,
    )


def _user_ref(entity: User | None, user_id: str) -> Ref:
    return Loaded(entity) if entity is not None else ById(user_id)


def _viewer_reactions(db: Session, message_id: str, me: User | None) -> list[str]:
    if me is None:
        return []
    rows = (
        db.query(MessagingMessageReaction.reaction)
        .filter(
            MessagingMessageReaction.message_id == message_id,
            MessagingMessageReaction.user_id == me.id,
        )
        .order_by(MessagingMessageReaction.created_at, MessagingMessageReaction.id)
        .all()
    )
    return [reaction for (reaction,) in rows]


def pack(
    db: Session,
    ref: Ref,
    me: User | None = None,
    *,
    populate_recipient: bool = True,
    populate_group: bool = True,
    populate_reply: bool = True,
    meta: Meta | None = None,
) -> MessagingMessagePacked:
    """
    Pack a message for `me` (the viewer, if any).

    The reply is packed one level deep without its recipient or group.
    """
    message = resolve(db, MessagingMessage, ref)
    if meta is None and message.file_id:
        meta = meta_service.fetch_meta(db)

    recipient = None
    if message.recipient_id and populate_recipient:
        recipient = users.pack_lite(db, _user_ref(message.recipient, message.recipient_id))

    group = None
    if message.group_id and populate_group:
        group = pack_group(db, Loaded(message.group) if message.group else ById(message.group_id))

    reply = None
    if populate_reply and message.reply is not None:
        reply = pack(
            db,
            Loaded(message.reply),
            me,
            populate_recipient=False,
            populate_group=False,
            populate_reply=False,
            meta=meta,
        )

    return MessagingMessagePacked(
        id=message.id,
        created_at=isoformat_utc(message.created_at),
        text=message.text,
        user_id=message.user_id,
        user=users.pack_lite(db, _user_ref(message.user, message.user_id)),
        recipient_id=message.recipient_id,
        recipient=recipient,
        group_id=message.group_id,
        group=group,
        file_id=message.file_id,
        file=drive_files.pack_nullable(db, ById(message.file_id), meta) if message.file_id else None,
        is_read=message.is_read,
        reads=list(message.reads or []),
        reply_id=message.reply_id,
        reply=reply,
        reaction_counts=message.reaction_counts or {},
        user_reactions=_viewer_reactions(db, message.id, me),
        is_deleted=message.is_deleted,
    )
