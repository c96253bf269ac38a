from sqlalchemy.orm import Session

from campra.db.models import Channel, ChannelInvitation
from campra.repositories.refs import ById, Loaded, Ref, resolve
from campra.schemas.channel import ChannelInvitationPacked, ChannelPacked
from campra.utils.dates import isoformat_utc


def pack_channel(db: Session, ref: Ref) -> ChannelPacked:
    channel = resolve(db, Channel, ref)
    return ChannelPacked(
        id=channel.id,
        created_at=isoformat_utc(channel.created_at),
        name=channel.name,
        description=channel.description,
        user_id=channel.user_id,
    )


def pack_invitation(db: Session, ref: Ref) -> ChannelInvitationPacked:
    invitation = resolve(db, ChannelInvitation, ref)
    channel_ref = Loaded(invitation.channel) if invitation.channel is not None else ById(invitation.channel_id)
    return ChannelInvitationPacked(
        id=invitation.id,
        channel=pack_channel(db, channel_ref),
    )


def pack_invitations(db: Session, refs: list[Ref]) -> list[ChannelInvitationPacked]:
    return [pack_invitation(db, ref) for ref in refs]
