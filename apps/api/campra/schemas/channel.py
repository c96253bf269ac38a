"""Channel schemas."""

from campra.schemas.common import CampraModel


class ChannelPacked(CampraModel):
    id: str
    created_at: str
    name: str
    description: str | None
    user_id: str | None


class ChannelInvitationPacked(CampraModel):
    id: str
    channel: ChannelPacked
