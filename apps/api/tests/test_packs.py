"""Tests for pack serializers (entity -> API DTO)."""

from datetime import datetime, timezone

import pytest

from campra.db.models import (
    Channel,
    ChannelInvitation,
    Decoration,
    DriveFile,
    Emoji,
    Meta,
    MessagingMessage,
    MessagingMessageReaction,
    School,
    UserGroup,
)
from campra.repositories import (
    ById,
    EntityNotFound,
    Loaded,
    channels,
    decorations,
    drive_files,
    emojis,
    messaging,
    schools,
    users,
)

CREATED = datetime(2025, 7, 3, 20, 38, 5, 123000, tzinfo=timezone.utc)


def _plain_meta() -> Meta:
    return Meta(id="x", use_object_storage=False, object_storage_use_ssl=True)


def _drive_file(**overrides) -> DriveFile:
    values = dict(
        id="9g0000file",
        created_at=CREATED,
        md5="d41d8cd98f00b204e9800998ecf8427e",
        name="photo.jpg",
        type="image/jpeg",
        size=1024,
        properties={"width": 300, "height": 200, "orientation": 6},
        url="https://campra.test/files/photo.jpg",
        stored_internal=True,
        is_sensitive=False,
    )
    values.update(overrides)
    return DriveFile(**values)


# =============================================================================
# Refs
# =============================================================================

def test_resolve_by_id_missing_raises(db):
    with pytest.raises(EntityNotFound) as exc_info:
        schools.pack(db, ById("0000000000"))

    assert exc_info.value.entity_id == "0000000000"
    assert exc_info.value.model is School


def test_loaded_ref_skips_the_database(db):
    school = School(id="9g00school", name="Demo", domain="demo.example", is_demo=True)

    packed = schools.pack(db, Loaded(school))

    assert packed.id == "9g00school"
    assert db.get(School, "9g00school") is None


def test_non_ref_argument_is_rejected(db):
    with pytest.raises(TypeError):
        schools.pack(db, "9g00school")


# =============================================================================
# Schools / users
# =============================================================================

def test_school_pack_wire_shape(db):
    school = School(name="Lincoln High", domain="lincoln.example.edu", is_demo=False)
    db.add(school)
    db.commit()

    packed = schools.pack_many(db, [ById(school.id)])

    assert [item.model_dump(by_alias=True) for item in packed] == [
        {"id": school.id, "name": "Lincoln High", "logoUrl": None, "isDemo": False}
    ]


def test_user_pack_lite(db, user_factory):
    teacher = user_factory("Ms_Frizzle", is_teacher=True).user

    packed = users.pack_lite(db, ById(teacher.id)).model_dump(by_alias=True)

    assert packed["username"] == "Ms_Frizzle"
    assert packed["isTeacher"] is True
    assert packed["host"] is None
    assert "token" not in packed


# =============================================================================
# Emojis / decorations
# =============================================================================

def test_emoji_pack_prefers_public_url(db):
    emoji = Emoji(
        id="9g000emoji",
        name="blob",
        category="blobs",
        aliases=["b", "bl"],
        original_url="https://campra.test/files/blob.png",
        public_url="https://campra.test/files/blob.webp",
    )

    packed = emojis.pack(db, Loaded(emoji), _plain_meta())

    assert packed.model_dump(by_alias=True) == {
        "id": "9g000emoji",
        "aliases": ["b", "bl"],
        "name": "blob",
        "category": "blobs",
        "host": None,
        "url": "https://campra.test/files/blob.webp",
    }


def test_decoration_pack_flags_use_exact_keys(db):
    decoration = Decoration(
        id="9g0000deco",
        name="halo",
        original_url="https://campra.test/files/halo.png",
        public_url="",
        aliases=[],
        is_plus=True,
        is_mplus=False,
        credit="9g0000user",
    )

    packed = decorations.pack_many(db, [Loaded(decoration)], _plain_meta())[0].model_dump(by_alias=True)

    assert packed["isPlus"] is True
    assert packed["isMPlus"] is False
    assert packed["credit"] == "9g0000user"
    assert packed["url"] == "https://campra.test/files/halo.png"


# =============================================================================
# Drive
# =============================================================================

@pytest.mark.parametrize(
    "name,valid",
    [
        ("photo.jpg", True),
        ("  ", False),
        ("a/b.png", False),
        ("a\\b.png", False),
        ("..png", False),
        ("x" * 201, False),
    ],
)
def test_validate_file_name(name, valid):
    assert drive_files.validate_file_name(name) is valid


def test_public_properties_apply_orientation():
    file = _drive_file()

    public = drive_files.get_public_properties(file)

    assert public == {"width": 200, "height": 300}
    # stored properties are left untouched
    assert file.properties["orientation"] == 6


def test_public_properties_low_orientation_keeps_dimensions():
    file = _drive_file(properties={"width": 300, "height": 200, "orientation": 1})

    assert drive_files.get_public_properties(file) == {"width": 300, "height": 200}


def test_file_pack_public_vs_self(db):
    file = _drive_file()
    meta = _plain_meta()

    public = drive_files.pack(db, Loaded(file), meta).model_dump(by_alias=True)
    own = drive_files.pack(db, Loaded(file), meta, self_=True).model_dump(by_alias=True)

    assert public["properties"] == {"width": 200, "height": 300}
    assert own["properties"]["orientation"] == 6
    assert public["createdAt"] == "2025-07-03T20:38:05.123Z"
    assert public["thumbnailUrl"] == "https://campra.test/files/photo.jpg"
    assert public["userId"] is None
    assert public["user"] is None


def test_non_image_has_no_thumbnail(db):
    file = _drive_file(type="application/pdf", name="doc.pdf", properties={})

    packed = drive_files.pack(db, Loaded(file), _plain_meta())

    assert packed.thumbnail_url is None
    assert packed.url == "https://campra.test/files/photo.jpg"


def test_file_pack_many_drops_missing(db, container, test_auth, tmp_path):
    source = tmp_path / "a.txt"
    source.write_text("a")
    stored = container.storage.add_file(db, source, name="a.txt", user=test_auth.user)

    packed = drive_files.pack_many(
        db, [ById(stored.id), ById("0000000000")], _plain_meta(), with_user=True
    )

    assert [item.id for item in packed] == [stored.id]
    assert packed[0].user.username == "alice"


def test_file_pack_nullable_returns_none(db):
    assert drive_files.pack_nullable(db, ById("0000000000"), _plain_meta()) is None


# =============================================================================
# Channels
# =============================================================================

def test_channel_invitation_pack(db, test_auth):
    channel = Channel(name="Chess club", description="Mondays", user_id=test_auth.user.id)
    db.add(channel)
    db.commit()
    invitation = ChannelInvitation(channel_id=channel.id, user_id=test_auth.user.id)
    db.add(invitation)
    db.commit()

    packed = channels.pack_invitations(db, [ById(invitation.id)])[0].model_dump(by_alias=True)

    assert packed["id"] == invitation.id
    assert packed["channel"]["name"] == "Chess club"
    assert packed["channel"]["userId"] == test_auth.user.id


# =============================================================================
# Messaging
# =============================================================================

def test_message_pack_with_reply_and_viewer_reactions(db, test_auth, user_factory):
    alice = test_auth.user
    bob = user_factory("bob").user

    group = UserGroup(name="Study group", user_id=alice.id)
    db.add(group)
    db.commit()

    first = MessagingMessage(user_id=alice.id, recipient_id=bob.id, text="hi bob")
    db.add(first)
    db.commit()
    reply = MessagingMessage(
        user_id=bob.id,
        recipient_id=alice.id,
        text="hi alice",
        reply_id=first.id,
        reaction_counts={"👍": 2},
    )
    db.add(reply)
    db.commit()
    db.add_all(
        [
            MessagingMessageReaction(message_id=reply.id, user_id=alice.id, reaction="👍"),
            MessagingMessageReaction(message_id=reply.id, user_id=bob.id, reaction="👍"),
        ]
    )
    db.commit()

    packed = messaging.pack(db, ById(reply.id), me=alice)

    assert packed.text == "hi alice"
    assert packed.user.username == "bob"
    assert packed.recipient.username == "alice"
    assert packed.reaction_counts == {"👍": 2}
    assert packed.user_reactions == ["👍"]
    assert packed.reply.id == first.id
    assert packed.reply.recipient is None
    assert packed.reply.reply is None

    anonymous = messaging.pack(db, ById(reply.id))
    assert anonymous.user_reactions == []


def test_message_pack_group_and_flags(db, test_auth):
    group = UserGroup(name="Study group", user_id=test_auth.user.id)
    db.add(group)
    db.commit()
    message = MessagingMessage(user_id=test_auth.user.id, group_id=group.id, text="hello all", reads=["a"])
    db.add(message)
    db.commit()

    packed = messaging.pack(db, Loaded(message)).model_dump(by_alias=True)
    unpopulated = messaging.pack(db, Loaded(message), populate_group=False)

    assert packed["group"] == {
        "id": group.id,
        "createdAt": packed["group"]["createdAt"],
        "name": "Study group",
        "ownerId": test_auth.user.id,
    }
    assert packed["groupId"] == group.id
    assert packed["reads"] == ["a"]
    assert packed["reactionCounts"] == {}
    assert packed["isDeleted"] is False
    assert unpopulated.group is None
