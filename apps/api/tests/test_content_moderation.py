"""Tests for the Iffy client and the content auto-moderator."""

import json

import httpx
import pytest

from campra.db.enums import JobStatus, JobType
from campra.db.models import DriveFile, Job, Meta, Note
from campra.services import iffy_client, job_service, meta_service
from campra.services.content_auto_moderator import ContentAutoModerator
from campra.services.iffy_client import IffyClient, IffyError, ModerationRequest

INGEST_URL = "https://iffy.example.com/api/v1/ingest"


def _client(handler, **overrides) -> IffyClient:
    values = dict(
        api_key="iffy-secret",
        api_url=INGEST_URL,
        public_url="https://campra.test",
        max_attempts=1,
        transport=httpx.MockTransport(handler),
    )
    values.update(overrides)
    return IffyClient(**values)


def _enable_moderation(db, **overrides) -> Meta:
    meta = meta_service.fetch_meta(db)
    meta.enable_content_moderation = True
    meta.iffy_api_key = "iffy-secret"
    for key, value in overrides.items():
        setattr(meta, key, value)
    db.commit()
    return meta


# =============================================================================
# Iffy client
# =============================================================================

@pytest.mark.parametrize(
    "setting,expected",
    [("low", 0.5), ("medium", 0.7), ("high", 0.9), (None, 0.9), ("bogus", 0.9)],
)
def test_confidence_threshold_mapping(setting, expected):
    assert iffy_client.confidence_threshold_for(setting) == expected


def test_set_confidence_threshold_bounds():
    client = _client(lambda request: httpx.Response(200))

    client.set_confidence_threshold(0.25)
    assert client.confidence_threshold == 0.25

    with pytest.raises(ValueError):
        client.set_confidence_threshold(1.5)
    with pytest.raises(ValueError):
        client.set_confidence_threshold(-0.1)


def test_from_meta_requires_api_key():
    with pytest.raises(IffyError):
        IffyClient.from_meta(Meta(id="x", iffy_api_key=None), public_url="https://campra.test")


def test_from_meta_uses_defaults():
    meta = Meta(id="x", iffy_api_key="k", iffy_api_url=None, iffy_confidence_threshold="low")

    client = IffyClient.from_meta(meta, public_url="https://campra.test/", default_api_url=INGEST_URL)

    assert client.api_url == INGEST_URL
    assert client.confidence_threshold == 0.5
    assert client.public_url == "https://campra.test"


@pytest.mark.asyncio
async def test_submit_text_posts_ingest_record():
    captured = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"id": "rec_1", "url": "https://iffy.example.com/records/rec_1"})

    result = await _client(handler).submit_text(
        ModerationRequest(content="hello", content_type="text", user_id="u1", content_id="n1", school_id="s1")
    )

    assert result.category == "pending"
    assert result.flagged is False
    assert result.iffy_record_id == "rec_1"
    assert result.iffy_url == "https://iffy.example.com/records/rec_1"

    request = captured[0]
    body = json.loads(request.content)
    assert request.headers["authorization"] == "Bearer iffy-secret"
    assert body["clientId"] == "n1"
    assert body["clientUrl"] == "https://campra.test/notes/n1"
    assert body["entity"] == "post"
    assert body["content"] == {"text": "hello"}
    assert body["user"]["clientId"] == "u1"
    assert body["metadata"]["platform"] == "campra"
    assert body["metadata"]["schoolId"] == "s1"


@pytest.mark.asyncio
async def test_submit_image_posts_image_urls():
    captured = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(json.loads(request.content))
        return httpx.Response(200, json={})

    result = await _client(handler).submit_image(
        ModerationRequest(content="https://x/p.png", content_type="image", user_id="u1", content_id="f1"),
        "https://x/p.png",
    )

    assert result.category == "pending"
    assert result.iffy_record_id == "f1"
    assert captured[0]["entity"] == "image"
    assert captured[0]["clientUrl"] == "https://campra.test/files/f1"
    assert captured[0]["content"] == {"imageUrls": ["https://x/p.png"]}


@pytest.mark.asyncio
async def test_submit_error_yields_error_result():
    result = await _client(lambda request: httpx.Response(500)).submit_text(
        ModerationRequest(content="hello", content_type="text", user_id="u1", content_id="n1")
    )

    assert result.category == "error"
    assert result.flagged is False
    assert result.reason == "Moderation service unavailable"


@pytest.mark.asyncio
async def test_submit_connection_failure_yields_error_result():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    result = await _client(handler).submit_text(
        ModerationRequest(content="hello", content_type="text", user_id="u1", content_id="n1")
    )

    assert result.category == "error"


@pytest.mark.asyncio
async def test_submit_rejects_mismatched_content_type():
    client = _client(lambda request: httpx.Response(200))
    image = ModerationRequest(content="x", content_type="image", user_id="u1", content_id="f1")
    text = ModerationRequest(content="x", content_type="text", user_id="u1", content_id="n1")

    with pytest.raises(ValueError):
        await client.submit_text(image)
    with pytest.raises(ValueError):
        await client.submit_image(text, "https://x/p.png")


# =============================================================================
# Auto-moderator
# =============================================================================

@pytest.mark.asyncio
async def test_moderator_disabled_without_configuration(db, settings):
    moderator = ContentAutoModerator(settings)

    await moderator.initialize(db)

    assert not moderator.is_available()
    assert moderator.client is None


@pytest.mark.asyncio
async def test_moderator_disabled_without_api_key(db, settings):
    _enable_moderation(db, iffy_api_key=None)
    moderator = ContentAutoModerator(settings)

    await moderator.initialize(db)

    assert not moderator.is_available()


@pytest.mark.asyncio
async def test_moderator_initialize_failure_leaves_it_disabled(db, settings, monkeypatch):
    def broken_fetch(_db):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(meta_service, "fetch_meta", broken_fetch)
    moderator = ContentAutoModerator(settings)

    await moderator.initialize(db)

    assert not moderator.is_available()


@pytest.mark.asyncio
async def test_moderator_initializes_from_meta(db, settings, user_factory):
    bot = user_factory("automod").user
    _enable_moderation(db, iffy_confidence_threshold="high", automod_account_id=bot.id)
    moderator = ContentAutoModerator(settings)

    await moderator.initialize(db)

    assert moderator.is_available()
    assert moderator.client.api_url == settings.IFFY_DEFAULT_API_URL
    assert moderator.client.confidence_threshold == 0.9
    assert moderator.automod_account_id == bot.id


@pytest.mark.asyncio
async def test_moderator_reinitialize_picks_up_changes(db, settings):
    moderator = ContentAutoModerator(settings)
    await moderator.initialize(db)
    assert not moderator.is_available()

    _enable_moderation(db, iffy_api_url="https://iffy.internal/ingest")
    await moderator.reinitialize(db)

    assert moderator.client.api_url == "https://iffy.internal/ingest"


@pytest.mark.asyncio
async def test_moderate_note_records_scan(db, settings, test_auth, mock_http):
    mock_http.routes[settings.IFFY_DEFAULT_API_URL] = lambda request: httpx.Response(
        200, json={"id": "rec_9", "url": "https://iffy.example.com/records/rec_9"}
    )
    _enable_moderation(db)
    moderator = ContentAutoModerator(settings, transport=httpx.MockTransport(mock_http.handler))
    await moderator.initialize(db)
    note = Note(user_id=test_auth.user.id, text="is this ok?")
    db.add(note)
    db.commit()

    allowed = await moderator.moderate_note(db, note)

    assert allowed is True
    assert note.iffy_scan_result["category"] == "pending"
    assert note.iffy_scan_result["iffy_record_id"] == "rec_9"
    assert note.iffy_scan_url == "https://iffy.example.com/records/rec_9"


@pytest.mark.asyncio
async def test_moderate_note_allows_when_unavailable(db, settings, test_auth):
    moderator = ContentAutoModerator(settings)
    note = Note(user_id=test_auth.user.id, text="hi")
    db.add(note)
    db.commit()

    assert await moderator.moderate_note(db, note) is True
    assert note.iffy_scan_result is None


@pytest.mark.asyncio
async def test_moderate_image_always_allows(db, settings, test_auth, mock_http):
    _enable_moderation(db)
    moderator = ContentAutoModerator(settings, transport=httpx.MockTransport(mock_http.handler))
    await moderator.initialize(db)
    file = DriveFile(
        id="9g0000file",
        user_id=test_auth.user.id,
        md5="0" * 32,
        name="p.png",
        type="image/png",
        size=1,
        url="https://campra.test/files/p.png",
    )

    # ingest endpoint is not mocked, so Iffy answers 404
    assert await moderator.moderate_image(db, file, file.url) is True
    assert json.loads(mock_http.requests[0].content)["entity"] == "image"


@pytest.mark.asyncio
async def test_moderate_note_job_uses_container_moderator(db, container, settings, test_auth, mock_http):
    mock_http.routes[settings.IFFY_DEFAULT_API_URL] = lambda request: httpx.Response(200, json={"id": "rec_2"})
    _enable_moderation(db)
    await container.moderator.initialize(db)
    note = Note(user_id=test_auth.user.id, text="queued")
    db.add(note)
    db.commit()
    job = job_service.schedule_job(db, JobType.MODERATE_NOTE, {"note_id": note.id})

    await container.queue.run_once()

    db.expire_all()
    assert db.get(Job, job.id).status == JobStatus.COMPLETED.value
    assert db.get(Note, note.id).iffy_scan_result["iffy_record_id"] == "rec_2"
