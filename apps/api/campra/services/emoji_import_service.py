"""Custom emoji import from an exported ZIP archive.

The archive carries a `meta.json` with an `emojis` list. Each record looks
like::

    {"downloaded": true, "fileName": "blob.png",
     "emoji": {"name": "blob", "category": "blobs", "aliases": ["b"]}}
"""

from __future__ import annotations

import json
import logging
import tempfile
import zipfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

import httpx
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from campra.db.models import DriveFile, Emoji
from campra.services.http_service import download_url

if TYPE_CHECKING:
    from campra.services.drive_service import DriveStorage

logger = logging.getLogger(__name__)

META_FILE_NAME = "meta.json"


class EmojiImportError(RuntimeError):
    """Raised when the archive itself is unusable."""


@dataclass
class EmojiImportResult:
    imported: int = 0
    skipped: int = 0


def _read_records(archive_path: Path, output_dir: Path) -> list[Any]:
    try:
        with zipfile.ZipFile(archive_path) as archive:
            archive.extractall(output_dir)
    except zipfile.BadZipFile as exc:
        raise EmojiImportError("Failed to extract zip file") from exc

    meta_path = output_dir / META_FILE_NAME
    if not meta_path.is_file():
        raise EmojiImportError("meta.json not found in zip file")

    try:
        data = json.loads(meta_path.read_text(encoding="utf-8"))
    except ValueError as exc:
        raise EmojiImportError("meta.json is not valid JSON") from exc

    records = data.get("emojis") if isinstance(data, dict) else None
    if not isinstance(records, list):
        raise EmojiImportError("Invalid meta.json format: missing or invalid emojis array")
    return records


def _resolve_member(output_dir: Path, file_name: Any) -> Path | None:
    if not isinstance(file_name, str) or not file_name:
        return None
    candidate = (output_dir / file_name).resolve()
    if output_dir.resolve() not in candidate.parents or not candidate.is_file():
        return None
    return candidate


def _import_record(db: Session, storage: DriveStorage, emoji_info: dict, path: Path, file_name: str) -> Emoji:
    name = emoji_info["name"]
    db.query(Emoji).filter(Emoji.name == name).delete(synchronize_session=False)
    db.commit()

    drive_file = storage.add_file(db, path, name=file_name)
    emoji = Emoji(
        updated_at=datetime.now(timezone.utc),
        name=name,
        category=emoji_info.get("category") or None,
        host=None,
        aliases=emoji_info.get("aliases") or [],
        original_url=drive_file.url,
        public_url=drive_file.webpublic_url or drive_file.url,
        type=drive_file.webpublic_type or drive_file.type,
    )
    db.add(emoji)
    db.commit()
    return emoji


async def import_custom_emojis(
    db: Session,
    file_id: str,
    *,
    storage: DriveStorage,
    timeout: float,
    transport: httpx.AsyncBaseTransport | None = None,
) -> EmojiImportResult | None:
    """
    Import every downloadable emoji from the archive in drive file `file_id`.

    Returns None when the drive file no longer exists. Download failures
    propagate so the job is retried; a bad archive raises EmojiImportError.
    Individual records that fail are logged and counted as skipped.
    """
    logger.info("Importing custom emojis from file %s", file_id)

    drive_file = db.get(DriveFile, file_id)
    if drive_file is None:
        logger.warning("Emoji archive %s not found, nothing to import", file_id)
        return None

    result = EmojiImportResult()
    with tempfile.TemporaryDirectory(prefix="campra-emojis-") as tmp:
        tmp_dir = Path(tmp)
        archive_path = tmp_dir / "emojis.zip"
        output_dir = tmp_dir / "emojis"
        output_dir.mkdir()

        await download_url(drive_file.url, archive_path, timeout=timeout, transport=transport)
        # extraction, hashing and uploads block; keep them off the server loop
        records = await run_in_threadpool(_read_records, archive_path, output_dir)

        for record in records:
            if not isinstance(record, dict) or not record.get("downloaded"):
                result.skipped += 1
                continue

            emoji_info = record.get("emoji")
            if not isinstance(emoji_info, dict) or not emoji_info.get("name"):
                logger.warning("Skipping emoji with missing name")
                result.skipped += 1
                continue

            file_name = record.get("fileName")
            path = _resolve_member(output_dir, file_name)
            if path is None:
                logger.warning("Emoji file not found: %s", file_name)
                result.skipped += 1
                continue

            try:
                await run_in_threadpool(_import_record, db, storage, emoji_info, path, file_name)
                result.imported += 1
            except Exception:
                db.rollback()
                logger.exception("Failed to import emoji %s", emoji_info.get("name"))
                result.skipped += 1

    logger.info("Imported %s emojis (%s skipped)", result.imported, result.skipped)
    return result
