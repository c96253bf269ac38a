"""Presigned object storage URLs.

Stored media URLs go stale once their signature expires, so packs re-sign
them on every read: the object key is recovered from the stored URL, signed
with the S3 client, and the signature query is grafted onto the instance's
configured base URL (which may be a CDN in front of the bucket).
"""

from __future__ import annotations

import logging
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from botocore.exceptions import BotoCoreError, ClientError

from campra.core.structured_logging import safe_url
from campra.db.models import Meta
from campra.services import storage_client

logger = logging.getLogger(__name__)

DEFAULT_EXPIRES_SECONDS = 3600


class SignedUrlError(RuntimeError):
    """Raised when a signed URL cannot be produced."""


def generate_signed_url(meta: Meta, key: str, expires: int = DEFAULT_EXPIRES_SECONDS) -> str:
    """Presigned GET URL for `key` in the configured bucket."""
    if not meta.use_object_storage:
        raise SignedUrlError("Object storage is not enabled")
    if not meta.object_storage_bucket:
        raise SignedUrlError("Object storage bucket is not configured")

    client = storage_client.get_s3_client(meta)
    try:
        return client.generate_presigned_url(
            "get_object",
            Params={"Bucket": meta.object_storage_bucket, "Key": key},
            ExpiresIn=expires,
        )
    except (BotoCoreError, ClientError) as exc:
        raise SignedUrlError(f"Failed to sign object key: {type(exc).__name__}") from exc


def sign_on_base_url(meta: Meta, key: str, expires: int = DEFAULT_EXPIRES_SECONDS) -> str:
    """`{base_url}/{key}` carrying a fresh signature query string."""
    key = key.lstrip("/")
    signed = urlsplit(generate_signed_url(meta, key, expires))

    target = urlsplit(f"{meta.object_storage_url}/{key}")
    params = dict(parse_qsl(target.query, keep_blank_values=True))
    params.update(parse_qsl(signed.query, keep_blank_values=True))
    return urlunsplit(
        (target.scheme, target.netloc, target.path, urlencode(params), target.fragment)
    )


def resign_stored_url(meta: Meta, url: str | None, expires: int = DEFAULT_EXPIRES_SECONDS) -> str | None:
    """
    Re-sign a stored object storage URL.

    URLs that do not live under the configured base URL (remote media, local
    files) and any signing failure fall back to the stored URL.
    """
    if not url or not meta.use_object_storage:
        return url

    try:
        base_url = meta.object_storage_url
        if not url.startswith(base_url):
            return url
        base_path = urlsplit(base_url).path
        key = urlsplit(url).path[len(base_path):].lstrip("/")
        if not key:
            return url
        return sign_on_base_url(meta, key, expires)
    except (SignedUrlError, ValueError) as exc:
        logger.debug("Falling back to stored URL %s: %s", safe_url(url), exc)
        return url
