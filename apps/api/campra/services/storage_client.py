"""Helpers for creating object storage clients from instance settings."""

from __future__ import annotations

from functools import lru_cache

import boto3
from botocore.client import BaseClient
from botocore.config import Config

from campra.db.models import Meta

DEFAULT_REGION = "us-east-1"


def build_endpoint_url(meta: Meta) -> str | None:
    """Endpoint for S3-compatible services; None means AWS itself."""
    if not meta.object_storage_endpoint:
        return None
    scheme = "https" if meta.object_storage_use_ssl else "http"
    port = f":{meta.object_storage_port}" if meta.object_storage_port else ""
    return f"{scheme}://{meta.object_storage_endpoint}{port}"


def _build_s3_config(endpoint_url: str | None) -> Config:
    # S3-compatible services (MinIO, R2, ...) generally need path-style addressing.
    style = "path" if endpoint_url else "auto"
    return Config(signature_version="s3v4", s3={"addressing_style": style})


@lru_cache(maxsize=8)
def _client_for(
    region: str,
    access_key: str | None,
    secret_key: str | None,
    endpoint_url: str | None,
) -> BaseClient:
    return boto3.client(
        "s3",
        region_name=region,
        aws_access_key_id=access_key,
        aws_secret_access_key=secret_key,
        endpoint_url=endpoint_url,
        config=_build_s3_config(endpoint_url),
    )


def get_s3_client(meta: Meta) -> BaseClient:
    """
    Return an S3 client configured from the meta row's object storage settings.

    Clients are reused while those settings stay the same; changing any of
    them in meta yields a new client.
    """
    return _client_for(
        meta.object_storage_region or DEFAULT_REGION,
        meta.object_storage_access_key or None,
        meta.object_storage_secret_key or None,
        build_endpoint_url(meta),
    )
