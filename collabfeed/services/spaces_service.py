"""Media object storage on DigitalOcean Spaces."""
from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Protocol
from urllib.parse import urlparse

from boto3.session import Session
from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError

from ..config import get_settings
from .errors import StorageFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ObjectRef:
    """Location of a stored object."""

    key: str
    url: str


class MediaStore(Protocol):
    def put_object(self, data: bytes, content_type: str, *, filename: str | None = None) -> ObjectRef: ...

    def delete_object(self, key: str) -> None: ...


@dataclass(frozen=True)
class SpacesConfig:
    """Runtime configuration extracted from settings."""

    key: str
    secret: str
    region: str
    bucket: str
    api_endpoint: str
    public_endpoint: str
    folder: str


class SpacesConfigurationError(StorageFailure):
    """Raised when required DigitalOcean Spaces settings are missing or invalid."""


@lru_cache(maxsize=1)
def load_spaces_config() -> SpacesConfig:
    """Read and validate DigitalOcean Spaces configuration."""

    settings = get_settings()
    required: dict[str, str | None] = {
        "DO_SPACES_KEY": settings.spaces_key,
        "DO_SPACES_SECRET": settings.spaces_secret,
        "DO_SPACES_REGION": settings.spaces_region,
        "DO_SPACES_NAME": settings.spaces_bucket,
        "DO_SPACES_ENDPOINT": settings.spaces_endpoint,
    }
    missing = [name for name, value in required.items() if not value or not value.strip()]
    if missing:
        raise SpacesConfigurationError(
            "Missing required DigitalOcean Spaces configuration: " + ", ".join(sorted(missing))
        )

    region = (settings.spaces_region or "").strip()
    bucket = (settings.spaces_bucket or "").strip()
    endpoint_raw = (settings.spaces_endpoint or "").strip().rstrip("/")

    parsed = urlparse(endpoint_raw)
    if not parsed.scheme:
        parsed = urlparse(f"https://{endpoint_raw.lstrip(':/')}")
    host = parsed.netloc or parsed.path
    if not host:
        raise SpacesConfigurationError("DO_SPACES_ENDPOINT must include a hostname.")
    if not host.endswith(".digitaloceanspaces.com"):
        raise SpacesConfigurationError("DO_SPACES_ENDPOINT must point to a *.digitaloceanspaces.com hostname.")

    return SpacesConfig(
        key=(settings.spaces_key or "").strip(),
        secret=(settings.spaces_secret or "").strip(),
        region=region,
        bucket=bucket,
        api_endpoint=f"https://{region}.digitaloceanspaces.com",
        public_endpoint=parsed.geturl().rstrip("/"),
        folder=settings.media_folder,
    )


@lru_cache(maxsize=1)
def get_spaces_client() -> BaseClient:
    """Create a singleton boto3 client for Spaces interactions."""

    config = load_spaces_config()
    session = Session()
    return session.client(
        "s3",
        region_name=config.region,
        endpoint_url=config.api_endpoint,
        aws_access_key_id=config.key,
        aws_secret_access_key=config.secret,
    )


def _sanitize_segments(parts: Iterable[str]) -> list[str]:
    sanitized: list[str] = []
    for part in parts:
        if part in {"", ".", ".."}:
            continue
        cleaned = re.sub(r"[^A-Za-z0-9._-]", "-", part.strip())
        cleaned = re.sub(r"-+", "-", cleaned).strip("-._")
        if cleaned:
            sanitized.append(cleaned)
    return sanitized


def object_key(filename: str | None, folder: str) -> str:
    """Generate a unique object key inside ``folder`` keeping a safe extension."""

    extension = Path(filename or "").suffix.lower()
    if extension and not re.fullmatch(r"\.[A-Za-z0-9]{1,10}", extension):
        extension = ""

    folder_segments = _sanitize_segments((folder or "uploads").replace("\\", "/").split("/"))
    safe_folder = "/".join(folder_segments) or "uploads"
    return f"{safe_folder}/{uuid.uuid4().hex}{extension}"


class SpacesMediaStore:
    """``MediaStore`` backed by an S3-compatible Spaces bucket."""

    def __init__(self, client: BaseClient | None = None, config: SpacesConfig | None = None) -> None:
        self._client = client
        self._config = config

    @property
    def config(self) -> SpacesConfig:
        if self._config is None:
            self._config = load_spaces_config()
        return self._config

    @property
    def client(self) -> BaseClient:
        if self._client is None:
            self._client = get_spaces_client()
        return self._client

    def public_url(self, key: str) -> str:
        normalized_key = key.lstrip("/")
        endpoint = self.config.public_endpoint.rstrip("/")
        return f"{endpoint}/{normalized_key}" if normalized_key else endpoint

    def put_object(self, data: bytes, content_type: str, *, filename: str | None = None) -> ObjectRef:
        config = self.config
        key = object_key(filename, config.folder)
        try:
            self.client.put_object(
                Bucket=config.bucket,
                Key=key,
                Body=data,
                ACL="public-read",
                ContentType=content_type or "application/octet-stream",
            )
        except (ClientError, BotoCoreError) as exc:  # pragma: no cover - network bound
            logger.exception("Upload to DigitalOcean Spaces failed for %s", key)
            raise StorageFailure("Upload to DigitalOcean Spaces failed") from exc
        return ObjectRef(key=key, url=self.public_url(key))

    def delete_object(self, key: str) -> None:
        if not key:
            return
        normalized_key = key.lstrip("/")
        try:
            self.client.delete_object(Bucket=self.config.bucket, Key=normalized_key)
        except (ClientError, BotoCoreError) as exc:  # pragma: no cover - network bound
            logger.exception("Failed to delete Spaces object %s", normalized_key)
            raise StorageFailure("Unable to delete media from storage") from exc


__all__ = [
    "ObjectRef",
    "MediaStore",
    "SpacesConfig",
    "SpacesConfigurationError",
    "SpacesMediaStore",
    "load_spaces_config",
    "get_spaces_client",
    "object_key",
]
