"""Upload storage: Aliyun OSS when credentials are set, local disk otherwise."""

import asyncio
import logging
import mimetypes
import os
import re
import uuid
from datetime import datetime

import oss2

from app.config import settings

LOCAL_URL_PREFIX = "/static/uploads"
_UNSAFE_RE = re.compile(r"[^a-zA-Z0-9_-]")
logger = logging.getLogger("devconnect.storage")


class StorageError(Exception):
    pass


def is_configured() -> bool:
    required = (
        settings.OSS_ACCESS_KEY_ID,
        settings.OSS_ACCESS_KEY_SECRET,
        settings.OSS_ENDPOINT,
        settings.OSS_BUCKET,
    )
    return all(required)


def _split_endpoint(endpoint: str) -> tuple[str, str]:
    """Return ``(scheme, host)``; bare hosts default to https."""
    endpoint = (endpoint or "").strip().rstrip("/")
    for scheme in ("https", "http"):
        marker = f"{scheme}://"
        if endpoint.startswith(marker):
            return scheme, endpoint[len(marker):]
    return "https", endpoint


def get_bucket() -> oss2.Bucket | None:
    if not is_configured():
        return None
    scheme, host = _split_endpoint(settings.OSS_ENDPOINT)
    auth = oss2.Auth(settings.OSS_ACCESS_KEY_ID, settings.OSS_ACCESS_KEY_SECRET)
    return oss2.Bucket(auth, f"{scheme}://{host}", settings.OSS_BUCKET)


def get_base_url() -> str:
    if settings.OSS_BASE_URL:
        return settings.OSS_BASE_URL.rstrip("/")
    bucket = (settings.OSS_BUCKET or "").strip()
    scheme, host = _split_endpoint(settings.OSS_ENDPOINT)
    if not bucket or not host:
        return ""
    # virtual-hosted style: <bucket>.<endpoint>
    if not host.startswith(f"{bucket}."):
        host = f"{bucket}.{host}"
    return f"{scheme}://{host}"


def get_public_url(object_key: str) -> str:
    key = object_key.lstrip("/")
    if not is_configured():
        return f"{LOCAL_URL_PREFIX}/{key}"
    base = get_base_url()
    return f"{base}/{key}" if base else ""


def sanitize_segment(value: str, default: str = "") -> str:
    return _UNSAFE_RE.sub("", value or "") or default


def build_object_key(
    category: str,
    filename: str | None,
    *,
    user_id: int | str | None = None,
    dt: datetime | None = None,
) -> str:
    """``<prefix>/<category>/<user>/<YYYY>/<MM>/<uuid><ext>``, empty segments skipped."""
    dt = dt or datetime.utcnow()
    ext = os.path.splitext(filename or "")[1].lower()
    segments = [
        (settings.OSS_PREFIX or "").strip("/"),
        sanitize_segment(category, "misc"),
        sanitize_segment("" if user_id is None else str(user_id)),
        f"{dt:%Y}",
        f"{dt:%m}",
        f"{uuid.uuid4().hex}{ext}",
    ]
    return "/".join(segment for segment in segments if segment)


def guess_content_type(filename: str | None, provided: str | None = None) -> str:
    if provided:
        return provided
    return mimetypes.guess_type(filename or "")[0] or "application/octet-stream"


def _write_local(object_key: str, data: bytes) -> None:
    path = os.path.join(settings.UPLOAD_DIR, *object_key.split("/"))
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as f:
        f.write(data)


async def upload_bytes(
    data: bytes,
    filename: str | None,
    *,
    category: str,
    user_id: int | str | None = None,
    content_type: str | None = None,
) -> str:
    """Store ``data`` and return the URL it can be fetched from.

    Local files land in ``UPLOAD_DIR``, which the app serves under
    ``/static/uploads``.
    """
    object_key = build_object_key(category, filename, user_id=user_id)
    bucket = get_bucket()
    try:
        if bucket is None:
            await asyncio.to_thread(_write_local, object_key, data)
        else:
            headers = {"Content-Type": guess_content_type(filename, content_type)}
            await asyncio.to_thread(bucket.put_object, object_key, data, headers=headers)
    except (OSError, oss2.exceptions.OssError) as exc:
        logger.error("Upload of %s failed: %s", object_key, exc)
        raise StorageError(str(exc)) from exc
    return get_public_url(object_key)
