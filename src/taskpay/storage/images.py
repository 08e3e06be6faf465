"""Image store for completion photos, withdrawal receipts and avatars.

Uploads fail open: an unreachable store must never block a task submission
or a withdrawal decision, so callers go through ``store_image`` which falls
back to an inline data reference.
"""

from __future__ import annotations

import asyncio
import base64
import logging
from pathlib import Path
from typing import Protocol

from taskpay.domain.errors import StorageUnavailable

logger = logging.getLogger(__name__)

INLINE_PREFIX = "data:image/jpeg;base64,"

# Buckets used by the tracker
PROOF_BUCKET = "task-proofs"
RECEIPT_BUCKET = "withdrawal-receipts"
AVATAR_BUCKET = "avatars"


def decode_image(data: str | bytes) -> bytes:
    """Return raw bytes from bytes, a data URI or a bare base64 string."""
    if isinstance(data, bytes):
        return data
    content = data.split(";base64,")[-1]
    if not content:
        raise ValueError("Invalid image format")
    return base64.b64decode(content)


def to_inline_reference(data: str | bytes) -> str:
    """Inline representation used when the store is unavailable."""
    if isinstance(data, str):
        return data
    return INLINE_PREFIX + base64.b64encode(data).decode("ascii")


def is_inline_reference(reference: str) -> bool:
    return reference.startswith("data:")


class ImageStore(Protocol):
    """Protocol for image store adapters."""

    async def upload(self, bucket: str, path: str, data: bytes) -> str:
        """Store the image and return a public URL reference.

        Raises StorageUnavailable if the store cannot complete the upload.
        """
        ...


class FilesystemImageStore:
    """Stores images under a local directory, served from ``base_url``."""

    def __init__(self, root: str | Path, base_url: str = "/images"):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    async def upload(self, bucket: str, path: str, data: bytes) -> str:
        target = self.root / bucket / path
        try:
            await asyncio.to_thread(self._write, target, data)
        except OSError as exc:
            raise StorageUnavailable(f"Image upload to {bucket}/{path} failed: {exc}") from exc
        return f"{self.base_url}/{bucket}/{path}"

    @staticmethod
    def _write(target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        # upsert semantics: re-uploading the same path replaces the file
        target.write_bytes(data)


async def store_image(
    store: ImageStore | None,
    bucket: str,
    path: str,
    image_data: str | bytes,
) -> str:
    """Upload an image, degrading to an inline reference on any failure.

    Existing URL references (anything that is neither bytes nor a data URI)
    are returned unchanged.
    """
    if isinstance(image_data, str) and not is_inline_reference(image_data):
        return image_data
    if store is None:
        return to_inline_reference(image_data)

    try:
        return await store.upload(bucket, path, decode_image(image_data))
    except (StorageUnavailable, ValueError, OSError) as exc:
        logger.warning(
            "Image upload to %s/%s failed, keeping inline copy: %s", bucket, path, exc
        )
        return to_inline_reference(image_data)
