"""Image storage adapters."""

from taskpay.storage.images import (
    AVATAR_BUCKET,
    PROOF_BUCKET,
    RECEIPT_BUCKET,
    FilesystemImageStore,
    ImageStore,
    store_image,
    to_inline_reference,
)

__all__ = [
    "AVATAR_BUCKET",
    "PROOF_BUCKET",
    "RECEIPT_BUCKET",
    "FilesystemImageStore",
    "ImageStore",
    "store_image",
    "to_inline_reference",
]
