"""HTTP surface over the tracker service."""

from taskpay.api.app import create_app

__all__ = ["create_app"]
