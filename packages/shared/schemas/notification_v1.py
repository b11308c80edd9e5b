"""Shared notification payload schema (v1).

The storefront core emits these for every cart mutation and for checkout progress. A
renderer shows them as transient toasts; `key` lets a LOADING message be replaced by its
outcome.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class NotificationKindV1(str, Enum):
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"
    LOADING = "LOADING"


class NotificationV1(BaseModel):
    kind: NotificationKindV1
    message: str
    key: str | None = None
