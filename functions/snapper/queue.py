"""
Refresh job queue shared by the API and ``snapper.worker``.

A job asks for one image's signed URL to be re-signed for a given window.
Jobs travel as JSON so the API and the worker can run in separate processes.
An image with a job already waiting is not queued again; the pending set is
cleared when the worker takes the job.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Optional, Protocol

import redis
from redis import exceptions as redis_exceptions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefreshJob:
    image_id: str
    validity: timedelta

    def encode(self) -> str:
        return json.dumps(
            {
                "image_id": self.image_id,
                "validity_seconds": int(self.validity.total_seconds()),
            }
        )

    @classmethod
    def decode(cls, payload: str) -> "RefreshJob":
        try:
            data = json.loads(payload)
            image_id = data["image_id"]
            seconds = int(data["validity_seconds"])
        except (KeyError, TypeError) as exc:
            raise ValueError(f"incomplete refresh job: {payload!r}") from exc
        if not isinstance(image_id, str) or not image_id:
            raise ValueError(f"bad image_id in refresh job: {payload!r}")
        if seconds <= 0:
            raise ValueError(f"bad validity in refresh job: {payload!r}")
        return cls(image_id=image_id, validity=timedelta(seconds=seconds))


def _parse(payload: str) -> Optional[RefreshJob]:
    try:
        return RefreshJob.decode(payload)
    except ValueError as exc:
        logger.warning("Dropping malformed refresh job %r: %s", payload, exc)
        return None


class RefreshQueue(Protocol):
    def enqueue(self, job: RefreshJob) -> bool:
        """Queue ``job``; False when the image already has a job waiting."""
        ...

    def dequeue(
        self, *, block: bool = True, timeout: int | None = None
    ) -> Optional[RefreshJob]:
        ...


@dataclass
class InMemoryRefreshQueue:
    """Single-process queue holding the same encoded payloads Redis would."""

    items: list[str] = field(default_factory=list)
    pending: set[str] = field(default_factory=set)

    def enqueue(self, job: RefreshJob) -> bool:
        if job.image_id in self.pending:
            return False
        self.pending.add(job.image_id)
        self.items.append(job.encode())
        return True

    def dequeue(
        self, *, block: bool = True, timeout: int | None = None
    ) -> Optional[RefreshJob]:
        while self.items:
            job = _parse(self.items.pop(0))
            if job is not None:
                self.pending.discard(job.image_id)
                return job
        return None


@dataclass
class RedisRefreshQueue:
    """
    Jobs live in a Redis list; image ids with a job waiting are tracked in a
    companion set at ``<queue_key>:pending``.
    """

    url: str
    queue_key: str = "snapper:pointer-refresh"

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url)

    @property
    def pending_key(self) -> str:
        return f"{self.queue_key}:pending"

    def enqueue(self, job: RefreshJob) -> bool:
        if not self.client.sadd(self.pending_key, job.image_id):
            return False
        self.client.rpush(self.queue_key, job.encode())
        return True

    def dequeue(
        self, *, block: bool = True, timeout: int | None = None
    ) -> Optional[RefreshJob]:
        try:
            if block:
                result = self.client.blpop(self.queue_key, timeout=timeout or 0)
                payload = result[1] if result else None
            else:
                payload = self.client.lpop(self.queue_key)
            if payload is None:
                return None
            job = _parse(payload.decode("utf-8"))
            if job is not None:
                self.client.srem(self.pending_key, job.image_id)
            return job
        except redis_exceptions.ConnectionError as exc:
            logger.warning("Lost connection to refresh queue, reconnecting: %s", exc)
            self.client = redis.Redis.from_url(self.url)
            return None
