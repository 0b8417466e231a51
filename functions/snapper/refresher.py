"""
Signed URL lifecycle for stored images.

Images keep their last signed URL and an internal ``expire_time`` in the
database. Listings reuse that URL while it is fresh, regenerate it inline once
it has expired, and hand near-expiry URLs to a background dispatcher so the
response never waits on a refresh it does not need.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional, Protocol

from snapper.db import DbClient, ImageRecord
from snapper.queue import RefreshJob, RefreshQueue
from snapper.storage import StorageClient
from snapper.types import utcnow

logger = logging.getLogger(__name__)

DEFAULT_EXPIRY_MARGIN = timedelta(minutes=10)
DEFAULT_REFRESH_THRESHOLD = timedelta(minutes=15)


@dataclass(frozen=True)
class SignedPointer:
    url: str
    expire_time: datetime


class PointerRefresher:
    """Generates signed URLs for compressed renditions and stores them."""

    def __init__(
        self,
        db: DbClient,
        storage: StorageClient,
        *,
        margin: timedelta = DEFAULT_EXPIRY_MARGIN,
        key_prefix: str = "compressed_",
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.storage = storage
        self.margin = margin
        self.key_prefix = key_prefix
        self.clock = clock

    def object_path(self, image_id: str) -> str:
        return f"{self.key_prefix}{image_id}"

    def generate(self, image_id: str, validity: timedelta) -> Optional[SignedPointer]:
        """
        Sign a fresh URL without persisting it. Returns None when the store
        refuses.
        """
        now = self.clock()
        try:
            url = self.storage.presign_get(
                self.object_path(image_id),
                expires_in=int(validity.total_seconds()),
            )
        except Exception as exc:
            logger.exception("Failed to sign URL for image %s: %s", image_id, exc)
            return None
        # Report expiry early so callers refresh before the URL actually dies.
        return SignedPointer(url=url, expire_time=now + validity - self.margin)

    def refresh(self, image_id: str, validity: timedelta) -> Optional[SignedPointer]:
        pointer = self.generate(image_id, validity)
        if pointer is None:
            return None
        try:
            updated = self.db.update_image_pointer(
                image_id, pointer.url, pointer.expire_time
            )
        except Exception as exc:
            logger.exception(
                "Failed to store signed URL for image %s: %s", image_id, exc
            )
            return pointer
        if updated:
            logger.info("Stored signed URL for image %s", image_id)
        else:
            logger.warning("Signed URL generated for unknown image %s", image_id)
        return pointer


class RefreshDispatcher(Protocol):
    """Runs a refresh without the caller waiting for it."""

    def submit(self, image_id: str, validity: timedelta) -> None:
        ...


class ExecutorRefreshDispatcher:
    """
    Runs refreshes on a thread pool owned by the process, detached from the
    request that asked for them.
    """

    def __init__(self, refresher: PointerRefresher, *, max_workers: int = 4):
        self.refresher = refresher
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="pointer-refresh"
        )

    def submit(self, image_id: str, validity: timedelta) -> None:
        future = self._executor.submit(self.refresher.refresh, image_id, validity)
        future.add_done_callback(
            lambda done: self._log_outcome(image_id, done)
        )

    def _log_outcome(self, image_id: str, future: Future) -> None:
        exc = future.exception()
        if exc is not None:
            logger.error(
                "Background refresh failed for image %s",
                image_id,
                exc_info=(type(exc), exc, exc.__traceback__),
            )
        elif future.result() is None:
            logger.warning("Background refresh produced no URL for image %s", image_id)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


class QueueRefreshDispatcher:
    """Pushes refresh jobs onto the refresh queue for ``snapper.worker``."""

    def __init__(self, queue: RefreshQueue):
        self.queue = queue

    def submit(self, image_id: str, validity: timedelta) -> None:
        try:
            queued = self.queue.enqueue(RefreshJob(image_id=image_id, validity=validity))
        except Exception as exc:
            logger.exception("Failed to enqueue refresh for image %s: %s", image_id, exc)
            return
        if not queued:
            logger.debug("Refresh for image %s already queued", image_id)


class PointerResolver:
    """
    Picks the URL a listing should return for an image.

    One resolver exists per call site since each endpoint signs for its own
    window.
    """

    def __init__(
        self,
        refresher: PointerRefresher,
        dispatcher: RefreshDispatcher,
        *,
        validity: timedelta,
        threshold: timedelta = DEFAULT_REFRESH_THRESHOLD,
    ):
        self.refresher = refresher
        self.dispatcher = dispatcher
        self.validity = validity
        self.threshold = threshold

    def resolve(self, image: ImageRecord) -> tuple[Optional[str], Optional[datetime]]:
        now = self.refresher.clock()
        url, expire_time = image.signed_url, image.expire_time

        if not url or expire_time is None or expire_time < now:
            refreshed = self.refresher.refresh(image.id, self.validity)
            if refreshed is None:
                # Serve whatever we had; the client can retry later.
                return url, expire_time
            return refreshed.url, refreshed.expire_time

        if expire_time - now < self.threshold:
            self.dispatcher.submit(image.id, self.validity)
        return url, expire_time
