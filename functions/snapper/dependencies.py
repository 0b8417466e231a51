"""
Dependency wiring for the FastAPI app.

Each backend is built once per process from settings and shared by every
request; tests swap them through ``app.dependency_overrides`` or ``reset_clients``.
"""

from __future__ import annotations

from datetime import timedelta

from fastapi import Depends

from snapper.access import AccessGate
from snapper.config import Settings, get_settings
from snapper.db import DbClient, InMemoryDbClient, PostgresDbClient
from snapper.listing import ImageLister
from snapper.queue import InMemoryRefreshQueue, RedisRefreshQueue, RefreshQueue
from snapper.refresher import (
    ExecutorRefreshDispatcher,
    PointerRefresher,
    PointerResolver,
    QueueRefreshDispatcher,
    RefreshDispatcher,
)
from snapper.storage import InMemoryStorageClient, S3StorageClient, StorageClient

_db_client: DbClient | None = None
_storage_client: StorageClient | None = None
_queue_client: RefreshQueue | None = None
_refresher: PointerRefresher | None = None
_dispatcher: RefreshDispatcher | None = None


def get_db_client() -> DbClient:
    """
    Return a singleton DB client; its engine owns the connection pool.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        _db_client = InMemoryDbClient()
    else:
        _db_client = PostgresDbClient(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )
    return _db_client


def get_storage_client() -> StorageClient:
    global _storage_client
    if _storage_client:
        return _storage_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.storage_bucket:
        _storage_client = InMemoryStorageClient()
    else:
        _storage_client = S3StorageClient(
            bucket=settings.storage_bucket,
            region=settings.storage_region,
            endpoint=settings.storage_endpoint,
            access_key_id=settings.storage_access_key_id or "",
            secret_access_key=settings.storage_secret_access_key or "",
        )
    return _storage_client


def get_queue_client() -> RefreshQueue:
    """
    Return a singleton queue client for dispatching refresh jobs to workers.
    """
    global _queue_client
    if _queue_client:
        return _queue_client

    settings = get_settings()
    if settings.redis_url and not settings.use_in_memory_backends:
        _queue_client = RedisRefreshQueue(
            url=settings.redis_url,
            queue_key=settings.redis_queue_key,
        )
    else:
        _queue_client = InMemoryRefreshQueue()
    return _queue_client


def get_refresher() -> PointerRefresher:
    global _refresher
    if _refresher:
        return _refresher

    settings = get_settings()
    _refresher = PointerRefresher(
        get_db_client(),
        get_storage_client(),
        margin=timedelta(seconds=settings.url_expiry_margin),
        key_prefix=settings.compressed_key_prefix,
    )
    return _refresher


def get_dispatcher() -> RefreshDispatcher:
    """
    Background refreshes go to the Redis worker when one is configured and to
    an in-process thread pool otherwise, so in-memory mode still refreshes.
    """
    global _dispatcher
    if _dispatcher:
        return _dispatcher

    settings = get_settings()
    if settings.redis_url and not settings.use_in_memory_backends:
        _dispatcher = QueueRefreshDispatcher(get_queue_client())
    else:
        _dispatcher = ExecutorRefreshDispatcher(
            get_refresher(), max_workers=settings.refresh_workers
        )
    return _dispatcher


def reset_clients() -> None:
    """Drop every singleton so the next request rebuilds them from settings."""
    global _db_client, _storage_client, _queue_client, _refresher, _dispatcher
    if isinstance(_dispatcher, ExecutorRefreshDispatcher):
        _dispatcher.shutdown(wait=False)
    if isinstance(_db_client, PostgresDbClient):
        _db_client.dispose()
    _db_client = _storage_client = _queue_client = None
    _refresher = _dispatcher = None


def get_access_gate(db: DbClient = Depends(get_db_client)) -> AccessGate:
    return AccessGate(db)


def _lister(
    ttl_seconds: int,
    settings: Settings,
    db: DbClient,
    refresher: PointerRefresher,
    dispatcher: RefreshDispatcher,
) -> ImageLister:
    resolver = PointerResolver(
        refresher,
        dispatcher,
        validity=timedelta(seconds=ttl_seconds),
        threshold=timedelta(seconds=settings.url_refresh_threshold),
    )
    return ImageLister(db, resolver)


def get_group_image_lister(
    settings: Settings = Depends(get_settings),
    db: DbClient = Depends(get_db_client),
    refresher: PointerRefresher = Depends(get_refresher),
    dispatcher: RefreshDispatcher = Depends(get_dispatcher),
) -> ImageLister:
    return _lister(settings.group_images_url_ttl, settings, db, refresher, dispatcher)


def get_person_image_lister(
    settings: Settings = Depends(get_settings),
    db: DbClient = Depends(get_db_client),
    refresher: PointerRefresher = Depends(get_refresher),
    dispatcher: RefreshDispatcher = Depends(get_dispatcher),
) -> ImageLister:
    return _lister(settings.person_images_url_ttl, settings, db, refresher, dispatcher)


def get_album_image_lister(
    settings: Settings = Depends(get_settings),
    db: DbClient = Depends(get_db_client),
    refresher: PointerRefresher = Depends(get_refresher),
    dispatcher: RefreshDispatcher = Depends(get_dispatcher),
) -> ImageLister:
    return _lister(settings.album_images_url_ttl, settings, db, refresher, dispatcher)


def get_similar_image_lister(
    settings: Settings = Depends(get_settings),
    db: DbClient = Depends(get_db_client),
    refresher: PointerRefresher = Depends(get_refresher),
    dispatcher: RefreshDispatcher = Depends(get_dispatcher),
) -> ImageLister:
    return _lister(settings.similar_images_url_ttl, settings, db, refresher, dispatcher)
