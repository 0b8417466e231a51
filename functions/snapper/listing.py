"""
Paginated image listings for groups, persons and albums.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional, Sequence

from snapper.db import DbClient, ImageRecord
from snapper.errors import BadRequest
from snapper.refresher import PointerResolver
from snapper.types import ImageView, SortKey


@dataclass(frozen=True)
class PageRequest:
    group_id: int
    page: int
    page_size: int
    sort: SortKey = SortKey.UPLOADED_AT

    def __post_init__(self):
        if self.page < 0:
            raise BadRequest("page must be a non-negative integer")
        if self.page_size < 1:
            raise ValueError("page_size must be positive")

    @property
    def offset(self) -> int:
        return self.page * self.page_size


@dataclass
class ImageItem:
    id: str
    filename: str
    uploaded_at: Optional[datetime]
    date_taken: Optional[datetime]
    size: int
    thumbnail_location: str
    compressed_location: Optional[str]
    compressed_location_3k: Optional[str]
    expire_time: Optional[datetime]
    highlight: bool
    delete_at: Optional[datetime] = None
    similar_image_id: Optional[str] = None


@dataclass
class PageResult:
    items: list[ImageItem] = field(default_factory=list)
    has_more: bool = False
    hot_images: Optional[int] = None


def fetch_page(
    fetch: Callable[[int, int], Sequence[ImageRecord]], request: PageRequest
) -> tuple[list[ImageRecord], bool]:
    """
    Ask for one row more than a page so we know whether another page exists
    without counting.
    """
    rows = list(fetch(request.page_size + 1, request.offset))
    has_more = len(rows) > request.page_size
    return rows[: request.page_size], has_more


class ImageLister:
    def __init__(self, db: DbClient, resolver: PointerResolver):
        self.db = db
        self.resolver = resolver

    def to_item(self, image: ImageRecord) -> ImageItem:
        url, expire_time = self.resolver.resolve(image)
        return ImageItem(
            id=image.id,
            filename=image.filename,
            uploaded_at=image.uploaded_at,
            date_taken=image.date_taken,
            size=image.size,
            thumbnail_location=image.thumbnail_location,
            compressed_location=url,
            compressed_location_3k=image.signed_url_3k,
            expire_time=expire_time,
            highlight=image.highlight,
            delete_at=image.delete_at,
            similar_image_id=image.similar_image_id,
        )

    def _page(
        self,
        fetch: Callable[[int, int], Sequence[ImageRecord]],
        request: PageRequest,
        hot_images: Optional[int] = None,
    ) -> PageResult:
        rows, has_more = fetch_page(fetch, request)
        return PageResult(
            items=[self.to_item(row) for row in rows],
            has_more=has_more,
            hot_images=hot_images,
        )

    def list_group_images(
        self, request: PageRequest, view: ImageView = ImageView.GALLERY
    ) -> PageResult:
        def fetch(limit: int, offset: int) -> list[ImageRecord]:
            return self.db.list_group_images(
                request.group_id,
                view=view,
                sort=request.sort,
                limit=limit,
                offset=offset,
            )

        return self._page(
            fetch, request, hot_images=self.db.count_hot_images(request.group_id)
        )

    def list_person_images(
        self,
        request: PageRequest,
        person_id: int,
        view: ImageView = ImageView.GALLERY,
    ) -> PageResult:
        def fetch(limit: int, offset: int) -> list[ImageRecord]:
            return self.db.list_person_images(
                request.group_id,
                person_id,
                view=view,
                sort=request.sort,
                limit=limit,
                offset=offset,
            )

        return self._page(
            fetch,
            request,
            hot_images=self.db.count_hot_images(request.group_id, person_id),
        )

    def list_album_images(self, request: PageRequest, album_id: int) -> PageResult:
        def fetch(limit: int, offset: int) -> list[ImageRecord]:
            return self.db.list_album_images(
                request.group_id,
                album_id,
                sort=request.sort,
                limit=limit,
                offset=offset,
            )

        return self._page(fetch, request)

    def list_similar_images(
        self, group_id: int, similar_image_id: str, sort: SortKey
    ) -> list[ImageItem]:
        rows = self.db.list_similar_images(group_id, similar_image_id, sort=sort)
        return [self.to_item(row) for row in rows]
