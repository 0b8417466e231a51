"""
Database abstraction for Postgres and an in-memory test implementation.
"""

from __future__ import annotations

import base64
import itertools
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, Optional, Protocol

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Integer,
    LargeBinary,
    String,
    Text,
    create_engine,
    func,
    select,
)
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from snapper.types import (
    HOT_STATUS,
    PUBLIC_ACCESS,
    ImageView,
    SortKey,
    as_utc,
    utcnow,
)


class DbClient(Protocol):
    """Interface for database access."""

    def get_group(self, group_id: int) -> Optional["GroupRecord"]:
        ...

    def create_group(
        self,
        name: str,
        *,
        access: str = "private",
        admin_user: Optional[str] = None,
        plan_type: Optional[str] = None,
    ) -> "GroupRecord":
        ...

    def add_image(self, image: "ImageRecord") -> "ImageRecord":
        ...

    def get_image(self, image_id: str) -> Optional["ImageRecord"]:
        ...

    def update_image_pointer(
        self, image_id: str, signed_url: str, expire_time: datetime
    ) -> bool:
        ...

    def list_group_images(
        self,
        group_id: int,
        *,
        view: ImageView,
        sort: SortKey,
        limit: int,
        offset: int,
    ) -> list["ImageRecord"]:
        ...

    def list_person_images(
        self,
        group_id: int,
        person_id: int,
        *,
        view: ImageView,
        sort: SortKey,
        limit: int,
        offset: int,
    ) -> list["ImageRecord"]:
        ...

    def list_album_images(
        self,
        group_id: int,
        album_id: int,
        *,
        sort: SortKey,
        limit: int,
        offset: int,
    ) -> list["ImageRecord"]:
        ...

    def list_similar_images(
        self, group_id: int, similar_image_id: str, *, sort: SortKey
    ) -> list["ImageRecord"]:
        ...

    def count_group_images(self, group_id: int, view: ImageView) -> int:
        ...

    def count_hot_images(self, group_id: int, person_id: Optional[int] = None) -> int:
        ...

    def set_image_deleted(self, image_id: str, delete_at: Optional[datetime]) -> bool:
        ...

    def set_image_highlight(self, image_id: str, highlight: bool) -> bool:
        ...

    def create_person(
        self,
        group_id: int,
        *,
        name: Optional[str] = None,
        thumbnail: Optional[bytes] = None,
        user_id: Optional[str] = None,
    ) -> "PersonRecord":
        ...

    def add_face(self, image_id: str, person_id: int) -> None:
        ...

    def get_person(self, person_id: int) -> Optional["PersonRecord"]:
        ...

    def list_persons(self, group_id: int) -> list["PersonRecord"]:
        ...

    def count_person_images(
        self, group_id: int, person_id: int, view: ImageView = ImageView.GALLERY
    ) -> int:
        """Images a person's listing would show, hot ones excluded."""
        ...

    def list_albums(self, group_id: int) -> list[tuple["AlbumRecord", int]]:
        ...

    def create_album(self, group_id: int, name: str) -> "AlbumRecord":
        ...

    def add_image_to_album(self, album_id: int, image_id: str, group_id: int) -> bool:
        ...

    def remove_image_from_album(self, album_id: int, image_id: str) -> bool:
        ...

    def delete_album(self, album_id: int, group_id: int) -> bool:
        ...


@dataclass
class GroupRecord:
    id: int
    name: str
    access: str
    admin_user: Optional[str] = None
    status: str = "heating"
    plan_type: Optional[str] = None
    total_images: int = 0
    total_size: int = 0
    created_at: datetime = field(default_factory=utcnow)
    delete_at: Optional[datetime] = None

    @property
    def is_public(self) -> bool:
        return (self.access or "").lower() == PUBLIC_ACCESS

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "access": self.access,
            "admin_user": self.admin_user,
            "status": self.status,
            "plan_type": self.plan_type,
            "total_images": self.total_images,
            "total_size": self.total_size,
            "created_at": self.created_at,
            "delete_at": self.delete_at,
        }


@dataclass
class ImageRecord:
    """
    A stored image. ``signed_url`` is the cached retrieval pointer for the
    compressed rendition; ``expire_time`` is when it should stop being served.
    """

    id: str
    group_id: int
    filename: str
    uploaded_at: datetime = field(default_factory=utcnow)
    date_taken: Optional[datetime] = None
    size: int = 0
    location: Optional[str] = None
    thumb_byte: Optional[bytes] = None
    signed_url: Optional[str] = None
    signed_url_3k: Optional[str] = None
    expire_time: Optional[datetime] = None
    status: str = "warm"
    highlight: bool = False
    delete_at: Optional[datetime] = None
    similar_image_id: Optional[str] = None

    @property
    def thumbnail_location(self) -> str:
        if self.location:
            return self.location
        if self.thumb_byte:
            encoded = base64.b64encode(self.thumb_byte).decode("ascii")
            return f"data:image/jpeg;base64,{encoded}"
        return ""


@dataclass
class PersonRecord:
    id: int
    group_id: int
    name: Optional[str] = None
    thumbnail: Optional[bytes] = None
    user_id: Optional[str] = None


@dataclass
class AlbumRecord:
    id: int
    group_id: int
    name: str
    created_at: datetime = field(default_factory=utcnow)


def _visible_in(image: ImageRecord, view: ImageView) -> bool:
    if view is ImageView.BIN:
        return image.delete_at is not None
    if image.delete_at is not None:
        return False
    if view is ImageView.HIGHLIGHT:
        return image.highlight
    return True


def _sort_images(images: Iterable[ImageRecord], sort: SortKey) -> list[ImageRecord]:
    # Sorts are stable, so ordering by id first makes it the tie-break.
    ordered = sorted(images, key=lambda image: image.id)
    attr = sort.value
    present = [image for image in ordered if getattr(image, attr) is not None]
    missing = [image for image in ordered if getattr(image, attr) is None]
    present.sort(key=lambda image: getattr(image, attr), reverse=sort.descending)
    return present + missing


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.groups: Dict[int, GroupRecord] = {}
        self.images: Dict[str, ImageRecord] = {}
        self.persons: Dict[int, PersonRecord] = {}
        self.faces: list[tuple[str, int]] = []
        self.albums: Dict[int, AlbumRecord] = {}
        self.album_images: Dict[tuple[int, str], int] = {}
        self._ids = itertools.count(1)

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.groups.clear()
        self.images.clear()
        self.persons.clear()
        self.faces.clear()
        self.albums.clear()
        self.album_images.clear()

    def get_group(self, group_id: int) -> Optional[GroupRecord]:
        return self.groups.get(group_id)

    def create_group(
        self,
        name: str,
        *,
        access: str = "private",
        admin_user: Optional[str] = None,
        plan_type: Optional[str] = None,
    ) -> GroupRecord:
        record = GroupRecord(
            id=next(self._ids),
            name=name,
            access=access,
            admin_user=admin_user,
            plan_type=plan_type,
        )
        self.groups[record.id] = record
        return record

    def add_image(self, image: ImageRecord) -> ImageRecord:
        self.images[image.id] = image
        return image

    def get_image(self, image_id: str) -> Optional[ImageRecord]:
        return self.images.get(image_id)

    def update_image_pointer(
        self, image_id: str, signed_url: str, expire_time: datetime
    ) -> bool:
        image = self.images.get(image_id)
        if not image:
            return False
        image.signed_url = signed_url
        image.expire_time = expire_time
        return True

    def _group_images(self, group_id: int) -> list[ImageRecord]:
        return [image for image in self.images.values() if image.group_id == group_id]

    def _person_image_ids(self, person_id: int) -> set[str]:
        return {image_id for image_id, owner in self.faces if owner == person_id}

    def list_group_images(
        self,
        group_id: int,
        *,
        view: ImageView,
        sort: SortKey,
        limit: int,
        offset: int,
    ) -> list[ImageRecord]:
        matches = [
            image
            for image in self._group_images(group_id)
            if image.status != HOT_STATUS and _visible_in(image, view)
        ]
        return _sort_images(matches, sort)[offset : offset + limit]

    def list_person_images(
        self,
        group_id: int,
        person_id: int,
        *,
        view: ImageView,
        sort: SortKey,
        limit: int,
        offset: int,
    ) -> list[ImageRecord]:
        image_ids = self._person_image_ids(person_id)
        matches = [
            image
            for image in self._group_images(group_id)
            if image.id in image_ids
            and image.status != HOT_STATUS
            and _visible_in(image, view)
        ]
        return _sort_images(matches, sort)[offset : offset + limit]

    def list_album_images(
        self,
        group_id: int,
        album_id: int,
        *,
        sort: SortKey,
        limit: int,
        offset: int,
    ) -> list[ImageRecord]:
        image_ids = {
            image_id for (owner, image_id) in self.album_images if owner == album_id
        }
        matches = [
            image for image in self._group_images(group_id) if image.id in image_ids
        ]
        return _sort_images(matches, sort)[offset : offset + limit]

    def list_similar_images(
        self, group_id: int, similar_image_id: str, *, sort: SortKey
    ) -> list[ImageRecord]:
        matches = [
            image
            for image in self._group_images(group_id)
            if image.similar_image_id == similar_image_id
            and image.status != HOT_STATUS
            and image.delete_at is None
        ]
        return _sort_images(matches, sort)

    def count_group_images(self, group_id: int, view: ImageView) -> int:
        return sum(
            1
            for image in self._group_images(group_id)
            if image.status != HOT_STATUS and _visible_in(image, view)
        )

    def count_hot_images(self, group_id: int, person_id: Optional[int] = None) -> int:
        image_ids = self._person_image_ids(person_id) if person_id is not None else None
        return sum(
            1
            for image in self._group_images(group_id)
            if image.status == HOT_STATUS
            and (image_ids is None or image.id in image_ids)
        )

    def set_image_deleted(self, image_id: str, delete_at: Optional[datetime]) -> bool:
        image = self.images.get(image_id)
        if not image:
            return False
        image.delete_at = delete_at
        return True

    def set_image_highlight(self, image_id: str, highlight: bool) -> bool:
        image = self.images.get(image_id)
        if not image:
            return False
        image.highlight = highlight
        return True

    def create_person(
        self,
        group_id: int,
        *,
        name: Optional[str] = None,
        thumbnail: Optional[bytes] = None,
        user_id: Optional[str] = None,
    ) -> PersonRecord:
        record = PersonRecord(
            id=next(self._ids),
            group_id=group_id,
            name=name,
            thumbnail=thumbnail,
            user_id=user_id,
        )
        self.persons[record.id] = record
        return record

    def add_face(self, image_id: str, person_id: int) -> None:
        self.faces.append((image_id, person_id))

    def get_person(self, person_id: int) -> Optional[PersonRecord]:
        return self.persons.get(person_id)

    def list_persons(self, group_id: int) -> list[PersonRecord]:
        return sorted(
            (person for person in self.persons.values() if person.group_id == group_id),
            key=lambda person: person.id,
        )

    def count_person_images(
        self, group_id: int, person_id: int, view: ImageView = ImageView.GALLERY
    ) -> int:
        image_ids = self._person_image_ids(person_id)
        return sum(
            1
            for image in self._group_images(group_id)
            if image.id in image_ids
            and image.status != HOT_STATUS
            and _visible_in(image, view)
        )

    def list_albums(self, group_id: int) -> list[tuple[AlbumRecord, int]]:
        albums = sorted(
            (album for album in self.albums.values() if album.group_id == group_id),
            key=lambda album: (album.created_at, album.id),
            reverse=True,
        )
        return [
            (
                album,
                sum(1 for (owner, _image_id) in self.album_images if owner == album.id),
            )
            for album in albums
        ]

    def create_album(self, group_id: int, name: str) -> AlbumRecord:
        record = AlbumRecord(id=next(self._ids), group_id=group_id, name=name)
        self.albums[record.id] = record
        return record

    def add_image_to_album(self, album_id: int, image_id: str, group_id: int) -> bool:
        key = (album_id, image_id)
        if key in self.album_images:
            return False
        self.album_images[key] = group_id
        return True

    def remove_image_from_album(self, album_id: int, image_id: str) -> bool:
        return self.album_images.pop((album_id, image_id), None) is not None

    def delete_album(self, album_id: int, group_id: int) -> bool:
        album = self.albums.get(album_id)
        if not album or album.group_id != group_id:
            return False
        for key in [key for key in self.album_images if key[0] == album_id]:
            del self.album_images[key]
        del self.albums[album_id]
        return True


def _view_clauses(view: ImageView) -> list:
    if view is ImageView.BIN:
        return [ImageRow.delete_at.is_not(None)]
    clauses = [ImageRow.delete_at.is_(None)]
    if view is ImageView.HIGHLIGHT:
        clauses.append(ImageRow.highlight.is_(True))
    return clauses


def _order_by(sort: SortKey) -> tuple:
    column = getattr(ImageRow, sort.value)
    primary = column.desc() if sort.descending else column.asc()
    return (primary.nulls_last(), ImageRow.id.asc())


def _person_images(person_id: int):
    # Subquery rather than a join: a person can have several faces on one image.
    return ImageRow.id.in_(
        select(FaceRow.image_id).where(FaceRow.person_id == person_id)
    )


class PostgresDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(
        self,
        database_url: str,
        *,
        pool_size: int = 5,
        max_overflow: int = 10,
        create_tables: bool = True,
    ):
        if not database_url:
            raise ValueError("DATABASE_URL is required for PostgresDbClient")
        engine_kwargs: dict = {"future": True, "pool_pre_ping": True}
        if make_url(database_url).get_backend_name() == "postgresql":
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_recycle=1800,
            )
        self.engine = create_engine(database_url, **engine_kwargs)
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        if create_tables:
            Base.metadata.create_all(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()

    def _to_group_record(self, row: "GroupRow") -> GroupRecord:
        return GroupRecord(
            id=row.id,
            name=row.name,
            access=row.access,
            admin_user=row.admin_user,
            status=row.status,
            plan_type=row.plan_type,
            total_images=row.total_images or 0,
            total_size=row.total_size or 0,
            created_at=as_utc(row.created_at),
            delete_at=as_utc(row.delete_at),
        )

    def _to_image_record(self, row: "ImageRow") -> ImageRecord:
        return ImageRecord(
            id=row.id,
            group_id=row.group_id,
            filename=row.filename,
            uploaded_at=as_utc(row.uploaded_at),
            date_taken=as_utc(row.date_taken),
            size=row.size or 0,
            location=row.location,
            thumb_byte=row.thumb_byte,
            signed_url=row.signed_url,
            signed_url_3k=row.signed_url_3k,
            expire_time=as_utc(row.expire_time),
            status=row.status,
            highlight=bool(row.highlight),
            delete_at=as_utc(row.delete_at),
            similar_image_id=row.similar_image_id,
        )

    def _to_person_record(self, row: "PersonRow") -> PersonRecord:
        return PersonRecord(
            id=row.id,
            group_id=row.group_id,
            name=row.name,
            thumbnail=row.thumbnail,
            user_id=row.user_id,
        )

    def _to_album_record(self, row: "AlbumRow") -> AlbumRecord:
        return AlbumRecord(
            id=row.id,
            group_id=row.group_id,
            name=row.name,
            created_at=as_utc(row.created_at),
        )

    def _fetch_images(self, stmt) -> list[ImageRecord]:
        with self.Session() as session:
            rows = session.execute(stmt).scalars().all()
            return [self._to_image_record(row) for row in rows]

    def _count(self, stmt) -> int:
        with self.Session() as session:
            return session.execute(stmt).scalar_one() or 0

    def get_group(self, group_id: int) -> Optional[GroupRecord]:
        with self.Session() as session:
            row = session.get(GroupRow, group_id)
            if not row:
                return None
            return self._to_group_record(row)

    def create_group(
        self,
        name: str,
        *,
        access: str = "private",
        admin_user: Optional[str] = None,
        plan_type: Optional[str] = None,
    ) -> GroupRecord:
        with self.Session() as session:
            row = GroupRow(
                name=name,
                access=access,
                admin_user=admin_user,
                status="heating",
                plan_type=plan_type,
                total_images=0,
                total_size=0,
                created_at=utcnow(),
            )
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_group_record(row)

    def add_image(self, image: ImageRecord) -> ImageRecord:
        with self.Session() as session:
            row = ImageRow(
                id=image.id,
                group_id=image.group_id,
                filename=image.filename,
                uploaded_at=image.uploaded_at,
                date_taken=image.date_taken,
                size=image.size,
                location=image.location,
                thumb_byte=image.thumb_byte,
                signed_url=image.signed_url,
                signed_url_3k=image.signed_url_3k,
                expire_time=image.expire_time,
                status=image.status,
                highlight=image.highlight,
                delete_at=image.delete_at,
                similar_image_id=image.similar_image_id,
            )
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_image_record(row)

    def get_image(self, image_id: str) -> Optional[ImageRecord]:
        with self.Session() as session:
            row = session.get(ImageRow, image_id)
            if not row:
                return None
            return self._to_image_record(row)

    def update_image_pointer(
        self, image_id: str, signed_url: str, expire_time: datetime
    ) -> bool:
        with self.Session() as session:
            row = session.get(ImageRow, image_id)
            if not row:
                return False
            row.signed_url = signed_url
            row.expire_time = expire_time
            session.commit()
            return True

    def list_group_images(
        self,
        group_id: int,
        *,
        view: ImageView,
        sort: SortKey,
        limit: int,
        offset: int,
    ) -> list[ImageRecord]:
        stmt = (
            select(ImageRow)
            .where(
                ImageRow.group_id == group_id,
                ImageRow.status != HOT_STATUS,
                *_view_clauses(view),
            )
            .order_by(*_order_by(sort))
            .limit(limit)
            .offset(offset)
        )
        return self._fetch_images(stmt)

    def list_person_images(
        self,
        group_id: int,
        person_id: int,
        *,
        view: ImageView,
        sort: SortKey,
        limit: int,
        offset: int,
    ) -> list[ImageRecord]:
        stmt = (
            select(ImageRow)
            .where(
                ImageRow.group_id == group_id,
                _person_images(person_id),
                ImageRow.status != HOT_STATUS,
                *_view_clauses(view),
            )
            .order_by(*_order_by(sort))
            .limit(limit)
            .offset(offset)
        )
        return self._fetch_images(stmt)

    def list_album_images(
        self,
        group_id: int,
        album_id: int,
        *,
        sort: SortKey,
        limit: int,
        offset: int,
    ) -> list[ImageRecord]:
        stmt = (
            select(ImageRow)
            .join(AlbumImageRow, AlbumImageRow.image_id == ImageRow.id)
            .where(ImageRow.group_id == group_id, AlbumImageRow.album_id == album_id)
            .order_by(*_order_by(sort))
            .limit(limit)
            .offset(offset)
        )
        return self._fetch_images(stmt)

    def list_similar_images(
        self, group_id: int, similar_image_id: str, *, sort: SortKey
    ) -> list[ImageRecord]:
        stmt = (
            select(ImageRow)
            .where(
                ImageRow.group_id == group_id,
                ImageRow.similar_image_id == similar_image_id,
                ImageRow.status != HOT_STATUS,
                ImageRow.delete_at.is_(None),
            )
            .order_by(*_order_by(sort))
        )
        return self._fetch_images(stmt)

    def count_group_images(self, group_id: int, view: ImageView) -> int:
        stmt = select(func.count(ImageRow.id)).where(
            ImageRow.group_id == group_id,
            ImageRow.status != HOT_STATUS,
            *_view_clauses(view),
        )
        return self._count(stmt)

    def count_hot_images(self, group_id: int, person_id: Optional[int] = None) -> int:
        stmt = select(func.count(ImageRow.id)).where(
            ImageRow.group_id == group_id, ImageRow.status == HOT_STATUS
        )
        if person_id is not None:
            stmt = stmt.where(_person_images(person_id))
        return self._count(stmt)

    def set_image_deleted(self, image_id: str, delete_at: Optional[datetime]) -> bool:
        with self.Session() as session:
            row = session.get(ImageRow, image_id)
            if not row:
                return False
            row.delete_at = delete_at
            session.commit()
            return True

    def set_image_highlight(self, image_id: str, highlight: bool) -> bool:
        with self.Session() as session:
            row = session.get(ImageRow, image_id)
            if not row:
                return False
            row.highlight = highlight
            session.commit()
            return True

    def create_person(
        self,
        group_id: int,
        *,
        name: Optional[str] = None,
        thumbnail: Optional[bytes] = None,
        user_id: Optional[str] = None,
    ) -> PersonRecord:
        with self.Session() as session:
            row = PersonRow(
                group_id=group_id, name=name, thumbnail=thumbnail, user_id=user_id
            )
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_person_record(row)

    def add_face(self, image_id: str, person_id: int) -> None:
        with self.Session() as session:
            session.add(FaceRow(image_id=image_id, person_id=person_id))
            session.commit()

    def get_person(self, person_id: int) -> Optional[PersonRecord]:
        with self.Session() as session:
            row = session.get(PersonRow, person_id)
            if not row:
                return None
            return self._to_person_record(row)

    def list_persons(self, group_id: int) -> list[PersonRecord]:
        with self.Session() as session:
            rows = session.execute(
                select(PersonRow)
                .where(PersonRow.group_id == group_id)
                .order_by(PersonRow.id.asc())
            ).scalars()
            return [self._to_person_record(row) for row in rows]

    def count_person_images(
        self, group_id: int, person_id: int, view: ImageView = ImageView.GALLERY
    ) -> int:
        stmt = select(func.count(ImageRow.id)).where(
            ImageRow.group_id == group_id,
            _person_images(person_id),
            ImageRow.status != HOT_STATUS,
            *_view_clauses(view),
        )
        return self._count(stmt)

    def list_albums(self, group_id: int) -> list[tuple[AlbumRecord, int]]:
        stmt = (
            select(AlbumRow, func.count(AlbumImageRow.image_id))
            .outerjoin(AlbumImageRow, AlbumImageRow.album_id == AlbumRow.id)
            .where(AlbumRow.group_id == group_id)
            .group_by(AlbumRow.id)
            .order_by(AlbumRow.created_at.desc(), AlbumRow.id.desc())
        )
        with self.Session() as session:
            return [
                (self._to_album_record(row), total or 0)
                for row, total in session.execute(stmt).all()
            ]

    def create_album(self, group_id: int, name: str) -> AlbumRecord:
        with self.Session() as session:
            row = AlbumRow(group_id=group_id, name=name, created_at=utcnow())
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_album_record(row)

    def add_image_to_album(self, album_id: int, image_id: str, group_id: int) -> bool:
        with self.Session() as session:
            if session.get(AlbumImageRow, (album_id, image_id)):
                return False
            session.add(
                AlbumImageRow(album_id=album_id, image_id=image_id, group_id=group_id)
            )
            session.commit()
            return True

    def remove_image_from_album(self, album_id: int, image_id: str) -> bool:
        with self.Session() as session:
            row = session.get(AlbumImageRow, (album_id, image_id))
            if not row:
                return False
            session.delete(row)
            session.commit()
            return True

    def delete_album(self, album_id: int, group_id: int) -> bool:
        with self.Session() as session:
            album = session.get(AlbumRow, album_id)
            if not album or album.group_id != group_id:
                return False
            session.query(AlbumImageRow).filter(
                AlbumImageRow.album_id == album_id
            ).delete(synchronize_session=False)
            session.delete(album)
            session.commit()
            return True


Base = declarative_base()


class GroupRow(Base):
    __tablename__ = "groups"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    access = Column(String, nullable=False, default="private")
    admin_user = Column(String, nullable=True)
    status = Column(String, nullable=False, default="heating")
    plan_type = Column(String, nullable=True)
    total_images = Column(Integer, nullable=False, default=0)
    total_size = Column(BigInteger, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False)
    delete_at = Column(DateTime(timezone=True), nullable=True)


class ImageRow(Base):
    __tablename__ = "images"

    id = Column(String, primary_key=True)
    group_id = Column(Integer, nullable=False, index=True)
    filename = Column(String, nullable=False)
    uploaded_at = Column(DateTime(timezone=True), nullable=False)
    date_taken = Column(DateTime(timezone=True), nullable=True)
    size = Column(BigInteger, nullable=False, default=0)
    location = Column(Text, nullable=True)
    thumb_byte = Column(LargeBinary, nullable=True)
    signed_url = Column(Text, nullable=True)
    signed_url_3k = Column(Text, nullable=True)
    expire_time = Column(DateTime(timezone=True), nullable=True)
    status = Column(String, nullable=False, default="warm")
    highlight = Column(Boolean, nullable=False, default=False)
    delete_at = Column(DateTime(timezone=True), nullable=True)
    similar_image_id = Column(String, nullable=True, index=True)


class PersonRow(Base):
    __tablename__ = "persons"

    id = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(Integer, nullable=False, index=True)
    name = Column(String, nullable=True)
    thumbnail = Column(LargeBinary, nullable=True)
    user_id = Column(String, nullable=True)


class FaceRow(Base):
    __tablename__ = "faces"

    id = Column(Integer, primary_key=True, autoincrement=True)
    image_id = Column(String, nullable=False, index=True)
    person_id = Column(Integer, nullable=False, index=True)


class AlbumRow(Base):
    __tablename__ = "albums"

    id = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(Integer, nullable=False, index=True)
    name = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)


class AlbumImageRow(Base):
    __tablename__ = "album_images"

    album_id = Column(Integer, primary_key=True)
    image_id = Column(String, primary_key=True)
    group_id = Column(Integer, nullable=False)
