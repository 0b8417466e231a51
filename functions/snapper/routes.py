"""
HTTP routes for the gallery API.
"""

from __future__ import annotations

import base64
import logging
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query

from snapper.access import AccessGate, Identity, get_identity, require_identity
from snapper.config import Settings, get_settings
from snapper.db import DbClient, PersonRecord
from snapper.dependencies import (
    get_access_gate,
    get_album_image_lister,
    get_db_client,
    get_group_image_lister,
    get_person_image_lister,
    get_similar_image_lister,
    get_storage_client,
)
from snapper.errors import BadRequest, NotFound, internal_errors
from snapper.listing import ImageLister, PageRequest, PageResult
from snapper.schemas import (
    AddAlbumImageRequest,
    AddAlbumImageResponse,
    AlbumResponse,
    AlbumSummary,
    CreateAlbumRequest,
    DeleteAlbumRequest,
    DownloadRequest,
    DownloadResponse,
    GroupDetailsResponse,
    ImageCountResponse,
    ImageItemResponse,
    ImagePageResponse,
    MessageResponse,
    PersonDetailsResponse,
    PersonSummary,
    SimilarImagesResponse,
)
from snapper.storage import StorageClient
from snapper.types import ImageView, SortKey, utcnow

logger = logging.getLogger(__name__)

router = APIRouter()

SOFT_DELETE_GRACE = timedelta(hours=24)


def _require(value, name: str):
    if value is None or value == "":
        raise BadRequest(f"Missing {name}")
    return value


def _page_response(result: PageResult) -> ImagePageResponse:
    return ImagePageResponse(
        items=[ImageItemResponse.model_validate(item) for item in result.items],
        has_more=result.has_more,
        hot_images=result.hot_images,
    )


def _person_thumb(person: PersonRecord) -> str:
    if not person.thumbnail:
        return ""
    encoded = base64.b64encode(person.thumbnail).decode("ascii")
    return f"data:image/jpeg;base64,{encoded}"


@router.get("/groups/images", response_model=ImagePageResponse)
def list_group_images(
    group_id: Optional[int] = Query(None, alias="groupId"),
    mode: Optional[str] = Query(None),
    sorting: Optional[str] = Query(None),
    page: int = Query(0),
    identity: Optional[Identity] = Depends(get_identity),
    gate: AccessGate = Depends(get_access_gate),
    lister: ImageLister = Depends(get_group_image_lister),
    settings: Settings = Depends(get_settings),
):
    group_id = _require(group_id, "groupId")
    request = PageRequest(
        group_id=group_id,
        page=page,
        page_size=settings.group_images_page_size,
        sort=SortKey.parse(sorting),
    )
    with internal_errors("GET /groups/images"):
        gate.check(identity, group_id)
        result = lister.list_group_images(request, ImageView.parse(mode))
    return _page_response(result)


@router.get("/groups/images/count", response_model=ImageCountResponse)
def count_group_images(
    group_id: Optional[int] = Query(None, alias="groupId"),
    mode: Optional[str] = Query(None),
    identity: Optional[Identity] = Depends(get_identity),
    gate: AccessGate = Depends(get_access_gate),
    db: DbClient = Depends(get_db_client),
):
    group_id = _require(group_id, "groupId")
    with internal_errors("GET /groups/images/count"):
        gate.check(identity, group_id)
        total = db.count_group_images(group_id, ImageView.parse(mode))
    return ImageCountResponse(total_count=total)


@router.get("/groups/images/similar", response_model=SimilarImagesResponse)
def list_similar_images(
    group_id: Optional[int] = Query(None, alias="groupId"),
    similar_image_id: Optional[str] = Query(None, alias="similarImageId"),
    sorting: Optional[str] = Query(None),
    identity: Optional[Identity] = Depends(get_identity),
    gate: AccessGate = Depends(get_access_gate),
    lister: ImageLister = Depends(get_similar_image_lister),
):
    group_id = _require(group_id, "groupId")
    similar_image_id = _require(similar_image_id, "similarImageId")
    with internal_errors("GET /groups/images/similar"):
        gate.check(identity, group_id)
        items = lister.list_similar_images(
            group_id, similar_image_id, SortKey.parse(sorting)
        )
    return SimilarImagesResponse(
        items=[ImageItemResponse.model_validate(item) for item in items],
        count=len(items),
        similar_image_id=similar_image_id,
    )


@router.delete("/groups/images", response_model=MessageResponse)
def soft_delete_image(
    image_id: Optional[str] = Query(None, alias="imageId"),
    identity: Identity = Depends(require_identity),
    db: DbClient = Depends(get_db_client),
):
    image_id = _require(image_id, "imageId")
    with internal_errors("DELETE /groups/images"):
        found = db.set_image_deleted(image_id, utcnow() + SOFT_DELETE_GRACE)
    if not found:
        raise NotFound("Image not found")
    logger.info("User %s moved image %s to the bin", identity.user_id, image_id)
    return MessageResponse(
        message=f"Image {image_id} marked for deletion (in 24 hours)."
    )


@router.patch("/groups/images/restore", response_model=MessageResponse)
def restore_image(
    image_id: Optional[str] = Query(None, alias="imageId"),
    identity: Identity = Depends(require_identity),
    db: DbClient = Depends(get_db_client),
):
    image_id = _require(image_id, "imageId")
    with internal_errors("PATCH /groups/images/restore"):
        found = db.set_image_deleted(image_id, None)
    if not found:
        raise NotFound("Image not found")
    return MessageResponse(message=f"Image {image_id} restored from the bin.")


@router.patch("/groups/images", response_model=MessageResponse)
def set_image_highlight(
    image_id: Optional[str] = Query(None, alias="imageId"),
    action: Optional[str] = Query(None),
    identity: Identity = Depends(require_identity),
    db: DbClient = Depends(get_db_client),
):
    image_id = _require(image_id, "imageId")
    highlight = action == "add"
    with internal_errors("PATCH /groups/images"):
        found = db.set_image_highlight(image_id, highlight)
    if not found:
        raise NotFound("Image not found")
    verb = "marked as" if highlight else "removed from"
    return MessageResponse(message=f"Image {image_id} {verb} highlight.")


@router.get("/groups/details", response_model=GroupDetailsResponse)
def group_details(
    group_id: Optional[int] = Query(None, alias="groupId"),
    identity: Optional[Identity] = Depends(get_identity),
    gate: AccessGate = Depends(get_access_gate),
    db: DbClient = Depends(get_db_client),
):
    group_id = _require(group_id, "groupId")
    with internal_errors("GET /groups/details"):
        gate.check(identity, group_id)
        group = db.get_group(group_id)
    if group is None:
        raise NotFound("Group not found")
    return GroupDetailsResponse(**group.as_dict())


@router.get("/persons", response_model=list[PersonSummary])
def list_persons(
    group_id: Optional[int] = Query(None, alias="groupId"),
    identity: Optional[Identity] = Depends(get_identity),
    gate: AccessGate = Depends(get_access_gate),
    db: DbClient = Depends(get_db_client),
):
    group_id = _require(group_id, "groupId")
    with internal_errors("GET /persons"):
        gate.check(identity, group_id)
        persons = db.list_persons(group_id)
    return [
        PersonSummary(
            person_id=person.id,
            name=person.name or "Add Name",
            face_thumb_bytes=_person_thumb(person),
        )
        for person in persons
    ]


@router.get("/persons/details", response_model=PersonDetailsResponse)
def person_details(
    person_id: Optional[int] = Query(None, alias="personId"),
    identity: Optional[Identity] = Depends(get_identity),
    gate: AccessGate = Depends(get_access_gate),
    db: DbClient = Depends(get_db_client),
):
    person_id = _require(person_id, "personId")
    with internal_errors("GET /persons/details"):
        person = db.get_person(person_id)
        if person is None:
            raise NotFound("Person not found")
        gate.check(identity, person.group_id)
        total = db.count_person_images(person.group_id, person.id)
    return PersonDetailsResponse(
        person_id=person.id,
        name=person.name or "Add Name",
        face_thumb_bytes=_person_thumb(person),
        total_images=total,
    )


@router.get("/persons/images", response_model=ImagePageResponse)
def list_person_images(
    group_id: Optional[int] = Query(None, alias="groupId"),
    person_id: Optional[int] = Query(None, alias="personId"),
    mode: Optional[str] = Query(None),
    sorting: Optional[str] = Query(None),
    page: int = Query(0),
    identity: Optional[Identity] = Depends(get_identity),
    gate: AccessGate = Depends(get_access_gate),
    lister: ImageLister = Depends(get_person_image_lister),
    settings: Settings = Depends(get_settings),
):
    group_id = _require(group_id, "groupId")
    person_id = _require(person_id, "personId")
    request = PageRequest(
        group_id=group_id,
        page=page,
        page_size=settings.person_images_page_size,
        sort=SortKey.parse(sorting),
    )
    with internal_errors("GET /persons/images"):
        gate.check(identity, group_id)
        result = lister.list_person_images(request, person_id, ImageView.parse(mode))
    return _page_response(result)


@router.get("/albums", response_model=list[AlbumSummary])
def list_albums(
    group_id: Optional[int] = Query(None, alias="groupId"),
    identity: Optional[Identity] = Depends(get_identity),
    gate: AccessGate = Depends(get_access_gate),
    db: DbClient = Depends(get_db_client),
):
    group_id = _require(group_id, "groupId")
    with internal_errors("GET /albums"):
        gate.check(identity, group_id)
        albums = db.list_albums(group_id)
    return [
        AlbumSummary(
            id=album.id, name=album.name, group_id=album.group_id, total_images=total
        )
        for album, total in albums
    ]


@router.post("/albums", response_model=AlbumResponse, status_code=201)
def create_album(
    payload: CreateAlbumRequest,
    identity: Identity = Depends(require_identity),
    db: DbClient = Depends(get_db_client),
):
    with internal_errors("POST /albums"):
        album = db.create_album(payload.group_id, payload.name)
    return AlbumResponse(
        id=album.id,
        name=album.name,
        group_id=album.group_id,
        created_at=album.created_at,
    )


@router.put("/albums", response_model=AddAlbumImageResponse)
def add_album_image(
    payload: AddAlbumImageRequest,
    identity: Identity = Depends(require_identity),
    db: DbClient = Depends(get_db_client),
):
    with internal_errors("PUT /albums"):
        added = db.add_image_to_album(
            payload.album_id, payload.image_id, payload.group_id
        )
    return AddAlbumImageResponse(
        album_id=payload.album_id,
        image_id=payload.image_id,
        group_id=payload.group_id,
        added=added,
    )


@router.delete("/albums", response_model=MessageResponse)
def delete_album(
    payload: DeleteAlbumRequest,
    identity: Identity = Depends(require_identity),
    db: DbClient = Depends(get_db_client),
):
    if payload.mode == "image":
        image_id = _require(payload.image_id, "imageId")
        with internal_errors("DELETE /albums"):
            removed = db.remove_image_from_album(payload.album_id, image_id)
        if not removed:
            raise NotFound("Image not in album")
        return MessageResponse(
            message=f"Image {image_id} removed from album {payload.album_id}"
        )

    with internal_errors("DELETE /albums"):
        deleted = db.delete_album(payload.album_id, payload.group_id)
    if not deleted:
        raise NotFound("Album not found")
    return MessageResponse(message=f"Album {payload.album_id} deleted")


@router.get("/albums/images", response_model=ImagePageResponse)
def list_album_images(
    group_id: Optional[int] = Query(None, alias="groupId"),
    album_id: Optional[int] = Query(None, alias="albumId"),
    sorting: Optional[str] = Query(None),
    page: int = Query(0),
    identity: Optional[Identity] = Depends(get_identity),
    gate: AccessGate = Depends(get_access_gate),
    lister: ImageLister = Depends(get_album_image_lister),
    settings: Settings = Depends(get_settings),
):
    group_id = _require(group_id, "groupId")
    album_id = _require(album_id, "albumId")
    request = PageRequest(
        group_id=group_id,
        page=page,
        page_size=settings.album_images_page_size,
        sort=SortKey.parse(sorting, default=SortKey.DATE_TAKEN),
    )
    with internal_errors("GET /albums/images"):
        gate.check(identity, group_id)
        result = lister.list_album_images(request, album_id)
    return _page_response(result)


@router.post("/images/download", response_model=DownloadResponse)
def download_url(
    payload: DownloadRequest,
    identity: Identity = Depends(require_identity),
    storage: StorageClient = Depends(get_storage_client),
    settings: Settings = Depends(get_settings),
):
    with internal_errors("POST /images/download"):
        url = storage.presign_get(
            payload.filename,
            expires_in=settings.download_url_ttl,
            download_filename=payload.filename,
        )
    return DownloadResponse(download_url=url)
