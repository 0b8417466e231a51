"""
Pydantic schemas for the gallery API.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ImageItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    filename: str
    uploaded_at: Optional[datetime] = None
    date_taken: Optional[datetime] = None
    size: int = 0
    thumbnail_location: str = ""
    compressed_location: Optional[str] = None
    compressed_location_3k: Optional[str] = None
    expire_time: Optional[datetime] = None
    highlight: bool = False
    delete_at: Optional[datetime] = None
    similar_image_id: Optional[str] = None


class ImagePageResponse(BaseModel):
    items: list[ImageItemResponse]
    has_more: bool
    hot_images: Optional[int] = None


class SimilarImagesResponse(BaseModel):
    items: list[ImageItemResponse]
    count: int
    similar_image_id: str


class ImageCountResponse(BaseModel):
    total_count: int


class GroupDetailsResponse(BaseModel):
    id: int
    name: str
    access: str
    admin_user: Optional[str] = None
    status: str
    plan_type: Optional[str] = None
    total_images: int
    total_size: int
    created_at: Optional[datetime] = None
    delete_at: Optional[datetime] = None


class PersonSummary(BaseModel):
    person_id: int
    name: str
    face_thumb_bytes: str


class PersonDetailsResponse(PersonSummary):
    total_images: int


class AlbumSummary(BaseModel):
    id: int
    name: str
    group_id: int
    total_images: int


class CreateAlbumRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    group_id: int = Field(..., alias="groupId")


class AlbumResponse(BaseModel):
    id: int
    name: str
    group_id: int
    created_at: datetime


class AddAlbumImageRequest(BaseModel):
    image_id: str = Field(..., alias="imageId")
    album_id: int = Field(..., alias="albumId")
    group_id: int = Field(..., alias="groupId")


class AddAlbumImageResponse(BaseModel):
    album_id: int
    image_id: str
    group_id: int
    added: bool


class DeleteAlbumRequest(BaseModel):
    mode: Literal["album", "image"]
    album_id: int = Field(..., alias="albumId")
    group_id: int = Field(..., alias="groupId")
    image_id: Optional[str] = Field(default=None, alias="imageId")


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class DownloadRequest(BaseModel):
    filename: str = Field(..., min_length=1, max_length=1024)


class DownloadResponse(BaseModel):
    download_url: str
