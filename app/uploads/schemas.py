"""Upload Pydantic schemas"""
from enum import Enum

from app.utils.casing import CamelModel


class Bucket(str, Enum):
    AVATARS = "avatars"
    GALLERY = "gallery"
    VIDEOS = "videos"


class UploadUrlRequest(CamelModel):
    bucket: Bucket


class UploadUrlResponse(CamelModel):
    """Presigned PUT target and the URL the object will be served from"""
    upload_url: str
    public_url: str
    file_name: str
