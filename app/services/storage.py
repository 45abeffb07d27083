import logging
import mimetypes
import uuid
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import HTTPException, status

from app.core.config import settings
from app.core.constants import UploadKindEnum
from app.schemas.utility import UploadResult

logger = logging.getLogger(__name__)

MB = 1024 * 1024

# kind -> (key prefix, accepted content type family, fallback content type)
UPLOAD_RULES = {
    UploadKindEnum.AVATAR: ("avatars", "image/", "image/jpeg"),
    UploadKindEnum.THUMBNAIL: ("thumbnails", "image/", "image/jpeg"),
    UploadKindEnum.VIDEO: ("videos", "video/", "video/mp4"),
}


class StorageService:
    def __init__(self, client=None):
        self._client = client
        self.bucket_name = settings.S3_BUCKET_NAME

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client("s3", region_name=settings.AWS_REGION)
        return self._client

    def max_size_bytes(self, kind: UploadKindEnum) -> int:
        if kind == UploadKindEnum.VIDEO:
            return settings.MAX_VIDEO_UPLOAD_MB * MB
        return settings.MAX_IMAGE_UPLOAD_MB * MB

    def public_url(self, key: str) -> str:
        return f"https://{self.bucket_name}.s3.{settings.AWS_REGION}.amazonaws.com/{key}"

    def build_key(self, kind: UploadKindEnum, filename: Optional[str]) -> str:
        prefix = UPLOAD_RULES[kind][0]
        extension = ""
        if filename and "." in filename:
            extension = "." + filename.rsplit(".", 1)[1].lower()
        return f"{prefix}/{uuid.uuid4().hex}{extension}"

    def upload(self, kind: UploadKindEnum, file: bytes, filename: Optional[str] = None,
               content_type: Optional[str] = None) -> UploadResult:
        kind = UploadKindEnum(kind)
        _, family, fallback = UPLOAD_RULES[kind]

        content_type = content_type or (mimetypes.guess_type(filename)[0] if filename else None) or fallback
        if not content_type.startswith(family):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid file type for {kind.value} upload."
            )
        if not file:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Uploaded file is empty.")

        limit = self.max_size_bytes(kind)
        if len(file) > limit:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"File is too large. Maximum size is {limit // MB} MB."
            )

        if not self.bucket_name:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="File storage is not configured."
            )

        key = self.build_key(kind, filename)
        try:
            self.client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=file,
                ContentType=content_type,
                ACL="public-read"
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to upload {kind.value} to {key}: {str(e)}")
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to upload file.")

        logger.info(f"Uploaded {kind.value} ({len(file)} bytes) to {key}")
        return UploadResult(url=self.public_url(key), key=key, content_type=content_type, size_bytes=len(file))


storage_service = StorageService()
