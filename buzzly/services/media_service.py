# buzzly/services/media_service.py
import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool
from typing import BinaryIO, Optional
import uuid
import logging

from buzzly.core.config import settings
from buzzly.errors import InvalidArgument, MediaUploadFailed

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}


class MediaService:
    def __init__(self):
        self._s3_client = None

    @property
    def is_configured(self) -> bool:
        return all([settings.S3_BUCKET_NAME, settings.S3_ACCESS_KEY_ID, settings.S3_SECRET_ACCESS_KEY])

    @property
    def s3_client(self):
        if self._s3_client is None:
            self._s3_client = boto3.client(
                "s3",
                endpoint_url=settings.S3_ENDPOINT_URL,
                aws_access_key_id=settings.S3_ACCESS_KEY_ID,
                aws_secret_access_key=settings.S3_SECRET_ACCESS_KEY,
                config=Config(signature_version="s3v4")
            )
        return self._s3_client

    def public_url(self, object_key: str) -> str:
        if settings.S3_PUBLIC_BASE_URL:
            return f"{settings.S3_PUBLIC_BASE_URL.rstrip('/')}/{object_key}"
        return f"https://{settings.S3_BUCKET_NAME}.s3.amazonaws.com/{object_key}"

    def _upload(self, file: BinaryIO, object_key: str, content_type: str) -> None:
        self.s3_client.upload_fileobj(
            file,
            settings.S3_BUCKET_NAME,
            object_key,
            ExtraArgs={"ContentType": content_type},
        )

    async def upload_profile_picture(self, file: BinaryIO, content_type: Optional[str], user_id: str) -> str:
        """Store an image in the media bucket and return its public URL."""
        extension = ALLOWED_IMAGE_TYPES.get(content_type or "")
        if not extension:
            raise InvalidArgument(message=f"Unsupported image type: {content_type}")
        if not self.is_configured:
            raise MediaUploadFailed(message="Image hosting is not configured")

        object_key = f"{settings.S3_PROFILE_PREFIX}/{user_id}/{uuid.uuid4()}.{extension}"
        try:
            await run_in_threadpool(self._upload, file, object_key, content_type)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error uploading profile picture for {user_id}: {e}")
            raise MediaUploadFailed() from e

        logger.info(f"Uploaded profile picture {object_key}")
        return self.public_url(object_key)

media_service = MediaService()
