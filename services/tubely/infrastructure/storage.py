from __future__ import annotations

import logging
import shutil
from pathlib import Path
from urllib.parse import quote

import boto3
from botocore.client import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from services.tubely.application.interfaces import Artifact, ObjectStore
from services.tubely.config import TubelyConfig
from services.tubely.domain.errors import SigningFailed, TransferFailed

logger = logging.getLogger(__name__)


def create_s3_client(config: TubelyConfig):
    return boto3.client(
        "s3",
        endpoint_url=config.storage_endpoint_url,
        region_name=config.s3_region,
        aws_access_key_id=config.storage_access_key,
        aws_secret_access_key=config.storage_secret_key,
        config=BotoConfig(signature_version="s3v4"),
    )


class S3ObjectStore(ObjectStore):
    def __init__(
        self, client, *, region: str, public_base_url: str | None = None
    ) -> None:
        self._client = client
        self._region = region
        self._public_base_url = public_base_url.rstrip("/") if public_base_url else None

    def put(
        self, bucket: str, key: str, artifact: Artifact, content_type: str
    ) -> None:
        artifact.rewind()
        try:
            self._client.put_object(
                Bucket=bucket,
                Key=key,
                Body=artifact.file,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            raise TransferFailed("Could not put the object into storage") from exc
        logger.info(f"Stored s3://{bucket}/{key} ({content_type})")

    def public_url(self, bucket: str, key: str) -> str:
        if self._public_base_url:
            return f"{self._public_base_url}/{quote(key)}"
        return f"https://{bucket}.s3.{self._region}.amazonaws.com/{quote(key)}"

    def presign_get(self, bucket: str, key: str, expires_in_seconds: int) -> str:
        try:
            return self._client.generate_presigned_url(
                ClientMethod="get_object",
                Params={"Bucket": bucket, "Key": key},
                ExpiresIn=expires_in_seconds,
            )
        except (BotoCoreError, ClientError) as exc:
            raise SigningFailed() from exc


class LocalAssetStore(ObjectStore):
    """Keeps objects under a local assets directory served by the app."""

    def __init__(self, root: str | Path, *, base_url: str) -> None:
        self._root = Path(root)
        self._base_url = base_url.rstrip("/")

    def put(
        self, bucket: str, key: str, artifact: Artifact, content_type: str
    ) -> None:
        destination = self._root / key
        artifact.rewind()
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            with destination.open("wb") as out:
                shutil.copyfileobj(artifact.file, out)
        except OSError as exc:
            destination.unlink(missing_ok=True)
            raise TransferFailed("Could not write the asset file") from exc
        logger.info(f"Stored asset {destination} ({content_type})")

    def public_url(self, bucket: str, key: str) -> str:
        return f"{self._base_url}/{quote(key)}"

    def presign_get(self, bucket: str, key: str, expires_in_seconds: int) -> str:
        # Local assets are served without signatures.
        return self.public_url(bucket, key)
