"""
Publish rendered illustrations to S3 so the presentation service can fetch them.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError

from storybook.common import LocalIOFailure, UpstreamCallFailure

logger = logging.getLogger(__name__)


class ArtifactPublisher(Protocol):
    def publish(self, local_path: Path) -> str:
        ...


class S3ArtifactPublisher:
    """
    Uploads local image files to a bucket and returns their public URL.

    Object keys are ``<key_prefix><story_id>_<file name>`` where the story id
    is the name of the file's parent directory, e.g.
    ``STORYBOOK_<uuid>_3.png``.
    """

    def __init__(
        self,
        *,
        bucket_name: str,
        region: str,
        key_prefix: str = "STORYBOOK_",
        client: Any | None = None,
    ) -> None:
        if not bucket_name:
            raise ValueError("S3 bucket name is required.")
        self._bucket_name = bucket_name
        self._region = region
        self._key_prefix = key_prefix
        self._client = client or boto3.client("s3", region_name=region)

    def object_key(self, local_path: Path) -> str:
        return f"{self._key_prefix}{local_path.parent.name}_{local_path.name}"

    def public_url(self, key: str) -> str:
        return f"https://{self._bucket_name}.s3.{self._region}.amazonaws.com/{key}"

    def publish(self, local_path: Path) -> str:
        local_path = Path(local_path)
        if not local_path.is_file():
            raise LocalIOFailure(f"Cannot publish missing file {local_path}.")

        key = self.object_key(local_path)
        try:
            self._client.upload_file(
                str(local_path),
                self._bucket_name,
                key,
                ExtraArgs={"ContentType": "image/png"},
            )
        except (S3UploadFailedError, BotoCoreError, ClientError) as exc:
            raise UpstreamCallFailure(
                f"Upload of {local_path} to s3://{self._bucket_name}/{key} failed: {exc}",
                user_message="You know, I am having trouble posting these images. Hrm. Try again later?",
            ) from exc
        except OSError as exc:
            raise LocalIOFailure(f"Could not read {local_path} for upload: {exc}") from exc

        url = self.public_url(key)
        logger.debug("Published %s to %s.", local_path, url)
        return url
