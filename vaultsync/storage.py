"""Read-only S3 access for vault sync."""

from __future__ import annotations

import logging
import time
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError, ProfileNotFound

from .exceptions import ConfigError, FetchError, ListError
from .sync.scanner import RemoteObject
from .utils import DEFAULT_REGION, DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

_BOTO_ERRORS = (BotoCoreError, ClientError)


class Deadline:
    """Wall-clock budget shared by every remote call of a run."""

    def __init__(self, seconds: float, clock=time.monotonic):
        self.seconds = seconds
        self._clock = clock
        self._expires_at = clock() + seconds

    def remaining(self) -> float:
        """Seconds left, never negative."""
        return max(0.0, self._expires_at - self._clock())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0


class ObjectStream:
    """Readable body of a fetched object.

    Read errors from botocore surface as :class:`FetchError` so callers can
    tell a broken download apart from a failing local write.
    """

    def __init__(self, key: str, body: Any, deadline: Deadline | None = None):
        self.key = key
        self._body = body
        self._deadline = deadline

    def read(self, size: int = -1) -> bytes:
        if self._deadline is not None and self._deadline.expired:
            raise FetchError(self.key, "deadline exceeded while reading")
        try:
            return self._body.read(size if size >= 0 else None)
        except _BOTO_ERRORS as e:
            raise FetchError(self.key, f"read failed: {e}") from e

    def close(self) -> None:
        self._body.close()

    def __enter__(self) -> ObjectStream:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class S3Storage:
    """List and fetch objects from one S3 bucket.

    All calls made through one instance share a single :class:`Deadline`;
    once it has elapsed, listings raise :class:`ListError` and fetches raise
    :class:`FetchError` without contacting S3.
    """

    def __init__(
        self,
        bucket: str,
        session: boto3.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        endpoint_url: str | None = None,
    ):
        """Initialize the storage client.

        Args:
            bucket: Bucket name
            session: boto3 session (profile and region); default session if None
            timeout: Wall-clock budget in seconds for all remote calls
            endpoint_url: Custom endpoint for S3-compatible services
        """
        self.bucket = bucket
        self.deadline = Deadline(timeout)

        kwargs: dict[str, Any] = {
            "config": Config(
                connect_timeout=timeout,
                read_timeout=timeout,
                retries={"max_attempts": 3, "mode": "standard"},
            ),
        }
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url

        if session is None:
            self._client = boto3.client("s3", **kwargs)
        else:
            self._client = session.client("s3", **kwargs)

    @classmethod
    def from_profile(
        cls,
        bucket: str,
        profile: str | None = None,
        region: str = DEFAULT_REGION,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> S3Storage:
        """Create storage from an AWS profile and region.

        Raises:
            ConfigError: If the profile does not exist or no credentials
                can be found
        """
        try:
            session = boto3.Session(profile_name=profile or None, region_name=region)
        except ProfileNotFound as e:
            raise ConfigError(f"AWS profile not found: {profile}") from e

        if session.get_credentials() is None:
            raise ConfigError(
                "No AWS credentials found. Configure a profile with --aws-profile "
                "or set AWS_ACCESS_KEY_ID/AWS_SECRET_ACCESS_KEY."
            )
        if profile:
            logger.info("Using AWS profile: %s", profile)
        logger.info("Using AWS region: %s", session.region_name)
        return cls(bucket, session=session, timeout=timeout)

    def list_objects(self, prefix: str) -> list[RemoteObject]:
        """List every object whose key starts with ``prefix``.

        Args:
            prefix: Normalized vault prefix

        Returns:
            RemoteObject list in listing order

        Raises:
            ListError: If listing fails or the deadline has elapsed
        """
        if self.deadline.expired:
            raise ListError(f"Listing s3://{self.bucket}/{prefix}: deadline exceeded")

        result: list[RemoteObject] = []
        try:
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                if self.deadline.expired:
                    raise ListError(
                        f"Listing s3://{self.bucket}/{prefix}: deadline exceeded"
                    )
                for obj in page.get("Contents", []):
                    result.append(
                        RemoteObject(
                            key=obj["Key"],
                            size=obj["Size"],
                            last_modified=obj["LastModified"],
                        )
                    )
        except _BOTO_ERRORS as e:
            raise ListError(f"Listing s3://{self.bucket}/{prefix} failed: {e}") from e

        logger.debug("Listed S3 objects: prefix=%s count=%d", prefix, len(result))
        return result

    def get_object(self, key: str) -> ObjectStream:
        """Open an object for reading.

        Raises:
            FetchError: If the request fails or the deadline has elapsed
        """
        if self.deadline.expired:
            raise FetchError(key, "deadline exceeded")
        try:
            response = self._client.get_object(Bucket=self.bucket, Key=key)
        except _BOTO_ERRORS as e:
            raise FetchError(key, f"download failed: {e}") from e
        return ObjectStream(key, response["Body"], self.deadline)
