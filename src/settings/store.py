from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional, Tuple, Type, TypeVar
from uuid import uuid4

import boto3
from botocore.exceptions import ClientError

from .base import Settings


logger = logging.getLogger(__name__)

S = TypeVar("S", bound=Settings)


class OptimisticLockError(Exception):
    """Raised when the stored object changed since the ETag a save expected."""


def _error_code(e: ClientError) -> Optional[str]:
    return e.response.get("Error", {}).get("Code")


class S3SettingsStore:
    """
    Keeps one `Settings` record as obfuscated JSON in an S3 object.

    `read()` loads the record (a fresh one when the object is missing) and
    remembers the ETag. `bind()` makes the record's `save()` write it back;
    with `if_match` each write only lands if the object still has the ETag
    seen last.
    """

    def __init__(
        self,
        *,
        s3: Optional[object] = None,
        bucket: str,
        key: str,
        region_name: Optional[str] = None,
    ) -> None:
        self._s3 = s3 or boto3.client("s3", region_name=region_name)
        self.bucket = bucket
        self.key = key
        self.etag: Optional[str] = None

    def read(
        self,
        settings_cls: Type[S],
        additional_attributes: Optional[Mapping[str, Any]] = None,
    ) -> Tuple[S, Optional[str]]:
        """Return `(settings, etag)`; ValueError if the body is not a JSON object."""
        try:
            resp = self._s3.get_object(Bucket=self.bucket, Key=self.key)
        except ClientError as e:
            if _error_code(e) not in ("NoSuchKey", "404"):
                raise
            self.etag = None
            return (settings_cls.from_data({}, additional_attributes), None)

        try:
            raw = json.loads(resp["Body"].read().decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as ex:
            raise ValueError("Failed to parse stored settings JSON") from ex
        if not isinstance(raw, dict):
            raise ValueError("Stored settings must be a JSON object")

        self.etag = resp.get("ETag")
        return (settings_cls.from_data(raw, additional_attributes), self.etag)

    def bind(self, settings: S, *, if_match: Optional[str] = None) -> S:
        """Persist `settings` on every successful `save()`.

        With `if_match`, the first save expects that ETag and each later save
        the ETag of the previous write.
        """
        expected = if_match

        def _save() -> None:
            nonlocal expected
            body = json.dumps(settings.obfuscated(), separators=(",", ":"), sort_keys=True, default=str)
            etag = self._write(body.encode("utf-8"), expected)
            if expected is not None:
                expected = etag

        settings.on_save(_save)
        return settings

    def _write(self, body: bytes, if_match: Optional[str]) -> str:
        if if_match is None:
            resp = self._s3.put_object(Bucket=self.bucket, Key=self.key, Body=body, ContentType="application/json")
        else:
            resp = self._swap(body, if_match)
        self.etag = str(resp.get("ETag"))
        logger.debug("Stored settings at s3://%s/%s", self.bucket, self.key)
        return self.etag

    def _swap(self, body: bytes, if_match: str) -> Mapping[str, Any]:
        # PutObject takes no If-Match; stage the body and copy it over conditionally
        staged = f"{self.key}.tmp-{uuid4().hex}"
        self._s3.put_object(Bucket=self.bucket, Key=staged, Body=body, ContentType="application/json")
        try:
            return self._s3.copy_object(
                Bucket=self.bucket,
                Key=self.key,
                CopySource={"Bucket": self.bucket, "Key": staged},
                IfMatch=if_match,
            )
        except ClientError as e:
            if _error_code(e) in ("PreconditionFailed", "412"):
                raise OptimisticLockError(f"s3://{self.bucket}/{self.key} changed since {if_match}") from e
            raise
        finally:
            self._s3.delete_object(Bucket=self.bucket, Key=staged)
