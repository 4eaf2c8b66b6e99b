from __future__ import annotations

import re
from pathlib import Path
from typing import Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from devcamper.core.config import Settings


class StorageError(Exception):
    pass


def safe_file_name(file_name: str) -> str:
    raw = str(file_name or "").strip() or "file.bin"
    return re.sub(r"[^A-Za-z0-9._-]+", "_", raw)


class FileStorage(Protocol):
    def save(self, file_name: str, content: bytes, content_type: str | None = None) -> str:
        ...


class LocalFileStorage:
    def __init__(self, root: str | Path):
        self.root = Path(root)

    def save(self, file_name: str, content: bytes, content_type: str | None = None) -> str:
        name = safe_file_name(file_name)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            (self.root / name).write_bytes(content)
        except OSError as exc:
            raise StorageError(f"Could not write {name}: {exc}") from exc
        return name


class S3FileStorage:
    def __init__(self, settings: Settings):
        self.bucket = settings.S3_BUCKET
        self.region = settings.S3_REGION
        self.client = boto3.client(
            "s3",
            endpoint_url=settings.S3_ENDPOINT or None,
            aws_access_key_id=settings.S3_ACCESS_KEY or None,
            aws_secret_access_key=settings.S3_SECRET_KEY or None,
            region_name=settings.S3_REGION,
            use_ssl=settings.S3_USE_SSL,
        )
        self._bucket_checked = False

    def ensure_bucket(self) -> None:
        if self._bucket_checked:
            return
        try:
            self.client.head_bucket(Bucket=self.bucket)
        except ClientError as exc:
            code = str(exc.response.get("Error", {}).get("Code", ""))
            if code not in {"404", "NoSuchBucket", "NotFound"}:
                raise
            kwargs: dict = {"Bucket": self.bucket}
            if self.region and self.region != "us-east-1":
                kwargs["CreateBucketConfiguration"] = {"LocationConstraint": self.region}
            try:
                self.client.create_bucket(**kwargs)
            except ClientError as create_exc:
                create_code = str(create_exc.response.get("Error", {}).get("Code", ""))
                if create_code not in {"BucketAlreadyOwnedByYou", "BucketAlreadyExists"}:
                    raise
        self._bucket_checked = True

    def save(self, file_name: str, content: bytes, content_type: str | None = None) -> str:
        name = safe_file_name(file_name)
        params = {"Bucket": self.bucket, "Key": f"photos/{name}", "Body": content}
        if content_type:
            params["ContentType"] = content_type
        try:
            self.ensure_bucket()
            self.client.put_object(**params)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Could not upload {name}: {exc}") from exc
        return name


def build_file_storage(settings: Settings) -> FileStorage:
    backend = str(settings.FILE_STORAGE or "local").strip().lower()
    if backend == "s3":
        return S3FileStorage(settings)
    if backend == "local":
        return LocalFileStorage(settings.FILE_UPLOAD_PATH)
    raise StorageError(f"Unknown FILE_STORAGE: {backend}")
