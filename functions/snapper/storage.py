"""
Storage abstraction for Firebase Storage (via the GCS S3-compatible XML API)
and in-memory testing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol
from urllib.parse import quote

import boto3
from botocore.config import Config


class StorageClient(Protocol):
    """Defines the operations the API needs from object storage."""

    def presign_get(
        self,
        path: str,
        expires_in: int = 3600,
        *,
        download_filename: Optional[str] = None,
    ) -> str:
        ...


@dataclass
class InMemoryStorageClient:
    """Test double for storage interactions."""

    base_url: str = "https://example.test/storage"
    fail_presign: bool = False
    presign_calls: list = field(default_factory=list)

    def presign_get(
        self,
        path: str,
        expires_in: int = 3600,
        *,
        download_filename: Optional[str] = None,
    ) -> str:
        if self.fail_presign:
            raise RuntimeError(f"presign failed for {path}")
        self.presign_calls.append((path, expires_in))
        url = (
            f"{self.base_url}/{path}?op=get&expires={expires_in}"
            f"&n={len(self.presign_calls)}"
        )
        if download_filename:
            url += f"&attachment={quote(download_filename)}"
        return url


@dataclass
class S3StorageClient:
    """
    S3-compatible storage client. Firebase Storage buckets are reachable at
    ``https://storage.googleapis.com`` with HMAC interoperability keys.
    """

    bucket: str
    region: str
    endpoint: str
    access_key_id: str
    secret_access_key: str

    def __post_init__(self):
        # Firebase bucket names contain dots, which break virtual-hosted TLS.
        config = Config(
            s3={"addressing_style": "path"},
            signature_version="s3v4",
        )
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint,
            region_name=self.region,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            config=config,
        )

    def presign_get(
        self,
        path: str,
        expires_in: int = 3600,
        *,
        download_filename: Optional[str] = None,
    ) -> str:
        params = {"Bucket": self.bucket, "Key": path}
        if download_filename:
            params["ResponseContentDisposition"] = (
                f'attachment; filename="{download_filename}"'
            )
            params["ResponseContentType"] = "application/octet-stream"
        return self._client.generate_presigned_url(
            ClientMethod="get_object",
            Params=params,
            ExpiresIn=expires_in,
        )

