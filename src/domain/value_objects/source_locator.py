"""Source locator value object."""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from urllib.parse import unquote, urlsplit

from pydantic import BaseModel, ConfigDict, Field

from src.domain.exceptions import InvalidSourceLocatorError

# Schemes whose host part is the bucket (virtual bucket URLs)
BUCKET_HOST_SCHEMES = frozenset({"s3", "s3a", "minio"})

# Schemes resolved by host: virtual-hosted S3 names carry the bucket in the
# host, any other endpoint is path-style with the bucket as first segment
HTTP_SCHEMES = frozenset({"http", "https"})

# bucket.s3.amazonaws.com, bucket.s3.<region>.amazonaws.com, bucket.s3-<region>...
_VIRTUAL_HOSTED_S3 = re.compile(
    r"^(?P<bucket>[a-z0-9][a-z0-9.-]*)\.s3(?:[.-][a-z0-9-]+)?\.amazonaws\.com$"
)
# s3.amazonaws.com, s3.<region>.amazonaws.com, s3-<region>.amazonaws.com
_PATH_STYLE_S3 = re.compile(r"^s3(?:[.-][a-z0-9-]+)?\.amazonaws\.com$")


class SourceLocator(BaseModel):
    """Bucket and key of an object in storage.

    Examples:
        >>> loc = SourceLocator.from_url("s3://in-bucket/videos/abc.mp4")
        >>> (loc.bucket, loc.key, loc.stem)
        ('in-bucket', 'videos/abc.mp4', 'abc')

        >>> SourceLocator.from_url("https://s3.amazonaws.com/in-bucket/a.mp4").bucket
        'in-bucket'

        >>> SourceLocator.from_url("https://in-bucket.s3.eu-west-1.amazonaws.com/a.mp4").key
        'a.mp4'
    """

    model_config = ConfigDict(frozen=True)

    bucket: str = Field(min_length=1, description="Bucket name")
    key: str = Field(min_length=1, description="Object key within the bucket")

    @classmethod
    def from_url(cls, url: str) -> SourceLocator:
        """Parse ``s3://bucket/key`` or an ``https://`` object URL.

        Virtual-hosted S3 URLs (``https://bucket.s3.region.amazonaws.com/key``)
        take the bucket from the host. Any other endpoint is read path-style,
        ``https://host/bucket/key``, which covers MinIO and other S3-compatible
        servers.

        Raises:
            InvalidSourceLocatorError: If the URL has no bucket or no key, or
                names an amazonaws.com host that is not an S3 endpoint.
        """
        if not url or not isinstance(url, str):
            raise InvalidSourceLocatorError(str(url), "URL cannot be empty")

        parts = urlsplit(url.strip())
        scheme = parts.scheme.lower()

        if scheme in BUCKET_HOST_SCHEMES:
            bucket = parts.netloc
            key = parts.path.lstrip("/")
        elif scheme in HTTP_SCHEMES:
            host = (parts.hostname or "").lower()
            virtual = _VIRTUAL_HOSTED_S3.match(host)
            if virtual:
                bucket = virtual.group("bucket")
                key = parts.path.lstrip("/")
            elif host.endswith(".amazonaws.com") and not _PATH_STYLE_S3.match(host):
                raise InvalidSourceLocatorError(url, f"Unrecognized S3 host '{host}'")
            else:
                bucket, _, key = parts.path.lstrip("/").partition("/")
        else:
            raise InvalidSourceLocatorError(url, f"Unsupported scheme '{parts.scheme}'")

        if not bucket:
            raise InvalidSourceLocatorError(url, "Missing bucket")
        if not key or key.endswith("/"):
            raise InvalidSourceLocatorError(url, "Missing object key")

        return cls(bucket=bucket, key=unquote(key))

    @property
    def filename(self) -> str:
        """Last path segment of the key."""
        return PurePosixPath(self.key).name

    @property
    def stem(self) -> str:
        """Key filename without its extension."""
        return PurePosixPath(self.key).stem

    @property
    def suffix(self) -> str:
        """Key filename extension, including the dot."""
        return PurePosixPath(self.key).suffix

    def to_url(self) -> str:
        """Render as an ``s3://`` URL."""
        return f"s3://{self.bucket}/{self.key}"

    def __str__(self) -> str:
        return self.to_url()
