from __future__ import annotations

from dataclasses import dataclass

from accounts_core.db.ids import new_object_name


@dataclass(frozen=True)
class PresignedUpload:
    url: str
    key: str


class S3StorageProvider:
    """S3-compatible bucket written to by clients through presigned PUT URLs."""

    def __init__(
        self,
        *,
        endpoint_url: str | None,
        access_key: str,
        secret_key: str,
        region: str,
        use_ssl: bool,
        bucket: str,
        public_base_url: str,
        key_prefix: str,
    ) -> None:
        self._endpoint_url = endpoint_url
        self._access_key = access_key
        self._secret_key = secret_key
        self._region = region
        self._use_ssl = use_ssl
        self._bucket = bucket
        self._public_base_url = public_base_url.rstrip("/")
        self._key_prefix = key_prefix.strip("/")
        self._client = None

    def _get_client(self):
        if self._client is not None:
            return self._client

        import boto3
        from botocore.client import Config

        self._client = boto3.client(
            "s3",
            endpoint_url=self._endpoint_url,
            aws_access_key_id=self._access_key,
            aws_secret_access_key=self._secret_key,
            region_name=self._region,
            use_ssl=self._use_ssl,
            config=Config(
                signature_version="s3v4",
                s3={"addressing_style": "path"},
                # Presigned PUTs must not pin a checksum of an empty body.
                request_checksum_calculation="when_required",
            ),
        )
        return self._client

    def key_for_user_upload(self, user_id: str) -> str:
        user_id = user_id.strip().lower()
        parts = [p for p in (self._key_prefix, user_id, new_object_name()) if p]
        return "/".join(parts)

    def presign_put(self, *, key: str, expires_in: int) -> str:
        # Signing is local to botocore; no request reaches the bucket here.
        client = self._get_client()
        return client.generate_presigned_url(
            "put_object",
            Params={"Bucket": self._bucket, "Key": key},
            ExpiresIn=expires_in,
            HttpMethod="PUT",
        )

    def presigned_upload_for_user(self, user_id: str, *, expires_in: int) -> PresignedUpload:
        key = self.key_for_user_upload(user_id)
        return PresignedUpload(url=self.presign_put(key=key, expires_in=expires_in), key=key)

    def public_url(self, key: str) -> str:
        return public_url_for_key(self._public_base_url, key)


def public_url_for_key(base_url: str, key: str) -> str:
    """Build '<bucket-base>/<key>' without doubling the separator."""

    return f"{base_url.rstrip('/')}/{key.lstrip('/')}"
