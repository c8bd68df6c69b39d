"""Google Cloud Storage object store for idea attachments."""

import io
import logging
import os
from typing import Any

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload

logger = logging.getLogger(__name__)

_SCOPES = ["https://www.googleapis.com/auth/devstorage.read_write"]


class ObjectStoreError(Exception):
    """Raised when an object store call fails."""


def object_key(owner_id: int | str, filename: str) -> str:
    """Key an attachment under its owner: ``{owner_id}/{filename}``."""
    return f"{owner_id}/{filename}"


class ObjectStore:
    """Writes and deletes public objects in a single bucket, addressed by key."""

    def __init__(self, bucket: str | None = None, public_base_url: str | None = None) -> None:
        self._bucket = bucket or os.environ.get("GCS_BUCKET", "").strip()
        base = public_base_url or os.environ.get("OBJECT_STORE_PUBLIC_URL", "").strip()
        self._public_base_url = (base or f"https://storage.googleapis.com/{self._bucket}").rstrip(
            "/"
        )
        self._service: Any = None

    def _get_service(self) -> Any:
        if self._service is None:
            if not self._bucket:
                raise ObjectStoreError("GCS_BUCKET environment variable is not set")
            creds_path = os.environ.get("GOOGLE_APPLICATION_CREDENTIALS", "credentials.json")
            if not os.path.exists(creds_path):
                raise ObjectStoreError(f"Service account credentials not found at {creds_path}")
            creds = service_account.Credentials.from_service_account_file(  # type: ignore[no-untyped-call]
                creds_path, scopes=_SCOPES
            )
            self._service = build("storage", "v1", credentials=creds)
        return self._service

    def url_for(self, key: str) -> str:
        """Public URL of *key*. Depends only on the key, never on the stored object."""
        return f"{self._public_base_url}/{key}"

    def upload(self, key: str, data: bytes, content_type: str | None = None) -> str:
        """Write *data* under *key*, overwriting any existing object; return its URL.

        Raises ObjectStoreError on failure.
        """
        try:
            service = self._get_service()
            media = MediaIoBaseUpload(
                io.BytesIO(data),
                mimetype=content_type or "application/octet-stream",
                resumable=False,
            )
            service.objects().insert(
                bucket=self._bucket,
                name=key,
                media_body=media,
                predefinedAcl="publicRead",
            ).execute()
        except ObjectStoreError:
            raise
        except Exception as exc:
            raise ObjectStoreError(str(exc)) from exc
        logger.info("stored object %s (%d bytes)", key, len(data))
        return self.url_for(key)

    def delete(self, key: str) -> None:
        """Delete the object under *key*. Raises ObjectStoreError on failure.

        A key that is already gone counts as deleted.
        """
        try:
            service = self._get_service()
            service.objects().delete(bucket=self._bucket, object=key).execute()
        except ObjectStoreError:
            raise
        except HttpError as exc:
            if exc.resp.status != 404:
                raise ObjectStoreError(str(exc)) from exc
            logger.warning("object %s was already gone", key)
            return
        except Exception as exc:
            raise ObjectStoreError(str(exc)) from exc
        logger.info("deleted object %s", key)


_store: ObjectStore | None = None


def get_object_store() -> ObjectStore:
    """FastAPI dependency returning the process-wide ObjectStore."""
    global _store
    if _store is None:
        _store = ObjectStore()
    return _store
