"""
Supabase Storage wrapper.

Manual uploads and AI-generated content live in separate buckets; objects are
keyed ``<post id>/<timestamp>-<sanitized name>`` and served by public URL.
"""
import re
import time
import unicodedata
from dataclasses import dataclass
from typing import Optional

from supabase import Client, create_client

from ..config import Settings
from ..logging_config import storage_logger
from .exceptions import StorageError

BUCKET_MANUAL = "manual"
BUCKET_AI = "ai"


@dataclass
class UploadResult:
    url: str
    path: str
    file_name: str
    file_size: int
    mime_type: str


def sanitize_file_name(file_name: str) -> str:
    """Lowercase ASCII name safe for object keys; keeps the extension."""
    last_dot = file_name.rfind(".")
    ext = file_name[last_dot:].lower() if last_dot > 0 else ""
    name = file_name[:last_dot] if last_dot > 0 else file_name

    name = name.replace("đ", "d").replace("Đ", "D")
    name = unicodedata.normalize("NFD", name.strip().lower())
    name = "".join(ch for ch in name if not unicodedata.combining(ch))
    name = re.sub(r"\s+", "_", name)
    name = re.sub(r"[^a-z0-9_.-]", "", name)
    name = re.sub(r"_+", "_", name).strip("_")

    return f"{name or 'file'}{ext}"


class StorageService:
    """Uploads, public URLs and deletes against Supabase Storage"""

    def __init__(self, settings: Settings, client: Optional[Client] = None):
        self.settings = settings
        self.buckets = {
            BUCKET_MANUAL: settings.supabase_bucket_manual,
            BUCKET_AI: settings.supabase_bucket_ai,
        }
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            if not self.settings.supabase_url or not self.settings.supabase_service_role_key:
                raise StorageError("Supabase URL and Service Role Key must be set")
            self._client = create_client(self.settings.supabase_url, self.settings.supabase_service_role_key)
        return self._client

    def _bucket(self, bucket: str):
        return self.client.storage.from_(self.buckets[bucket])

    def _upload(self, bucket: str, path: str, content: bytes, mime_type: str) -> str:
        try:
            self._bucket(bucket).upload(
                path,
                content,
                {"content-type": mime_type, "cache-control": "3600"},
            )
        except StorageError:
            raise
        except Exception as e:
            storage_logger.error("Upload failed", error=e, bucket=self.buckets[bucket], path=path)
            raise StorageError(f"Failed to upload file: {e}") from e
        return self.get_public_url(path, bucket)

    def upload_manual_file(
        self,
        content: bytes,
        file_name: str,
        mime_type: str,
        post_id: str,
        folder: Optional[str] = None,
    ) -> UploadResult:
        path = f"{folder or post_id}/{int(time.time() * 1000)}-{sanitize_file_name(file_name)}"
        url = self._upload(BUCKET_MANUAL, path, content, mime_type)
        storage_logger.info("Manual file uploaded", post_id=post_id, path=path, size=len(content))
        return UploadResult(url=url, path=path, file_name=file_name, file_size=len(content), mime_type=mime_type)

    def upload_ai_content(self, content: bytes, file_name: str, mime_type: str, post_id: str) -> UploadResult:
        path = f"{post_id}/{int(time.time() * 1000)}-{sanitize_file_name(file_name)}"
        url = self._upload(BUCKET_AI, path, content, mime_type)
        storage_logger.info("AI content uploaded", post_id=post_id, path=path, size=len(content))
        return UploadResult(url=url, path=path, file_name=file_name, file_size=len(content), mime_type=mime_type)

    def delete_post_files(self, post_id: str, buckets=(BUCKET_MANUAL, BUCKET_AI)) -> int:
        """
        Remove every object under ``<post id>/`` in the given buckets.

        Best effort: a bucket that fails is logged and skipped. Returns the
        number of objects removed.
        """
        removed = 0
        for bucket in buckets:
            try:
                files = self._bucket(bucket).list(post_id) or []
                paths = [f"{post_id}/{f['name']}" for f in files]
                if paths:
                    self._bucket(bucket).remove(paths)
                    removed += len(paths)
            except Exception as e:
                storage_logger.error("Post file cleanup failed", error=e, bucket=self.buckets[bucket], post_id=post_id)
        return removed

    def get_public_url(self, path: str, bucket: str = BUCKET_MANUAL) -> str:
        return self._bucket(bucket).get_public_url(path)

    def delete_file(self, path: str, bucket: str = BUCKET_MANUAL) -> bool:
        try:
            self._bucket(bucket).remove([path])
        except Exception as e:
            storage_logger.error("Delete failed", error=e, bucket=self.buckets[bucket], path=path)
            return False
        return True

    def path_for_url(self, url: str, bucket: str = BUCKET_MANUAL) -> Optional[str]:
        """Object key behind one of our public URLs, None for foreign URLs."""
        prefix = f"{self.settings.supabase_url.rstrip('/')}/storage/v1/object/public/{self.buckets[bucket]}/"
        if self.settings.supabase_url and url.startswith(prefix):
            return url[len(prefix):]
        return None
