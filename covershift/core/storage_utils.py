# covershift/core/storage_utils.py
import uuid

from covershift.core.supabase_client import supabase_admin


def upload_to_storage(bucket: str, path: str, file_bytes: bytes, content_type: str) -> str:
    """
    Upload raw bytes to a Supabase Storage bucket and return a public URL.

    If a file already exists at this path, it will be overwritten
    thanks to the 'upsert' option.

    Args:
        bucket: Storage bucket name (e.g. "avatars").
        path: Full object path inside the bucket.
              Example: "<user_id>/<uuid>.png"
        file_bytes: File content in bytes.
        content_type: MIME type stored alongside the object.

    Raises:
        Any exception raised by Supabase client if upload fails.
    """
    storage = supabase_admin().storage.from_(bucket)
    storage.upload(
        path,
        file_bytes,
        {"upsert": "true", "content-type": content_type},
    )
    return storage.get_public_url(path)


def delete_from_storage(bucket: str, path: str) -> None:
    """Delete a file from Supabase Storage by its object path."""
    supabase_admin().storage.from_(bucket).remove([path])


def extract_path_from_public_url(bucket: str, url: str) -> str | None:
    """
    Given a public URL, extract the object path relative to the bucket.

    Example:
        https://<proj>.supabase.co/storage/v1/object/public/avatars/u/1.png
        -> 'u/1.png'
    """
    marker = f"/storage/v1/object/public/{bucket}/"
    idx = url.find(marker)
    if idx == -1:
        return None
    return url[idx + len(marker) :]


def delete_public_url(bucket: str, url: str) -> None:
    """
    Convenience helper: delete a file by its public URL.
    No-op if the URL does not belong to this bucket.
    """
    path = extract_path_from_public_url(bucket, url)
    if path:
        delete_from_storage(bucket, path)


def generate_object_path(owner_id: uuid.UUID, ext: str) -> str:
    """
    Object path for a user-owned upload: "<owner_id>/<uuid4>.<ext>".
    """
    return f"{owner_id}/{uuid.uuid4()}.{ext}"
