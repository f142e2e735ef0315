# covershift/services/profile_service.py
from fastapi import HTTPException, status
from sqlmodel import Session

from covershift.core.config import get_settings
from covershift.core.storage_utils import (
    delete_public_url,
    generate_object_path,
    upload_to_storage,
)
from covershift.models.profile import Profile
from covershift.repositories.profile_repo import ProfileRepository
from covershift.schemas.profile import ProfileSync, ProfileUpdate

settings = get_settings()

ALLOWED_IMAGE_CONTENT_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}
ALLOWED_DOCUMENT_CONTENT_TYPES = {
    **ALLOWED_IMAGE_CONTENT_TYPES,
    "application/pdf": "pdf",
}

MAX_AVATAR_BYTES = 5 * 1024 * 1024
MAX_DOCUMENT_BYTES = 10 * 1024 * 1024


class ProfileService:
    """
    Business logic for profiles.

    Responsibilities:
      - login-time role sync
      - profile edits (field validation lives in the schema)
      - avatar / qualifications uploads to Supabase Storage
    """

    def __init__(self, repo: ProfileRepository):
        self.repo = repo

    def sync(self, session: Session, current: Profile, payload: ProfileSync) -> Profile:
        """
        Upsert run by the sign-in pages: record which side the user
        signed in on.
        """
        current.role = payload.role
        return self.repo.upsert(session, current)

    def update_me(self, session: Session, current: Profile, payload: ProfileUpdate) -> Profile:
        """
        Partial update. Fields sent as "" are cleared.
        """
        for key, value in payload.model_dump(exclude_unset=True).items():
            setattr(current, key, value or None)
        return self.repo.update(session, current)

    # ----- Uploads -----

    def set_avatar(
        self,
        session: Session,
        current: Profile,
        content_type: str,
        file_bytes: bytes,
    ) -> Profile:
        ext = self._validate(content_type, file_bytes, ALLOWED_IMAGE_CONTENT_TYPES, MAX_AVATAR_BYTES)

        # Best-effort cleanup of the previous avatar
        if current.avatar_url:
            delete_public_url(settings.AVATARS_BUCKET, current.avatar_url)

        current.avatar_url = upload_to_storage(
            settings.AVATARS_BUCKET,
            generate_object_path(current.id, ext),
            file_bytes,
            content_type,
        )
        return self.repo.update(session, current)

    def set_qualifications(
        self,
        session: Session,
        current: Profile,
        content_type: str,
        file_bytes: bytes,
    ) -> Profile:
        ext = self._validate(
            content_type, file_bytes, ALLOWED_DOCUMENT_CONTENT_TYPES, MAX_DOCUMENT_BYTES
        )

        if current.qualifications_url:
            delete_public_url(settings.QUALIFICATIONS_BUCKET, current.qualifications_url)

        current.qualifications_url = upload_to_storage(
            settings.QUALIFICATIONS_BUCKET,
            generate_object_path(current.id, ext),
            file_bytes,
            content_type,
        )
        return self.repo.update(session, current)

    @staticmethod
    def _validate(
        content_type: str,
        file_bytes: bytes,
        allowed: dict[str, str],
        max_bytes: int,
    ) -> str:
        if content_type not in allowed:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unsupported file type. Allowed: {', '.join(sorted(allowed))}.",
            )
        if not file_bytes:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Uploaded file is empty",
            )
        if len(file_bytes) > max_bytes:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"File too large (max {max_bytes // (1024 * 1024)}MB).",
            )
        return allowed[content_type]
