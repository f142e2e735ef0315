# covershift/core/auth.py
import uuid
from typing import Any

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlmodel import Session

from covershift.core.config import get_settings
from covershift.core.role_gate import normalize_role
from covershift.database import get_session
from covershift.models.profile import Profile

settings = get_settings()

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header will NOT raise immediately
#   so we can fall back to the Supabase auth cookie.
bearer_scheme = HTTPBearer(auto_error=False)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a Supabase access token (JWT).

    Verification:
      - signature (HS256 using SUPABASE_JWT_SECRET)
      - expiration time (exp)
      - audience is NOT verified (Supabase 'aud' may vary)

    Raises:
        HTTPException(401): if token is invalid/expired.
    """
    try:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.SUPABASE_JWT_ALG],
            options={"verify_aud": False},
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )


def extract_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None,
) -> str | None:
    """
    Bearer header first, then the Supabase auth cookie.
    """
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.AUTH_COOKIE_NAME) or None


def get_current_profile(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> Profile | None:
    """
    Resolve the caller's profile from a Supabase JWT.

    Flow:
      1. No bearer header and no auth cookie => anonymous => None.
      2. Decode JWT => extract 'sub' (auth user id) and 'email'.
      3. Convert 'sub' to UUID to match Profile.id type.
      4. Load the profile row, creating a minimal one (id + email) on
         first sight. Role stays empty until the login-time sync.

    Raises:
        HTTPException(401): if token is malformed or missing required claims.
    """
    token = extract_token(request, credentials)
    if token is None:
        return None

    payload = decode_access_token(token)
    sub = payload.get("sub")
    email = payload.get("email")

    if not sub:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing sub",
        )

    try:
        sub_uuid = uuid.UUID(sub)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid sub in token",
        )

    profile = session.get(Profile, sub_uuid)

    if profile is None:
        profile = Profile(id=sub_uuid, email=email)
        session.add(profile)
        session.commit()
        session.refresh(profile)
    elif email and profile.email != email:
        # Keep the mirrored email in sync with auth.users
        profile.email = email
        session.add(profile)
        session.commit()
        session.refresh(profile)

    return profile


def get_optional_profile(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> Profile | None:
    """
    Like get_current_profile, but an expired or invalid token reads as
    anonymous instead of raising 401.
    """
    try:
        return get_current_profile(request, credentials, session)
    except HTTPException as e:
        if e.status_code != status.HTTP_401_UNAUTHORIZED:
            raise
        return None


def require_auth(profile: Profile | None = Depends(get_current_profile)) -> Profile:
    """
    Enforce authentication.

    Raises:
        HTTPException(401): if no valid token was presented.
    """
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return profile


def require_role(*roles: str):
    """
    Build a dependency that only lets through profiles whose normalized
    role is one of `roles`.

        require_principal = require_role("principal")
    """
    wanted = {normalize_role(r) for r in roles}
    label = " or ".join(sorted(r for r in wanted if r))

    def dependency(profile: Profile = Depends(require_auth)) -> Profile:
        if normalize_role(profile.role) not in wanted:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access requires role: {label}",
            )
        return profile

    return dependency


require_principal = require_role("principal")
require_teacher = require_role("teacher")
