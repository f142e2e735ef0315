# covershift/routers/gate.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session

from covershift.core.auth import get_optional_profile
from covershift.core.role_gate import RoleGate
from covershift.database import get_session
from covershift.models.profile import Profile
from covershift.repositories.profile_repo import ProfileRepository
from covershift.schemas.gate import GateRead

router = APIRouter(prefix="/gate", tags=["Gate"])

repo = ProfileRepository()


@router.get("", response_model=GateRead)
def check_gate(
    want: list[str] = Query(...),
    login_path: str = "/login",
    debug: bool = False,
    session: Session = Depends(get_session),
    current: Profile | None = Depends(get_optional_profile),
):
    """
    Tell the front-end whether to render a role-restricted area.

    - ok       : render the area
    - mismatch : render "access denied"
    - noauth   : go to `redirect_to`

    An expired or invalid token counts as no session.
    """
    redirects: list[str] = []
    try:
        gate = RoleGate(
            want=want,
            session_provider=lambda: current.id if current else None,
            profile_lookup=lambda profile_id: repo.get_role(session, profile_id),
            on_redirect=redirects.append,
            login_path=login_path,
            debug=debug,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    gate.check()
    return GateRead(
        status=gate.status.value,
        role=gate.role,
        redirect_to=redirects[-1] if redirects else None,
    )
