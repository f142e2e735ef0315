# covershift/core/role_gate.py
"""
Role gate: decide whether a caller may see a role-restricted area.

The gate is a small finite-state object:

    loading -> ok | mismatch | noauth

It is built once per session context with its collaborators injected:

  - session_provider(): returns the current auth user id, or None
  - profile_lookup(user_id): returns the stored role string (or None)
  - on_redirect(path): called when the gate lands in "noauth"

This is a convenience check only. Real enforcement happens in the data
layer (row ownership guards in the job lifecycle, RLS policies in
Supabase).
"""
from __future__ import annotations

import logging
import uuid
from enum import Enum
from typing import Callable, Iterable

logger = logging.getLogger(__name__)

PRINCIPAL = "principal"
TEACHER = "teacher"
KNOWN_ROLES = frozenset({PRINCIPAL, TEACHER})

# Older sign-up pages stored teachers as "sub"
_ROLE_ALIASES = {"sub": TEACHER}


def normalize_role(raw: str | None) -> str | None:
    """
    Trim + lowercase a stored role and resolve legacy aliases.

    Returns None for empty values. Unknown values are returned normalized
    so callers can still report them.
    """
    if raw is None:
        return None
    value = raw.strip().lower()
    if not value:
        return None
    return _ROLE_ALIASES.get(value, value)


class GateStatus(str, Enum):
    LOADING = "loading"
    OK = "ok"
    MISMATCH = "mismatch"
    NOAUTH = "noauth"


SessionProvider = Callable[[], "uuid.UUID | None"]
ProfileLookup = Callable[[uuid.UUID], "str | None"]
RedirectCallback = Callable[[str], None]


class RoleGate:
    """
    Explicit state machine for role-gated areas.

    Usage:

        gate = RoleGate(
            want=["principal"],
            session_provider=lambda: current_user_id,
            profile_lookup=lambda uid: repo.get_role(session, uid),
            on_redirect=redirects.append,
            login_path="/principal/login",
        )
        gate.check()
        if gate.allows():
            ...
    """

    def __init__(
        self,
        want: str | Iterable[str],
        session_provider: SessionProvider,
        profile_lookup: ProfileLookup,
        on_redirect: RedirectCallback | None = None,
        login_path: str = "/login",
        debug: bool = False,
    ):
        wanted = [want] if isinstance(want, str) else list(want)
        self.want = frozenset(r for r in (normalize_role(w) for w in wanted) if r)
        if not self.want:
            raise ValueError("RoleGate needs at least one acceptable role")

        self.session_provider = session_provider
        self.profile_lookup = profile_lookup
        self.on_redirect = on_redirect
        self.login_path = login_path
        self.debug = debug

        self.status = GateStatus.LOADING
        self.user_id: uuid.UUID | None = None
        self.role: str | None = None
        self._cancelled = False
        self._generation = 0

    # ----- Transitions -----

    def check(self) -> GateStatus:
        """
        Resolve session + profile and move to a terminal state.

        Any failure in a collaborator lands in NOAUTH, never OK.
        """
        if self._cancelled:
            return self.status

        self._generation += 1
        generation = self._generation
        self.status = GateStatus.LOADING

        try:
            user_id = self.session_provider()
            role = None
            if user_id is not None:
                role = normalize_role(self.profile_lookup(user_id))
        except Exception as e:
            logger.warning(f"Role gate lookup failed: {e}")
            return self._settle(generation, GateStatus.NOAUTH, None, None)

        if user_id is None:
            return self._settle(generation, GateStatus.NOAUTH, None, None)

        new_status = GateStatus.OK if role in self.want else GateStatus.MISMATCH
        return self._settle(generation, new_status, user_id, role)

    def on_auth_state_change(self, event: str | None = None) -> GateStatus:
        """Re-run the check after a sign-in / sign-out / token refresh."""
        if self.debug:
            logger.info(f"Role gate: auth event {event!r}, re-checking")
        return self.check()

    def cancel(self) -> None:
        """Stop reacting to results; late lookups are ignored."""
        self._cancelled = True

    # ----- Views -----

    def allows(self) -> bool:
        return self.status is GateStatus.OK

    def render(self, children: Callable[[], object], denied: Callable[[], object]):
        """
        Return children() on OK, denied() on MISMATCH, None otherwise.
        """
        if self.status is GateStatus.OK:
            return children()
        if self.status is GateStatus.MISMATCH:
            return denied()
        return None

    # ----- Internals -----

    def _settle(
        self,
        generation: int,
        status: GateStatus,
        user_id: uuid.UUID | None,
        role: str | None,
    ) -> GateStatus:
        # A newer check (or cancel) superseded this one
        if self._cancelled or generation != self._generation:
            return self.status

        self.status = status
        self.user_id = user_id
        self.role = role

        if self.debug:
            logger.info(
                f"Role gate: want={sorted(self.want)} role={role!r} -> {status.value}"
            )

        if status is GateStatus.NOAUTH and self.on_redirect is not None:
            self.on_redirect(self.login_path)
        return status
