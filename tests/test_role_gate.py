import uuid

import pytest

from covershift.core.role_gate import GateStatus, RoleGate, normalize_role


def _gate(role="teacher", user_id=None, want="principal", **kw):
    uid = user_id if user_id is not None else uuid.uuid4()
    redirects = []
    gate = RoleGate(
        want=want,
        session_provider=lambda: uid,
        profile_lookup=lambda _id: role,
        on_redirect=redirects.append,
        **kw,
    )
    return gate, redirects


@pytest.mark.parametrize(
    "raw,expected",
    [
        (" Principal ", "principal"),
        ("TEACHER", "teacher"),
        ("sub", "teacher"),
        ("", None),
        (None, None),
        ("janitor", "janitor"),
    ],
)
def test_normalize_role(raw, expected):
    assert normalize_role(raw) == expected


def test_starts_loading():
    gate, redirects = _gate()
    assert gate.status is GateStatus.LOADING
    assert redirects == []


def test_teacher_at_principal_area_is_mismatch():
    gate, redirects = _gate(role="teacher", want="principal")
    assert gate.check() is GateStatus.MISMATCH

    rendered = gate.render(lambda: "children", lambda: "denied")
    assert rendered == "denied"
    assert redirects == []


def test_matching_role_is_ok_and_never_redirects():
    gate, redirects = _gate(role="  Principal", want="principal")
    assert gate.check() is GateStatus.OK
    assert gate.render(lambda: "children", lambda: "denied") == "children"
    gate.on_auth_state_change("TOKEN_REFRESHED")
    assert gate.status is GateStatus.OK
    assert redirects == []


def test_accepts_any_of_several_roles():
    gate, _ = _gate(role="teacher", want=["principal", "teacher"])
    assert gate.check() is GateStatus.OK


def test_no_session_redirects_to_login_path():
    redirects = []
    gate = RoleGate(
        want="teacher",
        session_provider=lambda: None,
        profile_lookup=lambda _id: "teacher",
        on_redirect=redirects.append,
        login_path="/teacher/login",
    )
    assert gate.check() is GateStatus.NOAUTH
    assert redirects == ["/teacher/login"]
    assert gate.render(lambda: "children", lambda: "denied") is None


def test_lookup_failure_fails_safe_to_noauth():
    def boom(_id):
        raise ConnectionError("backend down")

    redirects = []
    gate = RoleGate(
        want="principal",
        session_provider=lambda: uuid.uuid4(),
        profile_lookup=boom,
        on_redirect=redirects.append,
    )
    assert gate.check() is GateStatus.NOAUTH
    assert redirects == ["/login"]


def test_auth_change_rechecks():
    state = {"uid": uuid.uuid4()}
    redirects = []
    gate = RoleGate(
        want="teacher",
        session_provider=lambda: state["uid"],
        profile_lookup=lambda _id: "teacher",
        on_redirect=redirects.append,
    )
    assert gate.check() is GateStatus.OK

    state["uid"] = None
    assert gate.on_auth_state_change("SIGNED_OUT") is GateStatus.NOAUTH
    assert redirects == ["/login"]


def test_cancelled_gate_ignores_results():
    gate, redirects = _gate(role="teacher", want="teacher")
    gate.cancel()
    assert gate.check() is GateStatus.LOADING
    assert redirects == []


def test_requires_a_role():
    with pytest.raises(ValueError):
        RoleGate(want=" ", session_provider=lambda: None, profile_lookup=lambda _id: None)


# ----- HTTP -----


def test_gate_endpoint_mismatch(client, auth, teacher):
    r = client.get("/api/v1/gate", params={"want": "principal"}, headers=auth(teacher))
    assert r.status_code == 200
    assert r.json() == {"status": "mismatch", "role": "teacher", "redirect_to": None}


def test_gate_endpoint_ok(client, auth, principal):
    r = client.get("/api/v1/gate", params={"want": "principal"}, headers=auth(principal))
    assert r.json()["status"] == "ok"
    assert r.json()["redirect_to"] is None


def test_gate_endpoint_noauth(client, session):
    r = client.get(
        "/api/v1/gate",
        params={"want": "teacher", "login_path": "/teacher/login"},
    )
    assert r.json() == {"status": "noauth", "role": None, "redirect_to": "/teacher/login"}


def test_gate_endpoint_expired_token_is_noauth(client, token, teacher):
    r = client.get(
        "/api/v1/gate",
        params={"want": "teacher", "login_path": "/teacher/login"},
        headers={"Authorization": f"Bearer {token(teacher, expires_in=-60)}"},
    )
    assert r.status_code == 200
    assert r.json() == {"status": "noauth", "role": None, "redirect_to": "/teacher/login"}


def test_gate_endpoint_garbage_token_is_noauth(client, session):
    r = client.get(
        "/api/v1/gate",
        params={"want": "principal"},
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert r.status_code == 200
    assert r.json()["status"] == "noauth"
    assert r.json()["redirect_to"] == "/login"


def test_role_dependency_rejects_wrong_role(client, auth, teacher):
    r = client.get("/api/v1/jobs/bookings", headers=auth(teacher))
    assert r.status_code == 403


def test_role_dependency_accepts_legacy_sub_role(client, auth, make_profile):
    sub = make_profile("Sub ")
    r = client.get("/api/v1/jobs/open", headers=auth(sub))
    assert r.status_code == 200
