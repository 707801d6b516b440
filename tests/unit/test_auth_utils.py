from datetime import UTC, datetime, timedelta

from storefront.api.auth_utils import AuthContext, create_access_token, decode_access_token

SECRET = "unit-secret"


def test_issue_and_verify():
    auth = AuthContext(SECRET)
    user = auth.verify(auth.issue("admin-1"))
    assert user is not None
    assert user.id == "admin-1"
    assert user.roles == ("admin",)
    assert user.is_admin
    assert "exp" in user.claims


def test_token_without_admin_role():
    auth = AuthContext(SECRET)
    user = auth.verify(auth.issue("editor-1", roles=("viewer",)))
    assert user is not None
    assert not user.is_admin

    legacy = auth.verify(create_access_token({"sub": "admin-1"}, SECRET))
    assert legacy.roles == ()
    assert not legacy.is_admin


def test_malformed_roles_claim_is_rejected():
    token = create_access_token({"sub": "admin-1", "roles": "admin"}, SECRET)
    assert AuthContext(SECRET).verify(token) is None


def test_wrong_secret_is_rejected():
    token = AuthContext("other").issue("admin-1")
    assert AuthContext(SECRET).verify(token) is None


def test_expired_token_is_rejected():
    token = create_access_token(
        {"sub": "admin-1"},
        SECRET,
        expires_delta=timedelta(minutes=5),
        now_utc=datetime.now(UTC) - timedelta(hours=1),
    )
    assert decode_access_token(token, SECRET) is None
    assert AuthContext(SECRET).verify(token) is None


def test_token_without_subject_is_rejected():
    token = create_access_token({"role": "admin"}, SECRET)
    assert decode_access_token(token, SECRET)["role"] == "admin"
    assert AuthContext(SECRET).verify(token) is None


def test_garbage_token():
    assert AuthContext(SECRET).verify("not.a.jwt") is None
