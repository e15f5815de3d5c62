from datetime import timedelta


def _signup(client, *, email: str, password: str, role: str, name: str = "Test User"):
    return client.post(
        "/auth/signup",
        json={"email": email, "password": password, "role": role, "name": name},
    )


def _login(client, *, email: str, password: str):
    return client.post("/auth/login", json={"email": email, "password": password})


def _auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def test_signup_recruiter_success(client):
    r = _signup(client, email="recruiter@example.com", password="Testpass123!", role="recruiter")
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["user"]["role"] == "recruiter"
    assert isinstance(data.get("access_token"), str) and len(data["access_token"]) > 10


def test_signup_requires_all_fields(client):
    r = client.post("/auth/signup", json={"email": "x@example.com", "password": "Testpass123!"})
    assert r.status_code == 400, r.text
    assert r.json()["success"] is False


def test_signup_rejects_unknown_role(client):
    r = _signup(client, email="odd@example.com", password="Testpass123!", role="superuser")
    assert r.status_code == 400, r.text
    assert "role" in r.json()["error"].lower()


def test_signup_duplicate_email(client):
    _signup(client, email="dup@example.com", password="Testpass123!", role="applicant")
    r = _signup(client, email="DUP@example.com", password="Testpass123!", role="applicant")
    assert r.status_code == 400, r.text
    assert r.json()["error"] == "User already exists"


def test_admin_signup_disabled_by_default(app, client):
    from dataclasses import replace

    app.state.settings = replace(app.state.settings, allow_admin_signup=False)
    r = _signup(client, email="boss@example.com", password="Testpass123!", role="admin")
    assert r.status_code == 403, r.text


def test_login_success_and_profile(client):
    _signup(client, email="app@example.com", password="Testpass123!", role="applicant", name="Ann")
    r = _login(client, email="app@example.com", password="Testpass123!")
    assert r.status_code == 200, r.text
    token = r.json()["access_token"]

    me = client.get("/auth/profile", headers=_auth_headers(token))
    assert me.status_code == 200, me.text
    user = me.json()["user"]
    assert user["email"] == "app@example.com"
    assert user["role"] == "applicant"
    assert "password" not in user


def test_login_invalid_credentials_fails(client):
    _signup(client, email="rec2@example.com", password="Testpass123!", role="recruiter")
    r = _login(client, email="rec2@example.com", password="wrong-password")
    assert r.status_code == 401, r.text
    assert r.json()["error"] == "Invalid credentials"


def test_profile_requires_token(client):
    r = client.get("/auth/profile")
    assert r.status_code == 401, r.text
    assert r.json()["error"] == "Not authorized, no token"


def test_malformed_and_foreign_tokens_rejected(client, settings):
    from dataclasses import replace

    from jobboard.app.utils.security import create_access_token

    r = client.get("/auth/profile", headers=_auth_headers("not-a-jwt"))
    assert r.status_code == 401, r.text

    other = replace(settings, secret_key="some-other-secret")
    forged = create_access_token(subject=1, role="admin", settings=other)
    r = client.get("/auth/profile", headers=_auth_headers(forged))
    assert r.status_code == 401, r.text


def test_expired_token_rejected(client, settings):
    from jobboard.app.utils.security import create_access_token

    user = _signup(client, email="late@example.com", password="Testpass123!", role="applicant").json()["user"]
    token = create_access_token(
        subject=user["id"], role="applicant", settings=settings, expires_delta=timedelta(minutes=-5)
    )
    r = client.get("/auth/profile", headers=_auth_headers(token))
    assert r.status_code == 401, r.text


def test_token_for_deleted_account_rejected(client, db_session):
    from jobboard.app.models.user import User

    data = _signup(client, email="gone@example.com", password="Testpass123!", role="applicant").json()
    db_session.query(User).filter(User.id == data["user"]["id"]).delete()
    db_session.commit()

    r = client.get("/auth/profile", headers=_auth_headers(data["access_token"]))
    assert r.status_code == 401, r.text


def test_persisted_role_wins_over_token_claim(client, db_session):
    from jobboard.app.models.user import User

    data = _signup(client, email="demoted@example.com", password="Testpass123!", role="recruiter").json()
    user = db_session.query(User).filter(User.id == data["user"]["id"]).first()
    user.role = "applicant"
    db_session.commit()

    # Token still says recruiter; storage says applicant.
    r = client.post(
        "/jobs",
        headers=_auth_headers(data["access_token"]),
        json={
            "title": "T", "company": "C", "location": "L",
            "salary_range": "1-2", "description": "D",
        },
    )
    assert r.status_code == 403, r.text


def test_blocked_account_cannot_login(client, db_session):
    from jobboard.app.models.user import User

    data = _signup(client, email="blocked@example.com", password="Testpass123!", role="applicant").json()
    user = db_session.query(User).filter(User.id == data["user"]["id"]).first()
    user.is_blocked = True
    db_session.commit()

    r = _login(client, email="blocked@example.com", password="Testpass123!")
    assert r.status_code == 403, r.text
    assert r.json()["error"] == "Account blocked"


def test_logout_endpoint_exists(client):
    r = client.post("/auth/logout")
    assert r.status_code == 200, r.text
    assert "message" in r.json()


def test_dashboards_are_role_specific(make_user, client):
    _, applicant = make_user("applicant")
    _, recruiter = make_user("recruiter")

    r = client.get("/dashboard/applicant", headers=applicant)
    assert r.status_code == 200, r.text
    assert r.json()["message"] == "Applicant Dashboard"

    assert client.get("/dashboard/recruiter", headers=applicant).status_code == 403
    assert client.get("/dashboard/recruiter", headers=recruiter).status_code == 200
    assert client.get("/dashboard/admin", headers=recruiter).status_code == 403
