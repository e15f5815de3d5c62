from conftest import PASSWORD

from jobboard.migrate import create_admin


def test_create_admin_then_login(client, db_session):
    user = create_admin(db_session, email="Root@Example.com", password=PASSWORD, name="Root")
    assert user.role == "admin"

    r = client.post("/auth/login", json={"email": "root@example.com", "password": PASSWORD})
    assert r.status_code == 200, r.text
    token = r.json()["access_token"]
    assert client.get("/admin/stats", headers={"Authorization": f"Bearer {token}"}).status_code == 200


def test_create_admin_promotes_existing_account(client, db_session, make_user):
    applicant, _ = make_user("applicant", email="promote@example.com")
    user = create_admin(db_session, email="promote@example.com", password=PASSWORD, name="ignored")
    assert user.id == applicant["id"]
    assert user.role == "admin"
    assert user.is_blocked is False
