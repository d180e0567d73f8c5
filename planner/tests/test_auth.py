import pytest

from planner.security import hash_password, verify_password


class TestPasswordHashing:
    def test_hash_and_verify(self):
        stored = hash_password("s3cret")
        assert stored != "s3cret"
        assert verify_password("s3cret", stored)
        assert not verify_password("wrong", stored)

    def test_salts_differ(self):
        assert hash_password("same") != hash_password("same")

    @pytest.mark.parametrize("stored", ["", "nodot", ".salt", "zz.salt", "abcd."])
    def test_malformed_stored_hash_never_verifies(self, stored):
        assert not verify_password("anything", stored)


class TestRegister:
    def test_register_returns_user_without_password(self, client):
        res = client.post("/api/register", json={"username": "alice", "password": "pw"})
        assert res.status_code == 200
        body = res.json()
        assert body == {"id": 1, "username": "alice"}
        assert "planner_session" in res.cookies

    def test_register_logs_the_user_in(self, client, signup):
        signup("alice")
        res = client.get("/api/user")
        assert res.status_code == 200
        assert res.json()["username"] == "alice"

    def test_duplicate_username_is_conflict(self, client, signup):
        signup("alice")
        res = client.post("/api/register", json={"username": "alice", "password": "other"})
        assert res.status_code == 409
        assert res.json()["error"] == "conflict"

    @pytest.mark.parametrize("body", [{}, {"username": "", "password": "pw"}, {"username": "a", "password": ""}])
    def test_register_validation(self, client, body):
        assert client.post("/api/register", json=body).status_code == 400

    def test_malformed_json_on_public_route_is_400(self, client):
        res = client.post("/api/register", content=b"{not json", headers={"content-type": "application/json"})
        assert res.status_code == 400
        assert res.json()["error"] == "bad_request"


class TestLogin:
    def test_login_with_correct_password(self, client, signup):
        signup("alice", "pw1")
        client.post("/api/logout")
        res = client.post("/api/login", json={"username": "alice", "password": "pw1"})
        assert res.status_code == 200
        assert res.json()["username"] == "alice"
        assert client.get("/api/user").status_code == 200

    def test_login_with_wrong_password(self, client, signup):
        signup("alice", "pw1")
        client.post("/api/logout")
        res = client.post("/api/login", json={"username": "alice", "password": "nope"})
        assert res.status_code == 401
        assert client.get("/api/user").status_code == 401

    def test_login_unknown_user(self, client):
        res = client.post("/api/login", json={"username": "ghost", "password": "pw"})
        assert res.status_code == 401


class TestLogout:
    def test_logout_ends_session(self, client, signup):
        signup("alice")
        res = client.post("/api/logout")
        assert res.status_code == 200
        assert client.get("/api/user").status_code == 401

    def test_logout_without_session_is_harmless(self, client):
        assert client.post("/api/logout").status_code == 200
