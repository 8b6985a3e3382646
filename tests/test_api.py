"""API tests through FastAPI's TestClient: registration, login, access control, book CRUD and search."""

import unittest
from datetime import UTC, datetime, timedelta

from fastapi.testclient import TestClient

from app.core.policy import Role
from app.services.credentials import CredentialStore

from api_support import FakeClock, make_test_app

DUNE = {"title": "Dune", "author": "Herbert", "isbn": "0001", "publishedDate": "1965-01-01"}


class ApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.app, self.session_factory, self.clock = make_test_app(
            clock=FakeClock(datetime(2025, 6, 1, 9, 0, 0, tzinfo=UTC))
        )
        self.client = TestClient(self.app)

    def register(self, username: str = "alice", password: str = "secret1"):
        return self.client.post("/api/users/register", json={"username": username, "password": password})

    def login(self, username: str = "alice", password: str = "secret1"):
        return self.client.post("/api/users/login", json={"username": username, "password": password})

    def member_headers(self, username: str = "alice") -> dict[str, str]:
        self.register(username)
        token = self.login(username).json()["accessToken"]
        return {"Authorization": f"Bearer {token}"}

    def admin_headers(self) -> dict[str, str]:
        session = self.session_factory()
        try:
            CredentialStore(session, bcrypt_rounds=4).register("root", "rootpass", role=Role.ADMIN)
        finally:
            session.close()
        token = self.login("root", "rootpass").json()["accessToken"]
        return {"Authorization": f"Bearer {token}"}

    def assertError(self, response, status: int) -> None:
        self.assertEqual(response.status_code, status, response.text)
        body = response.json()
        self.assertEqual(set(body), {"status", "message"})
        self.assertEqual(body["status"], status)


class TestRegistrationAndLogin(ApiTestCase):
    def test_register_returns_201_with_id(self) -> None:
        response = self.register()
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertIsInstance(body["id"], int)
        self.assertEqual(body["username"], "alice")
        self.assertEqual(body["role"], "member")
        self.assertNotIn("password", response.text)

    def test_duplicate_username_409(self) -> None:
        self.register()
        self.assertError(self.register(password="different"), 409)

    def test_invalid_registration_400(self) -> None:
        self.assertError(self.register(username=""), 400)
        self.assertError(self.register(password=""), 400)
        self.assertError(self.client.post("/api/users/register", json={"username": "bob"}), 400)

    def test_login_returns_token(self) -> None:
        self.register()
        response = self.login()
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["tokenType"], "bearer")
        self.assertEqual(len(body["accessToken"].split(".")), 3)
        self.assertEqual(
            datetime.fromisoformat(body["expiresAt"]),
            self.clock.now + timedelta(minutes=60),
        )

    def test_bad_credentials_401_without_detail(self) -> None:
        self.register()
        wrong_password = self.login(password="nope")
        unknown_user = self.login(username="mallory")
        self.assertError(wrong_password, 401)
        self.assertError(unknown_user, 401)
        self.assertEqual(wrong_password.json()["message"], unknown_user.json()["message"])

    def test_me(self) -> None:
        headers = self.member_headers()
        response = self.client.get("/api/users/me", headers=headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["username"], "alice")


class TestAccessControl(ApiTestCase):
    def test_token_grants_access(self) -> None:
        response = self.client.get("/api/books", headers=self.member_headers())
        self.assertEqual(response.status_code, 200)

    def test_no_token_401(self) -> None:
        response = self.client.get("/api/books")
        self.assertError(response, 401)
        self.assertEqual(response.headers.get("www-authenticate"), "Bearer")

    def test_invalid_tokens_401_with_reason(self) -> None:
        headers = self.member_headers()
        token = headers["Authorization"].removeprefix("Bearer ")
        header, claims, signature = token.split(".")
        tampered = f"{header}.{claims}.{signature[:-2]}{'AA' if signature[-2:] != 'AA' else 'BB'}"
        cases = {
            "garbage": "Malformed token",
            tampered: "Invalid token signature",
        }
        for value, message in cases.items():
            with self.subTest(message=message):
                response = self.client.get("/api/books", headers={"Authorization": f"Bearer {value}"})
                self.assertError(response, 401)
                self.assertEqual(response.json()["message"], message)

    def test_expired_token_401(self) -> None:
        headers = self.member_headers()
        self.clock.advance(timedelta(minutes=60))
        response = self.client.get("/api/books", headers=headers)
        self.assertError(response, 401)
        self.assertEqual(response.json()["message"], "Token expired")

    def test_member_cannot_delete(self) -> None:
        headers = self.member_headers()
        self.client.post("/api/books", json=DUNE, headers=headers)
        self.assertError(self.client.delete("/api/books/1", headers=headers), 403)
        self.assertEqual(self.client.get("/api/books/1", headers=headers).status_code, 200)

    def test_admin_can_delete(self) -> None:
        headers = self.admin_headers()
        book_id = self.client.post("/api/books", json=DUNE, headers=headers).json()["id"]
        response = self.client.delete(f"/api/books/{book_id}", headers=headers)
        self.assertEqual(response.status_code, 204)
        self.assertError(self.client.get(f"/api/books/{book_id}", headers=headers), 404)
        self.assertError(self.client.delete(f"/api/books/{book_id}", headers=headers), 404)

    def test_account_list_is_admin_only(self) -> None:
        member = self.member_headers()
        self.assertError(self.client.get("/api/users", headers=member), 403)
        response = self.client.get("/api/users", headers=self.admin_headers())
        self.assertEqual(response.status_code, 200)
        self.assertEqual([u["username"] for u in response.json()["users"]], ["alice", "root"])

    def test_public_routes_need_no_token(self) -> None:
        self.assertEqual(self.client.get("/").status_code, 200)
        health = self.client.get("/api/health")
        self.assertEqual(health.status_code, 200)
        self.assertEqual(health.json()["status"], "ok")

    def test_unknown_route_requires_auth_then_404(self) -> None:
        self.assertError(self.client.get("/api/nothing-here"), 401)
        self.assertError(self.client.get("/api/nothing-here", headers=self.member_headers()), 404)


class TestBooks(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.headers = self.member_headers()

    def create(self, **overrides: str):
        return self.client.post("/api/books", json={**DUNE, **overrides}, headers=self.headers)

    def test_create_and_read(self) -> None:
        response = self.create()
        self.assertEqual(response.status_code, 201)
        book = response.json()
        self.assertEqual(book["title"], "Dune")
        self.assertEqual(book["isbn"], "0000000000001")
        self.assertEqual(book["publishedDate"], "1965-01-01")
        fetched = self.client.get(f"/api/books/{book['id']}", headers=self.headers)
        self.assertEqual(fetched.json(), book)

    def test_create_invalid_400(self) -> None:
        self.assertError(self.create(isbn="not-an-isbn"), 400)
        self.assertError(self.create(title=""), 400)
        self.assertError(self.create(publishedDate="yesterday"), 400)

    def test_create_requires_token(self) -> None:
        self.assertError(self.client.post("/api/books", json=DUNE), 401)

    def test_get_unknown_404(self) -> None:
        self.assertError(self.client.get("/api/books/999", headers=self.headers), 404)

    def test_id_beyond_column_range_404(self) -> None:
        self.create()
        for book_id in ("99999999999999999999", "2147483648", "0", "-1"):
            with self.subTest(book_id=book_id):
                url = f"/api/books/{book_id}"
                self.assertError(self.client.get(url, headers=self.headers), 404)
                self.assertError(self.client.put(url, json=DUNE, headers=self.headers), 404)

    def test_admin_delete_beyond_column_range_404(self) -> None:
        book_id = self.create().json()["id"]
        admin = self.admin_headers()
        self.assertError(self.client.delete("/api/books/99999999999999999999", headers=admin), 404)
        self.assertEqual(self.client.get(f"/api/books/{book_id}", headers=admin).status_code, 200)

    def test_update(self) -> None:
        book_id = self.create().json()["id"]
        response = self.client.put(
            f"/api/books/{book_id}",
            json={**DUNE, "title": "Dune (Deluxe Edition)", "isbn": "978-0-441-01359-3"},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["title"], "Dune (Deluxe Edition)")
        self.assertEqual(response.json()["isbn"], "9780441013593")
        self.assertEqual(response.json()["id"], book_id)

    def test_update_errors(self) -> None:
        book_id = self.create().json()["id"]
        self.assertError(self.client.put("/api/books/999", json=DUNE, headers=self.headers), 404)
        self.assertError(
            self.client.put(f"/api/books/{book_id}", json={"title": "x"}, headers=self.headers), 400
        )

    def test_search_examples(self) -> None:
        self.create()
        found = self.client.get("/api/books/search", params={"query": "dune"}, headers=self.headers)
        self.assertEqual(found.status_code, 200)
        body = found.json()
        self.assertEqual(body["totalCount"], 1)
        self.assertEqual(body["records"][0]["title"], "Dune")
        self.assertEqual(body["page"], 1)

        missing = self.client.get("/api/books/search", params={"query": "zzz"}, headers=self.headers)
        self.assertEqual(missing.json()["records"], [])
        self.assertEqual(missing.json()["totalCount"], 0)

    def test_pagination(self) -> None:
        for i in range(5):
            self.create(title=f"Book {i}", author="Author", isbn=str(100 + i))
        page2 = self.client.get("/api/books", params={"page": 2, "size": 2}, headers=self.headers).json()
        self.assertEqual([r["title"] for r in page2["records"]], ["Book 2", "Book 3"])
        self.assertEqual(page2["totalCount"], 5)
        self.assertEqual(page2["pageSize"], 2)

        beyond = self.client.get(
            "/api/books/search", params={"query": "book", "page": 9, "size": 2}, headers=self.headers
        )
        self.assertEqual(beyond.status_code, 200)
        self.assertEqual(beyond.json()["records"], [])
        self.assertEqual(beyond.json()["totalCount"], 5)

    def test_page_size_clamped_and_defaulted(self) -> None:
        self.create()
        clamped = self.client.get("/api/books", params={"size": 10_000}, headers=self.headers).json()
        self.assertEqual(clamped["pageSize"], 50)
        default = self.client.get("/api/books", headers=self.headers).json()
        self.assertEqual(default["pageSize"], 10)

    def test_bad_paging_parameters_400(self) -> None:
        for params in ({"page": 0}, {"size": 0}, {"page": "first"}):
            with self.subTest(params=params):
                self.assertError(self.client.get("/api/books/search", params=params, headers=self.headers), 400)


if __name__ == "__main__":
    unittest.main()
