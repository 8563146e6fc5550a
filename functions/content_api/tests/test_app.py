import time
import unittest

import jwt
from fastapi.testclient import TestClient

from content_api.access import AccessPolicy, JwtAdminVerifier
from content_api.app import create_app
from content_api.db import InMemoryContentStore
from content_api.dependencies import get_content_router
from content_api.repository import ContentRepository
from content_api.router import ContentRouter

SECRET = "test-secret-for-content-api-tokens"


class ContentApiTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryContentStore()
        router = ContentRouter(
            ContentRepository(self.store), AccessPolicy(JwtAdminVerifier(SECRET))
        )
        app = create_app()
        app.dependency_overrides[get_content_router] = lambda: router
        self.client = TestClient(app)
        token = jwt.encode(
            {"username": "admin", "isAdmin": True, "exp": int(time.time()) + 600},
            SECRET,
            algorithm="HS256",
        )
        self.admin = {"Authorization": f"Bearer {token}"}

    def test_create_list_and_get(self):
        response = self.client.post(
            "/api/content",
            json={"title": "Hero EN", "body": "Welcome", "section": "hero", "language": "en"},
            headers=self.admin,
        )
        self.assertEqual(response.status_code, 201)
        created = response.json()
        self.assertTrue(created["id"])
        self.assertTrue(created["isActive"])
        self.assertEqual(created["order"], 0)

        listing = self.client.get("/api/content", params={"section": "hero"})
        self.assertEqual(listing.status_code, 200)
        self.assertEqual([r["id"] for r in listing.json()], [created["id"]])

        single = self.client.get(f"/api/content/{created['id']}")
        self.assertEqual(single.json()["title"], "Hero EN")

    def test_slideshow_order(self):
        for title, order in (("second", 1), ("first", 0)):
            self.client.post(
                "/api/content",
                json={"title": title, "body": "b", "section": "slideshow", "order": order},
                headers=self.admin,
            )
        response = self.client.get(
            "/api/content", params={"section": "slideshow", "language": "en"}
        )
        self.assertEqual([r["title"] for r in response.json()], ["first", "second"])

    def test_inactive_hidden_from_public_listing(self):
        self.client.post(
            "/api/content",
            json={"title": "Draft", "body": "b", "section": "about", "isActive": False},
            headers=self.admin,
        )
        public = self.client.get("/api/content", params={"section": "about"})
        self.assertEqual(public.json(), [])
        admin = self.client.get(
            "/api/content/admin/all", params={"section": "about"}, headers=self.admin
        )
        self.assertEqual([r["title"] for r in admin.json()], ["Draft"])

    def test_update_unknown_id(self):
        response = self.client.put(
            "/api/content/doesnotexist", json={"title": "x"}, headers=self.admin
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"message": "Content not found"})

    def test_delete_requires_admin(self):
        record = self.store.create({"title": "t", "body": "b", "section": "projects"})
        response = self.client.delete(f"/api/content/{record.id}")
        self.assertEqual(response.status_code, 401)
        self.assertIsNotNone(self.store.find_by_id(record.id))

        response = self.client.delete(f"/api/content/{record.id}", headers=self.admin)
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(self.store.find_by_id(record.id))

    def test_arabic_content_round_trips(self):
        title = "مجتمع تعليمي"
        self.client.post(
            "/api/content",
            json={"title": title, "body": "نص", "section": "hero", "language": "ar"},
            headers=self.admin,
        )
        response = self.client.get("/api/content", params={"language": "ar"})
        self.assertEqual(response.json()[0]["title"], title)

    def test_out_of_range_order_is_a_bad_request(self):
        response = self.client.post(
            "/api/content",
            json={"title": "Slide", "body": "B", "section": "slideshow", "order": 2**40},
            headers=self.admin,
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("order", response.json()["message"])
        self.assertEqual(self.store.find(), [])

    def test_startup_logs_through_lifespan(self):
        app = create_app()
        self.assertEqual(app.router.on_startup, [])
        with self.assertLogs("content_api.app", level="INFO") as logs:
            with TestClient(app):
                pass
        output = "\n".join(logs.output)
        self.assertIn("Starting content API", output)
        self.assertIn("Content API stopped", output)


if __name__ == "__main__":
    unittest.main()
