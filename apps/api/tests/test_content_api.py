"""Tag, article, portfolio, member and like API tests."""

from __future__ import annotations

import os
import unittest

from fastapi.testclient import TestClient

from folio.core.config import get_settings
from folio.main import create_app


def _auth(identity_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer test:{identity_id}"}


class _SettingsEnvCase(unittest.TestCase):
    _env_keys = (
        "FOLIO_AUTH_PROVIDER",
        "FOLIO_FIREBASE_PROJECT_ID",
        "FOLIO_FIREBASE_AUDIENCE",
    )

    def setUp(self) -> None:
        self._old_env = {k: os.environ.get(k) for k in self._env_keys}
        os.environ["FOLIO_AUTH_PROVIDER"] = "mock"
        os.environ["FOLIO_FIREBASE_PROJECT_ID"] = "test-project"
        os.environ["FOLIO_FIREBASE_AUDIENCE"] = "test-audience"
        get_settings.cache_clear()

    def tearDown(self) -> None:
        for key, value in self._old_env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        get_settings.cache_clear()


class _SeededApiCase(_SettingsEnvCase):
    def setUp(self) -> None:
        super().setUp()
        self.app = create_app()
        self.client = TestClient(self.app)
        self.store = self.app.state.store
        self.store.seed(
            "members",
            {"id": "admin", "username": "root", "permission": "admin", "is_subscriber": False},
            {"id": "author-a", "username": "ada", "permission": "author", "is_subscriber": False},
            {"id": "author-b", "username": "bob", "permission": "author", "is_subscriber": False},
            {"id": "reader", "username": "ray", "permission": "guest", "is_subscriber": False},
        )


class TagApiTests(_SeededApiCase):
    def test_tag_writes_require_admin(self) -> None:
        self.assertEqual(self.client.post("/api/v1/tags", json={"name": "go"}).status_code, 401)
        response = self.client.post("/api/v1/tags", json={"name": "go"}, headers=_auth("author-a"))
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["details"]["required_permission"], "admin")

    def test_admin_tag_lifecycle(self) -> None:
        created = self.client.post("/api/v1/tags", json={"name": "Go"}, headers=_auth("admin"))
        self.assertEqual(created.status_code, 201)
        tag_id = created.json()["id"]

        again = self.client.post("/api/v1/tags", json={"name": "go"}, headers=_auth("admin"))
        self.assertEqual(again.json(), created.json())

        renamed = self.client.put(f"/api/v1/tags/{tag_id}", json={"name": "Golang"}, headers=_auth("admin"))
        self.assertEqual(renamed.json()["name"], "Golang")
        self.assertEqual(self.client.get("/api/v1/tags").json(), [{"id": tag_id, "name": "Golang"}])

        deleted = self.client.delete(f"/api/v1/tags/{tag_id}", headers=_auth("admin"))
        self.assertEqual(deleted.status_code, 200)
        self.assertEqual(deleted.json(), {"count": 1})

        self.assertEqual(self.client.get(f"/api/v1/tags/{tag_id}").status_code, 404)
        self.assertEqual(self.client.delete(f"/api/v1/tags/{tag_id}", headers=_auth("admin")).status_code, 404)

    def test_rename_into_existing_name_conflicts(self) -> None:
        self.client.post("/api/v1/tags", json={"name": "go"}, headers=_auth("admin"))
        rust = self.client.post("/api/v1/tags", json={"name": "rust"}, headers=_auth("admin")).json()

        response = self.client.put(f"/api/v1/tags/{rust['id']}", json={"name": "GO"}, headers=_auth("admin"))

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["code"], "CONFLICT")

    def test_renaming_missing_tag_is_not_found_even_when_name_is_taken(self) -> None:
        self.client.post("/api/v1/tags", json={"name": "go"}, headers=_auth("admin"))

        response = self.client.put("/api/v1/tags/missing", json={"name": "go"}, headers=_auth("admin"))

        self.assertEqual(response.status_code, 404)

    def test_failed_association_cleanup_keeps_tag(self) -> None:
        course = self.client.post(
            "/api/v1/courses",
            json={"title": "Intro", "tag_names": ["python"]},
            headers=_auth("author-a"),
        ).json()
        tag_id = course["tags"][0]["id"]
        self.store.fail_next("course_tags", "delete")

        with self.assertLogs("folio", level="ERROR"):
            response = self.client.delete(f"/api/v1/tags/{tag_id}", headers=_auth("admin"))

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["details"], {"failed_cleanups": ["course_tags"]})
        self.assertEqual(self.client.get(f"/api/v1/tags/{tag_id}").status_code, 200)

    def test_deleting_tag_detaches_it_from_content(self) -> None:
        course = self.client.post(
            "/api/v1/courses",
            json={"title": "Intro", "tag_names": ["python", "web"]},
            headers=_auth("author-a"),
        ).json()
        python_id = next(tag["id"] for tag in course["tags"] if tag["name"] == "python")

        self.client.delete(f"/api/v1/tags/{python_id}", headers=_auth("admin"))

        reloaded = self.client.get("/api/v1/courses/intro", headers=_auth("author-a")).json()
        self.assertEqual([tag["name"] for tag in reloaded["tags"]], ["web"])


class ArticleApiTests(_SeededApiCase):
    def _create_module(self, title: str, *, published: bool, owner: str = "author-a") -> dict:
        response = self.client.post(
            "/api/v1/articles",
            json={"title": title, "published": published, "tag_names": ["notes"]},
            headers=_auth(owner),
        )
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def test_unpublished_module_is_hidden_from_others(self) -> None:
        self._create_module("Drafts", published=False)
        self._create_module("Public", published=True)

        anonymous = [module["slug"] for module in self.client.get("/api/v1/articles").json()]
        owner = [module["slug"] for module in self.client.get("/api/v1/articles", headers=_auth("author-a")).json()]

        self.assertEqual(anonymous, ["public"])
        self.assertEqual(sorted(owner), ["drafts", "public"])
        self.assertEqual(self.client.get("/api/v1/articles/drafts", headers=_auth("author-b")).status_code, 404)

    def test_sub_articles_are_scoped_to_their_module(self) -> None:
        self._create_module("First", published=True)
        self._create_module("Second", published=True)

        slugs = []
        for module in ("first", "second", "first"):
            response = self.client.post(
                f"/api/v1/articles/{module}/sub-articles",
                json={"title": "Overview", "content": "body", "tag_names": ["Intro", "intro"]},
                headers=_auth("author-a"),
            )
            self.assertEqual(response.status_code, 201, response.text)
            slugs.append(response.json()["slug"])

        self.assertEqual(slugs, ["overview", "overview", "overview-1"])
        fetched = self.client.get("/api/v1/articles/first/sub-articles/overview-1").json()
        self.assertEqual(fetched["content"], "body")
        self.assertEqual([tag["name"] for tag in fetched["tags"]], ["Intro"])
        self.assertEqual(len(self.store.rows("sub_article_tags")), 3)

    def test_only_owner_adds_sub_articles_or_updates(self) -> None:
        self._create_module("Public", published=True)

        sub = self.client.post(
            "/api/v1/articles/public/sub-articles",
            json={"title": "Mine"},
            headers=_auth("author-b"),
        )
        update = self.client.put("/api/v1/articles/public", json={"title": "x"}, headers=_auth("author-b"))

        self.assertEqual(sub.status_code, 403)
        self.assertEqual(update.status_code, 403)
        self.assertEqual(update.json()["code"], "FORBIDDEN")

    def test_update_can_unpublish_and_keeps_slug(self) -> None:
        self._create_module("Public", published=True)

        response = self.client.put(
            "/api/v1/articles/public",
            json={"title": "Renamed", "published": False},
            headers=_auth("author-a"),
        )

        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["slug"], "public")
        self.assertEqual(self.client.get("/api/v1/articles/public").status_code, 404)


    def _create_sub_article(self, module: str, title: str, tag_names: list[str]) -> dict:
        response = self.client.post(
            f"/api/v1/articles/{module}/sub-articles",
            json={"title": title, "content": "body", "tag_names": tag_names},
            headers=_auth("author-a"),
        )
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def test_update_sub_article_keeps_slug_and_replaces_tags(self) -> None:
        self._create_module("Public", published=True)
        self._create_sub_article("public", "Overview", ["a", "b"])

        response = self.client.put(
            "/api/v1/articles/public/sub-articles/overview",
            json={"title": "A new overview", "tag_names": ["b", "c"]},
            headers=_auth("author-a"),
        )

        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual((body["title"], body["slug"], body["content"]), ("A new overview", "overview", "body"))
        self.assertEqual(sorted(tag["name"] for tag in body["tags"]), ["b", "c"])

    def test_update_sub_article_without_tag_names_keeps_tags(self) -> None:
        self._create_module("Public", published=True)
        self._create_sub_article("public", "Overview", ["a"])

        response = self.client.put(
            "/api/v1/articles/public/sub-articles/overview",
            json={"content": "rewritten"},
            headers=_auth("author-a"),
        )

        self.assertEqual(response.json()["content"], "rewritten")
        self.assertEqual([tag["name"] for tag in response.json()["tags"]], ["a"])

    def test_only_module_owner_changes_sub_articles(self) -> None:
        self._create_module("Public", published=True)
        self._create_sub_article("public", "Overview", [])
        path = "/api/v1/articles/public/sub-articles/overview"

        self.assertEqual(self.client.put(path, json={"title": "x"}, headers=_auth("author-b")).status_code, 403)
        self.assertEqual(self.client.delete(path, headers=_auth("author-b")).status_code, 403)

    def test_delete_sub_article_clears_its_tags(self) -> None:
        self._create_module("Public", published=True)
        self._create_sub_article("public", "Overview", ["a"])
        kept = self._create_sub_article("public", "Details", ["a"])

        response = self.client.delete("/api/v1/articles/public/sub-articles/overview", headers=_auth("author-a"))

        self.assertEqual(response.status_code, 204)
        self.assertEqual(self.client.get("/api/v1/articles/public/sub-articles/overview").status_code, 404)
        self.assertEqual([row["sub_article_id"] for row in self.store.rows("sub_article_tags")], [kept["id"]])

    def test_delete_module_removes_sub_articles_and_tag_links(self) -> None:
        self._create_module("Public", published=True)
        other = self._create_module("Other", published=True)
        self._create_sub_article("public", "Overview", ["a"])
        self._create_sub_article("public", "Details", ["b"])

        self.assertEqual(self.client.delete("/api/v1/articles/public", headers=_auth("author-b")).status_code, 403)
        response = self.client.delete("/api/v1/articles/public", headers=_auth("author-a"))

        self.assertEqual(response.status_code, 204)
        self.assertEqual(self.client.get("/api/v1/articles/public").status_code, 404)
        self.assertEqual(self.store.rows("sub_articles"), [])
        self.assertEqual(self.store.rows("sub_article_tags"), [])
        self.assertEqual(
            [row["article_module_id"] for row in self.store.rows("article_module_tags")],
            [other["id"]],
        )
        self.assertEqual(sorted(row["name"] for row in self.store.rows("tags")), ["a", "b", "notes"])


class PortfolioApiTests(_SeededApiCase):
    def test_project_lifecycle(self) -> None:
        created = self.client.post(
            "/api/v1/portfolio",
            json={"title": "My Site", "repo_url": "https://example.com/repo", "tag_names": ["web"]},
            headers=_auth("author-a"),
        )
        self.assertEqual(created.status_code, 201, created.text)
        self.assertEqual(created.json()["slug"], "my-site")

        self.client.post("/api/v1/portfolio", json={"title": "Other"}, headers=_auth("author-b"))
        mine = self.client.get("/api/v1/portfolio", params={"memberId": "author-a"}).json()
        self.assertEqual([project["slug"] for project in mine], ["my-site"])
        self.assertEqual(len(self.client.get("/api/v1/portfolio").json()), 2)

        forbidden = self.client.put("/api/v1/portfolio/my-site", json={"title": "x"}, headers=_auth("author-b"))
        self.assertEqual(forbidden.status_code, 403)

        updated = self.client.put(
            "/api/v1/portfolio/my-site",
            json={"description": "portfolio", "tag_names": []},
            headers=_auth("author-a"),
        )
        self.assertEqual(updated.json()["tags"], [])
        self.assertEqual(updated.json()["title"], "My Site")

        self.assertEqual(self.client.delete("/api/v1/portfolio/my-site", headers=_auth("author-a")).status_code, 204)
        self.assertEqual(self.client.get("/api/v1/portfolio/my-site").status_code, 404)
        self.assertEqual(self.store.rows("project_tags"), [])


class MemberApiTests(_SeededApiCase):
    def test_me_returns_profile(self) -> None:
        response = self.client.get("/api/v1/members/me", headers=_auth("author-a"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["username"], "ada")
        self.assertEqual(response.json()["permission"], "author")

    def test_me_without_profile(self) -> None:
        self.assertEqual(self.client.get("/api/v1/members/me").status_code, 401)
        response = self.client.get("/api/v1/members/me", headers=_auth("ghost"))
        self.assertEqual(response.json()["code"], "PROFILE_NOT_FOUND")

    def test_only_admin_changes_permissions(self) -> None:
        denied = self.client.put(
            "/api/v1/members/reader/permission",
            json={"permission": "author"},
            headers=_auth("author-a"),
        )
        self.assertEqual(denied.status_code, 403)

        with self.assertLogs("folio.services.members", level="INFO"):
            granted = self.client.put(
                "/api/v1/members/reader/permission",
                json={"permission": "author"},
                headers=_auth("admin"),
            )
        self.assertEqual(granted.json()["permission"], "author")

        promoted = self.client.post("/api/v1/courses", json={"title": "Now allowed"}, headers=_auth("reader"))
        self.assertEqual(promoted.status_code, 201)

    def test_unknown_member_is_not_found(self) -> None:
        self.assertEqual(self.client.get("/api/v1/members/nobody").status_code, 404)
        response = self.client.put(
            "/api/v1/members/nobody/permission",
            json={"permission": "admin"},
            headers=_auth("admin"),
        )
        self.assertEqual(response.status_code, 404)


class LikeApiTests(_SeededApiCase):
    def test_toggle_and_summary(self) -> None:
        path = "/api/v1/likes/project/project-1"

        self.assertEqual(self.client.post(path).status_code, 401)
        self.assertEqual(self.client.post(path, headers=_auth("author-a")).json(), {"liked": True, "count": 1})
        self.assertEqual(self.client.post(path, headers=_auth("reader")).json(), {"liked": True, "count": 2})
        self.assertEqual(self.client.post(path, headers=_auth("author-a")).json(), {"liked": False, "count": 1})

        anonymous = self.client.get(path).json()
        self.assertEqual((anonymous["count"], anonymous["liked"]), (1, False))
        reader = self.client.get(path, headers=_auth("reader")).json()
        self.assertEqual((reader["count"], reader["liked"]), (1, True))

    def test_unknown_content_type_is_rejected(self) -> None:
        self.assertEqual(self.client.get("/api/v1/likes/course/abc").status_code, 422)
