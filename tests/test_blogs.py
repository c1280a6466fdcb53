"""
Tests for the blog endpoints.
"""
import math
from datetime import datetime

import pytest

from personal_blog.database import SessionLocal
from personal_blog.models import Activity
from personal_blog.pagination import MAX_PAGE, MAX_PAGE_LIMIT
from personal_blog.routers import blog as blog_router


def _actions():
    db = SessionLocal()
    try:
        return [(a.action, a.resource, a.resource_id) for a in db.query(Activity).order_by(Activity.id)]
    finally:
        db.close()


class TestCreateBlog:
    """Tests for POST /api/blogs/create."""

    def test_create_returns_persisted_blog(self, client, alice, make_blog):
        blog = make_blog(title="Hello", content="World content", category="news")
        assert blog["id"]
        assert blog["title"] == "Hello"
        assert blog["content"] == "World content"
        assert blog["category"] == "news"
        assert blog["authorName"] == "alice"
        assert blog["createdAt"]
        assert blog["updatedAt"]

    def test_author_is_the_authenticated_user(self, client, alice, bob, make_blog):
        alice_blog = make_blog()
        bob_blog = make_blog(headers=bob)
        assert alice_blog["author"] != bob_blog["author"]
        assert bob_blog["authorName"] == "bob"

    def test_create_appends_one_created_record(self, client, make_blog):
        blog = make_blog()
        assert _actions() == [("created", "blog", blog["id"])]

    @pytest.mark.parametrize("body", [
        {"title": "", "content": "c"},
        {"title": "t", "content": "   "},
        {"title": "t"},
        {"content": "c"},
        {"title": "x" * 201, "content": "c"},
    ])
    def test_invalid_body_rejected(self, client, alice, body):
        response = client.post("/api/blogs/create", json=body, headers=alice)
        assert response.status_code == 400
        assert "message" in response.json()
        assert _actions() == []

    def test_requires_authentication(self, client):
        response = client.post("/api/blogs/create", json={"title": "t", "content": "c"})
        assert response.status_code == 401


class TestListBlogs:
    """Tests for GET /api/blogs."""

    def test_empty(self, client):
        response = client.get("/api/blogs")
        assert response.status_code == 200
        assert response.json() == {"totalBlogs": 0, "currentPage": 1, "totalPages": 0, "blogs": []}

    @pytest.mark.parametrize("page,limit", [(1, 4), (2, 4), (3, 4), (1, 10), (4, 3)])
    def test_pagination(self, client, make_blog, page, limit):
        for i in range(10):
            make_blog(title=f"Post {i}")
        body = client.get("/api/blogs", params={"page": page, "limit": limit}).json()
        assert body["totalBlogs"] == 10
        assert body["currentPage"] == page
        assert body["totalPages"] == math.ceil(10 / limit)
        assert len(body["blogs"]) <= limit
        assert len(body["blogs"]) == min(limit, max(0, 10 - (page - 1) * limit))

    def test_newest_first_by_default(self, client, make_blog):
        for i in range(3):
            make_blog(title=f"Post {i}")
        titles = [b["title"] for b in client.get("/api/blogs").json()["blogs"]]
        assert titles == ["Post 2", "Post 1", "Post 0"]

    def test_sort_by_title_ascending(self, client, make_blog):
        for title in ["banana", "apple", "cherry"]:
            make_blog(title=title)
        body = client.get("/api/blogs", params={"sortBy": "title", "sortOrder": "asc"}).json()
        assert [b["title"] for b in body["blogs"]] == ["apple", "banana", "cherry"]

    def test_unknown_sort_field_rejected(self, client):
        assert client.get("/api/blogs", params={"sortBy": "password_hash"}).status_code == 400

    def test_search_matches_content_only(self, client, make_blog):
        make_blog(title="Hello", content="World content")
        make_blog(title="Other", content="Nothing here")
        body = client.get("/api/blogs", params={"search": "world"}).json()
        assert body["totalBlogs"] == 1
        assert body["blogs"][0]["title"] == "Hello"

    def test_search_is_case_insensitive_over_title(self, client, make_blog):
        make_blog(title="Python Tips", content="text")
        body = client.get("/api/blogs", params={"search": "pYTHON"}).json()
        assert [b["title"] for b in body["blogs"]] == ["Python Tips"]

    def test_search_wildcards_are_literal(self, client, make_blog):
        make_blog(title="100% done", content="x")
        make_blog(title="1000 things", content="y")
        body = client.get("/api/blogs", params={"search": "0%"}).json()
        assert [b["title"] for b in body["blogs"]] == ["100% done"]

    @pytest.mark.parametrize("title,term", [
        ("Über uns", "Über"),
        ("Über uns", "über"),
        ("ÉTÉ chaud", "été"),
        ("CAFÉ CRÈME", "café crème"),
    ])
    def test_search_folds_non_ascii_case(self, client, make_blog, title, term):
        make_blog(title=title, content="plain")
        make_blog(title="Unrelated", content="plain")
        body = client.get("/api/blogs", params={"search": term}).json()
        assert [b["title"] for b in body["blogs"]] == [title]

    def test_search_folds_non_ascii_case_in_content(self, client, make_blog):
        make_blog(title="Trip", content="Un ÉTÉ à Paris")
        body = client.get("/api/blogs", params={"search": "été à"}).json()
        assert body["totalBlogs"] == 1

    def test_category_filter_is_exact_and_anded_with_search(self, client, make_blog):
        make_blog(title="Rust news", category="tech")
        make_blog(title="Rust recipes", category="food")
        make_blog(title="Go news", category="tech")
        body = client.get("/api/blogs", params={"category": "tech", "search": "rust"}).json()
        assert [b["title"] for b in body["blogs"]] == ["Rust news"]
        assert client.get("/api/blogs", params={"category": "tec"}).json()["totalBlogs"] == 0

    def test_limit_is_capped(self, client, make_blog):
        make_blog()
        body = client.get("/api/blogs", params={"limit": MAX_PAGE_LIMIT * 10}).json()
        assert body["totalPages"] == 1

    @pytest.mark.parametrize("params", [{"page": 0}, {"limit": 0}, {"page": "abc"}, {"page": 10**18}])
    def test_invalid_paging_rejected(self, client, params):
        assert client.get("/api/blogs", params=params).status_code == 400

    def test_last_allowed_page_is_empty_not_an_error(self, client, make_blog):
        make_blog()
        body = client.get("/api/blogs", params={"page": MAX_PAGE}).json()
        assert body["currentPage"] == MAX_PAGE
        assert body["blogs"] == []

    def test_password_hash_never_exposed(self, client, make_blog):
        make_blog()
        assert "password" not in client.get("/api/blogs").text


class TestGetBlog:
    """Tests for GET /api/blogs/{id}."""

    def test_get_existing(self, client, make_blog):
        blog = make_blog()
        response = client.get(f"/api/blogs/{blog['id']}")
        assert response.status_code == 200
        assert response.json() == blog

    def test_get_missing(self, client):
        response = client.get("/api/blogs/12345")
        assert response.status_code == 404
        assert response.json() == {"message": "Blog not found"}

    @pytest.mark.parametrize("blog_id", [0, -1, 2**63, 10**20])
    def test_out_of_range_ids_are_not_found(self, client, alice, blog_id):
        url = f"/api/blogs/{blog_id}"
        assert client.get(url).status_code == 404
        assert client.put(url, json={"title": "x"}).status_code == 404
        assert client.delete(url, headers=alice).status_code == 404


class TestUpdateBlog:
    """Tests for PUT /api/blogs/{id}."""

    def test_update_given_fields_only(self, client, make_blog):
        blog = make_blog(title="Old", content="Body", category="misc")
        response = client.put(f"/api/blogs/{blog['id']}", json={"title": "New"})
        assert response.status_code == 200
        updated = response.json()
        assert updated["title"] == "New"
        assert updated["content"] == "Body"
        assert updated["category"] == "misc"
        assert updated["author"] == blog["author"]

    def test_update_refreshes_updated_at_only(self, client, make_blog):
        blog = make_blog()
        updated = client.put(f"/api/blogs/{blog['id']}", json={"content": "Changed"}).json()
        assert updated["createdAt"] == blog["createdAt"]
        assert datetime.fromisoformat(updated["updatedAt"]) > datetime.fromisoformat(blog["updatedAt"])
        assert client.get(f"/api/blogs/{blog['id']}").json()["updatedAt"] == updated["updatedAt"]

    def test_update_missing(self, client):
        response = client.put("/api/blogs/999", json={"title": "New"})
        assert response.status_code == 404

    @pytest.mark.parametrize("body", [{"title": ""}, {"content": None}, {"title": "x" * 201}])
    def test_update_runs_creation_validation(self, client, make_blog, body):
        blog = make_blog()
        response = client.put(f"/api/blogs/{blog['id']}", json=body)
        assert response.status_code == 400
        assert client.get(f"/api/blogs/{blog['id']}").json()["title"] == "Hello"

    def test_update_is_open_by_default(self, client, make_blog):
        blog = make_blog()
        assert client.put(f"/api/blogs/{blog['id']}", json={"title": "Anyone"}).status_code == 200

    def test_author_only_policy(self, client, monkeypatch, alice, bob, make_blog):
        monkeypatch.setattr(blog_router, "BLOG_UPDATE_REQUIRES_AUTHOR", True)
        blog = make_blog()
        url = f"/api/blogs/{blog['id']}"
        assert client.put(url, json={"title": "x"}).status_code == 401
        assert client.put(url, json={"title": "x"}, headers=bob).status_code == 403
        response = client.put(url, json={"title": "x"}, headers=alice)
        assert response.status_code == 200
        assert response.json()["title"] == "x"


class TestDeleteBlog:
    """Tests for DELETE /api/blogs/{id}."""

    def test_only_author_can_delete(self, client, alice, bob, make_blog):
        blog = make_blog()
        url = f"/api/blogs/{blog['id']}"

        response = client.delete(url, headers=bob)
        assert response.status_code == 403
        assert response.json() == {"message": "Not authorized to delete this blog"}
        assert client.get(url).status_code == 200

        response = client.delete(url, headers=alice)
        assert response.status_code == 200
        assert response.json() == {"message": "Blog deleted successfully"}
        assert client.get(url).status_code == 404

    def test_delete_appends_one_deleted_record(self, client, alice, make_blog):
        blog = make_blog()
        client.delete(f"/api/blogs/{blog['id']}", headers=alice)
        assert _actions() == [("created", "blog", blog["id"]), ("deleted", "blog", blog["id"])]

    def test_refused_delete_logs_nothing(self, client, bob, make_blog):
        blog = make_blog()
        client.delete(f"/api/blogs/{blog['id']}", headers=bob)
        assert [a[0] for a in _actions()] == ["created"]

    def test_delete_missing(self, client, alice):
        assert client.delete("/api/blogs/999", headers=alice).status_code == 404

    def test_delete_requires_authentication(self, client, make_blog):
        blog = make_blog()
        assert client.delete(f"/api/blogs/{blog['id']}").status_code == 401


def test_end_to_end_scenario(client):
    client.post(
        "/api/auth/register",
        json={"username": "alice", "email": "a@x.com", "password": "pw123"},
    )
    login = client.post("/api/auth/login", json={"email": "a@x.com", "password": "pw123"})
    headers = {"Authorization": f"Bearer {login.json()['token']}"}

    created = client.post(
        "/api/blogs/create", json={"title": "Hello", "content": "World content"}, headers=headers
    )
    assert created.status_code == 201
    blog = created.json()
    assert blog["authorName"] == "alice"

    found = client.get("/api/blogs", params={"search": "World"}).json()
    assert [b["id"] for b in found["blogs"]] == [blog["id"]]

    assert client.delete(f"/api/blogs/{blog['id']}", headers=headers).status_code == 200
    assert client.get(f"/api/blogs/{blog['id']}").status_code == 404
