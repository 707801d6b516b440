"""Integration tests for blog post, product and category routes."""

from uuid import uuid4

READY_POST = {
    "title": "Hello World",
    "content": "<p>Body</p>",
    "excerpt": "Intro",
    "featured_image": {"url": "https://cdn.example.com/a.jpg"},
    "seo": {"title": "Hello", "description": "Desc"},
}

READY_PRODUCT = {
    "title": "CO2 Laser",
    "short_description": "Fractional laser",
    "product_description": "<p>Description</p>",
    "product_images": ["https://cdn.example.com/laser.jpg"],
    "seo": {"title": "Laser", "description": "Desc"},
}


def test_health(client):
    assert client.get("/health").json() == {"status": "ok", "service": "api"}


def test_admin_routes_require_auth(client):
    assert client.get("/api/blog-posts").status_code == 401
    assert client.post("/api/blog-posts", json={"title": "x"}).status_code == 401
    assert client.post(f"/api/products/{uuid4()}/publish").status_code == 401


def test_invalid_token_is_rejected(client):
    headers = {"Authorization": "Bearer not-a-token"}
    assert client.get("/api/blog-posts", headers=headers).status_code == 401


def test_cookie_token_is_accepted(client, auth_headers):
    token = auth_headers["Authorization"].removeprefix("Bearer ")
    client.cookies.set("access_token", token)
    assert client.get("/api/blog-posts").status_code == 200


def test_create_and_fetch_post(client, auth_headers):
    resp = client.post("/api/blog-posts", json={"title": "Hello World"}, headers=auth_headers)
    assert resp.status_code == 201
    post = resp.json()
    assert post["slug"] == "hello-world"
    assert post["publish_type"] == "draft"
    assert post["author_id"] == "admin-1"

    second = client.post("/api/blog-posts", json={"title": "Hello World"}, headers=auth_headers)
    assert second.json()["slug"] == "hello-world-2"

    fetched = client.get(f"/api/blog-posts/{post['id']}", headers=auth_headers)
    assert fetched.json()["id"] == post["id"]
    by_slug = client.get("/api/blog-posts/slug/hello-world", headers=auth_headers)
    assert by_slug.json()["id"] == post["id"]


def test_publish_gate_returns_422_with_fields(client, auth_headers):
    post = client.post(
        "/api/blog-posts", json={"title": "Hello World", "content": ""}, headers=auth_headers
    ).json()

    resp = client.post(f"/api/blog-posts/{post['id']}/publish", headers=auth_headers)

    assert resp.status_code == 422
    body = resp.json()
    assert body["success"] is False
    assert body["code"] == "validation"
    assert [e["field"] for e in body["errors"]] == ["content"]

    unchanged = client.get(f"/api/blog-posts/{post['id']}", headers=auth_headers).json()
    assert unchanged["publish_type"] == "draft"


def test_publish_returns_warnings(client, auth_headers):
    post = client.post(
        "/api/blog-posts", json={**READY_POST, "excerpt": ""}, headers=auth_headers
    ).json()

    resp = client.post(f"/api/blog-posts/{post['id']}/publish", headers=auth_headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["data"]["publish_type"] == "publish"
    assert body["data"]["published_at"] is not None
    assert [w["field"] for w in body["warnings"]] == ["excerpt"]

    public = client.get("/api/blog-posts/public/hello-world")
    assert public.status_code == 200


def test_public_route_hides_drafts(client, auth_headers):
    client.post("/api/blog-posts", json=READY_POST, headers=auth_headers)
    assert client.get("/api/blog-posts/public/hello-world").status_code == 404


def test_create_with_should_publish(client, auth_headers):
    resp = client.post(
        "/api/blog-posts", json={**READY_POST, "should_publish": True}, headers=auth_headers
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["data"]["publish_type"] == "publish"
    assert body["data"]["published_at"] is not None
    assert body["warnings"] == []


def test_create_with_should_publish_returns_warnings(client, auth_headers):
    resp = client.post(
        "/api/blog-posts",
        json={**READY_POST, "excerpt": "", "should_publish": True},
        headers=auth_headers,
    )
    assert resp.status_code == 201
    assert [w["field"] for w in resp.json()["warnings"]] == ["excerpt"]


def test_patch_with_should_publish_is_atomic(client, auth_headers):
    post = client.post("/api/blog-posts", json=READY_POST, headers=auth_headers).json()

    resp = client.patch(
        f"/api/blog-posts/{post['id']}",
        json={"title": "Changed", "content": "", "should_publish": True},
        headers=auth_headers,
    )
    assert resp.status_code == 422

    current = client.get(f"/api/blog-posts/{post['id']}", headers=auth_headers).json()
    assert current["title"] == "Hello World"
    assert current["publish_type"] == "draft"


def test_patch_slug_conflict(client, auth_headers):
    client.post("/api/blog-posts", json={"title": "A", "slug": "a"}, headers=auth_headers)
    b = client.post("/api/blog-posts", json={"title": "B", "slug": "b"}, headers=auth_headers)

    resp = client.patch(
        f"/api/blog-posts/{b.json()['id']}", json={"slug": "a"}, headers=auth_headers
    )

    assert resp.status_code == 409
    assert resp.json()["code"] == "conflict"


def test_unpublish_and_publish_type(client, auth_headers):
    post = client.post(
        "/api/blog-posts", json={**READY_POST, "should_publish": True}, headers=auth_headers
    ).json()["data"]

    resp = client.post(f"/api/blog-posts/{post['id']}/unpublish", headers=auth_headers)
    assert resp.json()["publish_type"] == "draft"

    resp = client.patch(
        f"/api/blog-posts/{post['id']}/publish-type",
        json={"publish_type": "pending"},
        headers=auth_headers,
    )
    assert resp.json()["publish_type"] == "pending"


def test_validate_preview(client, auth_headers):
    post = client.post("/api/blog-posts", json={"title": "x"}, headers=auth_headers).json()

    body = client.get(f"/api/blog-posts/{post['id']}/validate", headers=auth_headers).json()

    assert body["can_publish"] is False
    assert [e["field"] for e in body["errors"]] == ["content"]


def test_list_and_stats(client, auth_headers):
    for i in range(3):
        client.post("/api/blog-posts", json={"title": f"Post {i}"}, headers=auth_headers)

    body = client.get("/api/blog-posts?limit=2", headers=auth_headers).json()
    assert body["total"] == 3
    assert len(body["items"]) == 2
    assert body["total_pages"] == 2

    stats = client.get("/api/blog-posts/stats", headers=auth_headers).json()
    assert stats["draft"] == 3


def test_delete_and_missing(client, auth_headers):
    post = client.post("/api/blog-posts", json={"title": "x"}, headers=auth_headers).json()

    assert client.delete(f"/api/blog-posts/{post['id']}", headers=auth_headers).json() == {
        "success": True
    }
    missing = client.get(f"/api/blog-posts/{post['id']}", headers=auth_headers)
    assert missing.status_code == 404
    assert missing.json()["code"] == "not_found"


def test_unknown_category_is_bad_request(client, auth_headers):
    resp = client.post(
        "/api/blog-posts",
        json={"title": "x", "categories": [str(uuid4())]},
        headers=auth_headers,
    )
    assert resp.status_code == 400


def test_post_with_category(client, auth_headers):
    category = client.post(
        "/api/categories/blog", json={"name": "Company News"}, headers=auth_headers
    ).json()
    assert category["slug"] == "company-news"

    post = client.post(
        "/api/blog-posts",
        json={"title": "x", "categories": [{"_id": category["id"]}]},
        headers=auth_headers,
    ).json()
    assert post["categories"] == [category["id"]]

    listed = client.get(
        f"/api/blog-posts?category_id={category['id']}", headers=auth_headers
    ).json()
    assert [p["id"] for p in listed["items"]] == [post["id"]]


def test_categories(client, auth_headers):
    created = client.post(
        "/api/categories/product", json={"name": "Lasers"}, headers=auth_headers
    )
    assert created.status_code == 201

    duplicate = client.post(
        "/api/categories/product", json={"name": "Lasers"}, headers=auth_headers
    )
    assert duplicate.status_code == 409

    listed = client.get("/api/categories/product").json()
    assert [c["slug"] for c in listed["items"]] == ["lasers"]
    assert client.get("/api/categories/blog").json() == {"items": []}

    category_id = created.json()["id"]
    assert client.get(f"/api/categories/product/{category_id}").status_code == 200
    assert client.delete(
        f"/api/categories/product/{category_id}", headers=auth_headers
    ).json() == {"success": True}
    assert client.get(f"/api/categories/product/{category_id}").status_code == 404


# --- Products ---


def test_product_publish_gate(client, auth_headers):
    product = client.post(
        "/api/products", json={"title": "Bare"}, headers=auth_headers
    ).json()

    resp = client.post(f"/api/products/{product['id']}/publish", headers=auth_headers)

    assert resp.status_code == 422
    assert [e["field"] for e in resp.json()["errors"]] == [
        "short_description",
        "product_description",
        "product_images",
    ]


def test_product_lifecycle_routes(client, auth_headers):
    product = client.post("/api/products", json=READY_PRODUCT, headers=auth_headers).json()
    pid = product["id"]

    review = client.post(f"/api/products/{pid}/submit-for-review", headers=auth_headers)
    assert review.json()["publish_type"] == "pending"

    private = client.post(f"/api/products/{pid}/private", headers=auth_headers)
    assert private.json()["publish_type"] == "private"

    published = client.post(f"/api/products/{pid}/publish", headers=auth_headers)
    assert published.status_code == 200
    assert client.get("/api/products/public/co2-laser").status_code == 200

    copy = client.post(f"/api/products/{pid}/duplicate", headers=auth_headers)
    assert copy.status_code == 201
    assert copy.json()["slug"] == "co2-laser-copy"
    assert copy.json()["title"] == "CO2 Laser (Copy)"
    assert copy.json()["publish_type"] == "draft"


def test_hidden_product_is_not_public(client, auth_headers):
    product = client.post(
        "/api/products",
        json={**READY_PRODUCT, "visibility": "hidden", "should_publish": True},
        headers=auth_headers,
    ).json()["data"]
    assert product["publish_type"] == "publish"
    assert client.get("/api/products/public/co2-laser").status_code == 404


def test_publish_after_category_deleted_is_rejected(client, auth_headers):
    category = client.post(
        "/api/categories/blog", json={"name": "Company News"}, headers=auth_headers
    ).json()
    post = client.post(
        "/api/blog-posts",
        json={**READY_POST, "categories": [category["id"]]},
        headers=auth_headers,
    ).json()
    client.delete(f"/api/categories/blog/{category['id']}", headers=auth_headers)

    resp = client.post(f"/api/blog-posts/{post['id']}/publish", headers=auth_headers)

    assert resp.status_code == 422
    assert [e["field"] for e in resp.json()["errors"]] == ["categories"]
    current = client.get(f"/api/blog-posts/{post['id']}", headers=auth_headers).json()
    assert current["publish_type"] == "draft"


def test_content_routes_require_admin_role(client, viewer_headers):
    assert client.get("/api/blog-posts", headers=viewer_headers).status_code == 403
    assert (
        client.post("/api/products", json={"title": "x"}, headers=viewer_headers).status_code
        == 403
    )
