def test_list_categories_empty(client):
    assert client.get("/api/categories").status_code == 404


def test_list_categories_with_counts(client, category, margherita, pepperoni):
    response = client.get("/api/categories")
    assert response.status_code == 200
    assert response.json() == [{
        "category_id": category.id,
        "name": "Pizza",
        "icon_url": "https://example.com/pizza.png",
        "product_count": 2,
    }]


def test_product_count(client, category, margherita):
    response = client.get(f"/api/categories/{category.id}/product-count")
    assert response.status_code == 200
    assert response.json()["has_products"] is True
    assert response.json()["product_count"] == 1


def test_get_missing_category(client):
    assert client.get("/api/categories/999").status_code == 404


def test_create_category_admin_only(client, customer_headers, admin_headers):
    payload = {"name": "Drinks", "icon_url": "https://example.com/drinks.png"}
    assert client.post("/api/categories", json=payload).status_code == 401
    assert client.post("/api/categories", json=payload, headers=customer_headers).status_code == 403

    response = client.post("/api/categories", json=payload, headers=admin_headers)
    assert response.status_code == 201
    assert response.json()["product_count"] == 0


def test_create_duplicate_name_is_case_insensitive(client, category, admin_headers):
    payload = {"name": "PIZZA", "icon_url": "https://example.com/other.png"}
    assert client.post("/api/categories", json=payload, headers=admin_headers).status_code == 409


def test_create_category_validation(client, admin_headers):
    bad_url = {"name": "Drinks", "icon_url": "not a url"}
    short_name = {"name": "D", "icon_url": "https://example.com/d.png"}
    assert client.post("/api/categories", json=bad_url, headers=admin_headers).status_code == 400
    assert client.post("/api/categories", json=short_name, headers=admin_headers).status_code == 400


def test_update_category(client, category, admin_headers):
    other = client.post(
        "/api/categories",
        json={"name": "Pasta", "icon_url": "https://example.com/pasta.png"},
        headers=admin_headers,
    ).json()

    conflict = client.put(f"/api/categories/{other['category_id']}", json={"name": "pizza"}, headers=admin_headers)
    assert conflict.status_code == 409

    response = client.put(f"/api/categories/{category.id}", json={"name": "Pizzas"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["name"] == "Pizzas"


def test_delete_category_with_products_rejected(client, category, margherita, admin_headers):
    assert client.delete(f"/api/categories/{category.id}", headers=admin_headers).status_code == 400


def test_delete_empty_category(client, category, admin_headers):
    assert client.delete(f"/api/categories/{category.id}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/categories/{category.id}").status_code == 404
