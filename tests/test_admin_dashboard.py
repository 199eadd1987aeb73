from datetime import date

import pytest


@pytest.fixture
def orders_placed(client, customer, customer_headers, other_customer, other_headers, margherita, pepperoni):
    """alice buys 2 Margherita (20.00), bob buys 1 Margherita and 2 Pepperoni (25.00)."""
    for user, headers, lines in (
        (customer, customer_headers, [(margherita.id, 2)]),
        (other_customer, other_headers, [(margherita.id, 1), (pepperoni.id, 2)]),
    ):
        for food_item_id, quantity in lines:
            client.post(
                f"/api/carts/{user.id}/items",
                json={"food_item_id": food_item_id, "quantity": quantity},
                headers=headers,
            )
        response = client.post(f"/api/orders?userId={user.id}", json={"shipping_address": "1 Main St"}, headers=headers)
        assert response.status_code == 201


def test_dashboard_requires_admin(client, customer_headers):
    assert client.get("/api/admin/dashboard/statistics").status_code == 401
    assert client.get("/api/admin/dashboard/statistics", headers=customer_headers).status_code == 403


def test_statistics(client, admin_headers, orders_placed, margherita, customer_headers):
    client.post("/api/reviews", json={"food_item_id": margherita.id, "rating": 4}, headers=customer_headers)

    stats = client.get("/api/admin/dashboard/statistics", headers=admin_headers).json()
    assert stats["total_revenue"] == 45.0
    assert stats["total_orders"] == 2
    assert stats["pending_orders"] == 2
    assert stats["shipped_orders"] == 0
    assert stats["average_order_value"] == 22.5
    assert stats["total_customers"] == 3
    assert stats["total_products"] == 2
    assert stats["total_reviews"] == 1
    assert stats["average_product_rating"] == 4.0


def test_statistics_without_data(client, admin_headers):
    stats = client.get("/api/admin/dashboard/statistics", headers=admin_headers).json()
    assert stats["total_revenue"] == 0
    assert stats["average_order_value"] == 0
    assert stats["average_product_rating"] == 0


def test_revenue(client, admin_headers, orders_placed):
    revenue = client.get("/api/admin/dashboard/revenue?days=7", headers=admin_headers).json()
    assert revenue["total_revenue"] == 45.0
    assert revenue["order_count"] == 2
    days = revenue["daily_revenue"]
    assert sum(d["order_count"] for d in days) == 2
    assert sum(d["revenue"] for d in days) == 45.0
    assert [d["date"] for d in days] == sorted(d["date"] for d in days)
    date.fromisoformat(days[0]["date"])


def test_order_analytics(client, admin_headers, orders_placed):
    analytics = client.get("/api/admin/dashboard/orders", headers=admin_headers).json()
    assert analytics["total_orders"] == 2
    assert analytics["orders_by_status"] == {"Pending": 2}
    top = analytics["top_products"][0]
    assert top["product_name"] == "Margherita"
    assert top["order_count"] == 2
    assert top["revenue"] == 30.0


def test_user_analytics(client, admin_headers, orders_placed, make_user):
    make_user("gone@example.com", is_active=False)
    analytics = client.get("/api/admin/dashboard/users", headers=admin_headers).json()
    assert analytics["total_users"] == 4
    assert analytics["active_users"] == 3
    assert analytics["inactive_users"] == 1
    assert analytics["purchasing_users"] == 2
    assert analytics["average_lifetime_value"] == 22.5
    assert analytics["new_users_this_month"] == 4


def test_product_performance(client, db, admin_headers, orders_placed, pepperoni, customer_headers):
    pepperoni.stock_quantity = 0
    db.commit()
    client.post("/api/reviews", json={"food_item_id": pepperoni.id, "rating": 5}, headers=customer_headers)

    performance = client.get("/api/admin/dashboard/products", headers=admin_headers).json()
    assert performance["total_products"] == 2
    assert performance["out_of_stock_products"] == 1
    assert [p["product_name"] for p in performance["best_selling"]] == ["Margherita", "Pepperoni"]
    assert performance["most_reviewed"][0]["product_name"] == "Pepperoni"
    assert performance["rating_distribution"] == {"5": 1}
