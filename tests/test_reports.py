import csv
import io
from datetime import timedelta

import pytest

import models


@pytest.fixture
def order_placed(client, customer, customer_headers, margherita, pepperoni):
    for food_item_id, quantity in ((margherita.id, 2), (pepperoni.id, 1)):
        client.post(
            f"/api/carts/{customer.id}/items",
            json={"food_item_id": food_item_id, "quantity": quantity},
            headers=customer_headers,
        )
    response = client.post(
        f"/api/orders?userId={customer.id}", json={"shipping_address": "1 Main St"}, headers=customer_headers
    )
    return response.json()


def test_reports_require_admin(client, customer_headers):
    assert client.get("/api/reports/sales", headers=customer_headers).status_code == 403
    assert client.get("/api/reports/export?reportType=sales", headers=customer_headers).status_code == 403


def test_sales_report(client, admin_headers, order_placed):
    report = client.get("/api/reports/sales?days=30", headers=admin_headers).json()
    assert report["report_title"] == "Sales Report (30 days)"
    assert report["total_sales"] == 27.5
    assert report["total_orders"] == 1
    assert report["average_order_value"] == 27.5
    assert report["top_products"][0] == {"product_name": "Margherita", "quantity_sold": 2, "revenue": 20.0}


def test_order_report(client, admin_headers, order_placed):
    report = client.get("/api/reports/orders", headers=admin_headers).json()
    assert report["total_orders"] == 1
    assert report["orders_by_status"] == {"Pending": 1}
    assert report["orders"][0]["customer_name"] == "alice"
    assert report["orders"][0]["order_id"] == order_placed["order_id"]


def test_user_report(client, admin_headers, order_placed, customer_headers, margherita):
    client.post("/api/reviews", json={"food_item_id": margherita.id, "rating": 5}, headers=customer_headers)

    report = client.get("/api/reports/users", headers=admin_headers).json()
    assert report["report_title"] == "User Analytics Report"
    assert report["total_users"] == 2
    assert report["purchasing_users"] == 1
    assert report["reviewing_users"] == 1
    assert report["average_lifetime_value"] == 27.5
    assert report["top_customers"] == [{"customer_name": "alice", "total_spending": 27.5, "order_count": 1}]


def read_csv(response):
    return list(csv.reader(io.StringIO(response.text)))


def test_export_sales_csv(client, admin_headers, order_placed):
    response = client.get("/api/reports/export?reportType=sales&days=30", headers=admin_headers)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "sales_report_" in response.headers["content-disposition"]
    assert ".csv" in response.headers["content-disposition"]

    rows = read_csv(response)
    assert rows[0] == ["Product Name", "Quantity Sold", "Revenue"]
    assert rows[1] == ["Margherita", "2", "20.00"]
    assert rows[2] == ["Pepperoni", "1", "7.50"]


def test_export_orders_csv(client, admin_headers, order_placed):
    response = client.get("/api/reports/export?reportType=ORDERS", headers=admin_headers)
    rows = read_csv(response)
    assert rows[0] == ["Order ID", "Order Date", "Customer Name", "Total Amount", "Status"]
    assert rows[1][0] == str(order_placed["order_id"])
    assert rows[1][2:] == ["alice", "27.50", "Pending"]


def test_export_users_csv(client, admin_headers, order_placed):
    rows = read_csv(client.get("/api/reports/export?reportType=users", headers=admin_headers))
    assert rows == [["Customer Name", "Total Spending", "Order Count"], ["alice", "27.50", "1"]]


def test_export_users_csv_covers_all_time(client, db, admin_headers, order_placed):
    order = db.get(models.Order, order_placed["order_id"])
    order.order_date = models.utcnow() - timedelta(days=90)
    db.commit()

    rows = read_csv(client.get("/api/reports/export?reportType=users&days=1", headers=admin_headers))
    assert rows[1] == ["alice", "27.50", "1"]
    sales = read_csv(client.get("/api/reports/export?reportType=sales&days=1", headers=admin_headers))
    assert sales == [["Product Name", "Quantity Sold", "Revenue"]]


def test_export_unknown_type(client, admin_headers):
    response = client.get("/api/reports/export?reportType=inventory", headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid report type. Use: sales, orders, or users"
