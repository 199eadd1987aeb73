import pytest

import models


def address_payload(street, is_default=False):
    return {
        "street_address": street,
        "city": "Cluj-Napoca",
        "state": "CJ",
        "zip_code": "400000",
        "is_default": is_default,
    }


@pytest.fixture
def create_address(client, customer, customer_headers):
    def _create_address(street, is_default=False):
        response = client.post(
            f"/api/addresses?userId={customer.id}",
            json=address_payload(street, is_default),
            headers=customer_headers,
        )
        assert response.status_code == 201, response.text
        return response.json()
    return _create_address


def default_ids(db, user_id):
    db.expire_all()
    return [
        a.id for a in db.query(models.Address).filter(
            models.Address.user_id == user_id, models.Address.is_default == True
        )
    ]


def test_first_address_becomes_default(create_address):
    address = create_address("1 Main St")
    assert address["is_default"] is True
    assert address["full_address"] == "1 Main St, Cluj-Napoca, CJ 400000"


def test_second_address_not_default_unless_requested(db, customer, create_address):
    first = create_address("1 Main St")
    second = create_address("2 Side St")
    assert second["is_default"] is False
    assert default_ids(db, customer.id) == [first["address_id"]]


def test_new_default_unmarks_previous(db, customer, create_address):
    create_address("1 Main St")
    second = create_address("2 Side St", is_default=True)
    assert default_ids(db, customer.id) == [second["address_id"]]


def test_create_for_another_user_forbidden(client, other_customer, customer_headers):
    response = client.post(
        f"/api/addresses?userId={other_customer.id}", json=address_payload("1 Main St"), headers=customer_headers
    )
    assert response.status_code == 403


def test_list_addresses_default_first(client, customer, customer_headers, create_address):
    create_address("1 Main St")
    second = create_address("2 Side St", is_default=True)

    response = client.get(f"/api/addresses/user/{customer.id}", headers=customer_headers)
    assert response.status_code == 200
    assert response.json()[0]["address_id"] == second["address_id"]


def test_list_addresses_none(client, customer, customer_headers):
    assert client.get(f"/api/addresses/user/{customer.id}", headers=customer_headers).status_code == 404
    assert client.get(f"/api/addresses/user/{customer.id}/default", headers=customer_headers).status_code == 404


def test_get_default_address(client, customer, customer_headers, create_address):
    first = create_address("1 Main St")
    response = client.get(f"/api/addresses/user/{customer.id}/default", headers=customer_headers)
    assert response.json()["address_id"] == first["address_id"]


def test_get_address_of_another_user_forbidden(client, create_address, other_headers):
    address = create_address("1 Main St")
    assert client.get(f"/api/addresses/{address['address_id']}", headers=other_headers).status_code == 403


def test_set_default_leaves_exactly_one(client, db, customer, customer_headers, create_address):
    create_address("1 Main St")
    second = create_address("2 Side St")

    response = client.put(f"/api/addresses/{second['address_id']}/set-default", headers=customer_headers)
    assert response.status_code == 200
    assert response.json()["is_default"] is True
    assert default_ids(db, customer.id) == [second["address_id"]]


def test_update_address_fields(client, customer_headers, create_address):
    address = create_address("1 Main St")
    response = client.put(
        f"/api/addresses/{address['address_id']}",
        json={"city": "Bucharest", "street_address": ""},
        headers=customer_headers,
    )
    assert response.status_code == 200
    assert response.json()["city"] == "Bucharest"
    assert response.json()["street_address"] == "1 Main St"


def test_unset_default_of_only_address_rejected(client, customer_headers, create_address):
    address = create_address("1 Main St")
    response = client.put(
        f"/api/addresses/{address['address_id']}", json={"is_default": False}, headers=customer_headers
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot unset default address if it's the only address"


def test_unset_default_hands_over_to_lowest_other_id(client, db, customer, customer_headers, create_address):
    first = create_address("1 Main St")
    second = create_address("2 Side St")
    third = create_address("3 Third St")

    response = client.put(
        f"/api/addresses/{first['address_id']}", json={"is_default": False}, headers=customer_headers
    )
    assert response.status_code == 200
    assert response.json()["is_default"] is False
    assert default_ids(db, customer.id) == [second["address_id"]]

    client.put(f"/api/addresses/{third['address_id']}/set-default", headers=customer_headers)
    response = client.put(
        f"/api/addresses/{third['address_id']}", json={"is_default": False}, headers=customer_headers
    )
    assert response.status_code == 200
    assert default_ids(db, customer.id) == [first["address_id"]]


def test_update_marks_default(client, db, customer, customer_headers, create_address):
    create_address("1 Main St")
    second = create_address("2 Side St")
    client.put(f"/api/addresses/{second['address_id']}", json={"is_default": True}, headers=customer_headers)
    assert default_ids(db, customer.id) == [second["address_id"]]


def test_delete_only_address_rejected(client, customer_headers, create_address):
    address = create_address("1 Main St")
    response = client.delete(f"/api/addresses/{address['address_id']}", headers=customer_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot delete the only address. Users must have at least one address."


def test_delete_default_promotes_lowest_id(client, db, customer, customer_headers, create_address):
    first = create_address("1 Main St")
    second = create_address("2 Side St")
    third = create_address("3 Third St")

    response = client.delete(f"/api/addresses/{first['address_id']}", headers=customer_headers)
    assert response.status_code == 200
    assert default_ids(db, customer.id) == [second["address_id"]]
    assert third["is_default"] is False
