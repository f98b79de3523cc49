import pytest

from app.models import ServiceCategory


def _category(client, name="Injectables", description=""):
    response = client.post("/catalog/categories", json={"name": name, "description": description})
    assert response.status_code == 201
    return response.json()


def test_categories_get_increasing_sort_order(client):
    first = _category(client, "Surgery")
    second = _category(client, "Injectables")

    assert first["sort_order"] == 1
    assert second["sort_order"] == 2
    assert first["description"] is None

    listed = client.get("/catalog/categories").json()
    assert [c["name"] for c in listed] == ["Surgery", "Injectables"]


def test_category_name_required(client):
    response = client.post("/catalog/categories", json={"name": "   "})

    assert response.status_code == 400
    assert response.json() == {"error": "Please enter a category name."}


def test_rename_category(client):
    category = _category(client)

    response = client.patch(f"/catalog/categories/{category['id']}", json={"name": " Fillers "})

    assert response.status_code == 200
    assert response.json()["name"] == "Fillers"


def test_category_with_services_cannot_be_deleted(client, db):
    category = _category(client)
    client.post(
        "/catalog/services",
        json={"category_id": category["id"], "name": "Lip filler", "base_price": "450"},
    )

    response = client.delete(f"/catalog/categories/{category['id']}")

    assert response.status_code == 409
    assert response.json() == {
        "error": "Cannot delete category with existing services. Delete or reassign those services first."
    }
    assert db.query(ServiceCategory).count() == 1


def test_empty_category_can_be_deleted(client, db):
    category = _category(client)

    response = client.delete(f"/catalog/categories/{category['id']}")

    assert response.status_code == 200
    assert db.query(ServiceCategory).count() == 0


@pytest.mark.parametrize(
    "price, expected",
    [("1250,50", 1250.5), ("99.9", 99.9), (300, 300.0), ("", None), (None, None)],
)
def test_service_price_parsing(client, price, expected):
    category = _category(client)

    response = client.post(
        "/catalog/services",
        json={"category_id": category["id"], "name": "Botox", "base_price": price},
    )

    assert response.status_code == 201
    assert response.json()["base_price"] == expected


@pytest.mark.parametrize("price", ["abc", "-10", "1.2.3"])
def test_invalid_service_price(client, price):
    category = _category(client)

    response = client.post(
        "/catalog/services",
        json={"category_id": category["id"], "name": "Botox", "base_price": price},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Please enter a valid CHF price."}


def test_service_requires_category_and_name(client):
    category = _category(client)

    missing_category = client.post("/catalog/services", json={"name": "Botox"})
    missing_name = client.post("/catalog/services", json={"category_id": category["id"]})

    assert missing_category.json() == {"error": "Please select a category."}
    assert missing_name.json() == {"error": "Please enter a service name."}


def test_update_and_delete_service(client):
    category = _category(client)
    service = client.post(
        "/catalog/services", json={"category_id": category["id"], "name": "Botox"}
    ).json()

    updated = client.patch(
        f"/catalog/services/{service['id']}", json={"is_active": False, "base_price": "320,00"}
    )
    assert updated.status_code == 200
    assert updated.json()["is_active"] is False
    assert updated.json()["base_price"] == 320.0

    assert client.delete(f"/catalog/services/{service['id']}").status_code == 200
    assert client.get("/catalog/services").json() == []
