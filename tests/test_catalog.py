"""
Service catalog endpoints.
"""

from app.models import Service


def service_payload(**overrides):
    data = {
        "name": "Geyser Service",
        "category": "Plumbing Services",
        "description": "Descaling and thermostat check for water heaters.",
        "priceMin": 399,
        "priceMax": 999,
        "features": ["Descaling", "Thermostat check"],
    }
    data.update(overrides)
    return data


def test_admin_adds_service(client, admin_headers, db_session):
    response = client.post("/api/v1/services", json=service_payload(), headers=admin_headers)

    assert response.status_code == 201
    service = response.json()["data"]["service"]
    assert service["name"] == "Geyser Service"
    assert service["formatted_price_range"] == "₹399 - ₹999"
    assert db_session.query(Service).count() == 1


def test_customer_cannot_add_service(client, customer_headers):
    response = client.post("/api/v1/services", json=service_payload(), headers=customer_headers)
    assert response.status_code == 403


def test_duplicate_name_is_case_insensitive(client, admin_headers, ac_repair):
    response = client.post(
        "/api/v1/services",
        json=service_payload(name="  ac REPAIR ", category="AC Services"),
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_price_range_must_be_ordered(client, admin_headers, ac_repair):
    response = client.post(
        "/api/v1/services", json=service_payload(priceMin=1000, priceMax=500), headers=admin_headers
    )
    assert response.status_code == 400

    response = client.patch(
        f"/api/v1/services/{ac_repair.id}", json={"priceMin": 5000}, headers=admin_headers
    )
    assert response.status_code == 400


def test_unknown_category_rejected(client, admin_headers):
    response = client.post("/api/v1/services", json=service_payload(category="Gardening"), headers=admin_headers)
    assert response.status_code == 400


def test_list_and_categories(client, ac_repair):
    response = client.get("/api/v1/services")
    data = response.json()["data"]
    assert [s["name"] for s in data["services"]] == ["AC Repair"]
    assert data["categories"] == ["AC Services"]
    assert data["pagination"]["total"] == 1

    all_categories = client.get("/api/v1/services/categories").json()["data"]["categories"]
    assert "AC Services" in all_categories and "Plumbing Services" in all_categories


def test_category_listing(client, ac_repair):
    response = client.get("/api/v1/services/category/AC Services")
    assert response.status_code == 200
    assert len(response.json()["data"]["services"]) == 1

    assert client.get("/api/v1/services/category/Gardening").status_code == 400


def test_search(client, ac_repair):
    assert client.get("/api/v1/services/search", params={"q": "a"}).status_code == 400

    by_name = client.get("/api/v1/services/search", params={"q": "repair"}).json()["data"]["services"]
    assert [s["id"] for s in by_name] == [ac_repair.id]

    by_feature = client.get("/api/v1/services/search", params={"q": "gas leak"}).json()["data"]["services"]
    assert [s["id"] for s in by_feature] == [ac_repair.id]

    assert client.get("/api/v1/services/search", params={"q": "painting"}).json()["data"]["services"] == []


def test_get_missing_service(client):
    response = client.get("/api/v1/services/999")
    assert response.status_code == 404
    assert response.json()["message"] == "Service not found"


def test_update_service(client, admin_headers, ac_repair):
    response = client.patch(
        f"/api/v1/services/{ac_repair.id}",
        json={"description": "Full AC servicing and repair.", "isActive": False},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["data"]["service"]["is_active"] is False
    assert client.get("/api/v1/services").json()["data"]["services"] == []


def test_delete_blocked_by_active_booking(client, admin_headers, create_booking, ac_repair, db_session):
    booking = create_booking()

    response = client.delete(f"/api/v1/services/{ac_repair.id}", headers=admin_headers)
    assert response.status_code == 400
    assert "active booking" in response.json()["message"]

    client.patch(f"/api/v1/bookings/{booking['id']}/status", json={"status": "Completed"}, headers=admin_headers)
    response = client.delete(f"/api/v1/services/{ac_repair.id}", headers=admin_headers)
    assert response.status_code == 200
    assert db_session.query(Service).count() == 0
