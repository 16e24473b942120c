"""
Admin dashboard, user management, export and health endpoints.
"""

import io

from openpyxl import load_workbook

from app.models import Booking, Review, User, UserRole
from tests.conftest import auth_headers, make_user


def set_status(client, headers, booking_id, status, **extra):
    return client.patch(
        f"/api/v1/bookings/{booking_id}/status", json={"status": status, **extra}, headers=headers
    )


def test_admin_endpoints_require_admin(client, customer_headers):
    for url in ("/api/v1/admin/stats", "/api/v1/admin/users", "/api/v1/admin/bookings", "/api/v1/admin/system-health"):
        assert client.get(url, headers=customer_headers).status_code == 403
    assert client.get("/api/v1/admin/stats").status_code == 401


def test_stats(client, admin_headers, create_booking, ac_repair):
    first = create_booking()
    create_booking()
    set_status(client, admin_headers, first["id"], "Completed", actualCost=1800)

    response = client.get("/api/v1/admin/stats", headers=admin_headers)

    assert response.status_code == 200
    stats = response.json()["data"]["stats"]
    assert stats["overview"]["total_users"] == 1
    assert stats["overview"]["total_bookings"] == 2
    assert stats["overview"]["total_revenue"] == 1800.0
    assert stats["booking_status"]["Completed"] == 1
    assert stats["booking_status"]["Pending"] == 1
    assert stats["booking_status"]["Cancelled"] == 0
    assert stats["category_stats"] == [{"category": "AC Services", "count": 2}]
    assert sum(day["count"] for day in stats["booking_trends"]) == 2
    assert len(stats["recent_bookings"]) == 2


def test_admin_booking_filters(client, admin_headers, create_booking):
    first = create_booking()
    create_booking(name="Meena Iyer")
    set_status(client, admin_headers, first["id"], "Confirmed")

    confirmed = client.get("/api/v1/admin/bookings", params={"status": "Confirmed"}, headers=admin_headers)
    assert [b["id"] for b in confirmed.json()["data"]["bookings"]] == [first["id"]]

    by_name = client.get("/api/v1/admin/bookings", params={"search": "meena"}, headers=admin_headers)
    assert by_name.json()["data"]["pagination"]["total"] == 1


def test_export_bookings(client, admin_headers, create_booking):
    booking = create_booking()

    response = client.get("/api/v1/admin/export/bookings", headers=admin_headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert "attachment" in response.headers["content-disposition"]
    sheet = load_workbook(io.BytesIO(response.content)).active
    rows = list(sheet.iter_rows(values_only=True))
    assert rows[0][0] == "Booking ID"
    assert rows[1][0] == booking["booking_code"]
    assert rows[1][9] == "Pending"


def test_list_users_with_booking_counts(client, admin_headers, create_booking, customer, other_customer):
    create_booking()

    response = client.get("/api/v1/admin/users", headers=admin_headers)

    users = {u["email"]: u for u in response.json()["data"]["users"]}
    assert set(users) == {"ravi@example.com", "priya@example.com"}
    assert users["ravi@example.com"]["total_bookings"] == 1
    assert users["priya@example.com"]["total_bookings"] == 0


def test_deactivate_user(client, admin_headers, customer, db_session):
    response = client.patch(
        f"/api/v1/admin/users/{customer.id}/status", json={"is_active": False}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["data"]["user"]["is_active"] is False
    assert client.get("/api/v1/auth/me", headers=auth_headers(customer)).status_code == 401


def test_cannot_modify_admin_users(client, admin, admin_headers, db_session):
    other_admin = make_user(db_session, "ops@axteam.com", "+919800000005", role=UserRole.ADMIN)

    response = client.patch(
        f"/api/v1/admin/users/{other_admin.id}/status", json={"is_active": False}, headers=admin_headers
    )
    assert response.status_code == 403
    assert client.delete(f"/api/v1/admin/users/{other_admin.id}", headers=admin_headers).status_code == 403
    assert client.delete(f"/api/v1/admin/users/{admin.id}", headers=admin_headers).status_code == 400


def test_delete_user_removes_bookings_and_reviews(client, admin_headers, customer, customer_headers, create_booking, db_session):
    booking = create_booking()
    create_booking()
    set_status(client, admin_headers, booking["id"], "Completed")
    client.post(
        "/api/v1/reviews",
        json={"bookingId": booking["id"], "rating": 5, "feedback": "Great"},
        headers=customer_headers,
    )
    assert db_session.query(Review).count() == 1

    response = client.delete(f"/api/v1/admin/users/{customer.id}", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["data"]["deleted_bookings"] == 2
    assert db_session.query(User).filter(User.email == "ravi@example.com").count() == 0
    assert db_session.query(Booking).count() == 0
    assert db_session.query(Review).count() == 0


def test_delete_missing_user(client, admin_headers):
    assert client.delete("/api/v1/admin/users/999", headers=admin_headers).status_code == 404


def test_admin_services_include_inactive(client, admin_headers, ac_repair, db_session):
    ac_repair.is_active = False
    db_session.commit()

    response = client.get("/api/v1/admin/services", headers=admin_headers)
    assert [s["id"] for s in response.json()["data"]["services"]] == [ac_repair.id]


def test_system_health(client, admin_headers):
    response = client.get("/api/v1/admin/system-health", headers=admin_headers)
    health = response.json()["data"]["health"]
    assert health["status"] == "healthy"
    assert health["database"] == "connected"
