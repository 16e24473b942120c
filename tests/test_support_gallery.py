"""
Support requests and gallery uploads.
"""

import os

import pytest

from app.main import app
from app.models import GalleryItem, SupportRequest
from app.services.file_storage import FileStorageService, get_file_storage

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


# ============ SUPPORT ============

def support_payload(**overrides):
    data = {
        "name": "Ravi Kumar",
        "email": "Ravi@Example.com",
        "phone": "+919812345678",
        "subject": "Technician was late",
        "message": "The technician arrived two hours after the slot.",
        "category": "Complaint",
    }
    data.update(overrides)
    return data


def test_public_support_request(client, db_session):
    response = client.post("/api/v1/support", json=support_payload())

    assert response.status_code == 201
    ticket = response.json()["data"]["request"]
    assert ticket["email"] == "ravi@example.com"
    assert ticket["status"] == "Open"
    assert ticket["priority"] == "Medium"
    assert db_session.query(SupportRequest).count() == 1


def test_support_request_validation(client):
    assert client.post("/api/v1/support", json=support_payload(message="short")).status_code == 400
    assert client.post("/api/v1/support", json=support_payload(category="Sales")).status_code == 400


def test_support_listing_is_admin_only(client, admin_headers, customer_headers):
    client.post("/api/v1/support", json=support_payload())
    client.post("/api/v1/support", json=support_payload(category="General", subject="Pricing question"))

    assert client.get("/api/v1/support", headers=customer_headers).status_code == 403
    complaints = client.get("/api/v1/support", params={"category": "Complaint"}, headers=admin_headers)
    assert complaints.json()["data"]["pagination"]["total"] == 1


def test_resolution_stamped_once(client, admin, admin_headers):
    ticket_id = client.post("/api/v1/support", json=support_payload()).json()["data"]["request"]["id"]
    url = f"/api/v1/support/{ticket_id}"

    resolved = client.patch(url, json={"status": "Resolved", "adminNotes": "Apologised"}, headers=admin_headers)
    data = resolved.json()["data"]["request"]
    assert data["status"] == "Resolved"
    assert data["resolved_by_id"] == admin.id
    first_resolved_at = data["resolved_at"]
    assert first_resolved_at is not None

    client.patch(url, json={"status": "Closed"}, headers=admin_headers)
    again = client.patch(url, json={"status": "Resolved"}, headers=admin_headers)
    assert again.json()["data"]["request"]["resolved_at"] == first_resolved_at


def test_update_missing_ticket(client, admin_headers):
    assert client.patch("/api/v1/support/999", json={"status": "Closed"}, headers=admin_headers).status_code == 404


# ============ GALLERY ============

@pytest.fixture
def storage(client, tmp_path):
    service = FileStorageService(base_dir=str(tmp_path), static_url_prefix="/static")
    app.dependency_overrides[get_file_storage] = lambda: service
    return service


def upload(client, headers, content=PNG_BYTES, mime="image/png", **form):
    data = {"title": "Split AC install", "category": "AC"}
    data.update(form)
    return client.post(
        "/api/v1/gallery/upload",
        files={"file": ("install.png", content, mime)},
        data=data,
        headers=headers,
    )


def test_upload_and_list(client, admin_headers, storage, tmp_path):
    response = upload(client, admin_headers)

    assert response.status_code == 201
    item = response.json()["data"]["item"]
    assert item["media_type"] == "image"
    assert item["category"] == "AC"
    assert item["file_url"].startswith("/static/gallery/")
    stored = os.path.join(tmp_path, "gallery", os.path.basename(item["file_url"]))
    assert os.path.exists(stored)

    listing = client.get("/api/v1/gallery", params={"category": "AC"}).json()["data"]
    assert [i["id"] for i in listing["items"]] == [item["id"]]


def test_upload_rejects_other_mime_types(client, admin_headers, storage):
    response = upload(client, admin_headers, content=b"%PDF-1.4", mime="application/pdf")
    assert response.status_code == 400
    assert response.json()["message"] == "Only image and video files are allowed"


def test_upload_requires_admin(client, customer_headers, storage):
    assert upload(client, customer_headers).status_code == 403


def test_delete_gallery_item(client, admin_headers, storage, tmp_path, db_session):
    item = upload(client, admin_headers).json()["data"]["item"]
    stored = os.path.join(tmp_path, "gallery", os.path.basename(item["file_url"]))

    response = client.delete(f"/api/v1/gallery/{item['id']}", headers=admin_headers)

    assert response.status_code == 200
    assert not os.path.exists(stored)
    assert db_session.query(GalleryItem).count() == 0
    assert client.delete(f"/api/v1/gallery/{item['id']}", headers=admin_headers).status_code == 404


def test_storage_creates_upload_tree(tmp_path):
    base_dir = tmp_path / "uploads" / "fresh"
    FileStorageService(base_dir=str(base_dir))
    assert (base_dir / "gallery").is_dir()


def test_stored_files_are_served_under_static_prefix(client):
    url = FileStorageService().save(PNG_BYTES, "served.png")

    response = client.get(url)
    assert response.status_code == 200
    assert response.content == PNG_BYTES
