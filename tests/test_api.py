"""
Integration tests for the finance tracker HTTP endpoints.
"""
from pathlib import Path

import pytest

from finance_tracker.config import settings
from finance_tracker.models import TransactionModel
from finance_tracker.pipeline import ExtractionError

from conftest import USER_ID

HEADERS = {"X-User-Id": USER_ID}
PNG_BYTES = b"\x89PNG\r\n\x1a\n fake image payload"


def _upload(client, filename="receipt.png", content=PNG_BYTES, headers=HEADERS):
    return client.post(
        "/api/receipts/upload",
        files={"receipt": (filename, content, "image/png")},
        headers=headers,
    )


# ── Service ──────────────────────────────────────────────────────────────
class TestService:
    def test_root(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.json()["status"] == "running"

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}


# ── Upload ───────────────────────────────────────────────────────────────
class TestUpload:
    def test_upload_processes_receipt(self, client, extractor):
        resp = _upload(client)
        assert resp.status_code == 201
        body = resp.json()
        assert body["id"]
        assert body["image_url"].startswith("/uploads/receipts/")
        assert body["image_url"].endswith("-receipt.png")
        assert body["processed"] is False

        # stored on disk and handed to the OCR engine
        stored = Path(settings.UPLOAD_DIR) / body["image_url"].rsplit("/", 1)[-1]
        assert stored.read_bytes() == PNG_BYTES
        assert extractor.calls == [str(stored)]

        # TestClient runs background tasks before returning
        detail = client.get(f"/api/receipts/{body['id']}", headers=HEADERS).json()
        assert detail["processed"] is True
        assert detail["ocr_text"] == extractor.text
        [txn] = detail["transactions"]
        assert txn["merchant_name"] == "WALMART"
        assert float(txn["amount"]) == pytest.approx(5.70)
        assert txn["transaction_date"] == "2024-01-15"
        assert txn["description"] == "Auto-created from receipt (2 items)"

    def test_upload_resolves_user_category(self, client, make_category, db):
        groceries_id = make_category("Groceries")
        receipt_id = _upload(client).json()["id"]
        txn = db.query(TransactionModel).filter(TransactionModel.receipt_id == receipt_id).one()
        assert txn.category_id == groceries_id

    def test_ocr_failure_still_marks_processed(self, client, extractor):
        extractor.error = ExtractionError("receipt.png", "cannot identify image file")
        receipt_id = _upload(client).json()["id"]
        detail = client.get(f"/api/receipts/{receipt_id}", headers=HEADERS).json()
        assert detail["processed"] is True
        assert detail["ocr_text"] is None
        assert detail["transactions"] == []

    def test_no_file(self, client):
        resp = client.post("/api/receipts/upload", headers=HEADERS)
        assert resp.status_code == 400

    def test_bad_extension(self, client):
        resp = _upload(client, filename="receipt.txt")
        assert resp.status_code == 400
        assert "Invalid file type" in resp.json()["detail"]

    def test_empty_file(self, client):
        assert _upload(client, content=b"").status_code == 400

    def test_too_large(self, client, monkeypatch):
        monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 10)
        resp = _upload(client)
        assert resp.status_code == 400
        assert "too large" in resp.json()["detail"]

    def test_requires_user(self, client, extractor):
        resp = _upload(client, headers={})
        assert resp.status_code == 401
        assert extractor.calls == []


# ── List / get ───────────────────────────────────────────────────────────
class TestReceipts:
    def test_list_empty(self, client):
        resp = client.get("/api/receipts", headers=HEADERS)
        assert resp.status_code == 200
        body = resp.json()
        assert body["receipts"] == []
        assert body["pagination"] == {"total": 0, "limit": 50, "offset": 0, "has_more": False}

    def test_list_only_own(self, client, make_receipt):
        mine = _upload(client).json()["id"]
        make_receipt(user_id="someone-else")
        body = client.get("/api/receipts", headers=HEADERS).json()
        assert [r["id"] for r in body["receipts"]] == [mine]

    def test_pagination(self, client, make_receipt):
        for _ in range(3):
            make_receipt()
        body = client.get("/api/receipts?limit=2&offset=0", headers=HEADERS).json()
        assert len(body["receipts"]) == 2
        assert body["pagination"]["total"] == 3
        assert body["pagination"]["has_more"] is True

        body = client.get("/api/receipts?limit=2&offset=2", headers=HEADERS).json()
        assert len(body["receipts"]) == 1
        assert body["pagination"]["has_more"] is False

    def test_processed_filter(self, client, make_receipt):
        _upload(client)
        make_receipt()
        body = client.get("/api/receipts?processed=false", headers=HEADERS).json()
        assert body["pagination"]["total"] == 1
        assert body["receipts"][0]["processed"] is False

    @pytest.mark.parametrize("limit", [0, 201])
    def test_limit_bounds(self, client, limit):
        assert client.get(f"/api/receipts?limit={limit}", headers=HEADERS).status_code == 422

    def test_get_not_found(self, client):
        assert client.get("/api/receipts/nonexistent", headers=HEADERS).status_code == 404

    def test_get_other_users_receipt(self, client, make_receipt):
        receipt_id = make_receipt(user_id="someone-else")
        assert client.get(f"/api/receipts/{receipt_id}", headers=HEADERS).status_code == 403

    def test_list_requires_user(self, client):
        assert client.get("/api/receipts").status_code == 401


# ── Delete ───────────────────────────────────────────────────────────────
class TestDelete:
    def test_delete_cascades(self, client, db):
        body = _upload(client).json()
        stored = Path(settings.UPLOAD_DIR) / body["image_url"].rsplit("/", 1)[-1]
        assert stored.exists()
        assert db.query(TransactionModel).count() == 1

        resp = client.delete(f"/api/receipts/{body['id']}", headers=HEADERS)
        assert resp.status_code == 200
        assert resp.json()["receipt_id"] == body["id"]

        assert not stored.exists()
        assert client.get(f"/api/receipts/{body['id']}", headers=HEADERS).status_code == 404
        assert db.query(TransactionModel).count() == 0

    def test_delete_other_users_receipt(self, client, make_receipt):
        receipt_id = make_receipt(user_id="someone-else")
        assert client.delete(f"/api/receipts/{receipt_id}", headers=HEADERS).status_code == 403

    def test_delete_not_found(self, client):
        assert client.delete("/api/receipts/nope", headers=HEADERS).status_code == 404


# ── Categorization ───────────────────────────────────────────────────────
class TestCategorization:
    def test_categories(self, client):
        categories = client.get("/api/categorization/categories").json()["categories"]
        assert categories[0] == "Groceries"
        assert "Dining" in categories

    def test_suggest(self, client):
        body = client.get("/api/categorization/suggest", params={"merchant": "Starbucks Coffee"}).json()
        assert body["category"] == "Dining"
        assert body["suggestions"][0] == {"category": "Dining", "confidence": 100}

    def test_suggest_unknown(self, client):
        body = client.get("/api/categorization/suggest", params={"merchant": "Zorba"}).json()
        assert body["category"] == "Other"
        assert body["suggestions"] == []

    def test_suggest_requires_merchant(self, client):
        assert client.get("/api/categorization/suggest").status_code == 422

    def test_add_pattern(self, client):
        resp = client.post(
            "/api/categorization/patterns",
            json={"category": "Dining", "keyword": "Zorba"},
            headers=HEADERS,
        )
        assert resp.status_code == 201
        assert resp.json()["added"] is True
        assert "zorba" in resp.json()["keywords"]

        assert client.get("/api/categorization/suggest", params={"merchant": "ZORBA"}).json()["category"] == "Dining"

    def test_add_pattern_requires_user(self, client):
        resp = client.post("/api/categorization/patterns", json={"category": "Dining", "keyword": "x"})
        assert resp.status_code == 401
