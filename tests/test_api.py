from decimal import Decimal

from conftest import OWNER_ID, get_auth_headers

API = "/api"


def num(value) -> Decimal:
    # money and quantities may come back as JSON numbers or strings
    return Decimal(str(value))


def _biz(client, headers):
    r = client.post(f"{API}/business", json={"name": "Acme Traders"}, headers=headers)
    assert r.status_code == 201
    return r.json()["data"]["id"]


def _product(client, headers, biz_id, **fields):
    body = {"name": "Widget", "maintain_stock": True, "purchase_price": 50,
            "sales_price": 80, **fields}
    r = client.post(f"{API}/business/{biz_id}/products", json=body, headers=headers)
    assert r.status_code == 201
    return r.json()["data"]


def test_health(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["message"] == "GST Billing API running"


def test_requires_token(client):
    r = client.get(f"{API}/business")
    assert r.status_code == 401
    body = r.json()
    assert body["status"] is False
    assert body["error"]["msg"] == "Not authenticated"


def test_rejects_bad_token(client):
    r = client.get(f"{API}/business", headers={"Authorization": "Bearer nope"})
    assert r.status_code == 401


def test_business_is_scoped_to_owner(client):
    biz_id = _biz(client, get_auth_headers())
    r = client.get(f"{API}/business/{biz_id}", headers=get_auth_headers("user-2"))
    assert r.status_code == 404
    assert r.json()["error"]["msg"] == "Business not found"


def test_totals_preview(client):
    body = {
        "items": [
            {"quantity": 10, "unit_price": 100, "gst_percent": 18},
            {"quantity": 5, "unit_price": 150, "gst_percent": 12},
        ],
        "additional_charges": [{"name": "Freight", "amount": 300, "gst_percent": 14}],
        "tcs_info": {"percentage": 1},
    }
    r = client.post(f"{API}/billing/totals", json=body, headers=get_auth_headers())
    assert r.status_code == 200
    summary = r.json()["data"]["summary"]
    assert num(summary["taxable_amount"]) == Decimal("2050.0")
    assert num(summary["tax_amount"]) == Decimal("312.0")
    assert num(summary["tcs_amount"]) == Decimal("23.62")
    assert num(summary["grand_total"]) == Decimal("2385.62")


def test_totals_preview_validation(client):
    body = {"items": [{"quantity": -1, "unit_price": 10}]}
    r = client.post(f"{API}/billing/totals", json=body, headers=get_auth_headers())
    assert r.status_code == 422
    assert r.json()["error"]["code"] == "VALIDATION_FAILED"


def test_product_opening_stock_and_adjustment(client):
    headers = get_auth_headers()
    biz_id = _biz(client, headers)
    product = _product(client, headers, biz_id, opening_stock=20)
    assert num(product["current_stock"]) == Decimal("20.0")
    assert num(product["stock_value"]) == Decimal("1000.0")

    r = client.post(f"{API}/business/{biz_id}/products/{product['id']}/stock",
                    json={"quantity_change": 5, "remark": "restock"}, headers=headers)
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["message"] == "Stock updated successfully"
    assert num(data["product"]["current_stock"]) == Decimal("25.0")
    assert num(data["movement"]["final_stock"]) == Decimal("25.0")

    r = client.get(f"{API}/business/{biz_id}/products/{product['id']}/stock-movements",
                   params={"limit": 1}, headers=headers)
    page = r.json()["data"]
    assert [m["remark"] for m in page["stock_movements"]] == ["restock"]
    assert page["next_token"]

    r = client.get(f"{API}/business/{biz_id}/products/{product['id']}/stock-movements",
                   params={"limit": 1, "next_token": page["next_token"]}, headers=headers)
    page = r.json()["data"]
    assert [m["remark"] for m in page["stock_movements"]] == ["Opening stock"]
    assert page["next_token"] is None


def test_insufficient_stock_response(client):
    headers = get_auth_headers()
    biz_id = _biz(client, headers)
    product = _product(client, headers, biz_id, opening_stock=22)

    r = client.post(f"{API}/business/{biz_id}/products/{product['id']}/stock",
                    json={"quantity_change": -1000}, headers=headers)
    assert r.status_code == 400
    error = r.json()["error"]
    assert error["code"] == "INSUFFICIENT_STOCK"
    assert num(error["details"]["current_stock"]) == Decimal("22.0")
    assert num(error["details"]["requested_change"]) == Decimal("-1000.0")


def test_zero_adjustment_rejected(client):
    headers = get_auth_headers()
    biz_id = _biz(client, headers)
    product = _product(client, headers, biz_id)
    r = client.post(f"{API}/business/{biz_id}/products/{product['id']}/stock",
                    json={"quantity_change": 0}, headers=headers)
    assert r.status_code == 422
    error = r.json()["error"]
    assert error["code"] == "VALIDATION_FAILED"
    assert "non-zero" in error["msg"]


def test_untracked_and_missing_products(client):
    headers = get_auth_headers()
    biz_id = _biz(client, headers)
    product = _product(client, headers, biz_id, maintain_stock=False)

    r = client.post(f"{API}/business/{biz_id}/products/{product['id']}/stock",
                    json={"quantity_change": 1}, headers=headers)
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "STOCK_NOT_TRACKED"

    r = client.post(f"{API}/business/{biz_id}/products/missing/stock",
                    json={"quantity_change": 1}, headers=headers)
    assert r.status_code == 404


def test_movement_limit_zero_is_clamped_to_one(client):
    headers = get_auth_headers()
    biz_id = _biz(client, headers)
    product = _product(client, headers, biz_id, opening_stock=5)
    client.post(f"{API}/business/{biz_id}/products/{product['id']}/stock",
                json={"quantity_change": 1}, headers=headers)

    r = client.get(f"{API}/business/{biz_id}/products/{product['id']}/stock-movements",
                   params={"limit": 0}, headers=headers)
    page = r.json()["data"]
    assert page["count"] == 1
    assert page["next_token"]


def test_bad_cursor(client):
    headers = get_auth_headers()
    biz_id = _biz(client, headers)
    product = _product(client, headers, biz_id)
    r = client.get(f"{API}/business/{biz_id}/products/{product['id']}/stock-movements",
                   params={"next_token": "@@@"}, headers=headers)
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "INVALID_QUERY"


def test_inventory_settings_roundtrip(client):
    headers = get_auth_headers()
    biz_id = _biz(client, headers)
    url = f"{API}/business/{biz_id}/settings/inventory"

    r = client.get(url, headers=headers)
    assert r.json()["data"]["inventory_settings"] == {
        "reduce_stock_on": "invoice",
        "stock_value_based_on": "purchase",
        "allow_negative_stock": False,
    }

    r = client.put(url, json={"stock_value_based_on": "sale"}, headers=headers)
    assert r.json()["data"]["inventory_settings"]["stock_value_based_on"] == "sale"
    assert r.json()["data"]["inventory_settings"]["reduce_stock_on"] == "invoice"

    r = client.put(url, json={"reduce_stock_on": "somewhere"}, headers=headers)
    assert r.status_code == 422


def test_invoice_lifecycle(client):
    headers = get_auth_headers()
    biz_id = _biz(client, headers)
    product = _product(client, headers, biz_id, opening_stock=22)
    url = f"{API}/business/{biz_id}/invoices"
    body = {
        "voucher_number": "INV-001",
        "party_name": "Walk-in",
        "items": [{"item_id": product["id"], "quantity": 4, "unit_price": 100,
                   "gst_percent": 18}],
    }

    r = client.post(url, json=body, headers=headers)
    assert r.status_code == 201
    doc = r.json()["data"]
    assert doc["voucher_number"] == "INV-001"
    assert doc["data"]["party_name"] == "Walk-in"
    assert num(doc["totals"]["summary"]["grand_total"]) == Decimal("472.0")

    r = client.get(f"{API}/business/{biz_id}/products/{product['id']}", headers=headers)
    assert num(r.json()["data"]["current_stock"]) == Decimal("18")

    r = client.post(url, json=body, headers=headers)
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "VOUCHER_NUMBER_TAKEN"

    r = client.put(f"{url}/{doc['id']}", json={"voucher_number": "INV-002"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["data"]["voucher_number"] == "INV-002"

    r = client.get(url, headers=headers)
    assert r.json()["data"]["count"] == 1

    r = client.delete(f"{url}/{doc['id']}", headers=headers)
    assert r.status_code == 204

    r = client.get(f"{url}/{doc['id']}", headers=headers)
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "DOCUMENT_NOT_FOUND"

    r = client.get(f"{API}/business/{biz_id}/products/{product['id']}", headers=headers)
    assert num(r.json()["data"]["current_stock"]) == Decimal("22")


def test_invoice_over_stock_is_rejected(client):
    headers = get_auth_headers()
    biz_id = _biz(client, headers)
    product = _product(client, headers, biz_id, opening_stock=1)
    url = f"{API}/business/{biz_id}/invoices"
    body = {"voucher_number": "INV-001",
            "items": [{"item_id": product["id"], "quantity": 3}]}

    r = client.post(url, json=body, headers=headers)
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "INSUFFICIENT_STOCK"

    # number was released with the failed document
    body["items"][0]["quantity"] = 1
    r = client.post(url, json=body, headers=headers)
    assert r.status_code == 201


def test_cancelled_document_cannot_be_edited(client):
    headers = get_auth_headers()
    biz_id = _biz(client, headers)
    url = f"{API}/business/{biz_id}/quotations"
    doc = client.post(url, json={"voucher_number": "Q-1"}, headers=headers).json()["data"]

    r = client.put(f"{url}/{doc['id']}", json={"status": "cancelled"}, headers=headers)
    assert r.status_code == 200

    r = client.put(f"{url}/{doc['id']}", json={"notes": "x"}, headers=headers)
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "CANCELLED_DOCUMENT_EDIT_FORBIDDEN"


def test_missing_voucher_number(client):
    headers = get_auth_headers()
    biz_id = _biz(client, headers)
    r = client.post(f"{API}/business/{biz_id}/quotations", json={"voucher_number": "   "},
                    headers=headers)
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "VOUCHER_NUMBER_REQUIRED"


def test_payment_receipt_has_no_totals(client):
    headers = get_auth_headers()
    biz_id = _biz(client, headers)
    r = client.post(f"{API}/business/{biz_id}/payment-receipts",
                    json={"voucher_number": "PR-1", "amount_received": 500,
                          "payment_mode": "cash", "invoice_ids": ["x"]},
                    headers=headers)
    assert r.status_code == 201
    doc = r.json()["data"]
    assert doc["totals"] is None
    assert doc["data"]["amount_received"] == "500"
    assert doc["doc_type"] == "PAYMENT_RECEIPT"


def test_documents_are_owner_scoped(client):
    biz_id = _biz(client, get_auth_headers(OWNER_ID))
    r = client.get(f"{API}/business/{biz_id}/invoices", headers=get_auth_headers("user-2"))
    assert r.status_code == 404
