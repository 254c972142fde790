from datetime import datetime
from decimal import Decimal

from sqlalchemy.exc import OperationalError

from agroshop.db.changes import feed
from agroshop.models.bill import Bill


def create_farmer(client, name="Ramesh Kumar"):
    response = client.post("/farmers/", json={"name": name, "village": "Kothur", "phone": "9876543210"})
    assert response.status_code == 201
    return response.json()


def create_product(client, name="Urea 45kg", price=266.5, stock=40, reorder=10):
    response = client.post("/products/", json={
        "name": name, "type": "fertilizer", "price_per_unit": price,
        "unit": "bag", "stock_quantity": stock, "reorder_level": reorder,
    })
    assert response.status_code == 201
    return response.json()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_create_farmer_opens_an_account(client):
    farmer = create_farmer(client)

    response = client.get(f"/accounts/{farmer['id']}")

    assert response.status_code == 200
    account = response.json()
    assert account["current_balance"] == 0
    assert account["interest_rate"] == 2.0
    assert account["balance_status"] == "clear"
    assert account["farmer"]["name"] == "Ramesh Kumar"


def test_farmer_name_is_required(client):
    response = client.post("/farmers/", json={"name": "   "})
    assert response.status_code == 422


def test_farmer_crud(client):
    farmer = create_farmer(client)

    response = client.put(f"/farmers/{farmer['id']}", json={"district": "Mahbubnagar"})
    assert response.status_code == 200
    assert response.json()["district"] == "Mahbubnagar"

    assert client.get("/farmers/", params={"search": "ramesh"}).json()[0]["id"] == farmer["id"]

    assert client.delete(f"/farmers/{farmer['id']}").json() == {"ok": True}
    assert client.get(f"/farmers/{farmer['id']}").status_code == 404


def test_product_low_stock_flag(client):
    create_product(client, name="Urea", stock=5, reorder=10)
    create_product(client, name="DAP", stock=80, reorder=10)

    everything = client.get("/products/").json()
    low = client.get("/products/", params={"low_stock": True}).json()

    assert everything["total"] == 2
    assert [p["name"] for p in low["items"]] == ["Urea"]
    assert low["items"][0]["is_low_stock"] is True


def test_product_type_is_constrained(client):
    response = client.post("/products/", json={
        "name": "Seeds", "type": "seed", "price_per_unit": 10,
    })
    assert response.status_code == 422


def test_staff_cannot_delete_products(staff_client):
    product = create_product(staff_client)
    response = staff_client.delete(f"/products/{product['id']}")
    assert response.status_code == 403


def test_bill_lifecycle(client):
    farmer = create_farmer(client)
    product = create_product(client)

    response = client.post("/bills/", json={
        "farmer_id": farmer["id"],
        "bill_number": "INV-100",
        "discount_amount": 33,
        "items": [{"product_id": product["id"], "quantity": 2}],
    })
    assert response.status_code == 201
    bill = response.json()
    assert bill["total_amount"] == 533.0
    assert bill["final_amount"] == 500.0
    assert bill["bill_items"][0]["product"]["name"] == "Urea 45kg"

    integrity = client.get(f"/bills/{bill['id']}/integrity").json()
    assert integrity == {"bill_id": bill["id"], "consistent": True, "issues": []}

    response = client.put(f"/bills/{bill['id']}", json={"payment_status": "paid"})
    assert response.json()["payment_status"] == "paid"

    listed = client.get("/bills/", params={"farmer_id": farmer["id"], "payment_status": "paid"}).json()
    assert [b["bill_number"] for b in listed] == ["INV-100"]

    assert client.delete(f"/bills/{bill['id']}").json() == {"ok": True}
    assert client.get(f"/bills/{bill['id']}").status_code == 404


def test_bill_errors_map_to_http(client):
    farmer = create_farmer(client)

    missing_product = client.post("/bills/", json={
        "farmer_id": farmer["id"], "items": [{"product_id": 999, "quantity": 1}],
    })
    no_items = client.post("/bills/", json={"farmer_id": farmer["id"], "items": []})

    assert missing_product.status_code == 404
    assert missing_product.json()["detail"] == "Product with ID 999 not found"
    assert no_items.status_code == 400


def test_record_payment(client):
    farmer = create_farmer(client)

    response = client.post("/payments/", json={
        "farmer_id": farmer["id"], "amount_paid": 250, "payment_method": "cheque",
    })

    assert response.status_code == 201
    payment = response.json()
    assert payment["amount_paid"] == 250.0
    assert payment["bill_id"] is None
    assert payment["recorded_by"] == 1
    assert client.get("/payments/", params={"farmer_id": farmer["id"]}).json()[0]["id"] == payment["id"]


def test_record_payment_validation(client):
    farmer = create_farmer(client)

    zero = client.post("/payments/", json={"farmer_id": farmer["id"], "amount_paid": 0})
    no_farmer = client.post("/payments/", json={"amount_paid": 100})

    assert zero.status_code == 400
    assert zero.json()["detail"] == "Payment amount must be positive"
    assert no_farmer.status_code == 400


def test_non_numeric_amounts_are_rejected(client):
    farmer = create_farmer(client)
    product = create_product(client)
    headers = {"Content-Type": "application/json"}

    payment = client.post(
        "/payments/", headers=headers,
        content='{"farmer_id": %d, "amount_paid": NaN}' % farmer["id"],
    )
    bill = client.post(
        "/bills/", headers=headers,
        content='{"farmer_id": %d, "items": [{"product_id": %d, "quantity": Infinity}]}'
        % (farmer["id"], product["id"]),
    )
    account = client.put(
        f"/accounts/{farmer['id']}", headers=headers,
        content='{"current_balance": NaN}',
    )

    assert payment.status_code == 422
    assert payment.json()["detail"][0]["loc"] == ["body", "amount_paid"]
    assert bill.status_code == 422
    assert account.status_code == 422
    assert client.get("/payments/").json() == []
    assert client.get("/bills/").json() == []
    assert client.get(f"/accounts/{farmer['id']}").json()["current_balance"] == 0.0


def test_payment_below_a_cent_is_rejected(client):
    farmer = create_farmer(client)

    response = client.post("/payments/", json={"farmer_id": farmer["id"], "amount_paid": 0.004})

    assert response.status_code == 400
    assert response.json()["detail"] == "Payment amount must be positive"


def test_accrue_interest_endpoint(client):
    farmer = create_farmer(client)
    client.put(f"/accounts/{farmer['id']}", json={"current_balance": 1000, "interest_rate": 2})

    response = client.post(f"/accounts/{farmer['id']}/interest")

    assert response.status_code == 200
    accrual = response.json()
    assert accrual["applied"] is True
    assert accrual["interest_amount"] == 20.0
    assert accrual["new_balance"] == 1020.0
    assert accrual["charge"]["principal_amount"] == 1000.0

    ledger = client.get(f"/accounts/{farmer['id']}/ledger").json()
    assert ledger["account"]["current_balance"] == 1020.0
    assert ledger["account"]["balance_status"] == "high"
    assert len(ledger["interest_charges"]) == 1


def test_accrue_interest_on_clear_account_is_informational(client):
    farmer = create_farmer(client)
    client.put(f"/accounts/{farmer['id']}", json={"interest_rate": 5})

    response = client.post(f"/accounts/{farmer['id']}/interest")

    assert response.status_code == 200
    assert response.json()["applied"] is False
    assert response.json()["charge"] is None
    assert client.get(f"/accounts/{farmer['id']}/ledger").json()["interest_charges"] == []


def test_accrue_interest_unknown_account(client):
    assert client.post("/accounts/404/interest").status_code == 404


def test_outstanding_accounts_sorted_by_balance(client):
    small = create_farmer(client, "Small")
    big = create_farmer(client, "Big")
    create_farmer(client, "Clear")
    client.put(f"/accounts/{small['id']}", json={"current_balance": 100})
    client.put(f"/accounts/{big['id']}", json={"current_balance": 5000})

    accounts = client.get("/accounts/", params={"outstanding_only": True}).json()

    assert [a["farmer"]["name"] for a in accounts] == ["Big", "Small"]


def test_store_failure_returns_503(client, monkeypatch):
    def failing_commit(self):
        raise OperationalError("COMMIT", {}, Exception("database is locked"))

    monkeypatch.setattr("sqlalchemy.orm.Session.commit", failing_commit)
    response = client.post("/farmers/", json={"name": "Gopal"})

    assert response.status_code == 503
    monkeypatch.undo()
    assert client.get("/farmers/").json() == []


def test_revenue_report(client, db):
    farmer = create_farmer(client)
    product = create_product(client)
    paid = client.post("/bills/", json={
        "farmer_id": farmer["id"], "payment_status": "paid",
        "items": [{"product_id": product["id"], "quantity": 2, "unit_price": 250}],
    }).json()
    pending = client.post("/bills/", json={
        "farmer_id": farmer["id"],
        "items": [{"product_id": product["id"], "quantity": 1, "unit_price": 300}],
    }).json()
    db.query(Bill).filter(Bill.id == paid["id"]).update({"created_at": datetime(2024, 1, 10, 11, 0)})
    db.query(Bill).filter(Bill.id == pending["id"]).update({"created_at": datetime(2024, 1, 15, 11, 0)})
    db.commit()

    report = client.get("/reports/revenue", params={"status": "all"}).json()

    assert report["total_revenue"] == 500.0
    assert report["total_bills"] == 2
    assert report["filtered_bills"] == 2
    assert report["total_products"] == 1
    assert report["total_farmers"] == 1
    assert report["monthly_revenue"] == [{"month": "Jan 2024", "revenue": 500.0}]
    assert report["top_products"] == [{"product_name": "Urea 45kg", "total_sold": 2.0, "revenue": 500.0}]
    assert report["top_farmers"] == [{"farmer_name": "Ramesh Kumar", "total_purchases": 2}]

    january_10 = client.get("/reports/revenue", params={"date_from": "2024-01-10", "date_to": "2024-01-10"}).json()
    assert january_10["filtered_bills"] == 1
    assert january_10["total_bills"] == 2
    assert january_10["total_revenue"] == 500.0


def test_dashboard(client):
    farmer = create_farmer(client)
    create_product(client, name="Urea", stock=2, reorder=10)
    client.put(f"/accounts/{farmer['id']}", json={"current_balance": 750})

    stats = client.get("/reports/dashboard").json()

    assert stats["total_products"] == 1
    assert stats["total_farmers"] == 1
    assert stats["low_stock_items"] == 1
    assert stats["pending_payments"] == 750.0
    assert stats["total_revenue"] == 0
    assert stats["overdue_payments"] == 0


def test_report_read_failure_degrades_to_empty(client, monkeypatch):
    from sqlalchemy.orm import Query

    def failing_all(self):
        raise OperationalError("SELECT", {}, Exception("connection reset"))

    monkeypatch.setattr(Query, "all", failing_all)

    report = client.get("/reports/revenue")
    stats = client.get("/reports/dashboard")

    assert report.status_code == 200
    assert report.json()["total_revenue"] == 0
    assert report.json()["monthly_revenue"] == []
    assert stats.status_code == 200
    assert stats.json()["total_products"] == 0


def test_change_versions_move_on_writes(client):
    before = client.get("/changes/").json()["versions"]

    create_farmer(client)

    after = client.get("/changes/").json()["versions"]
    assert after.get("farmers", 0) == before.get("farmers", 0) + 1
    assert after.get("customer_accounts", 0) == before.get("customer_accounts", 0) + 1
    assert after.get("products", 0) == before.get("products", 0)
    assert feed.versions()["farmers"] == after["farmers"]
