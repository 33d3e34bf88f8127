import pytest
from sqlalchemy.exc import OperationalError

from app.db.unit_of_work import PrescriptionUnitOfWork


def add_stock(client, **body):
    payload = {"name": "Paracetamol", "amount": 5, "isDivisible": True,
               "dispensingUnit": "TABLET", "unitsPerPack": 10}
    payload.update(body)
    response = client.post("/stocks", json=payload)
    assert response.status_code == 200, response.text
    return response.json()["stock"]


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


class TestStocks:
    def test_create_and_search(self, client):
        stock = add_stock(client, lowStockThreshold=3)

        assert isinstance(stock["id"], str)
        assert stock["quantity"] == 5
        assert stock["lowStockThreshold"] == 3
        assert stock["inStock"] is True
        assert stock["isLow"] is False

        found = client.get("/stocks", params={"q": "PARA"}).json()["stocks"]
        assert [s["name"] for s in found] == ["Paracetamol"]
        assert client.get("/stocks", params={"q": "zzz"}).json()["stocks"] == []

    def test_amount_is_added_to_existing_stock(self, client):
        first = add_stock(client, amount=5)
        second = add_stock(client, name="paracetamol", amount=2.9)

        assert second["id"] == first["id"]
        assert second["quantity"] == 7

    def test_requires_name_and_non_zero_amount(self, client):
        assert client.post("/stocks", json={"name": "X", "amount": 0}).status_code == 400
        assert client.post("/stocks", json={"amount": 3}).status_code == 400
        assert client.post("/stocks", json={"name": "X", "amount": 1, "dispensingUnit": "CRATE"}).status_code == 400

    @pytest.mark.parametrize("field", ["amount", "unitsPerPack", "lowStockThreshold"])
    def test_out_of_range_numbers_are_rejected(self, client, field):
        body = {"name": "X", "amount": 1, field: 1e20}

        assert client.post("/stocks", json=body).status_code == 422
        assert client.get("/stocks").json()["stocks"] == []

    def test_low_stock(self, client):
        add_stock(client, name="Low", amount=2, lowStockThreshold=5)
        add_stock(client, name="Plenty", amount=50, lowStockThreshold=5)

        rows = client.get("/stocks/low-stock").json()["stocks"]

        assert [(r["name"], r["status"]) for r in rows] == [("Low", "Low Stock")]


class TestPatients:
    def test_lookup_requires_phone(self, client):
        assert client.get("/patients").status_code == 400

    def test_unknown_phone_returns_null(self, client):
        assert client.get("/patients", params={"phone": "999"}).json() == {"patient": None}

    def test_upsert_then_lookup(self, client):
        created = client.post("/patients", json={"phone": " 555 ", "name": "Jo", "age": 40.7}).json()["patient"]
        updated = client.post("/patients", json={"phone": "555", "name": "Joanna"}).json()["patient"]

        assert created["id"] == updated["id"]
        assert created["age"] == 40
        assert updated["age"] is None
        assert client.get("/patients", params={"phone": "555"}).json()["patient"]["name"] == "Joanna"

    def test_upsert_requires_name_and_phone(self, client):
        assert client.post("/patients", json={"phone": "555"}).status_code == 400


class TestPrescriptions:
    def test_save_list_and_print(self, client):
        stock = add_stock(client)

        response = client.post("/prescriptions", json={
            "phone": "555",
            "name": "Jo",
            "symptoms": "cough",
            "items": [
                {"medName": "Paracetamol", "quantity": 2},
                {"medName": "Paracetamol", "quantity": 1, "prescribedAs": "PACKS"},
                {"medName": "Honey"},
                {"medName": "   "},
            ],
        })
        assert response.status_code == 200, response.text
        rx = response.json()["prescription"]

        assert rx["number"] == 1
        assert isinstance(rx["id"], str)
        assert rx["patient"]["name"] == "Jo"
        assert [i["quantityDisplay"] for i in rx["items"]] == ["2 tablets", "1 pack (10 tablets)", "1"]
        assert rx["items"][0]["stockId"] == stock["id"]
        assert rx["items"][2]["stockId"] is None

        # 2 tablets + 1 pack = 12 tablets = 1 whole pack
        [after] = client.get("/stocks").json()["stocks"]
        assert after["quantity"] == 4

        listed = client.get("/prescriptions").json()["prescriptions"]
        assert [p["id"] for p in listed] == [rx["id"]]
        assert listed[0]["items"] == rx["items"]

        assert client.get(f"/prescriptions/{rx['id']}").json()["prescription"]["items"] == rx["items"]
        assert client.get("/prescriptions/next-number").json() == {"nextNumber": 2}

        printed = client.get(f"/prescriptions/{rx['id']}/print")
        assert printed.status_code == 200
        assert printed.headers["content-type"] == "application/pdf"
        assert printed.content.startswith(b"%PDF")

    def test_newest_first(self, client):
        for phone in ("1", "2", "3"):
            client.post("/prescriptions", json={"phone": phone, "name": "P", "items": [{"medName": "X"}]})

        numbers = [p["number"] for p in client.get("/prescriptions").json()["prescriptions"]]
        assert numbers == [3, 2, 1]

    def test_validation_errors(self, client):
        assert client.post("/prescriptions", json={"phone": "555", "items": [{"medName": "X"}]}).status_code == 400
        assert client.post("/prescriptions", json={"phone": "555", "name": "Jo", "items": []}).status_code == 400
        response = client.post("/prescriptions", json={"phone": "555", "name": "Jo", "items": [{"medName": " "}]})
        assert response.status_code == 400
        response = client.post("/prescriptions", json={"phone": "555", "name": "Jo",
                                                      "items": [{"medName": "X", "quantity": 1.5}]})
        assert response.status_code == 400
        response = client.post("/prescriptions", json={"phone": "555", "name": "Jo",
                                                      "items": [{"medName": "X", "quantity": 1e20}]})
        assert response.status_code == 400

        assert client.get("/prescriptions").json() == {"prescriptions": []}
        assert client.get("/patients", params={"phone": "555"}).json() == {"patient": None}

    def test_store_failure_returns_generic_error_and_saves_nothing(self, client, monkeypatch):
        add_stock(client, isDivisible=False, unitsPerPack=1)

        def failing_decrement(self, stock_id, total):
            raise OperationalError("UPDATE stocks", {}, Exception("disk I/O error"))

        monkeypatch.setattr(PrescriptionUnitOfWork, "decrement_stock", failing_decrement)

        response = client.post("/prescriptions", json={
            "phone": "555", "name": "Jo", "items": [{"medName": "Paracetamol", "quantity": 2}],
        })

        assert response.status_code == 500
        assert "disk" not in response.text
        assert client.get("/prescriptions").json() == {"prescriptions": []}
        assert client.get("/patients", params={"phone": "555"}).json() == {"patient": None}
        assert client.get("/stocks").json()["stocks"][0]["quantity"] == 5

    def test_unknown_prescription(self, client):
        assert client.get("/prescriptions/42").status_code == 404
        assert client.get("/prescriptions/42/print").status_code == 404
