# tests/test_api_rental.py
def test_rental_projection_success(client, spreadsheet_assumptions):
    r = client.post("/rental/projection", json=spreadsheet_assumptions.model_dump())
    assert r.status_code == 200, r.text
    data = r.json()

    assert len(data["years"]) == 10
    assert data["years"][2]["calendar_year"] == 2028
    assert abs(data["years"][2]["take_home_profit"] - 5_209_699_500) < 1

    summary = data["summary"]
    assert summary["payback_recoverable"] is True
    assert summary["payback_years"] > 0
    assert summary["formatted"]["total_profit"].startswith("Rp ")


def test_rental_projection_minimal_camel_case(client):
    r = client.post(
        "/rental/projection",
        params={"currency": "EUR"},
        json={"initialInvestment": "2,000,000,000", "purchaseDate": "2026-07", "keys": "4"},
    )
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["display_currency"] == "EUR"
    assert data["years"][0]["keys"] == 4
    assert data["summary"]["formatted"]["total_revenue"].startswith("€ ")


def test_rental_invalid_keys_is_422(client):
    r = client.post("/rental/projection", json={"initial_investment": 1, "purchase_date": "2026-01", "keys": 0})
    assert r.status_code == 422
    detail = r.json()["detail"]
    assert detail["field"] == "keys"


def test_rental_bad_purchase_date_is_422(client):
    r = client.post("/rental/projection", json={"initial_investment": 1, "purchase_date": "next year"})
    assert r.status_code == 422
    assert r.json()["detail"]["field"] == "purchase_date"


def test_currency_convert(client):
    r = client.get("/currency/convert", params={"amount": 32_000, "from_code": "IDR", "to_code": "USD"})
    assert r.status_code == 200, r.text
    data = r.json()
    assert abs(data["converted"] - 2.0) < 1e-9
    assert data["formatted"] == "$ 2.00"


def test_currency_convert_unknown_code(client):
    r = client.get("/currency/convert", params={"amount": 1, "from_code": "IDR", "to_code": "ZZZ"})
    assert r.status_code == 400


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
