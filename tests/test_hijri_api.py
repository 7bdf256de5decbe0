from fastapi.testclient import TestClient

from salat.app import app


client = TestClient(app)


def test_convert():
    resp = client.get("/v1/hijri/convert", params={"date": "2024-03-11"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["gregorian"] == "2024-03-11"
    assert (data["hijri"]["year"], data["hijri"]["month"], data["hijri"]["day"]) == (1445, 9, 1)
    assert data["hijri"]["month_name"] == "Ramadan"
    assert data["is_ramadan"] is True


def test_convert_defaults_to_today():
    resp = client.get("/v1/hijri/convert")
    assert resp.status_code == 200
    assert resp.json()["hijri"]["formatted"].endswith("AH")


def test_to_gregorian():
    resp = client.get("/v1/hijri/to-gregorian", params={"year": 1445, "month": 10, "day": 1})
    assert resp.status_code == 200
    assert resp.json()["gregorian"] == "2024-04-10"
    assert resp.json()["is_ramadan"] is False


def test_invalid_inputs():
    assert client.get("/v1/hijri/convert", params={"date": "yesterday"}).status_code == 400
    assert client.get("/v1/hijri/convert", params={"date": "0500-01-01"}).status_code == 400
    assert client.get("/v1/hijri/to-gregorian", params={"year": 1445, "month": 2, "day": 30}).status_code == 400
    assert client.get("/v1/hijri/to-gregorian", params={"year": 1445, "month": 13, "day": 1}).status_code == 422


def test_ramadan_status():
    resp = client.get("/v1/hijri/ramadan", params={"date": "2024-03-10"})
    assert resp.json() == {"is_ramadan": False, "days_until": 1}


def test_holidays():
    resp = client.get("/v1/hijri/holidays", params={"date": "2024-03-15"})
    assert resp.status_code == 200
    items = resp.json()["holidays"]
    assert len(items) == 3
    assert items[1] == {
        "name": "Eid al-Fitr",
        "description": "Festival of Breaking the Fast",
        "hijri_month": 10,
        "hijri_day": 1,
        "hijri_year": 1445,
        "date": "2024-04-10",
        "days_until": 26,
    }
    assert len(client.get("/v1/hijri/holidays", params={"date": "2024-03-15", "limit": 6}).json()["holidays"]) == 6
