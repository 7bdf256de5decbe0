from fastapi.testclient import TestClient

from salat.app import app


client = TestClient(app)

MECCA = {"lat": 21.3891, "lon": 39.8579, "tz": "Asia/Riyadh"}


def test_today_basic_shape():
    resp = client.get("/v1/prayer/today", params={**MECCA, "date": "2024-03-15"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["header"]["tz"] == "Asia/Riyadh"
    assert data["header"]["method"] == "MuslimWorldLeague"
    assert data["header"]["weekday"] == "Friday"
    times = data["times"]
    for name in ("fajr", "sunrise", "dhuhr", "asr", "maghrib", "isha", "qiyam", "midnight"):
        assert times[name].startswith("2024-03-1")
    assert times["fajr"].endswith("+03:00")
    assert times["ordered"] is True
    assert data["hijri"]["formatted"] == "5 Ramadan 1445 AH"
    assert data["ramadan"] == {"is_ramadan": True, "days_until": 0}
    assert [h["name"] for h in data["holidays"]] == ["Laylat al-Qadr", "Eid al-Fitr", "Eid al-Adha"]
    # another day than today: navigation starts from that day's midnight
    assert data["current_prayer"] is None
    assert data["next_prayer"]["name"] == "Fajr"
    assert data["next_prayer"]["is_next_day"] is False
    hh, mm = (int(x) for x in times["fajr"][11:16].split(":"))
    remaining = data["time_remaining"]
    assert remaining["hours"] * 60 + remaining["minutes"] == hh * 60 + mm


def test_compute_matches_today_for_same_inputs():
    payload = {
        "date": "2024-03-15",
        "place": {**MECCA, "label": "Makkah"},
        "options": {"method": "UmmAlQura", "asr_method": "Hanafi", "holiday_limit": 5},
    }
    resp = client.post("/v1/prayer/compute", json=payload)
    assert resp.status_code == 200
    data = resp.json()
    assert data["header"]["method"] == "UmmAlQura"
    assert data["header"]["asr_method"] == "Hanafi"
    assert data["header"]["place"]["label"] == "Makkah"
    assert len(data["holidays"]) == 5

    same = client.get(
        "/v1/prayer/today",
        params={**MECCA, "date": "2024-03-15", "method": "UmmAlQura", "asr_method": "Hanafi"},
    ).json()
    assert same["times"] == data["times"]


def test_unknown_method_falls_back():
    resp = client.get("/v1/prayer/today", params={**MECCA, "date": "2024-03-15", "method": "Atlantis"})
    assert resp.status_code == 200
    assert resp.json()["header"]["method"] == "MuslimWorldLeague"


def test_high_latitude_flags_surface():
    resp = client.get(
        "/v1/prayer/today",
        params={"lat": 59.9139, "lon": 10.7522, "tz": "Europe/Oslo", "date": "2024-06-21"},
    )
    assert resp.status_code == 200
    assert {"fajr", "isha"} <= set(resp.json()["times"]["high_latitude_adjusted"])


def test_no_fallback_is_unprocessable():
    payload = {
        "date": "2024-06-21",
        "place": {"lat": 69.6492, "lon": 18.9553, "tz": "Europe/Oslo"},
        "options": {"high_latitude_rule": "None"},
    }
    resp = client.post("/v1/prayer/compute", json=payload)
    assert resp.status_code == 422
    assert "sunrise" in resp.json()["detail"]


def test_bad_inputs():
    assert client.get("/v1/prayer/today", params={"lat": 95, "lon": 0}).status_code == 422
    assert client.get("/v1/prayer/today", params={**MECCA, "tz": "Mars/Olympus"}).status_code == 422
    assert client.get("/v1/prayer/today", params={**MECCA, "date": "2024-13-01"}).status_code == 400
    assert client.get("/v1/prayer/today", params={**MECCA, "asr_method": "jafari"}).status_code == 400


def test_methods_listing():
    resp = client.get("/v1/prayer/methods")
    assert resp.status_code == 200
    keys = {m["key"] for m in resp.json()}
    assert {"MuslimWorldLeague", "UmmAlQura", "NorthAmerica"} <= keys
    assert len(keys) == 12


def test_reminders_endpoint():
    resp = client.get("/v1/prayer/reminders", params={**MECCA, "reminder_minutes": 15})
    assert resp.status_code == 200
    data = resp.json()
    assert data["tz"] == "Asia/Riyadh"
    whens = [r["when"] for r in data["reminders"]]
    assert whens == sorted(whens)
    assert len(whens) <= 10
    for r in data["reminders"]:
        if r["data"]["type"] == "prayer_reminder":
            assert r["body"].endswith("is in 15 minutes")

    assert client.get("/v1/prayer/reminders", params={**MECCA, "reminder_minutes": 500}).status_code == 422


def test_past_date_has_no_reminders():
    resp = client.get("/v1/prayer/reminders", params={**MECCA, "date": "2024-03-15"})
    assert resp.status_code == 200
    assert resp.json()["reminders"] == []
