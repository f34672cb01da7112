import logging
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(__file__)))

import pytest

from app import create_app
from app import store as store_module

RAW = {
    "production": [
        {"Marca temporal": "2024-01-01T08:00:00", "Modelo": "M1", "Operario": "Ana", "Cantidad": 100},
        {"Marca temporal": "2024-01-02T08:00:00", "Modelo": "M2", "Operario": "Luis", "Cantidad": 1000},
        {"Marca temporal": "2024-01-03T08:00:00", "Modelo": "M1", "Operario": "Luis", "Cantidad": 10},
    ],
    "rejections": [
        {"Marca temporal": "2024-01-01T09:00:00", "Modelo": "M1", "Operario": "Ana", "Cantidad": 3, "Motivo": "Rayado"},
        {"Marca temporal": "2024-01-01T10:00:00", "Modelo": "M1", "Operario": "Ana", "Cantidad": 2, "Motivo": "Golpe"},
        {"Marca temporal": "2024-01-02T10:00:00", "Modelo": "M2", "Operario": "Luis", "Cantidad": 10, "Motivo": "Falla"},
        {"Marca temporal": "2024-01-03T10:00:00", "Modelo": "M1", "Operario": "Luis", "Motivo": "Rebaba"},
    ],
}


def _make_fetch(data, error=None):
    return lambda *args, data=data, error=error, **kwargs: (data, error)


@pytest.fixture
def app_instance(monkeypatch):
    monkeypatch.setenv("PRODUCTION_API_URL", "http://source/api/data")
    monkeypatch.setenv("REJECTION_TARGET_PERCENT", "2.5")
    monkeypatch.delenv("FIELD_CANDIDATES_JSON", raising=False)
    monkeypatch.setattr(store_module, "fetch_dataset", _make_fetch(RAW))
    app = create_app()
    return app


def test_dashboard_unfiltered(app_instance):
    client = app_instance.test_client()
    resp = client.get("/api/dashboard")
    assert resp.status_code == 200
    data = resp.get_json()
    assert [r["date"] for r in data["records"]] == ["2024-01-01", "2024-01-02", "2024-01-03"]
    first = data["records"][0]
    assert first["rejected_quantity"] == 5
    assert first["rejection_rate"] == 5.0
    assert first["primary_reason"] == "Rayado"
    # a rejection row without a count stands for one unit
    assert data["records"][2]["rejected_quantity"] == 1
    assert data["models"] == [
        {"model": "M1", "total_produced": 110, "total_rejected": 6},
        {"model": "M2", "total_produced": 1000, "total_rejected": 10},
    ]
    assert data["totals"]["total_produced"] == 1110
    assert data["totals"]["total_rejected"] == 16
    assert data["totals"]["rejection_rate_percent"] == 1.44
    assert data["totals"]["above_target"] is False
    assert data["start"] == "" and data["end"] == ""


def test_dashboard_date_range_is_inclusive(app_instance):
    client = app_instance.test_client()
    resp = client.get("/api/dashboard?start_date=2024-01-02&end_date=2024-01-03")
    data = resp.get_json()
    assert [r["date"] for r in data["records"]] == ["2024-01-02", "2024-01-03"]
    assert data["start"] == "2024-01-02"
    assert data["end"] == "2024-01-03"


def test_dashboard_entity_filters(app_instance):
    client = app_instance.test_client()
    data = client.get("/api/dashboard?operator=Luis&model=M1").get_json()
    assert len(data["records"]) == 1
    assert data["records"][0]["operator"] == "Luis"
    assert data["records"][0]["model"] == "M1"
    assert data["totals"]["above_target"] is True

    data = client.get("/api/dashboard?operator=Ana&operator=Luis").get_json()
    assert len(data["records"]) == 3


def test_dashboard_no_matches_is_empty_state(app_instance):
    client = app_instance.test_client()
    data = client.get("/api/dashboard?operator=Nadie").get_json()
    assert data["records"] == []
    assert data["models"] == []
    assert data["totals"]["total_produced"] == 0
    assert data["totals"]["rejection_rate_percent"] == 0


def test_invalid_date_returns_400(app_instance):
    client = app_instance.test_client()
    resp = client.get("/api/dashboard?start_date=sin-fecha")
    assert resp.status_code == 400


def test_fetch_error_returns_502(app_instance, monkeypatch):
    monkeypatch.setattr(
        store_module, "fetch_dataset", _make_fetch(None, "Failed to fetch production data: boom")
    )
    client = app_instance.test_client()
    resp = client.get("/api/dashboard")
    assert resp.status_code == 502
    assert resp.get_json() == {"message": "Failed to fetch production data: boom"}


def test_options_endpoint(app_instance):
    client = app_instance.test_client()
    data = client.get("/api/dashboard/options").get_json()
    assert data == {
        "operators": ["Ana", "Luis"],
        "models": ["M1", "M2"],
        "start": "2024-01-01",
        "end": "2024-01-03",
    }


def test_reload_endpoint(app_instance, monkeypatch):
    client = app_instance.test_client()
    assert len(client.get("/api/dashboard").get_json()["records"]) == 3

    smaller = {"production": RAW["production"][:1], "rejections": []}
    monkeypatch.setattr(store_module, "fetch_dataset", _make_fetch(smaller))
    resp = client.post("/api/dataset/reload")
    assert resp.status_code == 200
    assert resp.get_json() == {"production": 1, "rejections": 0}
    assert len(client.get("/api/dashboard").get_json()["records"]) == 1


def test_export_csv(app_instance):
    client = app_instance.test_client()
    resp = client.get("/api/dashboard/export?format=csv&start_date=2024-01-01&end_date=2024-01-01")
    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert "240101_240101_produccion.csv" in resp.headers["Content-Disposition"]
    lines = resp.data.decode("utf-8").strip().splitlines()
    assert len(lines) == 2
    assert lines[1].startswith("2024-01-01,Ana,M1,")


def test_export_xlsx(app_instance):
    client = app_instance.test_client()
    resp = client.get("/api/dashboard/export?format=xlsx")
    assert resp.status_code == 200
    assert resp.data[:2] == b"PK"


def test_export_unsupported_format(app_instance):
    client = app_instance.test_client()
    resp = client.get("/api/dashboard/export?format=pdf")
    assert resp.status_code == 400
    assert resp.get_json() == {"message": "Unsupported format. Choose csv or xlsx."}


@pytest.mark.parametrize("value", ["01/02/2024", "Jan 2 2024", "2024-01-02T08:00:00Z"])
def test_dashboard_accepts_any_parseable_date(app_instance, value):
    client = app_instance.test_client()
    resp = client.get("/api/dashboard", query_string={"start_date": value, "end_date": value})
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["start"] == "2024-01-02"
    assert [r["date"] for r in data["records"]] == ["2024-01-02"]


def test_offset_timestamp_filters_on_utc_day(app_instance):
    client = app_instance.test_client()
    resp = client.get(
        "/api/dashboard", query_string={"start_date": "2024-01-02T23:30:00-05:00"}
    )
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["start"] == "2024-01-03"
    assert [r["date"] for r in data["records"]] == ["2024-01-03"]


def test_trend_is_date_ordered_enriched_rows(app_instance):
    client = app_instance.test_client()
    trend = client.get("/api/dashboard").get_json()["trend"]
    assert [r["date"] for r in trend] == ["2024-01-01", "2024-01-02", "2024-01-03"]
    assert trend[0]["rejected_quantity"] == 5
    assert trend[0]["primary_reason"] == "Rayado"


def test_export_without_dates_is_named_after_data_range(app_instance):
    client = app_instance.test_client()
    resp = client.get("/api/dashboard/export?format=csv")
    assert resp.status_code == 200
    assert "240101_240103_produccion.csv" in resp.headers["Content-Disposition"]

    resp = client.get("/api/dashboard/export?format=csv&start_date=2024-01-02")
    assert "240102_240103_produccion.csv" in resp.headers["Content-Disposition"]


def test_invalid_log_level_falls_back_to_info(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    monkeypatch.setattr(store_module, "fetch_dataset", _make_fetch(RAW))
    app = create_app()
    assert app.logger.level == logging.INFO


def test_log_level_from_environment(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    app = create_app()
    assert app.logger.level == logging.DEBUG
