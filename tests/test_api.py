from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from solar_pump_sim.api import dependencies
from solar_pump_sim.api.app import create_app
from solar_pump_sim.application import SolarPumpApplication


def create_test_client() -> TestClient:
    """Build a FastAPI test client that never writes exports."""
    app = create_app()

    def get_app_service() -> SolarPumpApplication:
        return SolarPumpApplication(save_outputs=False, result_builder=None)

    app.dependency_overrides[dependencies.get_application_service] = get_app_service
    return TestClient(app)


def test_api_simulate_inline_scenario(simple_scenario_data: dict):
    """Exercise /api/simulate with an inline scenario."""
    client = create_test_client()
    resp = client.post("/api/simulate", json={"scenario": simple_scenario_data})
    assert resp.status_code == 200
    data = resp.json()

    assert data["scenario"] == "test scenario"
    assert data["days_not_served"] == 1
    assert len(data["monthly"]) == 12
    assert len(data["daily"]) == 365
    assert len(data["hourly_profiles"]) == 12
    assert data["solar"]["site"]["name"] == "Test site"


def test_api_simulate_without_daily_records(simple_scenario_data: dict):
    client = create_test_client()
    resp = client.post(
        "/api/simulate",
        json={"scenario": simple_scenario_data, "include_daily": False},
    )
    assert resp.status_code == 200
    assert resp.json()["daily"] == []


def test_api_simulate_default_scenario():
    client = create_test_client()
    resp = client.post("/api/simulate")
    assert resp.status_code == 200
    assert resp.json()["pump"]["name"] == "SQF-2 (1kW)"


def test_api_simulate_with_solar_text(simple_scenario_data: dict, pvgis_text: str):
    client = create_test_client()
    resp = client.post(
        "/api/simulate",
        json={"scenario": simple_scenario_data, "solar_text": pvgis_text, "include_daily": False},
    )
    assert resp.status_code == 200
    assert resp.json()["solar"]["row_count"] == 8760


def test_api_simulate_malformed_export_returns_422(simple_scenario_data: dict):
    client = create_test_client()
    resp = client.post(
        "/api/simulate",
        json={"scenario": simple_scenario_data, "solar_text": "time,T2m\n20230101:0010,20.0"},
    )
    assert resp.status_code == 422
    assert "must contain a 'P'" in resp.json()["detail"]


def test_api_simulate_invalid_head_returns_400(simple_scenario_data: dict):
    simple_scenario_data["system"]["head_m"] = -3
    client = create_test_client()
    resp = client.post("/api/simulate", json={"scenario": simple_scenario_data})
    assert resp.status_code == 400
    assert "head" in resp.json()["detail"]


def test_api_parse_solar(pvgis_text: str):
    client = create_test_client()
    resp = client.post("/api/solar/parse", json={"text": pvgis_text})
    assert resp.status_code == 200
    data = resp.json()

    assert data["row_count"] == 8760
    assert data["column_used"] == "P (PV power)"
    assert data["site"]["lat"] == pytest.approx(1.406)
    assert sorted(data["profile"], key=int) == [str(m) for m in range(1, 13)]
    assert data["profile"]["2"][8] == pytest.approx(200.0)


def test_api_parse_solar_too_few_rows():
    client = create_test_client()
    resp = client.post("/api/solar/parse", json={"text": "time,P\n20230101:0010,1.0"})
    assert resp.status_code == 422
    assert resp.json()["detail"].startswith("Only found 1 data rows")


def test_api_list_pumps():
    client = create_test_client()
    resp = client.get("/api/pumps", params={"head_m": 75, "n_steps": 10})
    assert resp.status_code == 200
    pumps = resp.json()

    assert len(pumps) == 3
    custom = next(p for p in pumps if p["name"] == "Custom")
    assert custom["curve"][-1]["flow_m3h"] == pytest.approx(4.0)


def test_api_pump_curve():
    client = create_test_client()
    resp = client.get("/api/pumps/curve", params={"preset": "Custom", "head_m": 300})
    assert resp.status_code == 200
    samples = resp.json()

    assert samples[0] == {"power_w": 0.0, "flow_m3h": 0.0}
    assert samples[-1]["power_w"] == 500.0
    assert samples[-1]["flow_m3h"] == pytest.approx(1.0)


def test_api_pump_curve_unknown_preset():
    client = create_test_client()
    resp = client.get("/api/pumps/curve", params={"preset": "nope"})
    assert resp.status_code == 404


@pytest.mark.parametrize("kind", ["existing", "missing", "directory"])
def test_api_simulate_rejects_server_side_solar_file(tmp_path, pvgis_text: str, kind: str):
    """A scenario may not make the server read its own files."""
    target = tmp_path / "export.csv"
    if kind == "existing":
        target.write_text(pvgis_text, encoding="utf-8")
    elif kind == "directory":
        target = tmp_path
    client = create_test_client()
    resp = client.post(
        "/api/simulate",
        json={"scenario": {"solar": {"file": str(target)}}},
    )
    assert resp.status_code == 400
    assert "'file' sources are not accepted" in resp.json()["detail"]


@pytest.mark.parametrize(
    "scenario,status",
    [
        ({"solar": {"profile": {"1": ["x"] * 24}}}, 422),
        ({"solar": {"profile": [1, 2, 3]}}, 422),
        ({"solar": {"profile": {"1": [1.0] * 24}, "site": {"lat": "north"}}}, 422),
        ({"pump": {"points": 5}}, 400),
        ({"pump": {"points": [{"flow_m3h": 1.0, "power_w": 200.0}], "reference_head_m": "abc"}}, 400),
        ({"pump": "SQF"}, 400),
        ({"pump": {"preset": ["SQF-2 (1kW)"]}}, 400),
        ({"system": "big"}, 400),
    ],
)
def test_api_simulate_bad_scenario_content(scenario: dict, status: int):
    client = create_test_client()
    resp = client.post("/api/simulate", json={"scenario": scenario})
    assert resp.status_code == status
    assert resp.json()["detail"]
