from __future__ import annotations

import json

import pytest

from solar_pump_sim.application import SolarPumpApplication
from solar_pump_sim.errors import ConfigurationError, MalformedInput
from solar_pump_sim.result_builder import ResultBuilder
from solar_pump_sim.scenario_setup import (
    DEFAULT_SCENARIO,
    build_pump_curve,
    build_simulation_config,
    build_solar_data,
    load_scenario_data,
)


def test_run_simulation_with_inline_scenario(simple_scenario_data: dict):
    """Run the inline scenario and check the assembled summary."""
    app = SolarPumpApplication(save_outputs=False, result_builder=None)
    summary = app.run_simulation(scenario_data=simple_scenario_data)

    assert summary["scenario"] == "test scenario"
    assert summary["system"]["people_served"] == 133
    assert summary["pump"]["name"] == "single"
    assert summary["solar"]["row_count"] == 0
    assert summary["solar"]["site"]["name"] == "Test site"
    assert summary["days_not_served"] == 1
    assert len(summary["monthly"]) == 12
    assert len(summary["daily"]) == 365
    assert len(summary["hourly_profiles"]) == 12
    assert summary["hourly_profiles"][0]["points"][12]["flow_m3h"] == pytest.approx(2.0)
    assert summary["pump_curve"][-1]["power_w"] == 500.0
    assert summary["output_dir"] is None


def test_run_simulation_default_scenario():
    """Without input the built-in Kapchorwa scenario runs."""
    summary = SolarPumpApplication().run_simulation()

    assert summary["scenario"] == DEFAULT_SCENARIO["scenario_name"]
    assert summary["pump"]["name"] == "SQF-2 (1kW)"
    assert summary["solar"]["uses_irradiance"]
    assert summary["solar"]["description"] == "Built-in monthly profile"
    assert 0.0 <= summary["reliability_pct"] <= 100.0


def test_run_simulation_with_solar_text(simple_scenario_data: dict, pvgis_text: str):
    """A raw export overrides the scenario's inline profile."""
    app = SolarPumpApplication()
    summary = app.run_simulation(scenario_data=simple_scenario_data, solar_text=pvgis_text)

    assert summary["solar"]["row_count"] == 8760
    assert summary["solar"]["column_used"] == "P (PV power)"
    # January: 100 W over 12 hours through the 2 m³/h @ 500 W pump
    assert summary["monthly"][0]["avg_daily_pumped_m3"] == pytest.approx(12 * 0.4)


def test_run_simulation_with_solar_file(tmp_path, simple_scenario_data: dict, pvgis_text: str):
    path = tmp_path / "Timeseries_0.5_32.5.csv"
    path.write_text(pvgis_text, encoding="utf-8")

    summary = SolarPumpApplication().run_simulation(
        scenario_data=simple_scenario_data,
        solar_file=path,
    )

    assert summary["solar"]["site"]["name"] == "0.5 32.5"


def test_run_simulation_saves_outputs(tmp_path, simple_scenario_data: dict):
    app = SolarPumpApplication(save_outputs=True, result_builder=ResultBuilder(tmp_path))
    summary = app.run_simulation(scenario_data=simple_scenario_data)

    output_dir = tmp_path / summary["output_dir"]
    assert output_dir.exists()
    saved = json.loads((output_dir / "summary.json").read_text(encoding="utf-8"))
    assert saved["scenario"] == "test scenario"
    assert "daily" not in saved


def test_run_simulation_rejects_malformed_export(simple_scenario_data: dict):
    app = SolarPumpApplication()
    with pytest.raises(MalformedInput):
        app.run_simulation(scenario_data=simple_scenario_data, solar_text="no data here")


def test_run_simulation_rejects_zero_head(simple_scenario_data: dict):
    simple_scenario_data["system"]["head_m"] = 0
    with pytest.raises(ConfigurationError):
        SolarPumpApplication().run_simulation(scenario_data=simple_scenario_data)


def test_parse_solar_returns_profile(pvgis_text: str):
    payload = SolarPumpApplication().parse_solar(pvgis_text)

    assert payload["row_count"] == 8760
    assert payload["site"]["radiation_db"] == "PVGIS-SARAH3"
    assert payload["description"].startswith("Loaded 8,760 hourly records")
    assert payload["profile"][4][10] == pytest.approx(400.0)


def test_list_pumps_samples_each_preset():
    pumps = SolarPumpApplication().list_pumps(head_m=300.0, n_steps=10)

    names = [p["name"] for p in pumps]
    assert names == ["SQF-2 (1kW)", "SQF-10 (2kW)", "Custom"]
    custom = pumps[-1]
    assert custom["max_power_w"] == 500.0
    assert custom["curve"][-1]["flow_m3h"] == pytest.approx(1.0)


def test_list_pumps_rejects_zero_head():
    with pytest.raises(ConfigurationError):
        SolarPumpApplication().list_pumps(head_m=0.0)


class TestScenarioSetup:
    def test_default_scenario_is_copied(self):
        data = load_scenario_data()
        data["system"]["head_m"] = 1.0
        assert DEFAULT_SCENARIO["system"]["head_m"] == 150.0

    def test_scenario_loaded_from_json_file(self, tmp_path, simple_scenario_data: dict):
        path = tmp_path / "scenario.json"
        path.write_text(json.dumps(simple_scenario_data), encoding="utf-8")
        assert load_scenario_data(path)["scenario_name"] == "test scenario"

    def test_system_section_merges_over_defaults(self, daylight_profile, single_point_pump):
        config = build_simulation_config(
            {"system": {"daily_demand_liters": 4500}},
            profile=daylight_profile,
            pump_curve=single_point_pump,
        )
        assert config.daily_demand_liters == 4500.0
        assert config.head_m == 150.0
        assert config.tank_capacity_liters == 5000.0

    def test_invalid_system_value_raises(self):
        with pytest.raises(ConfigurationError):
            build_simulation_config({"system": {"head_m": "high"}})

    def test_pump_preset_and_inline_points(self, simple_scenario_data: dict):
        assert build_pump_curve({"pump": {"preset": "Custom"}}).name == "Custom"
        inline = build_pump_curve(simple_scenario_data)
        assert inline.max_power_w == 500.0
        assert inline.reference_head_m == 150.0

    def test_invalid_pump_point_raises(self):
        with pytest.raises(ConfigurationError):
            build_pump_curve({"pump": {"points": [{"flow_m3h": 1.0}]}})

    def test_unknown_preset_raises(self):
        with pytest.raises(ConfigurationError):
            build_pump_curve({"pump": {"preset": "nope"}})

    def test_solar_text_section(self, pvgis_text: str):
        solar = build_solar_data({"solar": {"text": pvgis_text}})
        assert solar.row_count == 8760

    def test_inline_irradiance_profile(self):
        solar = build_solar_data({"solar": {"profile": {1: [100.0] * 24}, "irradiance": True}})
        assert solar.uses_irradiance
        assert solar.profile.month(1)[0] == 100.0
        assert solar.metadata.name is None


def test_run_simulation_can_refuse_local_files(tmp_path, pvgis_text: str):
    path = tmp_path / "export.csv"
    path.write_text(pvgis_text, encoding="utf-8")
    scenario = {"solar": {"file": str(path)}}
    app = SolarPumpApplication()

    with pytest.raises(ConfigurationError, match="'file' sources are not accepted"):
        app.run_simulation(scenario_data=scenario, allow_files=False)
    assert app.run_simulation(scenario_data=scenario)["solar"]["row_count"] == 8760


class TestScenarioValidation:
    def test_missing_solar_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            build_solar_data({"solar": {"file": str(tmp_path / "missing.csv")}})

    def test_solar_file_pointing_to_directory(self, tmp_path):
        with pytest.raises(ConfigurationError):
            build_solar_data({"solar": {"file": str(tmp_path)}})

    def test_non_numeric_profile_hours(self):
        with pytest.raises(MalformedInput, match="must be numbers"):
            build_solar_data({"solar": {"profile": {"1": ["x"] * 24}}})

    def test_profile_must_be_a_mapping(self):
        with pytest.raises(MalformedInput):
            build_solar_data({"solar": {"profile": [0.0] * 24}})

    def test_site_fields_are_converted(self):
        solar = build_solar_data(
            {"solar": {"profile": {"1": [1.0] * 24}, "site": {"lat": "1.5", "name": 7}}}
        )
        assert solar.metadata.lat == 1.5
        assert solar.metadata.name == "7"
        with pytest.raises(MalformedInput):
            build_solar_data({"solar": {"profile": {"1": [1.0] * 24}, "site": {"lat": "north"}}})

    def test_points_must_be_a_list(self):
        with pytest.raises(ConfigurationError, match="must be a list"):
            build_pump_curve({"pump": {"points": 5}})

    def test_non_numeric_reference_head(self):
        with pytest.raises(ConfigurationError, match="reference head"):
            build_pump_curve(
                {"pump": {"points": [{"flow_m3h": 1.0, "power_w": 200.0}], "reference_head_m": "abc"}}
            )

    def test_pump_section_must_be_a_mapping(self):
        with pytest.raises(ConfigurationError, match="'pump' must be an object"):
            build_pump_curve({"pump": "SQF"})

    def test_unhashable_preset_name(self):
        with pytest.raises(ConfigurationError, match="Unknown pump preset"):
            build_pump_curve({"pump": {"preset": ["SQF-2 (1kW)"]}})

    def test_system_section_must_be_a_mapping(self):
        with pytest.raises(ConfigurationError):
            build_simulation_config({"system": "big"})
