"""
Tests for the command-line interface.
"""

import json

import pytest
from click.testing import CliRunner

from growthchart.cli import cli
from growthchart.exporters import export_snapshot
from growthchart.models import MeasurementType


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def records_file(tmp_path):
    path = tmp_path / "records.json"
    path.write_text(json.dumps([
        {"patient_id": "p1", "observation_date": "2024-04-01", "age_months": 15,
         "measurement_type": "Height", "value": 78, "unit": "cm"},
        {"patient_id": "p1", "observation_date": "2024-01-01", "age_months": 12,
         "measurement_type": "Height", "value": 75, "unit": "cm"},
    ]))
    return path


class TestCalculationCommands:
    def test_bmi(self, runner):
        result = runner.invoke(cli, ["bmi", "10", "75"])

        assert result.exit_code == 0
        assert "17.8" in result.output

    def test_bmi_imperial(self, runner):
        result = runner.invoke(cli, ["bmi", "22.0462", "29.5276", "--weight-unit", "lbs", "--height-unit", "in"])

        assert result.exit_code == 0
        assert "17.8" in result.output

    def test_bmi_invalid_height(self, runner):
        result = runner.invoke(cli, ["bmi", "10", "0"])

        assert result.exit_code == 0
        assert "N/A" in result.output

    def test_age(self, runner):
        result = runner.invoke(cli, ["age", "2023-01-15", "2023-02-15"])

        assert result.exit_code == 0
        assert "1.00" in result.output

    def test_age_before_birth(self, runner):
        result = runner.invoke(cli, ["age", "2023-05-01", "2023-01-01"])
        assert "N/A" in result.output

    def test_convert(self, runner):
        result = runner.invoke(cli, ["convert", "10", "kg", "--to", "Imperial"])

        assert result.exit_code == 0
        assert "22 lbs" in result.output

    def test_convert_uses_configured_units(self, runner, monkeypatch):
        monkeypatch.setenv("GROWTHCHART_UNITS", "Imperial")

        result = runner.invoke(cli, ["convert", "100.04", "cm"])

        assert result.exit_code == 0
        assert " in" in result.output


class TestVelocityCommand:
    def test_series_table(self, runner, records_file):
        result = runner.invoke(cli, ["velocity", str(records_file)])

        assert result.exit_code == 0
        assert "Growth Velocity" in result.output
        assert "12.00" in result.output
        assert "13.50" in result.output

    def test_no_series(self, runner, tmp_path):
        path = tmp_path / "single.json"
        path.write_text(json.dumps([
            {"patient_id": "p1", "observation_date": "2024-01-01", "age_months": 12,
             "measurement_type": "Weight", "value": 10, "unit": "kg"},
        ]))

        result = runner.invoke(cli, ["velocity", str(path)])

        assert result.exit_code == 0
        assert "No velocity" in result.output

    def test_invalid_file(self, runner, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps([{"measurement_type": "Weight"}]))

        result = runner.invoke(cli, ["velocity", str(path)])

        assert result.exit_code != 0
        assert "Invalid records file" in result.output


class TestZScoreCommand:
    def test_at_median(self, runner, chart_file):
        result = runner.invoke(cli, ["zscore", "54.7244", "1", "--chart", str(chart_file)])

        assert result.exit_code == 0
        assert "0.00" in result.output
        assert "50.0" in result.output

    def test_out_of_range(self, runner, chart_file):
        result = runner.invoke(cli, ["zscore", "70", "12", "--chart", str(chart_file)])

        assert result.exit_code == 0
        assert "N/A" in result.output

    def test_chart_without_lms(self, runner, tmp_path, chart_payload):
        chart_payload["lmsParametersAvailable"] = None
        path = tmp_path / "percentiles.json"
        path.write_text(json.dumps(chart_payload))

        result = runner.invoke(cli, ["zscore", "55", "1", "--chart", str(path)])

        assert result.exit_code != 0
        assert "L, M and S" in result.output

    def test_malformed_chart(self, runner, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("[")

        result = runner.invoke(cli, ["zscore", "55", "1", "--chart", str(path)])

        assert result.exit_code != 0
        assert "Malformed" in result.output

    def test_relative_chart_from_reference_dir(self, runner, chart_file, monkeypatch):
        monkeypatch.setenv("GROWTHCHART_REFERENCE_DIR", str(chart_file.parent))

        result = runner.invoke(cli, ["zscore", "54.7244", "1", "--chart", chart_file.name])

        assert result.exit_code == 0
        assert "Length-for-age Boys" in result.output
        assert "0.00" in result.output

    def test_missing_chart(self, runner, tmp_path):
        result = runner.invoke(cli, ["zscore", "55", "1", "--chart", str(tmp_path / "nope.json")])

        assert result.exit_code != 0
        assert "Cannot read" in result.output


class TestRecordsCommand:
    @pytest.fixture
    def snapshot_file(self, tmp_path, store, patient, make_record):
        store.add_record(make_record(12, 10.0, MeasurementType.WEIGHT, "kg", patient_id=patient.id))
        store.add_record(make_record(12, 75.0, patient_id=patient.id, notes="clinic"))
        store.select_patient(patient.id)
        path = tmp_path / "snapshot.json"
        export_snapshot(store, output_path=path)
        return path

    def test_selected_patient(self, runner, snapshot_file):
        result = runner.invoke(cli, ["records", str(snapshot_file)])

        assert result.exit_code == 0
        assert "Test Patient" in result.output
        assert "17.8" in result.output
        assert "clinic" in result.output

    def test_imperial(self, runner, snapshot_file):
        result = runner.invoke(cli, ["records", str(snapshot_file), "--units", "Imperial"])

        assert result.exit_code == 0
        assert "lbs" in result.output

    def test_unknown_patient(self, runner, snapshot_file):
        result = runner.invoke(cli, ["records", str(snapshot_file), "--patient", "nobody"])

        assert result.exit_code != 0
        assert "No such patient" in result.output
