"""
End-to-end test of the batch entry point on local files.

Run with: python -m pytest _tests/test_main.py -v
"""

import json
import logging

import pytest

from School_Buffer_Analysis import main
from School_Buffer_Analysis.models.data_models import LayerType


# ═══════════════════════════════════════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════════════════════════════════════


def _write_json(path, payload):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload), encoding="utf-8")


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Workspace with official and community schools, hospitals and police."""
    _write_json(
        tmp_path / "Data" / "official_schools.geojson",
        {
            "type": "FeatureCollection",
            "features": [
                {
                    "type": "Feature",
                    "geometry": {"type": "Point", "coordinates": [-64.1888, -31.4201]},
                    "properties": {"id": 1, "nombre": "Escuela Central"},
                },
                {
                    "type": "Feature",
                    "geometry": None,
                    "properties": {"id": 2, "nombre": "Escuela Sin Punto"},
                },
            ],
        },
    )
    _write_json(
        tmp_path / "Data" / "community_schools.json",
        {
            "elements": [
                {
                    "type": "way",
                    "id": 10,
                    "tags": {"name": "Escuela Central"},
                    "geometry": [
                        {"lat": -31.4199, "lon": -64.1890},
                        {"lat": -31.4199, "lon": -64.1886},
                        {"lat": -31.4201, "lon": -64.1884},
                        {"lat": -31.4203, "lon": -64.1886},
                        {"lat": -31.4203, "lon": -64.1890},
                    ],
                }
            ]
        },
    )
    _write_json(
        tmp_path / "Data" / "hospitals.geojson",
        {
            "type": "FeatureCollection",
            "features": [
                {
                    "type": "Feature",
                    "geometry": {"type": "Point", "coordinates": [-64.1888, -31.4201]},
                    "properties": {"nombre": "Hospital Central"},
                }
            ],
        },
    )
    _write_json(
        tmp_path / "Data" / "police.json",
        {"elements": [{"type": "node", "id": 5, "lat": -31.4201, "lon": -64.1888}]},
    )
    monkeypatch.setattr(main, "WORKSPACE_ROOT", tmp_path)
    yield tmp_path

    # setup_logging() attaches handlers to the package logger
    package_logger = logging.getLogger("School_Buffer_Analysis")
    for handler in list(package_logger.handlers):
        handler.close()
        package_logger.removeHandler(handler)


# ═══════════════════════════════════════════════════════════════════════════
# TESTS
# ═══════════════════════════════════════════════════════════════════════════


class TestLoadLayer:
    """Test layer file loading."""

    def test_missing_layer_is_empty(self, workspace):
        logger = logging.getLogger("test")
        assert main.load_layer(LayerType.RISK_ZONES, "Data/nope.geojson", logger) == []

    def test_overpass_json_layer(self, workspace):
        logger = logging.getLogger("test")
        features = main.load_layer(LayerType.POLICE, "Data/police.json", logger)
        assert [f.id for f in features] == ["osm_5"]

    def test_geojson_layer(self, workspace):
        logger = logging.getLogger("test")
        features = main.load_layer(LayerType.HOSPITALS, "Data/hospitals.geojson", logger)
        assert len(features) == 1
        assert features[0].name == "Hospital Central"


class TestRunBufferAnalysis:
    """Test the batch workflow on local files."""

    def test_summary(self, workspace):
        summary = main.run_buffer_analysis()

        assert summary["zone_count"] == 5
        assert summary["schools"] == 1
        assert summary["hybrid_schools"] == 1
        assert summary["appended_schools"] == 0
        assert summary["totals"]["schools"] == 1
        assert summary["totals"]["hospitals"] == 1
        assert summary["totals"]["police"] == 1
        assert summary["totals"]["fire_stations"] == 0
        assert summary["zones"][0]["total"] == 3
        assert summary["total_in_all_zones"] == 3
        assert summary["approximate_rings"] is False

    def test_outputs_written(self, workspace):
        summary = main.run_buffer_analysis()
        output_dir = workspace / "Output"
        assert (output_dir / "buffer_zones.geojson").exists()
        assert (output_dir / "zone_statistics.csv").exists()
        assert (output_dir / "merged_schools.geojson").exists()
        assert set(summary["outputs"]) == {"zones", "statistics", "schools"}

    def test_log_folder_created(self, workspace):
        main.run_buffer_analysis()
        run_folders = list((workspace / "logs").iterdir())
        assert len(run_folders) == 1
        assert (run_folders[0] / "main.log").exists()
