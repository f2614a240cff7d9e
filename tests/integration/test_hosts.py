"""
Integration tests for the CLI and HTTP hosts
"""

import os
import sys

import numpy as np
import pytest
import yaml
from fastapi.testclient import TestClient

project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.append(project_root)

from common.config import load_params
from console import service
from console.server import create_app
from console.service import build_controller
from terrain.store import RegionStore
from tests.factories import RS, make_region


@pytest.fixture
def config_file(tmp_path, settings, registry):
    root = tmp_path / "regions"
    store = RegionStore(settings, registry, root=str(root))
    for i in range(2):
        for j in range(2):
            store.save_region(make_region(i, j, fill=float(i * 10 + j)))
    cfg = tmp_path / "params.yaml"
    cfg.write_text(yaml.safe_dump({
        "terrain": {"region_size": RS, "regions_root": str(root)},
        "logging": {"level": "WARNING", "format": "plain"},
    }))
    return cfg


class TestConfig:
    """YAML parameters over defaults"""

    def test_missing_file_gives_defaults(self, tmp_path):
        params = load_params(str(tmp_path / "none.yaml"))
        assert params["terrain"]["region_size"] == 256
        assert params["server"]["port"] == 8000

    def test_partial_file_is_merged(self, config_file):
        params = load_params(str(config_file))
        assert params["terrain"]["region_size"] == RS
        assert params["terrain"]["region_format"] == ".r32"


class TestCLI:
    """python -m console.service"""

    def test_test_command(self, config_file, tmp_path, capsys):
        f = tmp_path / "four.r32"
        f.write_bytes(bytes(4 * RS * RS * 4))
        code = service.main(["--config", str(config_file), "test", str(f)])
        assert code == 0
        assert "W=2, H=2" in capsys.readouterr().out

    def test_failure_exit_code(self, config_file, capsys):
        code = service.main(["--config", str(config_file), "rescale", "5", "1"])
        assert code == 1
        assert "Max Value is less than Min Value" in capsys.readouterr().out

    def test_changes_are_persisted(self, config_file, tmp_path):
        assert service.main(["--config", str(config_file), "rescale", "-1", "-1"]) == 0
        controller = build_controller(load_params(str(config_file)))
        for r in controller.tools.grid.regions():
            assert np.all(r.heightmap == -1.0)


class TestHTTP:
    """FastAPI host"""

    @pytest.fixture
    def client(self, config_file):
        return TestClient(create_app(build_controller(load_params(str(config_file)))))

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "ok"
        assert body["regions"] == 4
        assert body["bounds"] == {"x": 0, "y": 0, "num_x": 2, "num_y": 2}
        assert ".raw" in body["formats"]

    def test_regions(self, client):
        regions = client.get("/regions").json()["regions"]
        assert [(r["x"], r["y"]) for r in regions] == [(0, 0), (0, 1), (1, 0), (1, 1)]
        assert regions[3]["max"] == 11.0

    def test_command_ok(self, client):
        resp = client.post("/commands/stitch", json={"args": ["4"]})
        assert resp.status_code == 200
        assert resp.json()["ok"] is True

    def test_command_failure_is_400(self, client):
        resp = client.post("/commands/stitch-part", json={"args": ["4", "5", "5", "0", "0"]})
        assert resp.status_code == 400
        assert resp.json()["ok"] is False

    def test_unknown_command_is_400(self, client):
        resp = client.post("/commands/flatten", json={"args": []})
        assert resp.status_code == 400

    def test_command_table(self, client):
        names = [c["name"] for c in client.get("/commands").json()["commands"]]
        assert "rescale-part" in names
