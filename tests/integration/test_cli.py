"""
Integration tests for the mountguard CLI.
"""

import json
from pathlib import Path

import yaml
from typer.testing import CliRunner

from mountguard import __version__
from mountguard.cli import app


runner = CliRunner()


def write_config(path: Path, **document) -> Path:
    path.write_text(yaml.safe_dump(document))
    return path


class TestVersion:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestInitConfig:
    """Tests for `mountguard init-config`."""

    def test_writes_defaults(self, temp_dir: Path) -> None:
        path = temp_dir / "mountguard.yaml"
        result = runner.invoke(app, ["init-config", str(path)])

        assert result.exit_code == 0
        data = yaml.safe_load(path.read_text())
        assert "minicopter.entity" in data["monitoredVehicleTypes"]
        assert data["requireAllItems"] is False

    def test_refuses_overwrite(self, temp_dir: Path) -> None:
        path = write_config(temp_dir / "mountguard.yaml", blockedItems=["x"])
        result = runner.invoke(app, ["init-config", str(path)])

        assert result.exit_code == 1
        assert yaml.safe_load(path.read_text()) == {"blockedItems": ["x"]}

    def test_force_overwrites(self, temp_dir: Path) -> None:
        path = write_config(temp_dir / "mountguard.yaml", blockedItems=["x"])
        result = runner.invoke(app, ["init-config", str(path), "--force"])

        assert result.exit_code == 0
        assert "heavy.plate.helmet" in yaml.safe_load(path.read_text())["blockedItems"]


class TestShowConfig:
    """Tests for `mountguard show-config`."""

    def test_json(self, temp_dir: Path) -> None:
        path = write_config(temp_dir / "c.yaml", blockedItems=["a", "a"], requireAllItems=True)
        result = runner.invoke(app, ["show-config", "--config", str(path), "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["blockedItems"] == ["a"]
        assert data["requireAllItems"] is True

    def test_missing_file_shows_defaults(self, temp_dir: Path) -> None:
        path = temp_dir / "absent.yaml"
        result = runner.invoke(app, ["show-config", "--config", str(path)])

        assert result.exit_code == 0
        assert "showing defaults" in result.stdout
        assert not path.exists()

    def test_table(self, temp_dir: Path) -> None:
        path = write_config(temp_dir / "c.yaml", monitoredVehicleTypes=["rowboat"])
        result = runner.invoke(app, ["show-config", "--config", str(path)])

        assert result.exit_code == 0
        assert "rowboat" in result.stdout
        assert "Monitoring 1 vehicle type(s)" in result.stdout


class TestCheckMount:
    """Tests for `mountguard check-mount`."""

    def test_denied(self, temp_dir: Path) -> None:
        path = write_config(
            temp_dir / "c.yaml",
            monitoredVehicleTypes=["minicopter.entity"],
            blockedItems=["heavy.plate.helmet"],
        )
        result = runner.invoke(
            app,
            [
                "check-mount",
                "minicopter.entity",
                "--wear",
                "heavy.plate.helmet=Heavy Plate Helmet",
                "--config",
                str(path),
                "--json",
            ],
        )

        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["allowed"] is False
        assert data["message"]["args"] == ["Heavy Plate Helmet"]
        assert data["delivered"] == ["Mount blocked. Remove these items before mounting:\nHeavy Plate Helmet"]

    def test_allowed(self, temp_dir: Path) -> None:
        path = write_config(temp_dir / "c.yaml", blockedItems=["heavy.plate.helmet"])
        result = runner.invoke(
            app,
            ["check-mount", "minicopter.entity", "-w", "heavy.plate.jacket", "-c", str(path)],
        )
        assert result.exit_code == 0
        assert "allowed" in result.stdout

    def test_bypass(self, temp_dir: Path) -> None:
        path = write_config(temp_dir / "c.yaml")
        result = runner.invoke(
            app,
            ["check-mount", "rowboat", "-w", "heavy.plate.pants", "--bypass", "-c", str(path)],
        )
        assert result.exit_code == 0

    def test_invalid_item_spec(self, temp_dir: Path) -> None:
        result = runner.invoke(
            app,
            ["check-mount", "rowboat", "-w", "=Helmet", "-c", str(temp_dir / "c.yaml")],
        )
        assert result.exit_code == 1
        assert "Invalid item" in result.stdout


class TestCheckEquip:
    """Tests for `mountguard check-equip`."""

    def test_denied_while_mounted(self, temp_dir: Path) -> None:
        path = write_config(temp_dir / "c.yaml")
        result = runner.invoke(
            app,
            ["check-equip", "heavy.plate.pants", "--mounted-on", "rowboat_skin2", "-c", str(path), "--json"],
        )

        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["rule_matched"] == "blocked_while_mounted"
        assert len(data["delivered"]) == 1

    def test_not_mounted(self, temp_dir: Path) -> None:
        path = write_config(temp_dir / "c.yaml")
        result = runner.invoke(app, ["check-equip", "heavy.plate.pants", "-c", str(path)])
        assert result.exit_code == 0

    def test_evaluation_error(self, temp_dir: Path, monkeypatch) -> None:
        def broken(*args, **kwargs):
            raise RuntimeError("hook exploded")

        monkeypatch.setattr("mountguard.cli.GearGuard.can_wear", broken)
        path = write_config(temp_dir / "c.yaml")

        result = runner.invoke(app, ["check-equip", "heavy.plate.pants", "-m", "rowboat", "-c", str(path)])
        assert result.exit_code == 1
        assert "Evaluation error: hook exploded" in result.stdout
        assert "Traceback" not in result.stdout

        result = runner.invoke(
            app, ["check-equip", "heavy.plate.pants", "-m", "rowboat", "-c", str(path), "--debug"]
        )
        assert result.exit_code == 1
        assert "Traceback" in result.stdout
