"""
Tests for the fleet configuration loader, item/result records, logging setup
and the run_allocation command line.

Run with: pytest tests/test_fleet.py -v
"""

import json
import logging
from pathlib import Path

import pytest

from scripts.run_allocation import main as run_allocation_main
from src.allocation.config import AllocatorConfig
from src.allocation.engine import AllocationEngine
from src.allocation.errors import ConfigError, InvalidItemError, NoCarriersError
from src.allocation.items import Item
from src.fleet.config import FleetConfig, load_config, parse_capacity
from src.fleet.logger import ROOT_LOGGER, configure_logging
from src.fleet.records import load_items, parse_items, result_to_dict, save_result

REPO_ROOT = Path(__file__).resolve().parents[1]


# ── Test: configuration ───────────────────────────────────────────


class TestFleetConfig:
    """Tests for YAML loading and CLI overrides."""

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "fleet.yaml"
        path.write_text(
            "carriers:\n"
            "  V2: 50\n"
            "  V1: 80\n"
            "allocator:\n"
            "  max_attempts: 5\n",
            encoding="utf-8",
        )
        config = load_config(path)

        assert list(config.carriers) == ["V2", "V1"]
        assert config.carriers["V1"] == 80
        assert config.allocator == AllocatorConfig(max_attempts=5, split_incompatible=True)
        assert [c.id for c in config.build_carriers()] == ["V2", "V1"]

    def test_default_file_ships_three_carriers(self):
        config = load_config(REPO_ROOT / "config" / "default_fleet.yaml")
        assert list(config.carriers) == ["Vehicle-0", "Vehicle-1", "Vehicle-2"]
        assert config.allocator.max_attempts == 3

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        config = load_config(path)

        assert config == FleetConfig()
        with pytest.raises(NoCarriersError):
            config.build_carriers()

    def test_unknown_allocator_key(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("allocator:\n  retries: 3\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_carriers_must_be_mapping(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("carriers:\n  - V1\n  - V2\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_with_capacities(self):
        config = FleetConfig(carriers={"V1": 10, "V2": 20})
        updated = config.with_capacities({"V2": 5, "V3": 7})

        assert updated.carriers == {"V1": 10, "V2": 5, "V3": 7}
        assert config.carriers == {"V1": 10, "V2": 20}

    def test_parse_capacity(self):
        assert parse_capacity("Vehicle-3=60") == ("Vehicle-3", 60)
        assert parse_capacity(" V1 = 8") == ("V1", 8)

    @pytest.mark.parametrize("override", ["V1", "=10", "V1=ten"])
    def test_parse_capacity_invalid(self, override):
        with pytest.raises(ConfigError):
            parse_capacity(override)

    def test_unknown_top_level_key(self, tmp_path):
        path = tmp_path / "typo.yaml"
        path.write_text("carrier:\n  V1: 10\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="carrier"):
            load_config(path)

    @pytest.mark.parametrize("attempts", [0, -1, "three"])
    def test_invalid_max_attempts(self, tmp_path, attempts):
        path = tmp_path / "bad.yaml"
        path.write_text(f"carriers:\n  V1: 10\nallocator:\n  max_attempts: {attempts}\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_allocator_config_validates_directly(self):
        with pytest.raises(ConfigError):
            AllocatorConfig(max_attempts=0)
        with pytest.raises(ConfigError):
            AllocatorConfig(split_incompatible="yes")

    def test_default_fleet(self):
        config = FleetConfig.default()
        assert config.carriers == {"Vehicle-0": 100, "Vehicle-1": 100, "Vehicle-2": 100}
        assert config.allocator == AllocatorConfig()


# ── Test: records ─────────────────────────────────────────────────


class TestItemRecords:
    """Tests for parsing input records."""

    def test_parse_list(self):
        items = parse_items(
            [
                {"id": "A", "weight": 20, "incompatibilities": ["B"]},
                {"id": "B", "weight": 5},
            ]
        )
        assert items == [Item("A", 20, {"B"}), Item("B", 5)]

    def test_parse_goods_wrapper(self):
        items = parse_items({"goods": [{"id": "A", "weight": 1, "incompatibilities": []}]})
        assert items == [Item("A", 1)]

    def test_wrapper_without_goods_key(self):
        with pytest.raises(InvalidItemError):
            parse_items({"items": []})

    @pytest.mark.parametrize(
        "record",
        [
            {"weight": 3},
            {"id": "A"},
            {"id": "A", "weight": 0},
            {"id": "A", "weight": -2},
            {"id": "A", "weight": 2.5},
            {"id": "A", "weight": "3"},
            {"id": "A", "weight": 3, "incompatibilities": "B"},
            ["A", 3],
        ],
    )
    def test_malformed_record(self, record):
        with pytest.raises(InvalidItemError):
            parse_items([record])

    def test_duplicate_ids(self):
        with pytest.raises(InvalidItemError):
            parse_items([{"id": "A", "weight": 1}, {"id": "A", "weight": 2}])

    def test_id_colliding_with_split_part(self):
        with pytest.raises(InvalidItemError):
            parse_items([{"id": "B", "weight": 4}, {"id": "B_part0", "weight": 30}])

    def test_load_sample_file(self):
        items = load_items(REPO_ROOT / "config" / "sample_goods.json")
        ids = [i.id for i in items]

        assert ids[0] == "Fish"
        assert "Milk_box1" in ids
        assert all(i.weight > 0 for i in items)

    def test_load_items_from_disk(self, tmp_path):
        path = tmp_path / "goods.json"
        path.write_text(json.dumps({"goods": [{"id": "X", "weight": 4, "incompatibilities": ["Y_part1"]}]}))
        items = load_items(path)

        assert items == [Item("X", 4, {"Y"})]


class TestResultExport:
    """Tests for result serialisation."""

    @pytest.fixture
    def partial_result(self):
        items = [Item("A", 20, {"B"}), Item("B", 20, {"A"})]
        return AllocationEngine().allocate_with_diagnostics(items, {"V1": 40})

    def test_result_to_dict(self, partial_result):
        data = result_to_dict(partial_result)

        assert data["status"] == "PARTIAL"
        assert data["assignment"] == {"V1": [{"id": "A", "weight": 20, "incompatibilities": ["B"]}]}
        assert data["unassigned"] == [
            {"id": "B_part0", "weight": 10, "incompatibilities": ["A"], "reason": "CONFLICT"},
            {"id": "B_part1", "weight": 10, "incompatibilities": ["A"], "reason": "CONFLICT"},
        ]

    def test_save_result(self, partial_result, tmp_path):
        path = save_result(partial_result, tmp_path / "out" / "results.json")

        assert path.exists()
        assert json.loads(path.read_text(encoding="utf-8")) == result_to_dict(partial_result)


# ── Test: logging ─────────────────────────────────────────────────


@pytest.fixture
def package_logger():
    logger = logging.getLogger(ROOT_LOGGER)
    saved = (list(logger.handlers), logger.level, logger.propagate)
    logger.handlers.clear()
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_handlers_attached_once(self, package_logger):
        configure_logging("debug")
        configure_logging("debug")

        assert len(package_logger.handlers) == 1
        assert package_logger.level == logging.DEBUG
        assert package_logger.propagate is False

    def test_file_handler_writes(self, package_logger, tmp_path):
        log_file = tmp_path / "logs" / "allocation.log"
        configure_logging("INFO", log_file)

        logging.getLogger("src.allocation.engine").info("hello from engine")
        for handler in package_logger.handlers:
            handler.flush()

        assert "hello from engine" in log_file.read_text(encoding="utf-8")


# ── Test: command line ────────────────────────────────────────────


class TestRunAllocationCli:
    """Tests for scripts/run_allocation.py."""

    @pytest.fixture
    def items_path(self, tmp_path):
        path = tmp_path / "goods.json"
        path.write_text(
            json.dumps({"goods": [{"id": "A", "weight": 20, "incompatibilities": ["B"]}, {"id": "B", "weight": 20}]}),
            encoding="utf-8",
        )
        return path

    def test_missing_config_uses_default_fleet(self, package_logger, items_path, tmp_path, capsys):
        output = tmp_path / "results.json"
        run_allocation_main(
            [
                "--items", str(items_path),
                "--config", str(tmp_path / "missing.yaml"),
                "--output", str(output),
                "--log-level", "CRITICAL",
            ]
        )

        out = capsys.readouterr().out
        assert "default three-vehicle fleet" in out
        assert "Vehicle-2" in out
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["status"] == "COMPLETE"
        assert list(data["assignment"]) == ["Vehicle-0", "Vehicle-1", "Vehicle-2"]

    def test_empty_fleet_exits_with_message(self, package_logger, items_path, tmp_path, capsys):
        config = tmp_path / "fleet.yaml"
        config.write_text("allocator:\n  max_attempts: 2\n", encoding="utf-8")

        with pytest.raises(SystemExit) as exc_info:
            run_allocation_main(["--items", str(items_path), "--config", str(config), "--log-level", "CRITICAL"])

        assert exc_info.value.code == 2
        assert "At least one carrier" in capsys.readouterr().err

    def test_capacity_override_supplies_carriers(self, package_logger, items_path, tmp_path, capsys):
        config = tmp_path / "fleet.yaml"
        config.write_text("allocator:\n  max_attempts: 2\n", encoding="utf-8")

        run_allocation_main(
            [
                "--items", str(items_path),
                "--config", str(config),
                "--capacity", "Truck=25",
                "--capacity", "Van=25",
                "--log-level", "CRITICAL",
            ]
        )

        assert "Truck" in capsys.readouterr().out
