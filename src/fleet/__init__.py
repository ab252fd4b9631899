from src.fleet.config import FleetConfig, load_config
from src.fleet.records import load_items, parse_items, save_result

__all__ = ["FleetConfig", "load_config", "load_items", "parse_items", "save_result"]
