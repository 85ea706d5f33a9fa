"""YAML configuration loader."""
import logging
from pathlib import Path
from typing import Any

import yaml

from .scenario import ScenarioConfig
from .schemas import GameRules

logger = logging.getLogger(__name__)


def _read_yaml(path: Path, kind: str) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"{kind} file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f)

    if data is None:
        raise ValueError(f"Empty {kind.lower()} file: {path}")
    if not isinstance(data, dict):
        raise ValueError(f"{kind} file must contain a mapping: {path}")
    return data


def load_rules(rules_path: str | Path | None = None) -> GameRules:
    """
    Load and validate game rules from a YAML file.

    Keys left out of the file keep their default values. Without a path
    the standard rules are returned.

    Args:
        rules_path: Path to YAML rules file, or None

    Returns:
        Validated GameRules instance

    Raises:
        FileNotFoundError: If rules file doesn't exist
        ValueError: If rules are invalid
        yaml.YAMLError: If YAML parsing fails
    """
    if rules_path is None:
        return GameRules()

    rules_path = Path(rules_path)
    data = _read_yaml(rules_path, "Rules")

    try:
        rules = GameRules.from_dict(data)
    except Exception as e:
        raise ValueError(f"Invalid rules: {e}") from e

    logger.debug("Loaded rules from %s", rules_path)
    return rules


def load_scenario(scenario_path: str | Path) -> tuple[ScenarioConfig, GameRules]:
    """
    Load and validate a scenario and the rules it references.

    Args:
        scenario_path: Path to YAML scenario file

    Returns:
        (scenario, rules). Rules are the standard rules unless the
        scenario names a rules file.

    Raises:
        FileNotFoundError: If the scenario or its rules file doesn't exist
        ValueError: If the scenario or rules are invalid
        yaml.YAMLError: If YAML parsing fails
    """
    scenario_path = Path(scenario_path)
    data = _read_yaml(scenario_path, "Scenario")

    try:
        scenario = ScenarioConfig.from_dict(data)
    except Exception as e:
        raise ValueError(f"Invalid scenario: {e}") from e

    rules = load_rules(scenario.rules_path(scenario_path))
    logger.debug("Loaded scenario %s (room %s)", scenario_path, scenario.room_code)
    return scenario, rules
