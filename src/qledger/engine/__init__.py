"""Scenario configuration and execution."""

from qledger.engine.config import ConfigLoadError, ScenarioConfig, ScenarioStep, load_scenario_config
from qledger.engine.runner import ScenarioError, ScenarioResult, ScenarioRunner, StepOutcome

__all__ = [
    "ConfigLoadError",
    "ScenarioConfig",
    "ScenarioError",
    "ScenarioResult",
    "ScenarioRunner",
    "ScenarioStep",
    "StepOutcome",
    "load_scenario_config",
]
