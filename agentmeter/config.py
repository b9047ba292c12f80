"""Configuration loading for agentmeter (.agentmeter.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".agentmeter.yml"
DEFAULT_DATA_DIR = ".agentmeter"
DEFAULT_INCLUDE: tuple[str, ...] = ("Examples/agents/**/*.md",)
DEFAULT_EXCLUDE: tuple[str, ...] = ("README.md", "TEMPLATE-*.md")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class CorpusConfig:
    """Which markdown files form the template corpus."""

    include: List[str] = field(default_factory=lambda: list(DEFAULT_INCLUDE))
    exclude: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE))


@dataclass
class ScoringConfig:
    """Overrides applied on top of the default scoring policy."""

    weights: Dict[str, float] = field(default_factory=dict)
    required_sections: List[str] = field(default_factory=list)


@dataclass
class GateConfig:
    """Minimum scores enforced by the quality gates."""

    min_overall: float = 70.0
    min_yaml: float = 80.0
    min_sections: float = 65.0
    min_workflow: float = 60.0
    min_examples: int = 2


@dataclass
class HistoryConfig:
    """Location and retention of the version history file."""

    path: Path
    trend_limit: int = 30
    lock_timeout: float = 10.0


@dataclass
class VersioningConfig:
    """Thresholds used when classifying document changes."""

    minor_threshold: int = 3


@dataclass
class ReportConfig:
    """Report output settings."""

    output_dir: Path
    top_issues: int = 10
    top_strengths: int = 5


@dataclass
class AutoFixConfig:
    """Values inserted by the auto-fixer when frontmatter fields are missing."""

    default_model: str = "sonnet"
    orchestrator_model: str = "opus"


@dataclass
class AgentMeterConfig:
    """Represents the settings defined in .agentmeter.yml."""

    root: Path
    data_dir: Path
    history: HistoryConfig
    reports: ReportConfig
    corpus: CorpusConfig = field(default_factory=CorpusConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    gates: GateConfig = field(default_factory=GateConfig)
    versioning: VersioningConfig = field(default_factory=VersioningConfig)
    autofix: AutoFixConfig = field(default_factory=AutoFixConfig)


def default_config(root: Path) -> AgentMeterConfig:
    """Return the configuration used when no .agentmeter.yml is present."""
    root = root.resolve()
    data_dir = root / DEFAULT_DATA_DIR
    return AgentMeterConfig(
        root=root,
        data_dir=data_dir,
        history=HistoryConfig(path=data_dir / "history.json"),
        reports=ReportConfig(output_dir=data_dir / "reports"),
    )


def load_config(config_path: Path) -> AgentMeterConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()
    config = default_config(root)

    if not config_file.exists():
        return config

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    data_dir_str = _as_str(data.get("data_dir"))
    if data_dir_str:
        config.data_dir = root / data_dir_str
        config.history.path = config.data_dir / "history.json"
        config.reports.output_dir = config.data_dir / "reports"

    corpus_data = _as_dict(data.get("corpus"))
    if corpus_data:
        if "include" in corpus_data:
            config.corpus.include = _as_str_list(corpus_data.get("include"))
        if "exclude" in corpus_data:
            config.corpus.exclude = _as_str_list(corpus_data.get("exclude"))

    scoring_data = _as_dict(data.get("scoring"))
    if scoring_data:
        weights_data = _as_dict(scoring_data.get("weights"))
        weights: Dict[str, float] = {}
        for key, value in weights_data.items():
            weight = _as_float(value)
            if weight is None:
                raise ConfigError(f"scoring.weights.{key} must be a number")
            weights[str(key)] = weight
        config.scoring.weights = weights
        if "required_sections" in scoring_data:
            sections = _as_str_list(scoring_data.get("required_sections"))
            if not sections:
                raise ConfigError("scoring.required_sections must list at least one section")
            config.scoring.required_sections = sections

    gates_data = _as_dict(data.get("gates"))
    if gates_data:
        gates = config.gates
        gates.min_overall = _number_or(gates_data.get("min_overall"), gates.min_overall)
        gates.min_yaml = _number_or(gates_data.get("min_yaml"), gates.min_yaml)
        gates.min_sections = _number_or(gates_data.get("min_sections"), gates.min_sections)
        gates.min_workflow = _number_or(gates_data.get("min_workflow"), gates.min_workflow)
        min_examples = _as_int(gates_data.get("min_examples"))
        if min_examples is not None:
            gates.min_examples = min_examples

    history_data = _as_dict(data.get("history"))
    if history_data:
        path_str = _as_str(history_data.get("path"))
        if path_str:
            config.history.path = root / path_str
        trend_limit = _as_int(history_data.get("trend_limit"))
        if trend_limit is not None:
            if trend_limit < 1:
                raise ConfigError("history.trend_limit must be positive")
            config.history.trend_limit = trend_limit
        config.history.lock_timeout = _number_or(
            history_data.get("lock_timeout"), config.history.lock_timeout
        )

    versioning_data = _as_dict(data.get("versioning"))
    if versioning_data:
        threshold = _as_int(versioning_data.get("minor_threshold"))
        if threshold is not None:
            config.versioning.minor_threshold = threshold

    reports_data = _as_dict(data.get("reports"))
    if reports_data:
        output_dir = _as_str(reports_data.get("output_dir"))
        if output_dir:
            config.reports.output_dir = root / output_dir
        top_issues = _as_int(reports_data.get("top_issues"))
        if top_issues is not None:
            config.reports.top_issues = top_issues
        top_strengths = _as_int(reports_data.get("top_strengths"))
        if top_strengths is not None:
            config.reports.top_strengths = top_strengths

    autofix_data = _as_dict(data.get("autofix"))
    if autofix_data:
        config.autofix.default_model = (
            _as_str(autofix_data.get("default_model")) or config.autofix.default_model
        )
        config.autofix.orchestrator_model = (
            _as_str(autofix_data.get("orchestrator_model")) or config.autofix.orchestrator_model
        )

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _number_or(value: Any, default: float) -> float:
    number = _as_float(value)
    return default if number is None else number


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "AgentMeterConfig",
    "CONFIG_FILENAME",
    "AutoFixConfig",
    "ConfigError",
    "CorpusConfig",
    "GateConfig",
    "HistoryConfig",
    "ReportConfig",
    "ScoringConfig",
    "VersioningConfig",
    "default_config",
    "load_config",
]
