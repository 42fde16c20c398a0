"""Configuration for deduction trials and batch runs."""

from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional
import json
import os

from dotenv import load_dotenv

from .bitmask import MAX_SIZE
from .errors import ConfigError

STRATEGY_NAMES = ("basic", "belief")


@dataclass
class TrialConfig:
    """Configuration shared by every trial of a run."""
    # Number of left (and right) items
    size: int = 10

    # "basic" (first-candidate heuristics) or "belief" (odds tracking)
    strategy: str = "belief"

    # Run the validators after every round and fail fast on a violation
    validate: bool = False

    # Log the full trial state at the end of every round
    verbose: bool = False

    def check(self) -> None:
        """Raise ConfigError if the configuration cannot be run."""
        if not 2 <= self.size <= MAX_SIZE:
            raise ConfigError(f"size must be in [2, {MAX_SIZE}], got {self.size}")
        if self.strategy not in STRATEGY_NAMES:
            raise ConfigError(
                f"unknown strategy {self.strategy!r}, expected one of {', '.join(STRATEGY_NAMES)}"
            )


@dataclass
class RunConfig:
    """Configuration for a batch of independent trials."""
    trial: TrialConfig = field(default_factory=TrialConfig)
    num_runs: int = 1000

    # Random seed for reproducibility (None = fresh entropy)
    seed: Optional[int] = None

    # Concurrent workspace slots (None = os.cpu_count())
    workers: Optional[int] = None

    def check(self) -> None:
        self.trial.check()
        if self.num_runs < 1:
            raise ConfigError(f"num_runs must be positive, got {self.num_runs}")
        if self.workers is not None and self.workers < 1:
            raise ConfigError(f"workers must be positive, got {self.workers}")


@dataclass
class OutputConfig:
    """Configuration for output."""
    output_dir: Optional[str] = None
    indent: int = 2


@dataclass
class Config:
    """Complete configuration."""
    run: RunConfig = field(default_factory=RunConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def apply_env_overrides(config: Config, dotenv_path: Optional[str | Path] = None) -> Config:
    """Override configuration values from MATCHEM_* environment variables.

    A .env file is loaded first (without replacing variables that are
    already set in the process environment).

    Args:
        config: Configuration to update in place
        dotenv_path: Optional explicit .env file

    Returns:
        The same config object
    """
    load_dotenv(dotenv_path)

    env = os.environ
    try:
        if "MATCHEM_SIZE" in env:
            config.run.trial.size = int(env["MATCHEM_SIZE"])
        if "MATCHEM_NUM_RUNS" in env:
            config.run.num_runs = int(env["MATCHEM_NUM_RUNS"])
        if "MATCHEM_SEED" in env:
            config.run.seed = int(env["MATCHEM_SEED"])
        if "MATCHEM_WORKERS" in env:
            config.run.workers = int(env["MATCHEM_WORKERS"])
    except ValueError as e:
        raise ConfigError(f"invalid MATCHEM_* integer: {e}") from e

    if "MATCHEM_STRATEGY" in env:
        config.run.trial.strategy = env["MATCHEM_STRATEGY"].strip()
    if "MATCHEM_VALIDATE" in env:
        config.run.trial.validate = _parse_bool(env["MATCHEM_VALIDATE"])
    if "MATCHEM_VERBOSE" in env:
        config.run.trial.verbose = _parse_bool(env["MATCHEM_VERBOSE"])

    return config


def load_config(path: Optional[str | Path] = None) -> Config:
    """Load configuration from JSON file or return defaults."""
    if path is None:
        return Config()

    try:
        with open(path) as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"cannot read configuration file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid JSON in {path}: {e}") from e

    config = Config()

    if "run" in data:
        run_data = dict(data["run"])
        trial_data = run_data.pop("trial", {})
        try:
            config.run = RunConfig(trial=TrialConfig(**trial_data), **run_data)
        except TypeError as e:
            raise ConfigError(f"invalid run configuration in {path}: {e}") from e
    if "output" in data:
        try:
            config.output = OutputConfig(**data["output"])
        except TypeError as e:
            raise ConfigError(f"invalid output configuration in {path}: {e}") from e

    return config


def save_config(config: Config, path: str | Path) -> None:
    """Save configuration to JSON file."""
    with open(path, "w") as f:
        json.dump(asdict(config), f, indent=2)
