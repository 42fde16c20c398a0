"""JSON output for run summaries."""

import json
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Optional

from .config import OutputConfig
from .models import RunSummary


def summary_to_dict(summary: RunSummary) -> dict:
    """Convert a run summary to a JSON-serializable dict.

    Histogram keys become strings (JSON object keys) and the derived
    average is included.
    """
    data = asdict(summary)
    data["histogram"] = {str(k): v for k, v in summary.histogram.items()}
    data["avg_rounds"] = summary.avg_rounds
    return data


def save_run_summary(
    summary: RunSummary,
    output_dir: str | Path,
    config: Optional[OutputConfig] = None,
    name: Optional[str] = None
) -> Path:
    """Save a run summary to JSON.

    Args:
        summary: Summary to save
        output_dir: Directory to save to
        config: Output configuration
        name: Optional file name (without extension)

    Returns:
        Path to saved file
    """
    config = config or OutputConfig()
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    if name is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        name = f"summary_{summary.strategy}_n{summary.size}_{timestamp}"

    data = summary_to_dict(summary)
    data["generated_at"] = datetime.now().isoformat()

    filepath = output_dir / f"{name}.json"
    with open(filepath, "w") as f:
        json.dump(data, f, indent=config.indent)

    return filepath


def load_run_summary(filepath: str | Path) -> RunSummary:
    """Load a run summary saved by save_run_summary."""
    with open(filepath) as f:
        data = json.load(f)

    data.pop("avg_rounds", None)
    data.pop("generated_at", None)
    data["histogram"] = {int(k): v for k, v in data.get("histogram", {}).items()}
    return RunSummary(**data)
