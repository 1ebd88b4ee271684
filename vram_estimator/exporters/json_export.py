"""Export reference catalogs and reports to JSON files for the frontend."""

import json
import logging
from dataclasses import asdict
from datetime import UTC, datetime
from pathlib import Path

from vram_estimator import config
from vram_estimator.catalog.gpus import GPU_LIST
from vram_estimator.catalog.precision import BYTES_PER_ELEMENT
from vram_estimator.catalog.presets import MODEL_PRESETS
from vram_estimator.report import Report

logger = logging.getLogger(__name__)


def _resolve_dir(output_dir: Path | None) -> Path:
    if output_dir is None:
        output_dir = config.EXPORT_DIR
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


def export_precisions(output_dir: Path | None = None) -> Path:
    """Export the precision table to precisions.json."""
    output_dir = _resolve_dir(output_dir)

    rows = [
        {"precision": precision.value, "bytes_per_element": width}
        for precision, width in BYTES_PER_ELEMENT.items()
    ]

    path = output_dir / "precisions.json"
    path.write_text(json.dumps(rows, indent=2) + "\n")
    logger.info("Exported %d precisions to %s", len(rows), path)
    return path


def export_gpus(output_dir: Path | None = None) -> Path:
    """Export the GPU catalog to gpus.json, in catalog order."""
    output_dir = _resolve_dir(output_dir)

    rows = [asdict(gpu) for gpu in GPU_LIST]

    path = output_dir / "gpus.json"
    path.write_text(json.dumps(rows, indent=2) + "\n")
    logger.info("Exported %d GPUs to %s", len(rows), path)
    return path


def export_presets(output_dir: Path | None = None) -> Path:
    """Export model presets to presets.json."""
    output_dir = _resolve_dir(output_dir)

    rows = [asdict(preset) for preset in MODEL_PRESETS]

    path = output_dir / "presets.json"
    path.write_text(json.dumps(rows, indent=2) + "\n")
    logger.info("Exported %d model presets to %s", len(rows), path)
    return path


def export_metadata(output_dir: Path | None = None) -> Path:
    """Export run metadata to metadata.json."""
    output_dir = _resolve_dir(output_dir)

    metadata = {"updated_at": datetime.now(UTC).isoformat()}
    path = output_dir / "metadata.json"
    path.write_text(json.dumps(metadata, indent=2) + "\n")
    logger.info("Exported metadata to %s", path)
    return path


def export_report(report: Report, output_dir: Path | None = None, name: str = "report.json") -> Path:
    """Export a single estimate/plan report."""
    output_dir = _resolve_dir(output_dir)

    path = output_dir / name
    path.write_text(report.model_dump_json(indent=2) + "\n")
    logger.info("Exported report to %s", path)
    return path


def export_catalogs(output_dir: Path | None = None) -> dict[str, Path]:
    """Export every reference catalog plus metadata."""
    return {
        "precisions": export_precisions(output_dir),
        "gpus": export_gpus(output_dir),
        "presets": export_presets(output_dir),
        "metadata": export_metadata(output_dir),
    }
