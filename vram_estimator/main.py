"""CLI entry point for the LLM VRAM estimator."""

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from vram_estimator.catalog.gpus import GPU_LIST
from vram_estimator.catalog.precision import Precision
from vram_estimator.catalog.presets import MODEL_PRESETS, find_preset
from vram_estimator.errors import InvalidInputError, UnsupportedConfig
from vram_estimator.exporters.json_export import export_catalogs, export_report
from vram_estimator.inputs import CalculationInputs
from vram_estimator.planner import node_layout
from vram_estimator.report import Report, calculate
from vram_estimator.sources.dbgpu_source import verify_catalog_memory
from vram_estimator.sources.huggingface import fetch_model

logger = logging.getLogger(__name__)

PRECISION_CHOICES = [p.value for p in Precision]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Estimate LLM inference VRAM and plan a GPU deployment")

    model = parser.add_argument_group("model")
    source = model.add_mutually_exclusive_group()
    source.add_argument("--preset", choices=[p.name for p in MODEL_PRESETS], help="Model preset")
    source.add_argument("--hf-model", help="HuggingFace repo id to read the architecture from")
    model.add_argument("--params", type=float, help="Parameter count in billions")
    model.add_argument("--layers", type=int, help="Number of transformer layers")
    model.add_argument("--hidden-size", type=int, help="Hidden dimension")
    model.add_argument("--precision", choices=PRECISION_CHOICES, help="Weight precision (default: FP16)")
    model.add_argument("--kv-heads", type=int, help="KV heads (enables grouped-query attention)")
    model.add_argument("--attention-heads", type=int, help="Attention heads (with --kv-heads)")

    workload = parser.add_argument_group("workload")
    workload.add_argument("--seq-length", type=int, default=8192)
    workload.add_argument("--batch-size", type=int, default=1)
    workload.add_argument("--kv-precision", choices=PRECISION_CHOICES, default=Precision.FP16.value)

    hardware = parser.add_argument_group("hardware")
    hardware.add_argument("--gpu", choices=[g.name for g in GPU_LIST], help="GPU to plan for")
    hardware.add_argument("--gpus-per-node", type=int, default=8)

    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    parser.add_argument("--export-dir", type=Path, help="Also write report.json to this directory")
    parser.add_argument(
        "--export-catalogs",
        action="store_true",
        help="Write precision/GPU/preset catalogs as JSON and exit",
    )
    parser.add_argument(
        "--verify-gpus",
        action="store_true",
        help="Compare catalog GPU memory with dbgpu and exit",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
    )
    return parser


def build_inputs(args: argparse.Namespace) -> CalculationInputs:
    """Merge preset / HuggingFace / explicit flags, later sources winning."""
    fields: dict = {}

    if args.hf_model:
        info = fetch_model(args.hf_model)
        fields.update(
            param_count=info.preset.params,
            layers=info.preset.layers,
            hidden_size=info.preset.hidden_size,
        )
        if info.attention.kind == "gqa":
            fields.update(
                is_gqa=True,
                kv_heads=info.attention.kv_heads,
                attention_heads=info.attention.attention_heads,
            )
        if info.precision is not None:
            fields["precision"] = info.precision

    if args.preset:
        preset = find_preset(args.preset)
        fields.update(param_count=preset.params, layers=preset.layers, hidden_size=preset.hidden_size)

    explicit = {
        "param_count": args.params,
        "layers": args.layers,
        "hidden_size": args.hidden_size,
        "precision": args.precision,
    }
    fields.update({k: v for k, v in explicit.items() if v is not None})

    if args.kv_heads is not None and args.attention_heads is not None:
        fields.update(is_gqa=True, kv_heads=args.kv_heads, attention_heads=args.attention_heads)

    fields.update(
        seq_length=args.seq_length,
        batch_size=args.batch_size,
        kv_precision=args.kv_precision,
        selected_gpu=args.gpu,
        gpus_per_node=args.gpus_per_node,
    )
    return CalculationInputs.from_flat(**fields)


def format_report(report: Report) -> str:
    r = report.result
    lines = [
        f"Total estimated VRAM: {r.total_memory:.2f} GB",
        *(f"  {item.name:<18} {item.value:>10.2f} GB" for item in r.breakdown),
    ]
    if report.deployment is not None:
        d = report.deployment
        lines += [
            "",
            f"Deployment plan: {d.num_nodes}x node(s), {d.total_cards}x {d.gpu.name}",
            f"  Capacity: {d.total_vram:g} GB ({d.cards_per_node} GPUs per node)",
            f"  Reason:   {d.reason}",
        ]
        for node in node_layout(d):
            lines.append(f"  Node {node.index + 1}: {node.active}/{node.slots} GPUs active")
    elif report.generic is not None:
        lines += ["", f"Generic recommendation: {report.generic.label}"]
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    if args.export_catalogs:
        for name, path in export_catalogs(args.export_dir).items():
            logger.info("Exported %s -> %s", name, path)
        return

    if args.verify_gpus:
        mismatches = verify_catalog_memory()
        for m in mismatches:
            print(f"{m.gpu_name}: catalog {m.catalog_gb:g} GB, dbgpu {m.dbgpu_gb:g} GB")
        sys.exit(1 if mismatches else 0)

    if not (args.preset or args.hf_model) and None in (args.params, args.layers, args.hidden_size):
        parser.error("give --preset, --hf-model, or all of --params/--layers/--hidden-size")
    if (args.kv_heads is None) != (args.attention_heads is None):
        parser.error("--kv-heads and --attention-heads must be given together")

    try:
        inputs = build_inputs(args)
        report = calculate(inputs)
    except ValidationError as e:
        logger.error("Invalid input: %s", e)
        sys.exit(2)
    except (InvalidInputError, UnsupportedConfig, RuntimeError) as e:
        logger.error("%s", e)
        sys.exit(1)

    if args.export_dir is not None:
        export_report(report, args.export_dir)

    if args.json:
        print(report.model_dump_json(indent=2))
    else:
        print(format_report(report))


if __name__ == "__main__":
    main()
