"""Tests for the command-line entry point."""

import json
from unittest.mock import patch

import pytest

from vram_estimator.main import build_inputs, build_parser, main
from vram_estimator.sources.dbgpu_source import MemoryMismatch


def test_preset_with_gpu(capsys):
    main(["--preset", "Qwen3-32B", "--gpu", "NVIDIA H100"])
    out = capsys.readouterr().out
    assert "Total estimated VRAM: 79.03 GB" in out
    assert "1x NVIDIA H100" in out
    assert "fits within total VRAM" in out
    assert "Node 1: 1/8 GPUs active" in out


def test_explicit_flags_generic(capsys):
    main(["--params", "8", "--layers", "32", "--hidden-size", "4096"])
    out = capsys.readouterr().out
    assert "21.83 GB" in out
    assert "Generic recommendation: Single High-End Consumer GPU (24GB)" in out


def test_json_output(capsys):
    main(["--params", "8", "--layers", "32", "--hidden-size", "4096", "--precision", "INT4", "--json"])
    data = json.loads(capsys.readouterr().out)
    assert data["result"]["weight_memory"] == 4.0


def test_gqa_flags():
    args = build_parser().parse_args(
        ["--preset", "GLM-4.6", "--kv-heads", "8", "--attention-heads", "96", "--batch-size", "4"]
    )
    inputs = build_inputs(args)
    assert inputs.is_gqa
    assert inputs.attention.kv_factor == pytest.approx(8 / 96)
    assert inputs.batch_size == 4


def test_explicit_flags_override_preset():
    args = build_parser().parse_args(["--preset", "Qwen3-32B", "--params", "30"])
    assert build_inputs(args).param_count == 30


def test_missing_model_arguments():
    with pytest.raises(SystemExit) as exc_info:
        main(["--params", "8"])
    assert exc_info.value.code == 2


def test_invalid_input_exits():
    with pytest.raises(SystemExit) as exc_info:
        main(["--params", "8", "--layers", "32", "--hidden-size", "4096", "--batch-size", "0"])
    assert exc_info.value.code == 2


def test_export_catalogs(tmp_path):
    main(["--export-catalogs", "--export-dir", str(tmp_path)])
    assert (tmp_path / "gpus.json").exists()
    assert (tmp_path / "presets.json").exists()


def test_export_report(tmp_path, capsys):
    main(["--preset", "Qwen3-32B", "--export-dir", str(tmp_path)])
    assert json.loads((tmp_path / "report.json").read_text())["result"]["total_memory"] == 79.03


def test_verify_gpus_mismatch(capsys):
    with patch(
        "vram_estimator.main.verify_catalog_memory",
        return_value=[MemoryMismatch("NVIDIA H100", 80, 94)],
    ):
        with pytest.raises(SystemExit) as exc_info:
            main(["--verify-gpus"])
    assert exc_info.value.code == 1
    assert "NVIDIA H100: catalog 80 GB, dbgpu 94 GB" in capsys.readouterr().out


def test_hf_model_unavailable():
    with patch("vram_estimator.sources.huggingface.fetch_hf_config", return_value=None):
        with pytest.raises(SystemExit) as exc_info:
            main(["--hf-model", "org/missing"])
    assert exc_info.value.code == 1


@pytest.mark.parametrize("flag", ["--kv-heads", "--attention-heads"])
def test_head_counts_required_together(flag):
    with pytest.raises(SystemExit) as exc_info:
        main(["--preset", "GLM-4.6", flag, "8"])
    assert exc_info.value.code == 2


def test_preset_and_hf_model_are_exclusive():
    with pytest.raises(SystemExit) as exc_info:
        build_parser().parse_args(["--preset", "Qwen3-32B", "--hf-model", "Qwen/Qwen3-32B"])
    assert exc_info.value.code == 2
