"""Tests for the estimate → plan flow and generic recommendations."""

import pytest

from vram_estimator.inputs import CalculationInputs
from vram_estimator.report import calculate, generic_recommendation

LLAMA_8B = dict(param_count=8, layers=32, hidden_size=4096, seq_length=8192, batch_size=1)


def test_plan_when_gpu_selected():
    report = calculate(CalculationInputs(**LLAMA_8B, selected_gpu="NVIDIA H100", gpus_per_node=8))
    assert report.result.total_memory == 21.83
    assert report.deployment is not None
    assert report.deployment.total_cards == 1
    assert report.deployment.total_vram == 640
    assert report.generic is None
    assert "NVIDIA H100" in report.summary


def test_generic_when_no_gpu():
    report = calculate(CalculationInputs(**LLAMA_8B))
    assert report.deployment is None
    assert report.generic.tier == "consumer"
    assert report.summary == "Single High-End Consumer GPU (24GB)"


def test_generic_when_gpu_unknown(caplog):
    report = calculate(CalculationInputs(**LLAMA_8B, selected_gpu="NotAGPU"))
    assert report.deployment is None
    assert report.generic is not None
    assert "NotAGPU" in caplog.text


def test_planner_uses_rounded_total():
    # 32B FP16 at 8K context: 79.03 GB → two 48 GB cards
    inputs = CalculationInputs(
        param_count=32, layers=64, hidden_size=5120, selected_gpu="NVIDIA L40S", gpus_per_node=8
    )
    report = calculate(inputs)
    assert report.result.total_memory == 79.03
    assert report.deployment.total_cards == 2


@pytest.mark.parametrize(
    "total, tier",
    [
        (0.5, "consumer"),
        (24, "consumer"),
        (24.01, "workstation"),
        (48, "workstation"),
        (80, "datacenter"),
        (120, "dual_datacenter"),
        (160, "dual_datacenter"),
        (160.01, "cluster"),
        (5000, "cluster"),
    ],
)
def test_generic_tiers(total, tier):
    assert generic_recommendation(total).tier == tier
