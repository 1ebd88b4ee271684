"""Tests for the precision table, GPU catalog and model presets."""

import pytest
from pydantic import ValidationError

from vram_estimator.catalog.gpus import GPU_BY_NAME, GPU_LIST, find_gpu, gpu_names
from vram_estimator.catalog.precision import (
    BYTES_PER_ELEMENT,
    Precision,
    bytes_per_element,
    parse_precision,
)
from vram_estimator.catalog.presets import (
    MODEL_PRESETS,
    ModelPreset,
    apply_preset,
    find_preset,
    inputs_from_preset,
)
from vram_estimator.errors import UnknownPrecisionError
from vram_estimator.inputs import CalculationInputs

# ===================================================================
# Precision
# ===================================================================


class TestPrecision:
    def test_every_member_has_width(self):
        assert set(BYTES_PER_ELEMENT) == set(Precision)

    @pytest.mark.parametrize(
        "precision, width",
        [
            (Precision.FP32, 4),
            (Precision.FP16, 2),
            (Precision.BF16, 2),
            (Precision.INT8, 1),
            (Precision.INT4, 0.5),
        ],
    )
    def test_widths(self, precision, width):
        assert bytes_per_element(precision) == width

    def test_unknown_key_is_fatal(self):
        with pytest.raises(UnknownPrecisionError):
            bytes_per_element("FP8")

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            BYTES_PER_ELEMENT[Precision.FP16] = 1

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("FP16", Precision.FP16),
            ("int4", Precision.INT4),
            ("bfloat16", Precision.BF16),
            ("float32", Precision.FP32),
            (Precision.INT8, Precision.INT8),
        ],
    )
    def test_parse(self, raw, expected):
        assert parse_precision(raw) == expected

    def test_parse_unknown(self):
        with pytest.raises(UnknownPrecisionError):
            parse_precision("float8_e4m3fn")


# ===================================================================
# GPUs
# ===================================================================


class TestGpuCatalog:
    def test_names_unique(self):
        assert len(GPU_BY_NAME) == len(GPU_LIST)

    def test_lookup(self):
        gpu = find_gpu("NVIDIA H200")
        assert gpu.memory == 141
        assert gpu.vendor == "NVIDIA"

    def test_lookup_miss(self):
        assert find_gpu("NotAGPU") is None
        assert find_gpu("") is None
        assert find_gpu(None) is None

    def test_vendor_filter(self):
        assert gpu_names("Ascend") == ["Ascend 910B3-64GB", "Ascend 910B4-64GB", "Ascend 910B4-32GB"]
        assert gpu_names()[0] == "NVIDIA B300"

    def test_entries_immutable(self):
        with pytest.raises(AttributeError):
            GPU_LIST[0].memory = 1


# ===================================================================
# Presets
# ===================================================================


class TestPresets:
    def test_all_presets_valid_inputs(self):
        for preset in MODEL_PRESETS:
            inputs = inputs_from_preset(preset)
            assert inputs.param_count == preset.params
            assert inputs.layers >= 1
            assert inputs.hidden_size >= 1

    def test_apply_preset(self):
        inputs = CalculationInputs(param_count=8, layers=32, hidden_size=4096, batch_size=4)
        applied = apply_preset(inputs, "Qwen3-32B")
        assert applied.param_count == 32
        assert applied.layers == 64
        assert applied.hidden_size == 5120
        # workload untouched, source inputs unchanged
        assert applied.batch_size == 4
        assert inputs.param_count == 8

    def test_apply_preset_keeps_attention(self):
        inputs = CalculationInputs.from_flat(
            is_gqa=True, kv_heads=8, attention_heads=64, param_count=8, layers=32, hidden_size=4096
        )
        assert apply_preset(inputs, "Qwen3-32B").attention == inputs.attention

    def test_apply_invalid_preset_object_rejected(self):
        inputs = CalculationInputs(param_count=8, layers=32, hidden_size=4096)
        with pytest.raises(ValidationError):
            apply_preset(inputs, ModelPreset("bad", -8, 0, -1))

    def test_apply_unknown_preset_is_noop(self):
        inputs = CalculationInputs(param_count=8, layers=32, hidden_size=4096)
        assert apply_preset(inputs, "No Such Model") is inputs

    def test_inputs_from_preset_overrides(self):
        inputs = inputs_from_preset(
            "GLM-4.6", precision="INT4", is_gqa=True, kv_heads=8, attention_heads=96
        )
        assert inputs.param_count == 358
        assert inputs.precision == Precision.INT4
        assert inputs.is_gqa

    def test_inputs_from_unknown_preset(self):
        with pytest.raises(KeyError):
            inputs_from_preset("No Such Model")

    def test_find_preset(self):
        assert find_preset("DeepSeek-V3.2 (671B MoE)").params == 671
        assert find_preset("missing") is None
