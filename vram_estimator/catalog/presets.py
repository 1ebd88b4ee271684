"""Reference model architectures used to pre-populate estimator inputs.

Several layer/hidden sizes are estimates where the vendor has not published
a config; they are marked below.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType

from vram_estimator.inputs import CalculationInputs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelPreset:
    name: str
    params: float  # billions
    layers: int
    hidden_size: int
    description: str = ""


MODEL_PRESETS: tuple[ModelPreset, ...] = (
    ModelPreset(
        "DeepSeek-V3.2 (671B MoE)", 671, 61, 7168,
        "DeepSeek V3 (MoE). Uses total params for weights. "
        "Activations lower due to sparse active params.",
    ),
    ModelPreset("Qwen3-235B", 235, 104, 12288, "Qwen 3 235B Model (Estimated Specs)"),  # estimated
    ModelPreset("GPT-oss-120B", 120, 96, 10240, "Open Source GPT 120B Variant"),  # estimated
    ModelPreset("Qwen3-80B", 80, 80, 8192, "Qwen 3 80B Model (Estimated Specs)"),
    ModelPreset(
        "Kimi-k2-Thinking", 1024, 96, 16384,
        "Moonshot AI Kimi k2 (Thinking). Total Params: 1024B.",
    ),  # estimated for 1T scale
    ModelPreset("Minimax-M2", 100, 88, 9126, "Minimax M2 (Estimated 100B)"),
    ModelPreset("MImo-309B", 309, 120, 14336, "MImo 309B (Estimated)"),
    ModelPreset("Qwen3-32B", 32, 64, 5120, "Qwen 3 32B Model (Estimated)"),
    ModelPreset("GLM-4.6", 358, 80, 12288, "GLM-4.6. Total Params: 358B."),  # estimated
)

PRESET_BY_NAME: MappingProxyType[str, ModelPreset] = MappingProxyType(
    {preset.name: preset for preset in MODEL_PRESETS}
)


def find_preset(name: str) -> ModelPreset | None:
    return PRESET_BY_NAME.get(name)


def apply_preset(inputs: CalculationInputs, preset: str | ModelPreset) -> CalculationInputs:
    """Return *inputs* with the preset's params, layers and hidden size.

    An unknown preset name leaves the inputs untouched.
    """
    if isinstance(preset, str):
        found = find_preset(preset)
        if found is None:
            logger.debug("Unknown preset %r, inputs unchanged", preset)
            return inputs
        preset = found

    # model_copy skips validation; rebuild so a bad preset is rejected here
    return CalculationInputs.model_validate(
        {
            **inputs.model_dump(),
            "param_count": float(preset.params),
            "layers": preset.layers,
            "hidden_size": preset.hidden_size,
        }
    )


def inputs_from_preset(preset: str | ModelPreset, **overrides) -> CalculationInputs:
    """Build fresh inputs from a preset, with any field overridden by keyword."""
    if isinstance(preset, str):
        found = find_preset(preset)
        if found is None:
            raise KeyError(f"Unknown model preset: {preset!r}")
        preset = found

    fields = {
        "param_count": float(preset.params),
        "layers": preset.layers,
        "hidden_size": preset.hidden_size,
    }
    fields.update(overrides)
    return CalculationInputs.from_flat(**fields)
