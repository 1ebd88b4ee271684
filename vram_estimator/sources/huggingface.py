"""HuggingFace model source: architecture presets from the HF API + config.json."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from vram_estimator import config as settings
from vram_estimator.catalog.precision import Precision, parse_precision
from vram_estimator.catalog.presets import ModelPreset
from vram_estimator.errors import UnknownPrecisionError, UnsupportedConfig
from vram_estimator.inputs import CalculationInputs, GroupedQueryAttention, StandardAttention

logger = logging.getLogger(__name__)

HF_BASE_URL = "https://huggingface.co"

# Configs that wrap the language backbone in a text_config dict
MULTIMODAL_MODEL_TYPES = {"kimi_k25", "llava", "qwen2_vl", "mllama"}


@dataclass(frozen=True)
class HFModelInfo:
    """Everything the estimator can take from a HuggingFace repo."""

    hf_model_id: str
    preset: ModelPreset
    attention: StandardAttention | GroupedQueryAttention
    precision: Precision | None
    context_length: int | None

    def to_inputs(self, **overrides) -> CalculationInputs:
        fields = {
            "param_count": self.preset.params,
            "layers": self.preset.layers,
            "hidden_size": self.preset.hidden_size,
            "attention": self.attention,
        }
        if self.precision is not None:
            fields["precision"] = self.precision
        fields.update(overrides)
        return CalculationInputs(**fields)


def _headers() -> dict[str, str]:
    if settings.HF_TOKEN:
        return {"Authorization": f"Bearer {settings.HF_TOKEN}"}
    return {}


def fetch_hf_config(hf_id: str) -> dict | None:
    """Fetch a HuggingFace model config.json for architecture details."""
    url = f"{HF_BASE_URL}/{hf_id}/raw/main/config.json"
    try:
        response = httpx.get(url, headers=_headers(), timeout=30.0, follow_redirects=True)
        response.raise_for_status()
        config = response.json()
        logger.info("Fetched config.json for %s", hf_id)
        return config
    except (httpx.HTTPError, ValueError):
        logger.debug("No config.json available for %s", hf_id)
        return None


def fetch_hf_param_count(hf_id: str) -> float | None:
    """Fetch total parameter count from the HF API (safetensors metadata).

    Returns total params in billions, or None if unavailable.
    """
    url = f"{HF_BASE_URL}/api/models/{hf_id}"
    try:
        response = httpx.get(url, headers=_headers(), timeout=30.0, follow_redirects=True)
        response.raise_for_status()
        data = response.json()
    except (httpx.HTTPError, ValueError):
        logger.debug("Could not fetch HF API param count for %s", hf_id)
        return None

    by_dtype = (data.get("safetensors") or {}).get("parameters") or {}
    if not by_dtype:
        return None
    # Sum all dtypes to get total param count
    params_b = round(sum(by_dtype.values()) / 1e9, 1)
    logger.info("HF API param count for %s: %.1fB", hf_id, params_b)
    return params_b


def resolve_text_config(config: dict) -> dict:
    """Unwrap multimodal configs to get the text backbone."""
    model_type = config.get("model_type", "")
    if model_type in MULTIMODAL_MODEL_TYPES or (
        "num_hidden_layers" not in config and isinstance(config.get("text_config"), dict)
    ):
        text_config = config.get("text_config")
        if not isinstance(text_config, dict):
            raise ValueError(
                f"model_type='{model_type}' requires 'text_config' dict, "
                f"but it is {'missing' if text_config is None else type(text_config).__name__}"
            )
        return text_config
    return config


def _require(config: dict, key: str, hf_id: str) -> int:
    val = config.get(key)
    if val is None:
        raise UnsupportedConfig(hf_id, f"required field '{key}' is missing")
    return int(val)


def approximate_dense_params(config: dict, hf_id: str = "<config>") -> float:
    """Dense-transformer param count in billions from config dimensions.

    Used only when the HF API has no safetensors metadata.  Counts embeddings,
    grouped-query attention projections, a gated MLP and layer norms.
    """
    hidden = _require(config, "hidden_size", hf_id)
    layers = _require(config, "num_hidden_layers", hf_id)
    vocab = _require(config, "vocab_size", hf_id)
    intermediate = config.get("intermediate_size") or 4 * hidden
    n_heads = config.get("num_attention_heads") or 1
    n_kv_heads = config.get("num_key_value_heads") or n_heads
    head_dim = config.get("head_dim") or hidden // n_heads

    attention = 2 * hidden * n_heads * head_dim + 2 * hidden * n_kv_heads * head_dim
    mlp = 3 * hidden * intermediate
    norms = 2 * hidden
    embed = vocab * hidden
    lm_head = 0 if config.get("tie_word_embeddings", False) else vocab * hidden

    total = embed + lm_head + layers * (attention + mlp + norms) + hidden
    return round(total / 1e9, 1)


def detect_precision(config: dict) -> Precision | None:
    """Weight precision from torch_dtype or quantization_config, if recognised."""
    quant_config = config.get("quantization_config")
    if quant_config is None:
        dtype = config.get("torch_dtype") or config.get("dtype")
        if not dtype:
            return None
        try:
            return parse_precision(dtype)
        except UnknownPrecisionError:
            logger.warning("Unrecognised torch_dtype=%r", dtype)
            return None

    method = quant_config.get("quant_method", "")
    bits = quant_config.get("bits")
    if method == "fp8":
        # 1-byte storage, same width as INT8
        return Precision.INT8
    if method == "compressed-tensors":
        for group in quant_config.get("config_groups", {}).values():
            bits = group.get("weights", {}).get("num_bits")
            if bits:
                break
    if bits == 4:
        return Precision.INT4
    if bits == 8:
        return Precision.INT8

    logger.warning("Unrecognised quantization_config (quant_method=%r)", method)
    return None


def attention_from_config(config: dict) -> StandardAttention | GroupedQueryAttention:
    n_heads = config.get("num_attention_heads")
    n_kv_heads = config.get("num_key_value_heads")
    if n_heads and n_kv_heads and 0 < int(n_kv_heads) < int(n_heads):
        return GroupedQueryAttention(kv_heads=int(n_kv_heads), attention_heads=int(n_heads))
    return StandardAttention()


def model_info_from_config(
    hf_id: str,
    raw_config: dict,
    params_b: float | None = None,
    name: str | None = None,
) -> HFModelInfo:
    """Build an ``HFModelInfo`` from an already-fetched config.json.

    Raises ``UnsupportedConfig`` when layer count or hidden size is missing.
    """
    try:
        text_config = resolve_text_config(raw_config)
    except ValueError as e:
        raise UnsupportedConfig(hf_id, str(e)) from e

    layers = _require(text_config, "num_hidden_layers", hf_id)
    hidden = _require(text_config, "hidden_size", hf_id)

    if params_b is None:
        params_b = approximate_dense_params(text_config, hf_id)
        logger.info("Approximated %s at %.1fB params from config dimensions", hf_id, params_b)

    # Quantization config usually sits on the outer config for wrapped models
    precision = detect_precision(raw_config) or detect_precision(text_config)

    preset = ModelPreset(
        name=name or hf_id.split("/")[-1],
        params=params_b,
        layers=layers,
        hidden_size=hidden,
        description=f"From HuggingFace {hf_id} ({text_config.get('model_type', 'unknown')})",
    )
    return HFModelInfo(
        hf_model_id=hf_id,
        preset=preset,
        attention=attention_from_config(text_config),
        precision=precision,
        context_length=text_config.get("max_position_embeddings"),
    )


def fetch_model(hf_id: str, name: str | None = None) -> HFModelInfo:
    """Fetch config.json and param count for *hf_id* and build a preset.

    Raises:
        RuntimeError: If config.json is unavailable.
        UnsupportedConfig: If the config lacks layer count or hidden size.
    """
    config = fetch_hf_config(hf_id)
    if not config:
        raise RuntimeError(f"No config.json available for {hf_id}")

    params_b = fetch_hf_param_count(hf_id)
    info = model_info_from_config(hf_id, config, params_b=params_b, name=name)
    logger.info(
        "  -> %s: %.1fB params, %d layers, hidden=%d, %s",
        info.preset.name,
        info.preset.params,
        info.preset.layers,
        info.preset.hidden_size,
        info.attention.kind,
    )
    return info
