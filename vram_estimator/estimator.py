"""Closed-form VRAM estimate for transformer inference.

Pure computation, no I/O.  All magnitudes are GB with GB = bytes / 1e9, so a
parameter count in billions times bytes-per-element is already in GB.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, localcontext

from pydantic import BaseModel, ConfigDict

from vram_estimator import config
from vram_estimator.catalog.precision import bytes_per_element
from vram_estimator.errors import InvalidInputError
from vram_estimator.inputs import CalculationInputs

logger = logging.getLogger(__name__)

BYTES_PER_GB = 1e9

CENT = Decimal("0.01")

# Key and value tensors per layer
KV_TENSORS_PER_LAYER = 2


# ---------------------------------------------------------------------------
# Tunables
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EstimatorTunables:
    """Heuristic coefficients for the overhead term.

    Defaults come from ``vram_estimator.config`` (env-overridable).
    """

    base_overhead_gb: float = field(default_factory=lambda: config.BASE_SYSTEM_OVERHEAD_GB)
    activation_divisor: float = field(default_factory=lambda: config.ACTIVATION_DIVISOR)
    buffer_percentage: float = field(default_factory=lambda: config.BUFFER_PERCENTAGE)

    def __post_init__(self) -> None:
        if not math.isfinite(self.base_overhead_gb) or self.base_overhead_gb < 0:
            raise InvalidInputError("base_overhead_gb", self.base_overhead_gb, "must be finite and >= 0")
        if not math.isfinite(self.activation_divisor) or self.activation_divisor <= 0:
            raise InvalidInputError("activation_divisor", self.activation_divisor, "must be finite and > 0")
        if not math.isfinite(self.buffer_percentage) or self.buffer_percentage < 0:
            raise InvalidInputError("buffer_percentage", self.buffer_percentage, "must be finite and >= 0")


# ---------------------------------------------------------------------------
# Result models
# ---------------------------------------------------------------------------

CATEGORY_WEIGHTS = "weights"
CATEGORY_KV_CACHE = "kv_cache"
CATEGORY_OVERHEAD = "overhead"

# category id → (display name, color token, description)
BREAKDOWN_STYLE: dict[str, tuple[str, str, str]] = {
    CATEGORY_WEIGHTS: ("Model Weights", "#3b82f6", "Static memory for params"),
    CATEGORY_KV_CACHE: ("KV Cache", "#8b5cf6", "Dynamic context memory"),
    CATEGORY_OVERHEAD: ("Overhead & Buffer", "#94a3b8", "System overhead"),
}


class BreakdownItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: str
    name: str
    value: float
    color: str
    description: str


class CalculationResult(BaseModel):
    """Estimated memory in GB, each magnitude rounded to 2 decimal places."""

    model_config = ConfigDict(frozen=True)

    weight_memory: float
    kv_cache_memory: float
    activation_memory: float
    total_memory: float
    breakdown: tuple[BreakdownItem, BreakdownItem, BreakdownItem]


def round_gb(value: float) -> float:
    """Round half-up to 2 decimal places, on the float's shortest decimal form."""
    exact = Decimal(repr(value))
    with localcontext() as ctx:
        # integer digits plus two decimals must fit in the context
        ctx.prec = max(ctx.prec, exact.adjusted() + 4)
        return float(exact.quantize(CENT, rounding=ROUND_HALF_UP))


# ---------------------------------------------------------------------------
# Components
# ---------------------------------------------------------------------------


def weight_memory_gb(inputs: CalculationInputs) -> float:
    return inputs.param_count * bytes_per_element(inputs.precision)


def kv_cache_memory_gb(inputs: CalculationInputs) -> float:
    """Key + value tensors for every layer, token and sequence in the batch."""
    total_bytes = (
        KV_TENSORS_PER_LAYER
        * inputs.layers
        * inputs.hidden_size
        * inputs.seq_length
        * inputs.batch_size
        * bytes_per_element(inputs.kv_precision)
        * inputs.attention.kv_factor
    )
    return total_bytes / BYTES_PER_GB


def activation_memory_gb(
    inputs: CalculationInputs,
    weights_gb: float,
    kv_gb: float,
    tunables: EstimatorTunables,
) -> float:
    """Runtime base cost + scaled-down activations + safety buffer."""
    activation_bytes = (
        inputs.batch_size
        * inputs.seq_length
        * inputs.hidden_size
        * inputs.layers
        * bytes_per_element(inputs.precision)
    )
    activations = activation_bytes / tunables.activation_divisor / BYTES_PER_GB
    buffer = (weights_gb + kv_gb) * tunables.buffer_percentage
    return tunables.base_overhead_gb + activations + buffer


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def estimate(
    inputs: CalculationInputs | dict,
    tunables: EstimatorTunables | None = None,
) -> CalculationResult:
    """Estimate inference VRAM for *inputs*.

    Dicts are validated into ``CalculationInputs`` first, so malformed
    values raise ``pydantic.ValidationError`` before any arithmetic runs.
    """
    if isinstance(inputs, dict):
        inputs = CalculationInputs.model_validate(inputs)
    if tunables is None:
        tunables = EstimatorTunables()

    weights = weight_memory_gb(inputs)
    kv_cache = kv_cache_memory_gb(inputs)
    activation = activation_memory_gb(inputs, weights, kv_cache, tunables)
    total = weights + kv_cache + activation
    if not math.isfinite(total):
        raise InvalidInputError("total_memory", total, "estimate overflows a finite float")

    logger.debug(
        "Estimate: weights=%.4f kv=%.4f overhead=%.4f total=%.4f GB (kv_factor=%.4f)",
        weights, kv_cache, activation, total, inputs.attention.kv_factor,
    )

    values = {
        CATEGORY_WEIGHTS: round_gb(weights),
        CATEGORY_KV_CACHE: round_gb(kv_cache),
        CATEGORY_OVERHEAD: round_gb(activation),
    }
    breakdown = tuple(
        BreakdownItem(category=category, name=name, value=values[category], color=color, description=desc)
        for category, (name, color, desc) in BREAKDOWN_STYLE.items()
    )

    return CalculationResult(
        weight_memory=values[CATEGORY_WEIGHTS],
        kv_cache_memory=values[CATEGORY_KV_CACHE],
        activation_memory=values[CATEGORY_OVERHEAD],
        total_memory=round_gb(total),
        breakdown=breakdown,
    )
