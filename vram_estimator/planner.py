"""Fit an estimated memory requirement onto whole GPUs and server nodes."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict

from vram_estimator.catalog.gpus import GPUModel, find_gpu
from vram_estimator.errors import InvalidInputError

logger = logging.getLogger(__name__)

REASON_FITS = "fits within total VRAM"
REASON_TP4 = "optimized for TP=4 (avoiding 3 cards)"
REASON_TP8 = "optimized for TP=8 (avoiding irregular splits)"


# ---------------------------------------------------------------------------
# Tensor-parallel rounding rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TensorParallelRule:
    """Round an irregular card count up to a TP-friendly one.

    *applies* receives ``(min_cards, gpus_per_node)``.
    """

    applies: Callable[[int, int], bool]
    cards: int
    reason: str


# Evaluated in order; first match wins, no match keeps the VRAM minimum.
TP_RULES: tuple[TensorParallelRule, ...] = (
    TensorParallelRule(
        applies=lambda cards, per_node: cards == 3 and per_node >= 4,
        cards=4,
        reason=REASON_TP4,
    ),
    TensorParallelRule(
        applies=lambda cards, per_node: 4 < cards < 8 and per_node >= 8,
        cards=8,
        reason=REASON_TP8,
    ),
)


def apply_tp_rules(
    min_cards: int,
    gpus_per_node: int,
    rules: tuple[TensorParallelRule, ...] = TP_RULES,
) -> tuple[int, str]:
    """Return ``(recommended_cards, reason)`` for a VRAM-only card count."""
    for rule in rules:
        if rule.applies(min_cards, gpus_per_node):
            return rule.cards, rule.reason
    return min_cards, REASON_FITS


# ---------------------------------------------------------------------------
# Result models
# ---------------------------------------------------------------------------


class DeploymentResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    gpu: GPUModel
    total_cards: int  # active GPUs
    num_nodes: int
    cards_per_node: int
    total_vram: float  # GB provisioned (whole nodes)
    reason: str


@dataclass(frozen=True)
class NodeLayout:
    """One server node: how many of its slots hold an active GPU."""

    index: int
    slots: int
    active: int

    @property
    def empty(self) -> int:
        return self.slots - self.active


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def _validate(total_memory: float, gpus_per_node: int) -> None:
    if not isinstance(total_memory, (int, float)) or isinstance(total_memory, bool):
        raise InvalidInputError("total_memory", total_memory, "must be a number")
    if not math.isfinite(total_memory) or total_memory < 0:
        raise InvalidInputError("total_memory", total_memory, "must be finite and >= 0")
    if not isinstance(gpus_per_node, int) or isinstance(gpus_per_node, bool) or gpus_per_node < 1:
        raise InvalidInputError("gpus_per_node", gpus_per_node, "must be an integer >= 1")


def plan_deployment(
    total_memory: float,
    gpu_name: str | None,
    gpus_per_node: int,
    rules: tuple[TensorParallelRule, ...] = TP_RULES,
) -> DeploymentResult | None:
    """Recommend a card and node count for *total_memory* GB on *gpu_name*.

    Returns ``None`` when the GPU is not in the catalog; the caller falls
    back to ``generic_recommendation``.  Otherwise raises
    ``InvalidInputError`` for a negative/non-finite requirement or a node
    density below 1.
    """
    gpu = find_gpu(gpu_name)
    if gpu is None:
        logger.debug("GPU %r not in catalog, no deployment plan", gpu_name)
        return None

    _validate(total_memory, gpus_per_node)

    # Fractional GPUs are never recommended, and a plan always has one card
    min_cards = max(1, math.ceil(total_memory / gpu.memory))
    cards, reason = apply_tp_rules(min_cards, gpus_per_node, rules)
    num_nodes = math.ceil(cards / gpus_per_node)

    logger.debug(
        "Plan for %.2f GB on %s: min=%d -> %d cards, %d node(s) (%s)",
        total_memory, gpu.name, min_cards, cards, num_nodes, reason,
    )

    return DeploymentResult(
        gpu=gpu,
        total_cards=cards,
        num_nodes=num_nodes,
        cards_per_node=gpus_per_node,
        total_vram=num_nodes * gpus_per_node * gpu.memory,
        reason=reason,
    )


def node_layout(deployment: DeploymentResult) -> list[NodeLayout]:
    """Split active cards across nodes, filling each node before the next."""
    layout = []
    remaining = deployment.total_cards
    for index in range(deployment.num_nodes):
        active = min(remaining, deployment.cards_per_node)
        layout.append(NodeLayout(index=index, slots=deployment.cards_per_node, active=active))
        remaining -= active
    return layout
