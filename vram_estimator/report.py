"""Run the full estimate → plan flow for one set of inputs."""

import logging

from pydantic import BaseModel, ConfigDict

from vram_estimator.estimator import CalculationResult, EstimatorTunables, estimate
from vram_estimator.inputs import CalculationInputs
from vram_estimator.planner import DeploymentResult, plan_deployment

logger = logging.getLogger(__name__)

# (upper bound GB inclusive, tier id, label); checked in order
GENERIC_TIERS: tuple[tuple[float, str, str], ...] = (
    (24, "consumer", "Single High-End Consumer GPU (24GB)"),
    (48, "workstation", "Prosumer/Workstation Card (48GB)"),
    (80, "datacenter", "Data Center A100/H100 (80GB)"),
    (160, "dual_datacenter", "2x Data Center Cards (160GB+)"),
)
CLUSTER_TIER = ("cluster", "Multi-GPU Cluster Required")


class GenericRecommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    tier: str
    label: str


class Report(BaseModel):
    model_config = ConfigDict(frozen=True)

    inputs: CalculationInputs
    result: CalculationResult
    deployment: DeploymentResult | None = None
    generic: GenericRecommendation | None = None

    @property
    def summary(self) -> str:
        if self.deployment is not None:
            d = self.deployment
            return f"{d.num_nodes}x nodes ({d.total_cards} GPUs, {d.gpu.name})"
        return self.generic.label if self.generic else ""


def generic_recommendation(total_memory: float) -> GenericRecommendation:
    """Coarse hardware class for a requirement when no GPU was chosen."""
    for limit, tier, label in GENERIC_TIERS:
        if total_memory <= limit:
            return GenericRecommendation(tier=tier, label=label)
    tier, label = CLUSTER_TIER
    return GenericRecommendation(tier=tier, label=label)


def calculate(
    inputs: CalculationInputs,
    tunables: EstimatorTunables | None = None,
) -> Report:
    """Estimate memory, then plan a deployment if a GPU is selected.

    An unselected or unknown GPU yields a generic recommendation instead.
    """
    result = estimate(inputs, tunables)

    deployment = None
    if inputs.selected_gpu:
        deployment = plan_deployment(result.total_memory, inputs.selected_gpu, inputs.gpus_per_node)
        if deployment is None:
            logger.warning("GPU '%s' is not in the catalog; using generic guidance", inputs.selected_gpu)

    generic = None if deployment is not None else generic_recommendation(result.total_memory)

    return Report(inputs=inputs, result=result, deployment=deployment, generic=generic)
