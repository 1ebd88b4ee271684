"""GPU reference catalog.

Memory sizes are vendor-published capacities in GB.  The NVIDIA entries can
be cross-checked against the TechPowerUp database with
``vram_estimator.sources.dbgpu_source.verify_catalog_memory``.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True)
class GPUModel:
    name: str
    memory: float  # GB
    vendor: str


GPU_LIST: tuple[GPUModel, ...] = (
    # NVIDIA data center
    GPUModel("NVIDIA B300", 288, "NVIDIA"),
    GPUModel("NVIDIA B200", 192, "NVIDIA"),
    GPUModel("NVIDIA H200", 141, "NVIDIA"),
    GPUModel("NVIDIA H100", 80, "NVIDIA"),
    GPUModel("NVIDIA H800", 80, "NVIDIA"),
    GPUModel("NVIDIA A100", 80, "NVIDIA"),
    GPUModel("NVIDIA A800-80GB", 80, "NVIDIA"),
    GPUModel("NVIDIA A800-40GB", 40, "NVIDIA"),
    GPUModel("NVIDIA A30", 24, "NVIDIA"),
    # NVIDIA China-market / L-series
    GPUModel("NVIDIA H20-141GB", 141, "NVIDIA"),
    GPUModel("NVIDIA H20-96GB", 96, "NVIDIA"),
    GPUModel("NVIDIA L40S", 48, "NVIDIA"),
    GPUModel("NVIDIA L40", 48, "NVIDIA"),
    GPUModel("NVIDIA L20", 48, "NVIDIA"),
    # NVIDIA workstation / consumer
    GPUModel("NVIDIA A6000", 48, "NVIDIA"),
    GPUModel("RTX 4090 D", 24, "NVIDIA"),
    GPUModel("RTX 4090", 24, "NVIDIA"),
    # Huawei Ascend
    GPUModel("Ascend 910B3-64GB", 64, "Ascend"),
    GPUModel("Ascend 910B4-64GB", 64, "Ascend"),
    GPUModel("Ascend 910B4-32GB", 32, "Ascend"),
    # Hygon
    GPUModel("Hygon K100-AI", 64, "Hygon"),
    # MetaX
    GPUModel("MetaX C550", 64, "MetaX"),
    GPUModel("MetaX C500", 64, "MetaX"),
    GPUModel("MetaX N260", 64, "MetaX"),
    # Tianshu
    GPUModel("Tianshu MR-V100", 32, "Tianshu"),
)

GPU_BY_NAME: MappingProxyType[str, GPUModel] = MappingProxyType(
    {gpu.name: gpu for gpu in GPU_LIST}
)


def find_gpu(name: str | None) -> GPUModel | None:
    """Look up a GPU by exact catalog name; ``None`` when not listed."""
    if not name:
        return None
    return GPU_BY_NAME.get(name)


def gpu_names(vendor: str | None = None) -> list[str]:
    """Catalog names in display order, optionally filtered by vendor."""
    return [gpu.name for gpu in GPU_LIST if vendor is None or gpu.vendor == vendor]
