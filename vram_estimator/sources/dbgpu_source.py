"""Cross-check catalog GPU memory sizes against dbgpu (TechPowerUp database).

Only NVIDIA parts with a known dbgpu slug are checked; China-market and
non-NVIDIA accelerators are not in dbgpu.
"""

import logging
from dataclasses import dataclass

from dbgpu import GPUDatabase

from vram_estimator.catalog.gpus import GPU_BY_NAME

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Catalog name → dbgpu specification key (slug)
# ---------------------------------------------------------------------------
CATALOG_TO_DBGPU_KEY: dict[str, str] = {
    "NVIDIA B300": "b300",
    "NVIDIA B200": "b200",
    "NVIDIA H200": "h200-sxm-141gb",
    "NVIDIA H100": "h100-sxm5-80gb",
    "NVIDIA A100": "a100-sxm4-80gb",
    "NVIDIA L40S": "l40s",
    "NVIDIA L40": "l40",
    "NVIDIA A6000": "rtx-a6000",
    "RTX 4090": "geforce-rtx-4090",
}

# dbgpu reports per-die specs for dual-die (MCM) packages
MULTI_DIE_CHIPS: dict[str, int] = {
    "GB100": 2,  # B200
    "GB110": 2,  # B300
}


@dataclass(frozen=True)
class MemoryMismatch:
    gpu_name: str
    catalog_gb: float
    dbgpu_gb: float

    @property
    def delta_gb(self) -> float:
        return self.dbgpu_gb - self.catalog_gb


def fetch_memory_sizes(db: GPUDatabase | None = None) -> dict[str, float]:
    """Return catalog name → memory GB according to dbgpu.

    Raises KeyError if a mapped GPU is not found in dbgpu; no silent fallbacks.
    """
    if db is None:
        db = GPUDatabase.default()
    specs_map = db.specifications

    sizes: dict[str, float] = {}
    for gpu_name, dbgpu_key in CATALOG_TO_DBGPU_KEY.items():
        if dbgpu_key not in specs_map:
            raise KeyError(
                f"GPU '{gpu_name}' not found in dbgpu (key='{dbgpu_key}'). "
                f"Update CATALOG_TO_DBGPU_KEY or upgrade dbgpu."
            )
        spec = specs_map[dbgpu_key]
        mem_gb = spec.memory_size_gb or 0
        mem_gb *= MULTI_DIE_CHIPS.get(spec.gpu_name, 1)
        sizes[gpu_name] = round(mem_gb, 1)
        logger.debug("  %s: %.1f GB (chip=%s)", gpu_name, sizes[gpu_name], spec.gpu_name)

    logger.info("Fetched memory sizes for %d GPUs from dbgpu", len(sizes))
    return sizes


def verify_catalog_memory(
    tolerance_gb: float = 1.0,
    db: GPUDatabase | None = None,
) -> list[MemoryMismatch]:
    """List catalog entries whose memory differs from dbgpu by more than *tolerance_gb*."""
    mismatches = []
    for gpu_name, dbgpu_gb in fetch_memory_sizes(db).items():
        catalog_gb = GPU_BY_NAME[gpu_name].memory
        if abs(dbgpu_gb - catalog_gb) > tolerance_gb:
            logger.warning(
                "Catalog memory for %s is %.1f GB, dbgpu reports %.1f GB",
                gpu_name, catalog_gb, dbgpu_gb,
            )
            mismatches.append(MemoryMismatch(gpu_name, catalog_gb, dbgpu_gb))
    return mismatches
