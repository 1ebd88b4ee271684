"""Environment variable loading and configuration."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJECT_ROOT / ".env")


def get_env(key: str, default: str | None = None) -> str:
    """Get an environment variable or raise if missing and no default."""
    value = os.getenv(key, default)
    if value is None:
        raise ValueError(f"Missing required environment variable: {key}")
    return value


def get_float_env(key: str, default: float) -> float:
    """Get a float environment variable, falling back to *default* when unset."""
    raw = get_env(key, str(default))
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"Environment variable {key}={raw!r} is not a number") from None


# Paths
EXPORT_DIR = Path(get_env("VRAM_EXPORT_DIR", str(_PROJECT_ROOT / "web" / "public" / "data")))

# Estimator tunables (calibrated heuristics, not first-principles constants)
BASE_SYSTEM_OVERHEAD_GB = get_float_env("VRAM_BASE_OVERHEAD_GB", 0.5)
ACTIVATION_DIVISOR = get_float_env("VRAM_ACTIVATION_DIVISOR", 100.0)
BUFFER_PERCENTAGE = get_float_env("VRAM_BUFFER_PERCENTAGE", 0.05)

# HuggingFace (optional; anonymous requests when missing)
HF_TOKEN = os.getenv("HF_TOKEN")
