"""Numeric precision formats and their storage cost.

Pure lookup tables, no I/O.  Unknown keys raise ``UnknownPrecisionError``
so a catalog gap fails loudly instead of silently assuming a width.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType

from vram_estimator.errors import UnknownPrecisionError


class Precision(str, Enum):
    FP32 = "FP32"
    FP16 = "FP16"
    BF16 = "BF16"
    INT8 = "INT8"
    INT4 = "INT4"


BYTES_PER_ELEMENT: MappingProxyType[Precision, float] = MappingProxyType({
    Precision.FP32: 4.0,
    Precision.FP16: 2.0,
    Precision.BF16: 2.0,
    Precision.INT8: 1.0,
    Precision.INT4: 0.5,
})

# HuggingFace torch_dtype / quantization spellings → our enum
_ALIASES: dict[str, Precision] = {
    "float32": Precision.FP32,
    "float16": Precision.FP16,
    "half": Precision.FP16,
    "bfloat16": Precision.BF16,
    "int8": Precision.INT8,
    "int4": Precision.INT4,
}


def bytes_per_element(precision: Precision) -> float:
    """Return the storage width of one element in *precision*."""
    try:
        return BYTES_PER_ELEMENT[precision]
    except KeyError:
        raise UnknownPrecisionError(precision) from None


def parse_precision(value: str | Precision) -> Precision:
    """Resolve an enum name (``"FP16"``) or dtype name (``"bfloat16"``).

    Raises ``UnknownPrecisionError`` for anything else.
    """
    if isinstance(value, Precision):
        return value
    token = value.strip()
    if token.upper() in Precision.__members__:
        return Precision[token.upper()]
    if token.lower() in _ALIASES:
        return _ALIASES[token.lower()]
    raise UnknownPrecisionError(value)
