"""Validated request model for a VRAM estimate."""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vram_estimator.catalog.precision import Precision, parse_precision
from vram_estimator.errors import UnknownPrecisionError


class StandardAttention(BaseModel):
    """Full multi-head attention: one KV head per attention head."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["standard"] = "standard"

    @property
    def kv_factor(self) -> float:
        return 1.0


class GroupedQueryAttention(BaseModel):
    """Grouped-query attention: query heads share fewer KV heads."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["gqa"] = "gqa"
    kv_heads: int = Field(gt=0, description="Number of key/value heads")
    attention_heads: int = Field(gt=0, description="Number of query attention heads")

    @property
    def kv_factor(self) -> float:
        """KV memory relative to full multi-head attention; any positive pair is taken as given."""
        return self.kv_heads / self.attention_heads


AttentionMode = Annotated[
    StandardAttention | GroupedQueryAttention,
    Field(discriminator="kind"),
]


class CalculationInputs(BaseModel):
    """Model architecture, precision and workload for one estimate.

    Construction validates every field; a rejected value raises
    ``pydantic.ValidationError`` naming the field.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    param_count: float = Field(ge=0, description="Parameter count in billions")
    precision: Precision = Field(Precision.FP16, description="Weight precision")
    kv_precision: Precision = Field(Precision.FP16, description="KV cache precision")
    seq_length: int = Field(8192, ge=1, description="Context window in tokens")
    batch_size: int = Field(1, ge=1, description="Concurrent sequences")
    layers: int = Field(ge=1, description="Number of transformer layers")
    hidden_size: int = Field(ge=1, description="Hidden dimension")
    attention: AttentionMode = Field(default_factory=StandardAttention)
    selected_gpu: str | None = Field(None, description="GPU catalog name; None for no plan")
    gpus_per_node: int = Field(8, ge=1, description="GPUs per server node")

    @field_validator("precision", "kv_precision", mode="before")
    @classmethod
    def _parse_precision(cls, value):
        if isinstance(value, str):
            try:
                return parse_precision(value)
            except UnknownPrecisionError:
                raise ValueError(f"unknown precision {value!r}") from None
        return value

    @property
    def is_gqa(self) -> bool:
        return isinstance(self.attention, GroupedQueryAttention)

    @classmethod
    def from_flat(
        cls,
        *,
        is_gqa: bool = False,
        kv_heads: int | None = None,
        attention_heads: int | None = None,
        **fields,
    ) -> "CalculationInputs":
        """Build inputs from the flat ``is_gqa`` / head-count form used by forms.

        GQA only applies when the flag is set and both head counts are
        positive; otherwise the KV cache is sized for full attention.
        """
        if is_gqa and (kv_heads or 0) > 0 and (attention_heads or 0) > 0:
            fields["attention"] = GroupedQueryAttention(
                kv_heads=kv_heads, attention_heads=attention_heads
            )
        else:
            fields["attention"] = StandardAttention()
        return cls(**fields)
