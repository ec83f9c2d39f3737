"""
Data models for block metadata documents.

A block's ``meta.json`` is decoded into these Pydantic models. Decoding is
strict (no string-to-int coercion) and the models are frozen, so a decoded
document can be handed to any renderer without further checks.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer, model_validator

META_FILENAME = "meta.json"

_MODEL_CONFIG = ConfigDict(frozen=True, strict=True, populate_by_name=True, extra="ignore")

# json.Encoder in Go escapes these by default; match its output byte for byte
_GO_JSON_ESCAPES = str.maketrans({
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
})


class BlockStats(BaseModel):
    """Sample, series and chunk counts of a block."""
    model_config = _MODEL_CONFIG

    num_samples: int = Field(
        default=0, ge=0,
        validation_alias=AliasChoices("numSamples", "samples"),
        serialization_alias="numSamples",
    )
    num_series: int = Field(
        default=0, ge=0,
        validation_alias=AliasChoices("numSeries", "series"),
        serialization_alias="numSeries",
    )
    num_chunks: int = Field(
        default=0, ge=0,
        validation_alias=AliasChoices("numChunks", "chunks"),
        serialization_alias="numChunks",
    )
    num_tombstones: int = Field(
        default=0, ge=0,
        validation_alias=AliasChoices("numTombstones", "tombstones"),
        serialization_alias="numTombstones",
    )


class BlockCompaction(BaseModel):
    """Compaction level and the blocks this one was compacted from."""
    model_config = _MODEL_CONFIG

    level: int = Field(..., ge=0, description="Compaction level (1 for freshly cut blocks)")
    sources: List[str] = Field(default_factory=list, description="ULIDs of source blocks, in order")


class BlockMeta(BaseModel):
    """
    Decoded ``meta.json`` of one block.

    Field order is the encoding order of the canonical JSON form. Label keys
    are sorted on encode so that two equal documents always encode to the
    same bytes.
    """
    model_config = _MODEL_CONFIG

    version: int = Field(..., description="Meta format version")
    ulid: str = Field(..., min_length=1, description="Block identifier")
    min_time: int = Field(..., alias="minTime", description="Start of the time range (ms)")
    max_time: int = Field(..., alias="maxTime", description="End of the time range (ms)")
    stats: BlockStats
    compaction: BlockCompaction
    labels: Dict[str, str] = Field(default_factory=dict, description="External labels")

    @model_validator(mode="after")
    def check_time_range(self) -> BlockMeta:
        if self.min_time > self.max_time:
            raise ValueError(f"minTime {self.min_time} is after maxTime {self.max_time}")
        return self

    @field_serializer("labels")
    def _sorted_labels(self, labels: Dict[str, str]) -> Dict[str, str]:
        return dict(sorted(labels.items()))

    @classmethod
    def from_json(cls, data: bytes | str) -> BlockMeta:
        """
        Decode a meta document from its JSON bytes.

        Raises:
            pydantic.ValidationError: If the JSON is malformed or fails validation
        """
        return cls.model_validate_json(data)

    def to_json_dict(self) -> Dict[str, Any]:
        """Plain JSON-compatible dict using the on-disk key names."""
        return self.model_dump(mode="json", by_alias=True)

    def canonical_json(self) -> str:
        """Deterministic, tab-indented JSON encoding followed by a newline."""
        text = json.dumps(self.to_json_dict(), indent="\t", ensure_ascii=False)
        return text.translate(_GO_JSON_ESCAPES) + "\n"

    def compact_json(self) -> str:
        """Single-line JSON encoding, escaped like canonical_json."""
        text = json.dumps(self.to_json_dict(), separators=(",", ":"), ensure_ascii=False)
        return text.translate(_GO_JSON_ESCAPES)


__all__ = ["META_FILENAME", "BlockStats", "BlockCompaction", "BlockMeta"]
