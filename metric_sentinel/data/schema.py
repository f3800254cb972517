"""
Input-side schema for the anomaly engine.

This module defines the row batch and column mapping handed over by the
ingestion and schema-analysis collaborators, plus the bucketed series the
engine derives from them.

Design rationale:
- Rows stay untyped mappings; coercion happens at bucketing time
- Column meanings come from an external classifier and are only read
- Buckets are keyed by period strings so ordering is lexical
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Semantic types with special meaning for bucketing
TIMESTAMP_TYPE = "timestamp"
USER_ID_TYPE = "user_id"

# Key used when no timestamp column is configured
ALL_PERIOD = "all"


class NormalizedData(BaseModel):
    """
    A batch of rows as produced by a data adapter.

    Attributes:
        columns: Ordered column names
        rows: Row mappings (column -> raw value)
        metadata: Source information (source name, fetch time, row count)

    Notes:
        - The engine never mutates rows
        - metadata is carried for the host and ignored by detection
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    columns: List[str] = Field(default_factory=list, description="Column names")
    rows: List[Dict[str, Any]] = Field(default_factory=list, description="Row mappings")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Source metadata")


class ColumnMeaning(BaseModel):
    """
    Semantic role assigned to a column by the schema analyzer.

    Accepts both snake_case and the analyzer's camelCase keys
    (``semanticType``, ``detectedType``).
    """

    model_config = ConfigDict(populate_by_name=True)

    column: str = Field(..., min_length=1)
    semantic_type: str = Field(..., alias="semanticType")
    confidence: float = Field(1.0, ge=0.0, le=1.0)
    detected_type: Optional[str] = Field(default=None, alias="detectedType")


class BucketedPoint(BaseModel):
    """One aggregated value for one period."""

    model_config = ConfigDict(frozen=True)

    period: str
    value: float


class TimeRange(BaseModel):
    """Inclusive UTC date range (``YYYY-MM-DD``) covered by a row batch."""

    model_config = ConfigDict(frozen=True)

    start: str
    end: str


def find_column(meanings: List[ColumnMeaning], semantic_type: str) -> Optional[str]:
    """
    Return the column holding a semantic type, or None.

    The first matching entry wins.
    """
    for meaning in meanings:
        if meaning.semantic_type == semantic_type:
            return meaning.column
    return None
