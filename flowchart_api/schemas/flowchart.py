from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from enum import Enum


class NodeType(str, Enum):
    problem = "problem"
    finding = "finding"


# ── Request ──────────────────────────────────────────────────────────────────

class HypothesisInput(BaseModel):
    """One clinical hypothesis with its newline-delimited findings."""
    hypothesis: str
    findings: str = Field(default="", description="One observational finding per line")


class FlowchartRequest(BaseModel):
    """Request body for flowchart generation."""
    hypotheses: List[HypothesisInput] = Field(..., min_length=1)


# ── Response ─────────────────────────────────────────────────────────────────

class FlowchartNode(BaseModel):
    """A problem (hypothesis) or finding node linked to its parent by id."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    label: str
    type: NodeType
    parent_id: Optional[str] = Field(default=None, alias="parentId")


class FlowchartResult(BaseModel):
    """Successful payload: the flat node list."""
    nodes: List[FlowchartNode]


class ErrorResult(BaseModel):
    """Failure payload. Every error response has exactly this shape."""
    error: str
