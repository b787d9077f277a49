from __future__ import annotations
from pydantic import BaseModel, Field, field_validator
from typing import List


# ── Request ──────────────────────────────────────────────────────────────────

class MindMapRequest(BaseModel):
    """Request body for mind map generation."""
    topic: str = Field(..., min_length=1, description="Topic to break down into a mind map")


# ── Response ─────────────────────────────────────────────────────────────────

class MindMapNode(BaseModel):
    """A single node in the mind map tree (recursive)."""
    name: str = Field(..., min_length=1)
    children: List[MindMapNode] = []

    @field_validator("children", mode="before")
    @classmethod
    def null_children_is_leaf(cls, v):
        return [] if v is None else v

    def iter_nodes(self):
        """Depth-first walk yielding every node, root first."""
        yield self
        for child in self.children:
            yield from child.iter_nodes()

    def depth(self) -> int:
        if not self.children:
            return 1
        return 1 + max(child.depth() for child in self.children)


MindMapNode.model_rebuild()
