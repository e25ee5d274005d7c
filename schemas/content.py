"""Content document schemas"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class Block(BaseModel):
    """One typed unit of content.

    `props` is kept as plain JSON: keys unknown to the block's schema are
    carried along untouched so documents survive schema evolution.
    """
    id: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    props: dict[str, Any] = Field(default_factory=dict)

    model_config = {"extra": "allow"}


class ContentDocument(BaseModel):
    """Ordered list of blocks plus optional document-level metadata."""
    blocks: list[Block] = Field(default_factory=list)
    meta: Optional[dict[str, Any]] = None

    model_config = {"extra": "allow"}

    def to_json(self) -> dict:
        """Storage representation, `meta` omitted when unset."""
        data = self.model_dump(mode="json")
        if data.get("meta") is None:
            data.pop("meta", None)
        return data
