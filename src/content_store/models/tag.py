"""Tag model."""

from pydantic import BaseModel, Field


class Tag(BaseModel):
    """A tag attached to posts. Names compare case-insensitively."""

    id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1, description="Tag name in its original casing")
    slug: str = Field(..., min_length=1, description="Store-unique URL slug")

    def matches(self, name: str) -> bool:
        """Check whether ``name`` refers to this tag."""
        return self.name.lower() == name.strip().lower()
