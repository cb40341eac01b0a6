from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Any


class RevalidationResult(BaseModel):
    revalidated: bool
    now: int  # epoch milliseconds


class RevalidationFailure(BaseModel):
    revalidated: bool = False
    detail: str


class ChangedDocument(BaseModel):
    """The part of a CMS webhook body that identifies the changed document."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Optional[str] = Field(default=None, alias="_id")
    type: Optional[str] = Field(default=None, alias="_type")
    slug: Optional[Any] = None

    def describe(self) -> str:
        slug = self.slug.get("current") if isinstance(self.slug, dict) else self.slug
        parts = [self.type or "unknown", self.id or "?"]
        if slug:
            parts.append(f"slug={slug}")
        return " ".join(parts)


class HealthResponse(BaseModel):
    status: str
    secret_configured: bool
