"""Domain models flowing through the ingestion pipeline."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from docchat_ingest.ingestion.identity import content_id

MetadataValue = str | int | float | bool


class PageRecord(BaseModel):
    """Plain text of one physical page, numbered from 1 in source order."""

    model_config = ConfigDict(frozen=True)

    text: str
    page_number: int = Field(ge=1)


class Segment(BaseModel):
    """A bounded slice of page text, the unit of embedding.

    Attributes
    ----------
    text:
        ``raw_text`` cut to the byte budget at a character boundary.  This
        is what gets embedded, hashed and stored.
    page_number:
        Page the segment was split from.
    raw_text:
        Splitter output before truncation.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    page_number: int = Field(ge=1)
    raw_text: str


class VectorMetadata(BaseModel):
    """Metadata stored next to each vector.

    Serialised with the index-side key names (``text``, ``pageNumber``).
    Additional flat key/value pairs are accepted and passed through.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    text: str
    page_number: int = Field(alias="pageNumber")


class EmbeddingVector(BaseModel):
    """A vector ready to be upserted, keyed by the hash of its text."""

    id: str
    values: list[float]
    metadata: VectorMetadata

    @classmethod
    def from_segment(
        cls,
        segment: Segment,
        values: list[float],
        **extra: MetadataValue,
    ) -> EmbeddingVector:
        return cls(
            id=content_id(segment.text),
            values=values,
            metadata=VectorMetadata(text=segment.text, page_number=segment.page_number, **extra),
        )

    def to_record(self) -> dict[str, Any]:
        """Return the ``{id, values, metadata}`` mapping the index expects."""
        return {
            "id": self.id,
            "values": list(self.values),
            "metadata": self.metadata.model_dump(by_alias=True),
        }
