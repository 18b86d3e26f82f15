"""Pydantic models for Firestore REST responses."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .values import decode_fields, document_id


class FirestoreBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class DocumentPayload(FirestoreBaseModel):
    name: str
    fields: dict[str, dict[str, object]] = Field(default_factory=dict[str, dict[str, object]])
    create_time: str | None = Field(default=None, alias="createTime")
    update_time: str | None = Field(default=None, alias="updateTime")

    @property
    def id(self) -> str:
        return document_id(self.name)

    def decoded(self) -> dict[str, object]:
        return decode_fields(self.fields)


class RunQueryItem(FirestoreBaseModel):
    """One element of a ``runQuery`` response stream; only some carry a document."""

    document: DocumentPayload | None = None
    read_time: str | None = Field(default=None, alias="readTime")
    skipped_results: int | None = Field(default=None, alias="skippedResults")


class ErrorStatus(FirestoreBaseModel):
    code: int | None = None
    message: str = ""
    status: str | None = None


class ErrorResponse(FirestoreBaseModel):
    error: ErrorStatus
