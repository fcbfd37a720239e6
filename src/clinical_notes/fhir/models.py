"""Pydantic models for the FHIR R4 resources this application reads and writes.

The server owns these schemas. Models keep unknown fields (``extra="allow"``)
so a resource read from the server dumps back to the same JSON.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class FHIRModel(BaseModel):
    """Base for FHIR JSON: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_fhir(self) -> dict[str, Any]:
        """Dump to FHIR JSON, omitting unset elements."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Meta(FHIRModel):
    last_updated: str | None = Field(default=None, description="Server timestamp of the last write")


class HumanName(FHIRModel):
    family: str | None = None
    given: list[str] | None = None
    prefix: list[str] | None = None

    @property
    def display(self) -> str:
        """'Given Given Family', trimmed."""
        given = " ".join(self.given or [])
        return f"{given} {self.family or ''}".strip()


class Reference(FHIRModel):
    reference: str | None = Field(default=None, description="Relative reference, e.g. 'Patient/123'")
    display: str | None = None


class Practitioner(FHIRModel):
    resource_type: Literal["Practitioner"] = "Practitioner"
    id: str | None = None
    active: bool | None = None
    name: list[HumanName] | None = None
    meta: Meta | None = None


class Patient(FHIRModel):
    resource_type: Literal["Patient"] = "Patient"
    id: str | None = None
    active: bool | None = None
    name: list[HumanName] | None = None
    general_practitioner: list[Reference] | None = None
    meta: Meta | None = None


class CodeableText(FHIRModel):
    text: str | None = None


class Attachment(FHIRModel):
    content_type: str | None = None
    data: str | None = Field(default=None, description="Base64-encoded note body")
    title: str | None = None


class DocumentContent(FHIRModel):
    attachment: Attachment


NoteStatus = Literal["current", "superseded", "entered-in-error"]


class DocumentReference(FHIRModel):
    """A clinical note."""

    resource_type: Literal["DocumentReference"] = "DocumentReference"
    id: str | None = None
    status: NoteStatus | None = None
    type: CodeableText | None = None
    subject: Reference | None = None
    author: list[Reference] | None = None
    description: str | None = None
    content: list[DocumentContent] | None = None
    meta: Meta | None = None


def display_name(resource: Practitioner | Patient | None) -> str:
    """Display name from the first name entry, or '' when there is none."""
    if resource is None or not resource.name:
        return ""
    return resource.name[0].display


def last_updated(resource: FHIRModel) -> str | None:
    meta = getattr(resource, "meta", None)
    return meta.last_updated if meta else None
