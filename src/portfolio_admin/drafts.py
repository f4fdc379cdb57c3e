"""Typed in-memory drafts of records being edited.

A draft is never sent anywhere until the editing session saves it. Optional
fields are ``None`` when absent and are dropped from the payload, so an
empty form field is never coerced into a value on the server.
"""

from __future__ import annotations

import uuid
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

from .models import Entity, ResourceKind, ValidationError


def _new_key() -> str:
    return uuid.uuid4().hex


class DraftBullet(BaseModel):
    """A bullet as the operator sees it.

    ``local_key`` identifies the row for the lifetime of the edit and is
    never sent to the server; ``id`` goes from ``None`` to the server id
    once the bullet has been created.
    """

    model_config = ConfigDict(validate_assignment=True)

    local_key: str = Field(default_factory=_new_key)
    id: str | None = None
    content: str = ""


class Draft(BaseModel):
    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    kind: ClassVar[ResourceKind]
    required: ClassVar[tuple[str, ...]] = ()

    published: bool = False

    def missing_required(self) -> list[str]:
        missing = []
        for name in self.required:
            value = getattr(self, name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)
        return missing

    def check_required(self) -> None:
        missing = self.missing_required()
        if missing:
            raise ValidationError(
                f"Missing required field(s): {', '.join(missing)}",
                field_errors=[{"field": name, "message": "is required"} for name in missing],
            )

    def to_payload(self) -> dict[str, Any]:
        """Wire payload for create/update; absent and blank fields are omitted."""
        payload: dict[str, Any] = {}
        for name, info in type(self).model_fields.items():
            if name == "bullets":
                continue
            value = getattr(self, name)
            if isinstance(value, str):
                value = value.strip() or None
            if value is None:
                continue
            payload[info.alias or name] = value
        return payload

    def set_field(self, name: str, value: Any) -> None:
        if name not in type(self).model_fields or name == "bullets":
            raise KeyError(f"{type(self).__name__} has no editable field {name!r}")
        setattr(self, name, value)


class BulletedDraft(Draft):
    bullets: list[DraftBullet] = Field(default_factory=list)

    def add_bullet(self, content: str = "") -> DraftBullet:
        bullet = DraftBullet(content=content)
        self.bullets.append(bullet)
        return bullet

    def remove_bullet(self, index: int) -> DraftBullet:
        return self.bullets.pop(index)

    def move_bullet(self, from_index: int, to_index: int) -> None:
        size = len(self.bullets)
        if not (0 <= from_index < size and 0 <= to_index < size):
            raise IndexError(f"bullet move {from_index} -> {to_index} out of range for {size} bullets")
        if from_index == to_index:
            return
        self.bullets.insert(to_index, self.bullets.pop(from_index))

    def set_bullet_content(self, index: int, content: str) -> None:
        self.bullets[index].content = content

    def bullet_by_key(self, local_key: str) -> DraftBullet:
        for bullet in self.bullets:
            if bullet.local_key == local_key:
                return bullet
        raise KeyError(local_key)


class ExperienceDraft(BulletedDraft):
    kind = ResourceKind.EXPERIENCE
    required = ("company", "role", "start_date")

    company: str | None = None
    role: str | None = None
    location: str | None = None
    employment_type: str | None = Field(default=None, alias="employmentType")
    start_date: str | None = Field(default=None, alias="startDate")
    end_date: str | None = Field(default=None, alias="endDate")
    description: str | None = None
    tech_stack: str | None = Field(default=None, alias="techStack")
    company_url: str | None = Field(default=None, alias="companyUrl")
    logo_url: str | None = Field(default=None, alias="logoUrl")


class ProjectDraft(BulletedDraft):
    kind = ResourceKind.PROJECT
    required = ("title",)

    title: str | None = None
    slug: str | None = None
    description: str | None = None
    long_description: str | None = Field(default=None, alias="longDescription")
    tech_stack: str | None = Field(default=None, alias="techStack")
    live_url: str | None = Field(default=None, alias="liveUrl")
    github_url: str | None = Field(default=None, alias="githubUrl")
    image_url: str | None = Field(default=None, alias="imageUrl")
    thumbnail_url: str | None = Field(default=None, alias="thumbnailUrl")
    featured: bool = False


class EducationDraft(Draft):
    kind = ResourceKind.EDUCATION
    required = ("institution", "degree", "start_year")

    institution: str | None = None
    degree: str | None = None
    field_of_study: str | None = Field(default=None, alias="fieldOfStudy")
    location: str | None = None
    start_year: int | None = Field(default=None, alias="startYear")
    end_year: int | None = Field(default=None, alias="endYear")
    gpa: str | None = None
    description: str | None = None
    logo_url: str | None = Field(default=None, alias="logoUrl")


class CertificationDraft(Draft):
    kind = ResourceKind.CERTIFICATION
    required = ("name", "issuer", "issue_date")

    name: str | None = None
    issuer: str | None = None
    issue_date: str | None = Field(default=None, alias="issueDate")
    expiry_date: str | None = Field(default=None, alias="expiryDate")
    credential_id: str | None = Field(default=None, alias="credentialId")
    credential_url: str | None = Field(default=None, alias="credentialUrl")
    badge_url: str | None = Field(default=None, alias="badgeUrl")


class SkillCategoryDraft(Draft):
    kind = ResourceKind.SKILL_CATEGORY
    required = ("name",)

    name: str | None = None
    icon: str | None = None


DRAFT_TYPES: dict[ResourceKind, type[Draft]] = {
    cls.kind: cls
    for cls in (ExperienceDraft, ProjectDraft, EducationDraft, CertificationDraft, SkillCategoryDraft)
}


def new_draft(kind: ResourceKind | str) -> Draft:
    """Blank, unpublished draft for a record that does not exist yet."""
    return DRAFT_TYPES[ResourceKind(kind)]()


def draft_from_entity(kind: ResourceKind | str, entity: Entity) -> Draft:
    """Copy an entity's editable fields into a fresh draft."""
    draft_cls = DRAFT_TYPES[ResourceKind(kind)]
    values: dict[str, Any] = {}
    for name in draft_cls.model_fields:
        if name == "bullets":
            values[name] = [
                DraftBullet(id=b.id, content=b.content) for b in getattr(entity, "bullets", [])
            ]
        elif hasattr(entity, name):
            values[name] = getattr(entity, name)
    return draft_cls(**values)
