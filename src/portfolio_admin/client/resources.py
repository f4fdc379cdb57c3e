"""Endpoint layout for each managed collection."""

from dataclasses import dataclass

from ..models import (
    Certification,
    Education,
    Entity,
    Experience,
    Project,
    ResourceKind,
    SkillCategory,
)


@dataclass(frozen=True)
class ResourceSpec:
    kind: ResourceKind
    path: str
    reorder_path: str
    model: type[Entity]
    publish_key: str = "published"
    has_bullets: bool = False
    label: str = "item"

    def item_path(self, entity_id: str) -> str:
        return f"{self.path}/{entity_id}"

    def bullets_path(self, owner_id: str) -> str:
        return f"{self.path}/{owner_id}/bullets"


RESOURCES: dict[ResourceKind, ResourceSpec] = {
    ResourceKind.EXPERIENCE: ResourceSpec(
        kind=ResourceKind.EXPERIENCE,
        path="/api/admin/experiences",
        reorder_path="/api/admin/experience/reorder",
        model=Experience,
        has_bullets=True,
        label="experience",
    ),
    ResourceKind.PROJECT: ResourceSpec(
        kind=ResourceKind.PROJECT,
        path="/api/admin/projects",
        reorder_path="/api/admin/projects/reorder",
        model=Project,
        has_bullets=True,
        label="project",
    ),
    ResourceKind.EDUCATION: ResourceSpec(
        kind=ResourceKind.EDUCATION,
        path="/api/admin/education",
        reorder_path="/api/admin/education/reorder",
        model=Education,
        publish_key="isPublished",
        label="education entry",
    ),
    ResourceKind.CERTIFICATION: ResourceSpec(
        kind=ResourceKind.CERTIFICATION,
        path="/api/admin/certifications",
        reorder_path="/api/admin/certifications/reorder",
        model=Certification,
        publish_key="isPublished",
        label="certification",
    ),
    ResourceKind.SKILL_CATEGORY: ResourceSpec(
        kind=ResourceKind.SKILL_CATEGORY,
        path="/api/admin/skills",
        reorder_path="/api/admin/skills/reorder",
        model=SkillCategory,
        publish_key="isPublished",
        label="skill category",
    ),
}

SKILL_ITEMS_PATH = "/api/admin/skills/items"


def get_resource(kind: ResourceKind | str) -> ResourceSpec:
    return RESOURCES[ResourceKind(kind)]
