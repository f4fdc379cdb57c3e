"""Portfolio record models.

Wire format is camelCase; Python code uses the snake_case field names.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class ResourceKind(str, Enum):
    """The five collections managed from the admin screens."""

    EXPERIENCE = "experience"
    PROJECT = "project"
    EDUCATION = "education"
    CERTIFICATION = "certification"
    SKILL_CATEGORY = "skill_category"


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Bullet(WireModel):
    """Ordered sub-item owned by an Experience or Project."""

    id: str | None = None
    content: str = ""
    sort_order: int = Field(default=0, alias="sortOrder")


class SkillItem(WireModel):
    id: str | None = None
    name: str
    icon_url: str | None = Field(default=None, alias="iconUrl")
    proficiency: str | None = None
    sort_order: int = Field(default=0, alias="sortOrder")


class Entity(WireModel):
    """Fields shared by every top-level record."""

    id: str | None = None
    sort_order: int = Field(default=0, alias="sortOrder")
    published: bool = False
    created_at: str | None = Field(default=None, alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")


class Experience(Entity):
    company: str
    role: str
    location: str | None = None
    employment_type: str | None = Field(default=None, alias="employmentType")
    start_date: str | None = Field(default=None, alias="startDate")
    end_date: str | None = Field(default=None, alias="endDate")
    description: str | None = None
    tech_stack: str | None = Field(default=None, alias="techStack")
    company_url: str | None = Field(default=None, alias="companyUrl")
    logo_url: str | None = Field(default=None, alias="logoUrl")
    bullets: list[Bullet] = Field(default_factory=list)


class Project(Entity):
    title: str
    slug: str | None = None
    description: str | None = None
    long_description: str | None = Field(default=None, alias="longDescription")
    tech_stack: str | None = Field(default=None, alias="techStack")
    live_url: str | None = Field(default=None, alias="liveUrl")
    github_url: str | None = Field(default=None, alias="githubUrl")
    image_url: str | None = Field(default=None, alias="imageUrl")
    thumbnail_url: str | None = Field(default=None, alias="thumbnailUrl")
    featured: bool = False
    bullets: list[Bullet] = Field(default_factory=list)


class Education(Entity):
    institution: str
    degree: str
    field_of_study: str | None = Field(default=None, alias="fieldOfStudy")
    location: str | None = None
    start_year: int | None = Field(default=None, alias="startYear")
    end_year: int | None = Field(default=None, alias="endYear")
    gpa: str | None = None
    description: str | None = None
    logo_url: str | None = Field(default=None, alias="logoUrl")


class Certification(Entity):
    name: str
    issuer: str
    issue_date: str | None = Field(default=None, alias="issueDate")
    expiry_date: str | None = Field(default=None, alias="expiryDate")
    credential_id: str | None = Field(default=None, alias="credentialId")
    credential_url: str | None = Field(default=None, alias="credentialUrl")
    badge_url: str | None = Field(default=None, alias="badgeUrl")


class SkillCategory(Entity):
    name: str
    icon: str | None = None
    skills: list[SkillItem] = Field(default_factory=list)


class APIConfiguration(BaseModel):
    """Connection settings for the admin API."""

    base_url: str = "http://localhost:8080"
    api_token: SecretStr | None = None
    timeout: float = 30.0
