"""Data models and error types for the portfolio admin client."""

from .entities import (
    APIConfiguration,
    Bullet,
    Certification,
    Education,
    Entity,
    Experience,
    Project,
    ResourceKind,
    SkillCategory,
    SkillItem,
)
from .errors import (
    AuthError,
    NotFoundError,
    PortfolioError,
    ReconciliationError,
    ServerError,
    TransportError,
    ValidationError,
)

__all__ = [
    "APIConfiguration",
    "AuthError",
    "Bullet",
    "Certification",
    "Education",
    "Entity",
    "Experience",
    "NotFoundError",
    "PortfolioError",
    "Project",
    "ReconciliationError",
    "ResourceKind",
    "ServerError",
    "SkillCategory",
    "SkillItem",
    "TransportError",
    "ValidationError",
]
