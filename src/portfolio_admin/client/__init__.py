"""HTTP client, gateways and bullet reconciliation."""

from .api_client import CollectionGateway, PortfolioClient, SkillItemGateway, sort_entities
from .api_client_core import PortfolioClientCore, log_event
from .bullet_reconcile import plan_bullet_sync, reconcile_bullets
from .resources import RESOURCES, ResourceSpec, get_resource

__all__ = [
    "CollectionGateway",
    "PortfolioClient",
    "PortfolioClientCore",
    "RESOURCES",
    "ResourceSpec",
    "SkillItemGateway",
    "get_resource",
    "log_event",
    "plan_bullet_sync",
    "reconcile_bullets",
    "sort_entities",
]
