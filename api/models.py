"""Pydantic models for API requests and responses."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from infra.planning.config import NetworkConfig
from infra.planning.models import GroupKind


# =============================================================================
# CONFIG MODELS
# =============================================================================


class ConfigResponse(BaseModel):
    """Response for config operations."""

    slug: str
    environment: str
    message: str
    config: Optional[NetworkConfig] = None


# =============================================================================
# PLAN MODELS
# =============================================================================


class RouteEntry(BaseModel):
    """One route of a subnet's route table."""

    destination: str
    target: str


class SubnetEntry(BaseModel):
    """One planned subnet."""

    zone: str
    zone_index: int
    cidr_block: str
    identity_key: str
    nat_gateway: bool = False
    routes: list[RouteEntry] = Field(default_factory=list)


class GroupPlan(BaseModel):
    """All subnets of one group, in zone order."""

    name: str
    kind: GroupKind
    subnets: list[SubnetEntry]


class KeyRenameEntry(BaseModel):
    """Identity key change to apply to existing state."""

    old_key: str
    new_key: str


class PlanResponse(BaseModel):
    """Response for planning operations."""

    cidr_block: str
    zones: list[str]
    nat_gateway_zones: list[str]
    groups: list[GroupPlan]
    key_renames: list[KeyRenameEntry] = Field(default_factory=list)


# =============================================================================
# MIGRATION MODELS
# =============================================================================


class KeyRenameRecordEntry(BaseModel):
    """Logged identity key rename."""

    old_key: str
    new_key: str
    created_at: datetime

    class Config:
        from_attributes = True


class MigrationLogResponse(BaseModel):
    """Append-only log of identity key renames for a network."""

    network: str
    renames: list[KeyRenameRecordEntry]
