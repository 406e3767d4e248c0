"""Planning service."""

from typing import Optional

from api.database import Database
from api.models import (
    GroupPlan,
    KeyRenameEntry,
    PlanResponse,
    RouteEntry,
    SubnetEntry,
)
from infra.logging import bind_contextvars, clear_contextvars, get_logger
from infra.planning.config import NetworkConfig
from infra.planning.identity import record_migration
from infra.planning.models import KeyRename
from infra.planning.planner import NetworkPlan, plan_network

logger = get_logger(__name__)


class PlanningService:
    """Service for planning operations."""

    def plan(self, config: NetworkConfig) -> PlanResponse:
        """Plan a network without recording anything."""
        return self._to_response(plan_network(config))

    def plan_and_record(
        self,
        network: str,
        config: NetworkConfig,
        database: Database,
    ) -> PlanResponse:
        """Plan a network and log identity key changes against its last plan."""
        bind_contextvars(network=network)
        try:
            plan = plan_network(config)
            renames = record_migration(database, network, plan.keys)
            if renames:
                logger.info("identity_keys_renamed", renames=len(renames))
            return self._to_response(plan, renames)
        finally:
            clear_contextvars()

    def _to_response(
        self,
        plan: NetworkPlan,
        renames: Optional[list[KeyRename]] = None,
    ) -> PlanResponse:
        """Convert plan to response model."""
        return PlanResponse(
            cidr_block=str(plan.cidr_block),
            zones=[zone.label for zone in plan.zones],
            nat_gateway_zones=[zone.label for zone in plan.nat_gateway_zones],
            groups=[
                GroupPlan(
                    name=group.name,
                    kind=group.kind,
                    subnets=[
                        SubnetEntry(
                            zone=entry.zone.label,
                            zone_index=entry.zone.index,
                            cidr_block=str(entry.cidr_block),
                            identity_key=entry.identity_key,
                            nat_gateway=entry.nat_gateway,
                            routes=[
                                RouteEntry(
                                    destination=str(rule.destination),
                                    target=rule.target.reference,
                                )
                                for rule in entry.routes
                            ],
                        )
                        for entry in group.entries()
                    ],
                )
                for group in plan.outputs.values()
            ],
            key_renames=[
                KeyRenameEntry(old_key=old_key, new_key=new_key)
                for old_key, new_key in renames or []
            ],
        )


planning_service = PlanningService()
