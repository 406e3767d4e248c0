"""Single-pass network planning: allocation, topology, identity keys, outputs."""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

from infra.logging import get_logger
from infra.planning import address_space
from infra.planning.address_space import AddressBlock
from infra.planning.allocation import plan_allocations
from infra.planning.config import NetworkConfig
from infra.planning.errors import PlanningError
from infra.planning.identity import assign_keys
from infra.planning.outputs import GroupOutput, assemble_outputs
from infra.planning.models import SubnetGroup, SubnetRef, TopologyPlan, Zone
from infra.planning.topology import plan_topology

logger = get_logger(__name__)


@dataclass(frozen=True)
class NetworkPlan:
    """Everything one planning run produces."""

    cidr_block: AddressBlock
    zones: list[Zone]
    groups: list[SubnetGroup]
    allocations: dict[SubnetRef, AddressBlock]
    topology: TopologyPlan
    keys: dict[SubnetRef, str]
    outputs: dict[str, GroupOutput]

    @property
    def nat_gateway_zones(self) -> list[Zone]:
        return [zone for zone, present in self.topology.nat_gateways.items() if present]


def build_plan(
    cidr_block: str | AddressBlock,
    zones: Sequence[Zone],
    groups: Sequence[SubnetGroup],
    zone_capacity: Optional[int] = None,
) -> NetworkPlan:
    """Plan a network. Either the whole plan is returned or a PlanningError is raised."""
    zones = sorted(zones)
    groups = list(groups)

    try:
        block = address_space.parse_block(cidr_block)
        allocations = plan_allocations(block, zones, groups, zone_capacity=zone_capacity)
        topology = plan_topology(groups, allocations, zones)
    except PlanningError as e:
        logger.warning(
            "network_plan_rejected",
            cidr_block=str(cidr_block),
            error=type(e).__name__,
            **{key: str(value) for key, value in e.context.items()},
        )
        raise

    keys = assign_keys(groups, zones)
    outputs = assemble_outputs(groups, zones, allocations, topology, keys)

    plan = NetworkPlan(
        cidr_block=block,
        zones=zones,
        groups=groups,
        allocations=allocations,
        topology=topology,
        keys=keys,
        outputs=outputs,
    )
    logger.info(
        "network_planned",
        cidr_block=str(block),
        zones=len(zones),
        groups=len(groups),
        subnets=len(allocations),
        nat_gateways=len(plan.nat_gateway_zones),
    )
    return plan


def plan_network(config: NetworkConfig) -> NetworkPlan:
    """Plan the network described by a validated configuration."""
    return build_plan(
        config.block(),
        config.zones(),
        config.groups(),
        zone_capacity=config.zone_capacity,
    )
