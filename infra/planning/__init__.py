"""Network topology planner: address allocation, NAT/route wiring and identity keys."""

from infra.planning.address_space import AddressBlock, contains, overlaps, parse_block, partition
from infra.planning.allocation import plan_allocations
from infra.planning.config import NetworkConfig, SubnetGroupConfig, load_network_config_file
from infra.planning.errors import (
    CapacityError,
    InvalidAddressBlockError,
    OverlapError,
    PlanningError,
    UnsatisfiableRouteError,
    ZoneCountMismatchError,
)
from infra.planning.identity import assign_keys, legacy_keys, reconcile, record_migration
from infra.planning.models import (
    GroupKind,
    KeyRename,
    NatGatewayConfiguration,
    RouteRule,
    RouteTarget,
    SubnetGroup,
    TargetKind,
    TopologyPlan,
    Zone,
    build_zones,
)
from infra.planning.outputs import GroupOutput, ZoneEntry, assemble_outputs, attach_resource_ids
from infra.planning.planner import NetworkPlan, build_plan, plan_network
from infra.planning.topology import plan_topology

__all__ = [
    "AddressBlock",
    "CapacityError",
    "GroupKind",
    "GroupOutput",
    "InvalidAddressBlockError",
    "KeyRename",
    "NatGatewayConfiguration",
    "NetworkConfig",
    "NetworkPlan",
    "OverlapError",
    "PlanningError",
    "RouteRule",
    "RouteTarget",
    "SubnetGroup",
    "SubnetGroupConfig",
    "TargetKind",
    "TopologyPlan",
    "UnsatisfiableRouteError",
    "Zone",
    "ZoneCountMismatchError",
    "ZoneEntry",
    "assemble_outputs",
    "assign_keys",
    "attach_resource_ids",
    "build_plan",
    "build_zones",
    "contains",
    "legacy_keys",
    "load_network_config_file",
    "overlaps",
    "parse_block",
    "partition",
    "plan_allocations",
    "plan_network",
    "plan_topology",
    "reconcile",
    "record_migration",
]
