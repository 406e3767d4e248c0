"""Zone-indexed collections handed to the provisioning engine and downstream consumers."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Any, Optional

from infra.planning.address_space import AddressBlock
from infra.planning.models import GroupKind, RouteRule, SubnetGroup, SubnetRef, TopologyPlan, Zone


@dataclass(frozen=True)
class ZoneEntry:
    """One planned subnet."""

    zone: Zone
    cidr_block: AddressBlock
    identity_key: str
    routes: tuple[RouteRule, ...] = ()
    nat_gateway: bool = False
    resource_id: Optional[Any] = None


@dataclass(frozen=True)
class GroupOutput:
    """All zone entries of one subnet group, in zone index order."""

    name: str
    kind: GroupKind
    zones: dict[str, ZoneEntry] = field(default_factory=dict)
    tags: dict[str, str] = field(default_factory=dict)

    def entries(self) -> list[ZoneEntry]:
        return list(self.zones.values())

    def cidr_blocks(self) -> list[AddressBlock]:
        return [entry.cidr_block for entry in self.zones.values()]

    def resource_ids(self) -> list[Any]:
        return [entry.resource_id for entry in self.zones.values()]


def assemble_outputs(
    groups: Sequence[SubnetGroup],
    zones: Sequence[Zone],
    allocations: Mapping[SubnetRef, AddressBlock],
    topology: TopologyPlan,
    keys: Mapping[SubnetRef, str],
) -> dict[str, GroupOutput]:
    outputs = {}
    ordered_zones = sorted(zones)
    for group in groups:
        entries = {}
        for zone in ordered_zones:
            ref = (group.name, zone)
            entries[zone.label] = ZoneEntry(
                zone=zone,
                cidr_block=allocations[ref],
                identity_key=keys[ref],
                routes=tuple(topology.routes.get(ref, ())),
                nat_gateway=(
                    group.kind is GroupKind.PUBLIC and topology.nat_gateways.get(zone, False)
                ),
            )
        outputs[group.name] = GroupOutput(
            name=group.name,
            kind=group.kind,
            zones=entries,
            tags=dict(group.tags),
        )
    return outputs


def attach_resource_ids(
    outputs: Mapping[str, GroupOutput],
    resource_ids: Mapping[str, Any],
) -> dict[str, GroupOutput]:
    """Return a copy of ``outputs`` with resource ids filled in by identity key."""
    return {
        name: replace(
            group,
            zones={
                label: replace(entry, resource_id=resource_ids.get(entry.identity_key, entry.resource_id))
                for label, entry in group.zones.items()
            },
        )
        for name, group in outputs.items()
    }
