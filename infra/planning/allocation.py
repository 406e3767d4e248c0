"""Address allocation for (group, zone) pairs.

Explicit ``cidrs`` are taken as given. Netmask-based groups are packed into the
top-level block with non-public groups (custom and transit gateway) first in
declared order, then the public group. Each group reserves ``zone_capacity``
consecutive slots of its netmask, so adding a zone up to that capacity only
touches the new zone. The capacity may not be smaller than the zone count.

The plan is built in a local structure and returned only after every check has
passed.
"""

from collections.abc import Sequence
from typing import Optional

from infra.planning import address_space
from infra.planning.address_space import AddressBlock
from infra.planning.errors import (
    CapacityError,
    InvalidAddressBlockError,
    OverlapError,
    ZoneCountMismatchError,
)
from infra.planning.models import GroupKind, SubnetGroup, SubnetRef, Zone


class _Ledger:
    """Running set of consumed ranges."""

    def __init__(self):
        self.claims: list[tuple[SubnetRef, AddressBlock]] = []

    def claim(self, ref: SubnetRef, block: AddressBlock) -> None:
        for other_ref, other in self.claims:
            if address_space.overlaps(block, other):
                raise OverlapError(
                    f"{ref[0]}/{ref[1].label} ({block}) overlaps "
                    f"{other_ref[0]}/{other_ref[1].label} ({other})",
                    group=ref[0],
                    zone=ref[1].label,
                    block=block,
                    other_group=other_ref[0],
                    other_zone=other_ref[1].label,
                    other_block=other,
                )
        self.claims.append((ref, block))


def plan_allocations(
    top_level_block: str | AddressBlock,
    zones: Sequence[Zone],
    groups: Sequence[SubnetGroup],
    zone_capacity: Optional[int] = None,
) -> dict[SubnetRef, AddressBlock]:
    """Assign one address block to every (group, zone) pair.

    Args:
        top_level_block: The VPC block everything is carved from
        zones: Zones in index order
        groups: Subnet groups in declared order
        zone_capacity: Zone slots each computed group reserves
            (defaults to the number of zones)

    Returns:
        Mapping (group name, zone) -> block, ordered by declared group order
        then zone index
    """
    top = address_space.parse_block(top_level_block)
    zone_count = len(zones)
    capacity = zone_capacity if zone_capacity is not None else zone_count
    if zone_capacity is not None and zone_capacity < 1:
        raise ValueError("zone_capacity must be at least 1")
    if capacity < zone_count:
        raise CapacityError(
            f"zone_capacity {capacity} is smaller than the {zone_count} requested zones",
            zone_capacity=capacity,
            zone_count=zone_count,
        )

    ledger = _Ledger()
    allocated: dict[SubnetRef, AddressBlock] = {}

    for group in groups:
        if not group.is_explicit:
            continue
        if len(group.cidrs) != zone_count:
            raise ZoneCountMismatchError(
                f"Group '{group.name}' lists {len(group.cidrs)} cidrs for {zone_count} zones",
                group=group.name,
                cidr_count=len(group.cidrs),
                zone_count=zone_count,
            )
        for zone, block in zip(zones, group.cidrs):
            if not address_space.contains(top, block):
                raise InvalidAddressBlockError(
                    f"{group.name}/{zone.label} ({block}) is outside {top}",
                    group=group.name,
                    zone=zone.label,
                    block=block,
                )
            ledger.claim((group.name, zone), block)
            allocated[(group.name, zone)] = block

    computed = [g for g in groups if not g.is_explicit]
    if computed and zone_count == 0:
        raise ZoneCountMismatchError(
            f"Group '{computed[0].name}' allocates by netmask but no zones were requested",
            group=computed[0].name,
            zone_count=0,
        )
    ordered = [g for g in computed if g.kind is not GroupKind.PUBLIC]
    ordered += [g for g in computed if g.kind is GroupKind.PUBLIC]

    cursor = int(top.network_address)
    for group in ordered:
        if not 0 < group.netmask <= address_space.MAX_PREFIX:
            raise InvalidAddressBlockError(
                f"Group '{group.name}' has invalid netmask /{group.netmask}",
                group=group.name,
                netmask=group.netmask,
            )
        index = address_space.first_index_at_or_after(top, group.netmask, cursor)
        try:
            slots = address_space.partition(top, group.netmask, capacity, offset=index)
        except CapacityError as e:
            raise CapacityError(
                f"Group '{group.name}' does not fit: {e.message}",
                group=group.name,
                zone=zones[0].label,
                netmask=group.netmask,
            ) from e
        blocks = slots[: len(zones)]
        for zone, block in zip(zones, blocks):
            ledger.claim((group.name, zone), block)
            allocated[(group.name, zone)] = block
        cursor = int(blocks[0].network_address) + capacity * blocks[0].num_addresses

    return {
        (group.name, zone): allocated[(group.name, zone)]
        for group in groups
        for zone in zones
    }
