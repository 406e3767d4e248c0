"""NAT gateway placement and route table wiring."""

from collections.abc import Mapping, Sequence

from infra.planning import address_space
from infra.planning.address_space import DEFAULT_ROUTE, AddressBlock
from infra.planning.errors import UnsatisfiableRouteError
from infra.planning.models import (
    GroupKind,
    NatGatewayConfiguration,
    RouteRule,
    RouteTarget,
    SubnetGroup,
    SubnetRef,
    TargetKind,
    TopologyPlan,
    Zone,
)

INTERNET_GATEWAY = RouteTarget(TargetKind.INTERNET_GATEWAY)
TRANSIT_GATEWAY = RouteTarget(TargetKind.TRANSIT_GATEWAY)


def place_nat_gateways(
    groups: Sequence[SubnetGroup],
    allocations: Mapping[SubnetRef, AddressBlock],
    zones: Sequence[Zone],
) -> dict[Zone, bool]:
    """Decide which zones host a NAT gateway.

    Only the public group places NAT gateways. ``single_az`` uses zone 0.
    """
    public = next((g for g in groups if g.kind is GroupKind.PUBLIC), None)
    if public is None or not zones:
        return {}

    config = public.nat_gateway_configuration
    if config is NatGatewayConfiguration.ALL_AZS:
        placement = {zone: True for zone in zones}
    elif config is NatGatewayConfiguration.SINGLE_AZ:
        placement = {zone: zone.index == zones[0].index for zone in zones}
    else:
        return {}

    for zone, present in placement.items():
        if present and (public.name, zone) not in allocations:
            raise UnsatisfiableRouteError(
                f"NAT gateway in zone {zone.label} has no public subnet",
                group=public.name,
                zone=zone.label,
            )
    return placement


def _nat_target(
    group: SubnetGroup,
    zone: Zone,
    zones: Sequence[Zone],
    nat_gateways: Mapping[Zone, bool],
) -> RouteTarget:
    if nat_gateways.get(zone):
        return RouteTarget(TargetKind.NAT_GATEWAY, zone)
    if zones and nat_gateways.get(zones[0]):
        return RouteTarget(TargetKind.NAT_GATEWAY, zones[0])
    raise UnsatisfiableRouteError(
        f"Group '{group.name}' routes to a NAT gateway but none exists",
        group=group.name,
        zone=zone.label,
    )


def _zone_routes(
    group: SubnetGroup,
    zone: Zone,
    zones: Sequence[Zone],
    nat_gateways: Mapping[Zone, bool],
    has_transit_gateway: bool,
) -> list[RouteRule]:
    rules: list[RouteRule] = []

    if group.kind is GroupKind.PUBLIC:
        if group.route_to_nat:
            raise UnsatisfiableRouteError(
                f"Group '{group.name}' routes to the internet gateway and cannot route to NAT",
                group=group.name,
                zone=zone.label,
            )
        rules.append(RouteRule(DEFAULT_ROUTE, INTERNET_GATEWAY))

    if group.route_to_nat:
        rules.append(RouteRule(DEFAULT_ROUTE, _nat_target(group, zone, zones, nat_gateways)))

    if group.route_to_transit_gateway:
        if not has_transit_gateway:
            raise UnsatisfiableRouteError(
                f"Group '{group.name}' routes to the transit gateway "
                f"but no '{GroupKind.TRANSIT_GATEWAY.value}' group is declared",
                group=group.name,
                zone=zone.label,
            )
        for destination in sorted(group.route_to_transit_gateway, key=address_space.sort_key):
            rules.append(RouteRule(destination, TRANSIT_GATEWAY))

    seen: set[AddressBlock] = set()
    for rule in rules:
        if rule.destination in seen:
            raise UnsatisfiableRouteError(
                f"Group '{group.name}' has conflicting routes for {rule.destination}",
                group=group.name,
                zone=zone.label,
                block=rule.destination,
            )
        seen.add(rule.destination)
    return rules


def plan_topology(
    groups: Sequence[SubnetGroup],
    allocations: Mapping[SubnetRef, AddressBlock],
    zones: Sequence[Zone],
) -> TopologyPlan:
    """Place NAT gateways and build the ordered route rules of every (group, zone).

    Rule order per route table: internet gateway, NAT gateway, then transit
    gateway destinations by ascending base address.
    """
    nat_gateways = place_nat_gateways(groups, allocations, zones)
    has_transit_gateway = any(g.kind is GroupKind.TRANSIT_GATEWAY for g in groups)

    routes: dict[SubnetRef, list[RouteRule]] = {}
    for group in groups:
        for zone in zones:
            routes[(group.name, zone)] = _zone_routes(
                group, zone, zones, nat_gateways, has_transit_gateway
            )
    return TopologyPlan(nat_gateways=nat_gateways, routes=routes)
