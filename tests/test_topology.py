"""Tests for NAT placement and route wiring."""

import pytest

from infra.planning.address_space import DEFAULT_ROUTE, parse_block
from infra.planning.allocation import plan_allocations
from infra.planning.errors import UnsatisfiableRouteError
from infra.planning.models import (
    NatGatewayConfiguration,
    RouteTarget,
    SubnetGroup,
    TargetKind,
    build_zones,
)
from infra.planning.topology import plan_topology


def topology_for(groups, zones):
    allocations = plan_allocations("10.0.0.0/16", zones, groups)
    return plan_topology(groups, allocations, zones)


def public(config):
    return SubnetGroup(name="public", netmask=24, nat_gateway_configuration=config)


def targets(rules):
    return [(str(rule.destination), rule.target.reference) for rule in rules]


class TestNatGatewayPlacement:
    """Tests for NAT gateway placement."""

    def test_all_azs_places_one_per_zone(self, three_zones):
        topology = topology_for([public(NatGatewayConfiguration.ALL_AZS)], three_zones)

        assert topology.nat_gateways == {zone: True for zone in three_zones}

    def test_single_az_places_in_zone_zero(self, three_zones):
        topology = topology_for([public(NatGatewayConfiguration.SINGLE_AZ)], three_zones)

        assert [topology.nat_gateways[zone] for zone in three_zones] == [True, False, False]

    def test_none_places_nothing(self, three_zones):
        topology = topology_for([public(NatGatewayConfiguration.NONE)], three_zones)

        assert topology.nat_gateways == {}

    def test_no_public_group_places_nothing(self, two_zones):
        topology = topology_for([SubnetGroup(name="private", netmask=24)], two_zones)

        assert topology.nat_gateways == {}

    def test_single_az_uses_lowest_named_zone(self):
        zones = build_zones(2, ["us-east-1b", "us-east-1a"])

        topology = topology_for([public(NatGatewayConfiguration.SINGLE_AZ)], zones)

        nat_zones = [zone.name for zone, present in topology.nat_gateways.items() if present]
        assert nat_zones == ["us-east-1a"]


class TestRoutes:
    """Tests for route rules."""

    def test_public_routes_to_internet_gateway(self, two_zones):
        topology = topology_for([public(NatGatewayConfiguration.NONE)], two_zones)

        for zone in two_zones:
            assert targets(topology.routes[("public", zone)]) == [
                ("0.0.0.0/0", "internet_gateway")
            ]

    def test_route_to_nat_uses_own_zone(self, two_zones):
        groups = [
            public(NatGatewayConfiguration.ALL_AZS),
            SubnetGroup(name="private", netmask=24, route_to_nat=True),
        ]

        topology = topology_for(groups, two_zones)

        for zone in two_zones:
            (rule,) = topology.routes[("private", zone)]
            assert rule.destination == DEFAULT_ROUTE
            assert rule.target == RouteTarget(TargetKind.NAT_GATEWAY, zone)

    def test_route_to_nat_falls_back_to_zone_zero(self, three_zones):
        groups = [
            public(NatGatewayConfiguration.SINGLE_AZ),
            SubnetGroup(name="private", netmask=24, route_to_nat=True),
        ]

        topology = topology_for(groups, three_zones)

        for zone in three_zones:
            assert targets(topology.routes[("private", zone)]) == [("0.0.0.0/0", "nat_gateway/a")]

    def test_route_to_nat_without_nat_gateway_fails(self, two_zones):
        groups = [
            public(NatGatewayConfiguration.NONE),
            SubnetGroup(name="private", netmask=24, route_to_nat=True),
        ]

        with pytest.raises(UnsatisfiableRouteError) as exc_info:
            topology_for(groups, two_zones)

        assert exc_info.value.context["group"] == "private"

    def test_route_to_nat_without_public_group_fails(self, two_zones):
        groups = [SubnetGroup(name="private", netmask=24, route_to_nat=True)]

        with pytest.raises(UnsatisfiableRouteError):
            topology_for(groups, two_zones)

    def test_public_group_cannot_route_to_nat(self, two_zones):
        groups = [
            SubnetGroup(
                name="public",
                netmask=24,
                route_to_nat=True,
                nat_gateway_configuration=NatGatewayConfiguration.ALL_AZS,
            )
        ]

        with pytest.raises(UnsatisfiableRouteError):
            topology_for(groups, two_zones)

    def test_transit_routes_are_sorted_after_nat(self, two_zones):
        groups = [
            public(NatGatewayConfiguration.ALL_AZS),
            SubnetGroup(
                name="private",
                netmask=24,
                route_to_nat=True,
                route_to_transit_gateway=frozenset(
                    parse_block(b) for b in ["192.168.0.0/16", "10.100.0.0/16", "172.16.0.0/12"]
                ),
            ),
            SubnetGroup(name="transit_gateway", netmask=28),
        ]

        topology = topology_for(groups, two_zones)

        assert targets(topology.routes[("private", two_zones[1])]) == [
            ("0.0.0.0/0", "nat_gateway/b"),
            ("10.100.0.0/16", "transit_gateway"),
            ("172.16.0.0/12", "transit_gateway"),
            ("192.168.0.0/16", "transit_gateway"),
        ]

    def test_public_group_orders_internet_before_transit(self, two_zones):
        groups = [
            SubnetGroup(
                name="public",
                netmask=24,
                route_to_transit_gateway=frozenset([parse_block("10.50.0.0/16")]),
            ),
            SubnetGroup(name="transit_gateway", netmask=28),
        ]

        topology = topology_for(groups, two_zones)

        assert targets(topology.routes[("public", two_zones[0])]) == [
            ("0.0.0.0/0", "internet_gateway"),
            ("10.50.0.0/16", "transit_gateway"),
        ]

    def test_transit_route_requires_transit_gateway_group(self, two_zones):
        groups = [
            SubnetGroup(
                name="private",
                netmask=24,
                route_to_transit_gateway=frozenset([parse_block("10.50.0.0/16")]),
            )
        ]

        with pytest.raises(UnsatisfiableRouteError):
            topology_for(groups, two_zones)

    def test_conflicting_default_routes_fail(self, two_zones):
        groups = [
            public(NatGatewayConfiguration.ALL_AZS),
            SubnetGroup(
                name="private",
                netmask=24,
                route_to_nat=True,
                route_to_transit_gateway=frozenset([DEFAULT_ROUTE]),
            ),
            SubnetGroup(name="transit_gateway", netmask=28),
        ]

        with pytest.raises(UnsatisfiableRouteError):
            topology_for(groups, two_zones)

    def test_groups_without_routing_get_empty_tables(self, two_zones):
        topology = topology_for([SubnetGroup(name="isolated", netmask=24)], two_zones)

        assert all(rules == [] for rules in topology.routes.values())
        assert len(topology.routes) == 2

    def test_routes_do_not_depend_on_allocations(self, two_zones):
        groups = [
            public(NatGatewayConfiguration.ALL_AZS),
            SubnetGroup(name="private", netmask=24, route_to_nat=True),
        ]
        wide = [
            public(NatGatewayConfiguration.ALL_AZS),
            SubnetGroup(name="private", netmask=20, route_to_nat=True),
        ]

        assert topology_for(groups, two_zones) == topology_for(wide, two_zones)
