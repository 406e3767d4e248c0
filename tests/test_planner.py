"""Tests for end-to-end planning and output assembly."""

import itertools

import pytest

from infra.planning.address_space import overlaps, parse_block
from infra.planning.errors import (
    OverlapError,
    UnsatisfiableRouteError,
    ZoneCountMismatchError,
)
from infra.planning.config import NetworkConfig
from infra.planning.models import GroupKind, NatGatewayConfiguration, SubnetGroup
from infra.planning.outputs import attach_resource_ids
from infra.planning.planner import build_plan, plan_network


class TestBuildPlan:
    """Tests for build_plan."""

    def test_example_allocation(self, two_zones):
        groups = [SubnetGroup(name="public", netmask=24), SubnetGroup(name="private", netmask=24)]

        plan = build_plan("10.0.0.0/16", two_zones, groups)

        assert [str(b) for b in plan.outputs["private"].cidr_blocks()] == [
            "10.0.0.0/24",
            "10.0.1.0/24",
        ]
        assert [str(b) for b in plan.outputs["public"].cidr_blocks()] == [
            "10.0.2.0/24",
            "10.0.3.0/24",
        ]

    def test_nat_none_with_route_to_nat_is_rejected(self, two_zones):
        groups = [
            SubnetGroup(
                name="public", netmask=24, nat_gateway_configuration=NatGatewayConfiguration.NONE
            ),
            SubnetGroup(name="private", netmask=24, route_to_nat=True),
        ]

        with pytest.raises(UnsatisfiableRouteError):
            build_plan("10.0.0.0/16", two_zones, groups)

    def test_zones_are_sorted_by_index(self, three_zones):
        plan = build_plan(
            "10.0.0.0/16", list(reversed(three_zones)), [SubnetGroup(name="private", netmask=24)]
        )

        assert [zone.index for zone in plan.zones] == [0, 1, 2]
        assert list(plan.outputs["private"].zones) == ["a", "b", "c"]

    def test_plan_is_deterministic(self, three_zones, public_private_groups):
        first = build_plan("10.0.0.0/16", three_zones, public_private_groups)
        second = build_plan("10.0.0.0/16", three_zones, public_private_groups)

        assert first == second
        assert list(first.allocations.items()) == list(second.allocations.items())

    def test_overlap_rejects_the_whole_plan(self, two_zones):
        groups = [
            SubnetGroup(name="private", netmask=24),
            SubnetGroup(
                name="legacy",
                cidrs=(parse_block("10.0.0.128/25"), parse_block("10.0.8.0/24")),
            ),
        ]

        with pytest.raises(OverlapError) as exc_info:
            build_plan("10.0.0.0/16", two_zones, groups)

        assert exc_info.value.context["other_group"] == "legacy"


class TestOutputs:
    """Tests for assembled outputs."""

    def test_outputs_are_grouped_and_zone_ordered(self, three_zones, public_private_groups):
        plan = build_plan("10.0.0.0/16", three_zones, public_private_groups)

        assert list(plan.outputs) == ["public", "private"]
        private = plan.outputs["private"]
        assert private.kind is GroupKind.CUSTOM
        assert [e.identity_key for e in private.entries()] == [
            "private/a",
            "private/b",
            "private/c",
        ]
        assert [e.zone.index for e in private.entries()] == [0, 1, 2]

    def test_nat_gateway_flags_only_on_public(self, three_zones, public_private_groups):
        plan = build_plan("10.0.0.0/16", three_zones, public_private_groups)

        assert all(e.nat_gateway for e in plan.outputs["public"].entries())
        assert not any(e.nat_gateway for e in plan.outputs["private"].entries())

    def test_entries_carry_their_routes(self, two_zones, public_private_groups):
        plan = build_plan("10.0.0.0/16", two_zones, public_private_groups)

        entry = plan.outputs["private"].zones["b"]
        assert [rule.target.reference for rule in entry.routes] == ["nat_gateway/b"]

    def test_attach_resource_ids_fills_by_key(self, two_zones, public_private_groups):
        plan = build_plan("10.0.0.0/16", two_zones, public_private_groups)

        provisioned = attach_resource_ids(
            plan.outputs, {"private/a": "subnet-111", "private/b": "subnet-222"}
        )

        assert provisioned["private"].resource_ids() == ["subnet-111", "subnet-222"]
        assert provisioned["public"].resource_ids() == [None, None]
        assert plan.outputs["private"].resource_ids() == [None, None]


class TestPlanNetwork:
    """Tests for planning from a NetworkConfig."""

    def test_full_configuration(self, network_config):
        plan = plan_network(network_config)

        cidrs = {
            name: [str(b) for b in group.cidr_blocks()] for name, group in plan.outputs.items()
        }
        assert cidrs == {
            "public": ["10.0.3.0/24", "10.0.4.0/24"],
            "private": ["10.0.0.0/24", "10.0.1.0/24"],
            "transit_gateway": ["10.0.2.0/28", "10.0.2.16/28"],
        }
        assert [zone.label for zone in plan.nat_gateway_zones] == ["a"]

        private_b = plan.outputs["private"].zones["b"]
        assert [(str(r.destination), r.target.reference) for r in private_b.routes] == [
            ("0.0.0.0/0", "nat_gateway/a"),
            ("10.100.0.0/16", "transit_gateway"),
            ("10.200.0.0/16", "transit_gateway"),
        ]

    def test_no_allocations_overlap(self):
        config = NetworkConfig.model_validate(
            {
                "cidr_block": "10.0.0.0/16",
                "az_count": 4,
                "subnets": {
                    "public": {"netmask": 26, "nat_gateway_configuration": "all_azs"},
                    "app": {"netmask": 20, "route_to_nat": True},
                    "data": {
                        "cidrs": ["10.0.240.0/24", "10.0.241.0/24", "10.0.242.0/24", "10.0.243.0/24"]
                    },
                    "cache": {"netmask": 25},
                    "transit_gateway": {"netmask": 28},
                },
            }
        )

        plan = plan_network(config)

        assert len(plan.allocations) == 20
        for a, b in itertools.combinations(plan.allocations.values(), 2):
            assert not overlaps(a, b)

    def test_zone_names_beyond_az_count_are_ignored(self):
        config = NetworkConfig.model_validate(
            {
                "az_count": 2,
                "availability_zones": ["us-west-2c", "us-west-2a", "us-west-2b"],
                "subnets": {"private": {"netmask": 24}},
            }
        )

        plan = plan_network(config)

        assert [zone.label for zone in plan.zones] == ["us-west-2a", "us-west-2b"]

    def test_cidrs_for_removed_zone_are_rejected(self):
        config = NetworkConfig.model_validate(
            {
                "az_count": 2,
                "subnets": {"private": {"cidrs": ["10.0.0.0/24", "10.0.1.0/24", "10.0.2.0/24"]}},
            }
        )

        with pytest.raises(ZoneCountMismatchError):
            plan_network(config)
