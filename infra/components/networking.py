"""VPC and networking infrastructure provisioned from a network plan."""

from typing import Optional

import pulumi
import pulumi_aws as aws

from infra.logging import bind_contextvars, get_logger
from infra.planning.config import NetworkConfig
from infra.planning.identity import legacy_keys, reconcile, transit_route_key
from infra.planning.models import GroupKind, TargetKind, Zone
from infra.planning.outputs import ZoneEntry, attach_resource_ids
from infra.planning.planner import plan_network

logger = get_logger(__name__)

KEY_SCHEME_ZONE = "zone"


def resource_name(prefix: str, kind: str, key: str) -> str:
    """Pulumi resource name for an identity key."""
    return f"{prefix}-{kind}-{key.replace('/', '-')}"


class Networking(pulumi.ComponentResource):
    """VPC and networking infrastructure for one planned network.

    Creates:
    - VPC with the planned top-level block
    - One subnet, route table and association per (group, zone)
    - Internet gateway (when a public group exists)
    - NAT gateways where the plan places them
    - Routes to the internet gateway, NAT gateways and transit gateway
    - Transit gateway VPC attachment on the transit_gateway subnets
    """

    def __init__(
        self,
        name: str,
        network: NetworkConfig,
        provider: Optional[aws.Provider] = None,
        migrate_from_key_scheme: Optional[str] = None,
        opts: pulumi.ResourceOptions | None = None,
    ):
        super().__init__("netplan:infrastructure:Networking", name, None, opts)

        bind_contextvars(network=name)
        self.plan = plan_network(network)
        plan = self.plan
        self._name = name
        self._provider = provider

        # (name prefix, old key) by new identity key, for Pulumi aliases
        self._previous_keys: dict[str, tuple[str, str]] = {}
        if migrate_from_key_scheme == KEY_SCHEME_ZONE:
            group_by_key = {key: group for (group, _), key in plan.keys.items()}
            renames = reconcile(legacy_keys(plan.groups, plan.zones), plan.keys)
            for old_key, new_key in renames:
                self._previous_keys[new_key] = (f"{name}-{group_by_key[new_key]}", old_key)
            logger.info("identity_keys_migrated", renames=len(renames))
        elif migrate_from_key_scheme is not None:
            raise ValueError(f"Unknown key scheme '{migrate_from_key_scheme}'")

        self.vpc = aws.ec2.Vpc(
            f"{name}-vpc",
            cidr_block=str(plan.cidr_block),
            enable_dns_hostnames=True,
            enable_dns_support=True,
            tags={"Name": f"{name}-vpc"},
            opts=self._child_opts(),
        )

        self.internet_gateway = None
        if GroupKind.PUBLIC.value in plan.outputs:
            self.internet_gateway = aws.ec2.InternetGateway(
                f"{name}-igw",
                vpc_id=self.vpc.id,
                tags={"Name": f"{name}-igw"},
                opts=self._child_opts(),
            )

        # Subnets and route tables, keyed by identity key
        self.subnets: dict[str, aws.ec2.Subnet] = {}
        self.route_tables: dict[str, aws.ec2.RouteTable] = {}
        for group in plan.outputs.values():
            for entry in group.entries():
                key = entry.identity_key
                self.subnets[key] = aws.ec2.Subnet(
                    resource_name(name, "subnet", key),
                    vpc_id=self.vpc.id,
                    cidr_block=str(entry.cidr_block),
                    availability_zone=entry.zone.name,
                    map_public_ip_on_launch=group.kind is GroupKind.PUBLIC,
                    tags={**group.tags, "Name": f"{name}-{key}"},
                    opts=self._child_opts(key, "subnet"),
                )
                self.route_tables[key] = aws.ec2.RouteTable(
                    resource_name(name, "rt", key),
                    vpc_id=self.vpc.id,
                    tags={"Name": f"{name}-{key}"},
                    opts=self._child_opts(key, "rt"),
                )
                aws.ec2.RouteTableAssociation(
                    resource_name(name, "rta", key),
                    subnet_id=self.subnets[key].id,
                    route_table_id=self.route_tables[key].id,
                    opts=self._child_opts(key, "rta"),
                )

        # NAT gateways, each in its zone's public subnet
        self.nat_gateways: dict[Zone, aws.ec2.NatGateway] = {}
        for zone in plan.nat_gateway_zones:
            key = plan.keys[(GroupKind.PUBLIC.value, zone)]
            eip = aws.ec2.Eip(
                resource_name(name, "nat-eip", key),
                domain="vpc",
                tags={"Name": f"{name}-nat-{zone.label}"},
                opts=self._child_opts(key, "nat-eip"),
            )
            self.nat_gateways[zone] = aws.ec2.NatGateway(
                resource_name(name, "nat", key),
                allocation_id=eip.id,
                subnet_id=self.subnets[key].id,
                tags={"Name": f"{name}-nat-{zone.label}"},
                opts=self._child_opts(key, "nat", depends_on=[self.internet_gateway]),
            )

        self.transit_gateway_attachment = None
        has_transit_routes = any(
            rule.target.kind is TargetKind.TRANSIT_GATEWAY
            for rules in plan.topology.routes.values()
            for rule in rules
        )
        if has_transit_routes and not network.transit_gateway_id:
            raise ValueError("transit_gateway_id is required when routing to the transit gateway")
        transit_group = plan.outputs.get(GroupKind.TRANSIT_GATEWAY.value)
        if transit_group is not None and network.transit_gateway_id:
            self.transit_gateway_attachment = aws.ec2transitgateway.VpcAttachment(
                f"{name}-tgw-attachment",
                transit_gateway_id=network.transit_gateway_id,
                vpc_id=self.vpc.id,
                subnet_ids=[self.subnets[e.identity_key].id for e in transit_group.entries()],
                tags={"Name": f"{name}-tgw-attachment"},
                opts=self._child_opts(),
            )

        for group in plan.outputs.values():
            for entry in group.entries():
                self._create_routes(group.name, entry, network)

        # Export outputs
        self.vpc_id = self.vpc.id
        self.outputs = attach_resource_ids(
            plan.outputs, {key: subnet.id for key, subnet in self.subnets.items()}
        )
        self.subnet_ids_by_group = {
            group_name: group.resource_ids() for group_name, group in self.outputs.items()
        }
        self.route_table_ids_by_group = {
            group_name: [self.route_tables[e.identity_key].id for e in group.entries()]
            for group_name, group in self.outputs.items()
        }
        self.nat_gateway_ids = {zone.label: nat.id for zone, nat in self.nat_gateways.items()}

        self.register_outputs(
            {
                "vpc_id": self.vpc_id,
                "subnet_ids_by_group": self.subnet_ids_by_group,
                "route_table_ids_by_group": self.route_table_ids_by_group,
                "nat_gateway_ids": self.nat_gateway_ids,
            }
        )

    def _create_routes(self, group_name: str, entry: ZoneEntry, network: NetworkConfig) -> None:
        key = entry.identity_key
        route_table = self.route_tables[key]
        for rule in entry.routes:
            target = rule.target
            if target.kind is TargetKind.INTERNET_GATEWAY:
                aws.ec2.Route(
                    resource_name(self._name, "igw-route", key),
                    route_table_id=route_table.id,
                    destination_cidr_block=str(rule.destination),
                    gateway_id=self.internet_gateway.id,
                    opts=self._child_opts(key, "igw-route"),
                )
            elif target.kind is TargetKind.NAT_GATEWAY:
                aws.ec2.Route(
                    resource_name(self._name, "nat-route", key),
                    route_table_id=route_table.id,
                    destination_cidr_block=str(rule.destination),
                    nat_gateway_id=self.nat_gateways[target.zone].id,
                    opts=self._child_opts(key, "nat-route"),
                )
            else:
                # Keyed by zone and destination, so no alias is derived here
                aws.ec2.Route(
                    resource_name(
                        f"{self._name}-{group_name}", "tgw-route", transit_route_key(entry.zone, rule.destination)
                    ),
                    route_table_id=route_table.id,
                    destination_cidr_block=str(rule.destination),
                    transit_gateway_id=network.transit_gateway_id,
                    opts=self._child_opts(depends_on=[self.transit_gateway_attachment]),
                )

    def _child_opts(
        self,
        key: Optional[str] = None,
        kind: Optional[str] = None,
        depends_on: Optional[list] = None,
    ) -> pulumi.ResourceOptions:
        aliases = None
        if key is not None and key in self._previous_keys:
            prefix, old_key = self._previous_keys[key]
            aliases = [pulumi.Alias(name=resource_name(prefix, kind, old_key))]
        return pulumi.ResourceOptions(
            parent=self,
            provider=self._provider,
            aliases=aliases,
            depends_on=[d for d in depends_on or [] if d is not None] or None,
        )
