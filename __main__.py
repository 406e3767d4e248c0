"""Network planner - Main entry point for Pulumi infrastructure deployment."""

import pulumi

from infra.components.networking import Networking
from infra.config import load_stack_config
from infra.logging import configure_logging
from infra.providers import create_aws_provider

configure_logging(json_format=True)

# Load network configuration from stack config
config = load_stack_config()

# Create AWS provider (optionally assuming a role in another account)
aws_provider = create_aws_provider(config)

# Plan and provision the VPC, subnets, NAT gateways and routes
networking = Networking(
    name=config.name,
    network=config.network,
    provider=aws_provider,
    migrate_from_key_scheme=config.migrate_from_key_scheme,
)

# Exports
pulumi.export("vpc_id", networking.vpc_id)
pulumi.export("subnet_ids_by_group", networking.subnet_ids_by_group)
pulumi.export("route_table_ids_by_group", networking.route_table_ids_by_group)
pulumi.export("nat_gateway_ids", networking.nat_gateway_ids)
pulumi.export(
    "subnet_cidrs_by_group",
    {
        group_name: [str(block) for block in group.cidr_blocks()]
        for group_name, group in networking.outputs.items()
    },
)
