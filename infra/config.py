"""Stack configuration schema and loader."""

from dataclasses import dataclass
from typing import Optional

import pulumi

from infra.planning.config import NetworkConfig, load_network_config_file


@dataclass
class StackConfig:
    """Configuration for a network deployment."""

    # Network identity
    name: str
    environment: str

    # Cross-account access (optional)
    role_arn: Optional[str]
    external_id: Optional[pulumi.Output[str]]
    aws_region: str

    # Networking
    network: NetworkConfig

    # Identity migration: "zone" attaches aliases from the zone-only key scheme
    migrate_from_key_scheme: Optional[str]


def load_stack_config() -> StackConfig:
    """Load and validate network configuration from Pulumi stack config."""
    config = pulumi.Config()
    region = config.get("awsRegion") or "us-east-1"

    config_file = config.get("networkConfigFile")
    if config_file:
        network = load_network_config_file(config_file)
    else:
        network = NetworkConfig.model_validate(config.get_object("network") or {})

    # Default zone names based on region
    if network.availability_zones is None:
        network = network.model_copy(
            update={
                "availability_zones": [
                    f"{region}{letter}" for letter in "abcdefghijklmnopqrstuvwxyz"[: network.az_count]
                ]
            }
        )

    role_arn = config.get("roleArn")
    return StackConfig(
        name=config.require("name"),
        environment=config.get("environment") or "prod",
        role_arn=role_arn,
        external_id=config.require_secret("externalId") if role_arn else None,
        aws_region=region,
        network=network,
        migrate_from_key_scheme=config.get("migrateFromKeyScheme"),
    )
