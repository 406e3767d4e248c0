"""Inbound network configuration schema and loader."""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from infra.planning.address_space import AddressBlock, parse_block
from infra.planning.models import (
    GroupKind,
    NatGatewayConfiguration,
    SubnetGroup,
    Zone,
    build_zones,
)


class ConfigError(Exception):
    pass


class SubnetGroupConfig(BaseModel):
    """Configuration of one subnet group: either a netmask or explicit cidrs."""

    netmask: Optional[int] = Field(default=None, ge=1, le=32)
    cidrs: Optional[list[str]] = Field(default=None)
    route_to_nat: bool = Field(default=False)
    route_to_transit_gateway: list[str] = Field(default_factory=list)
    nat_gateway_configuration: Optional[NatGatewayConfiguration] = Field(default=None)
    tags: dict[str, str] = Field(default_factory=dict)

    @field_validator("cidrs", "route_to_transit_gateway")
    @classmethod
    def _validate_blocks(cls, value: Optional[list[str]]) -> Optional[list[str]]:
        if value is None:
            return value
        return [str(parse_block(item)) for item in value]

    @model_validator(mode="after")
    def _netmask_xor_cidrs(self) -> "SubnetGroupConfig":
        if (self.netmask is None) == (self.cidrs is None):
            raise ValueError("exactly one of 'netmask' or 'cidrs' must be set")
        return self


class NetworkConfig(BaseModel):
    """Top-level block, zones and subnet groups of one VPC."""

    cidr_block: str = Field(default="10.0.0.0/16")
    az_count: int = Field(default=2, ge=1, le=26)
    availability_zones: Optional[list[str]] = Field(default=None)
    zone_capacity: Optional[int] = Field(default=None, ge=1)
    subnets: dict[str, SubnetGroupConfig] = Field(default_factory=dict)
    transit_gateway_id: Optional[str] = Field(default=None)

    @field_validator("cidr_block")
    @classmethod
    def _validate_cidr_block(cls, value: str) -> str:
        return str(parse_block(value))

    @model_validator(mode="after")
    def _validate_groups(self) -> "NetworkConfig":
        if self.zone_capacity is not None and self.zone_capacity < self.az_count:
            raise ValueError(
                f"zone_capacity ({self.zone_capacity}) must be at least az_count ({self.az_count})"
            )
        if self.availability_zones is not None and len(set(self.availability_zones)) < self.az_count:
            raise ValueError(
                f"az_count is {self.az_count} but only "
                f"{len(set(self.availability_zones))} availability zones are listed"
            )
        for name, group in self.subnets.items():
            if (
                group.nat_gateway_configuration is not None
                and GroupKind.for_name(name) is not GroupKind.PUBLIC
            ):
                raise ValueError(
                    f"nat_gateway_configuration is only valid on the "
                    f"'{GroupKind.PUBLIC.value}' group, not '{name}'"
                )
        return self

    def block(self) -> AddressBlock:
        return parse_block(self.cidr_block)

    def zones(self) -> list[Zone]:
        return build_zones(self.az_count, self.availability_zones)

    def groups(self) -> list[SubnetGroup]:
        return [
            SubnetGroup(
                name=name,
                netmask=group.netmask,
                cidrs=(
                    tuple(parse_block(cidr) for cidr in group.cidrs)
                    if group.cidrs is not None
                    else None
                ),
                route_to_nat=group.route_to_nat,
                route_to_transit_gateway=frozenset(
                    parse_block(cidr) for cidr in group.route_to_transit_gateway
                ),
                nat_gateway_configuration=(
                    group.nat_gateway_configuration or NatGatewayConfiguration.NONE
                ),
                tags=tuple(sorted(group.tags.items())),
            )
            for name, group in self.subnets.items()
        ]


def load_network_config_file(path: str | Path) -> NetworkConfig:
    """Load a network configuration from a YAML file."""
    with open(path) as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid network config file: {path}")
    return NetworkConfig.model_validate(data)
