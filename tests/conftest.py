"""
Shared pytest fixtures for all tests.

Storage settings point at a throwaway directory before any ``api`` module is
imported, so importing the app never touches the working directory.
"""

import os
import tempfile

_STORAGE_DIR = tempfile.mkdtemp(prefix="netplan-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_STORAGE_DIR}/netplan.db")
os.environ.setdefault("CONFIG_DIR", f"{_STORAGE_DIR}/configs")
os.environ.setdefault("LOG_JSON", "false")

import pytest  # noqa: E402

from infra.planning.config import NetworkConfig  # noqa: E402
from infra.planning.models import (  # noqa: E402
    NatGatewayConfiguration,
    SubnetGroup,
    build_zones,
)


@pytest.fixture
def two_zones():
    return build_zones(2)


@pytest.fixture
def three_zones():
    return build_zones(3)


@pytest.fixture
def public_private_groups():
    """Public group declared before private, both /24, NAT in every zone."""
    return [
        SubnetGroup(
            name="public",
            netmask=24,
            nat_gateway_configuration=NatGatewayConfiguration.ALL_AZS,
        ),
        SubnetGroup(name="private", netmask=24, route_to_nat=True),
    ]


@pytest.fixture
def network_config() -> NetworkConfig:
    return NetworkConfig.model_validate(
        {
            "cidr_block": "10.0.0.0/16",
            "az_count": 2,
            "subnets": {
                "public": {"netmask": 24, "nat_gateway_configuration": "single_az"},
                "private": {
                    "netmask": 24,
                    "route_to_nat": True,
                    "route_to_transit_gateway": ["10.200.0.0/16", "10.100.0.0/16"],
                },
                "transit_gateway": {"netmask": 28},
            },
            "transit_gateway_id": "tgw-0123456789abcdef0",
        }
    )
