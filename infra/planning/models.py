"""Core planner types."""

import string
from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple, Optional

from infra.planning.address_space import AddressBlock
from infra.planning.errors import ZoneCountMismatchError


class GroupKind(str, Enum):
    """Kind of a subnet group, derived from its name."""

    PUBLIC = "public"
    TRANSIT_GATEWAY = "transit_gateway"
    CUSTOM = "custom"

    @classmethod
    def for_name(cls, name: str) -> "GroupKind":
        if name == cls.PUBLIC.value:
            return cls.PUBLIC
        if name == cls.TRANSIT_GATEWAY.value:
            return cls.TRANSIT_GATEWAY
        return cls.CUSTOM


class NatGatewayConfiguration(str, Enum):
    """NAT gateway placement policy of the public group."""

    ALL_AZS = "all_azs"
    SINGLE_AZ = "single_az"
    NONE = "none"


class TargetKind(str, Enum):
    INTERNET_GATEWAY = "internet_gateway"
    NAT_GATEWAY = "nat_gateway"
    TRANSIT_GATEWAY = "transit_gateway"


def zone_letter(index: int) -> str:
    """Letter label for a zone index: 0 -> "a", 25 -> "z", 26 -> "aa"."""
    letters = ""
    index += 1
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters = string.ascii_lowercase[remainder] + letters
    return letters


@dataclass(frozen=True, order=True)
class Zone:
    """An availability zone, ordered by index."""

    index: int
    name: Optional[str] = field(default=None, compare=False)

    @property
    def label(self) -> str:
        return self.name or zone_letter(self.index)


def build_zones(count: int, names: Optional[list[str]] = None) -> list[Zone]:
    """Build ``count`` zones.

    Provider names are sorted so that zone 0 is always the lowest-named zone.
    """
    if count < 0:
        raise ValueError("Zone count must not be negative")
    if not names:
        return [Zone(index=i) for i in range(count)]
    ordered = sorted(set(names))
    if len(ordered) < count:
        raise ZoneCountMismatchError(
            f"{count} zones requested but only {len(ordered)} zone names given",
            zone_count=count,
        )
    return [Zone(index=i, name=name) for i, name in enumerate(ordered[:count])]


@dataclass(frozen=True)
class SubnetGroup:
    """A named set of one subnet per zone sharing routing policy.

    Exactly one of ``netmask`` and ``cidrs`` is set.
    """

    name: str
    netmask: Optional[int] = None
    cidrs: Optional[tuple[AddressBlock, ...]] = None
    route_to_nat: bool = False
    route_to_transit_gateway: frozenset[AddressBlock] = frozenset()
    nat_gateway_configuration: NatGatewayConfiguration = NatGatewayConfiguration.NONE
    tags: tuple[tuple[str, str], ...] = ()

    @property
    def kind(self) -> GroupKind:
        return GroupKind.for_name(self.name)

    @property
    def is_explicit(self) -> bool:
        return self.cidrs is not None


SubnetRef = tuple[str, Zone]


@dataclass(frozen=True)
class RouteTarget:
    kind: TargetKind
    zone: Optional[Zone] = None

    @property
    def reference(self) -> str:
        if self.kind is TargetKind.NAT_GATEWAY and self.zone is not None:
            return f"{self.kind.value}/{self.zone.label}"
        return self.kind.value


@dataclass(frozen=True)
class RouteRule:
    destination: AddressBlock
    target: RouteTarget


class TopologyPlan(NamedTuple):
    nat_gateways: dict[Zone, bool]
    routes: dict[SubnetRef, list[RouteRule]]


class KeyRename(NamedTuple):
    old_key: str
    new_key: str
