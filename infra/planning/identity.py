"""Stable identity keys for planned subnets and their migration across key schemes.

Subnets, route tables and NAT gateways are keyed by their declared identity,
``"<group>/<zone label>"``, never by an allocated address. Changing a netmask
or widening a route therefore never changes a key.

Transit gateway routes still use the derived ``"<zone>:<destination>"`` key
(see ``transit_route_key``). Renames of those keys are not produced by
``reconcile`` and have to be corrected by hand.
"""

from collections.abc import Mapping, Sequence
from typing import Protocol

from infra.planning.address_space import AddressBlock
from infra.planning.models import KeyRename, SubnetGroup, SubnetRef, Zone

KEY_SEPARATOR = "/"


def identity_key(group_name: str, zone: Zone) -> str:
    return f"{group_name}{KEY_SEPARATOR}{zone.label}"


def assign_keys(groups: Sequence[SubnetGroup], zones: Sequence[Zone]) -> dict[SubnetRef, str]:
    """Key every (group, zone) pair by group name and zone label."""
    return {
        (group.name, zone): identity_key(group.name, zone)
        for group in groups
        for zone in zones
    }


def legacy_keys(groups: Sequence[SubnetGroup], zones: Sequence[Zone]) -> dict[SubnetRef, str]:
    """Keys of the previous scheme: zone label only, inside per-group collections."""
    return {(group.name, zone): zone.label for group in groups for zone in zones}


def transit_route_key(zone: Zone, destination: AddressBlock) -> str:
    return f"{zone.label}:{destination}"


def reconcile(old: Mapping[SubnetRef, str], new: Mapping[SubnetRef, str]) -> list[KeyRename]:
    """Pair old and new keys of the same (group, zone) whose key changed.

    Entries are matched by group name and zone index. Pairs are ordered by
    group name, then zone index.
    """
    previous = {(group, zone.index): key for (group, zone), key in old.items()}
    renames = []
    for (group, zone), new_key in sorted(new.items(), key=lambda item: (item[0][0], item[0][1].index)):
        old_key = previous.get((group, zone.index))
        if old_key is not None and old_key != new_key:
            renames.append(KeyRename(old_key, new_key))
    return renames


class IdentityStore(Protocol):
    """Append-only store of identity key snapshots and renames."""

    def latest_keys(self, network: str) -> dict[SubnetRef, str]:
        ...

    def append_keys(self, network: str, keys: Mapping[SubnetRef, str]) -> None:
        ...

    def append_renames(self, network: str, renames: Sequence[KeyRename]) -> None:
        ...

    def list_renames(self, network: str) -> list[KeyRename]:
        ...


def record_migration(
    store: IdentityStore,
    network: str,
    keys: Mapping[SubnetRef, str],
) -> list[KeyRename]:
    """Reconcile ``keys`` against the last snapshot of ``network`` and log the result."""
    latest = store.latest_keys(network)
    renames = reconcile(latest, keys)
    if renames:
        store.append_renames(network, renames)
    if dict(keys) != latest:
        store.append_keys(network, keys)
    return renames
