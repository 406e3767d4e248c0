"""Arithmetic over IPv4 address blocks."""

import ipaddress

from infra.planning.errors import CapacityError, InvalidAddressBlockError

AddressBlock = ipaddress.IPv4Network

MAX_PREFIX = 32
DEFAULT_ROUTE = ipaddress.IPv4Network("0.0.0.0/0")


def parse_block(value: str | AddressBlock) -> AddressBlock:
    """Parse ``"10.0.0.0/16"`` into an address block.

    The base address must be aligned to the prefix (no host bits set).
    """
    if isinstance(value, ipaddress.IPv4Network):
        return value
    if not isinstance(value, str) or "/" not in value:
        raise InvalidAddressBlockError(
            f"Address block must be written as '<address>/<prefix>', got {value!r}",
            block=value,
        )
    try:
        return ipaddress.IPv4Network(value.strip(), strict=True)
    except ValueError as e:
        raise InvalidAddressBlockError(f"Invalid address block '{value}': {e}", block=value) from e


def partition(
    block: str | AddressBlock,
    netmask: int,
    count: int,
    offset: int = 0,
) -> list[AddressBlock]:
    """Split ``block`` into ``/netmask`` sub-blocks.

    Returns ``count`` consecutive sub-blocks in ascending address order,
    starting at the ``offset``-th sub-block of ``block``.
    """
    block = parse_block(block)
    if netmask > MAX_PREFIX:
        raise InvalidAddressBlockError(
            f"Netmask /{netmask} is out of range (max /{MAX_PREFIX})", netmask=netmask
        )
    if netmask <= block.prefixlen:
        raise CapacityError(
            f"Netmask /{netmask} must be longer than the /{block.prefixlen} of {block}",
            block=block,
            netmask=netmask,
        )
    if count < 0 or offset < 0:
        raise ValueError("count and offset must not be negative")

    available = 1 << (netmask - block.prefixlen)
    if offset + count > available:
        raise CapacityError(
            f"{block} holds {available} /{netmask} blocks, "
            f"{offset + count} are needed",
            block=block,
            netmask=netmask,
        )

    size = 1 << (MAX_PREFIX - netmask)
    base = int(block.network_address)
    return [
        ipaddress.IPv4Network((base + (offset + i) * size, netmask))
        for i in range(count)
    ]


def first_index_at_or_after(block: AddressBlock, netmask: int, address: int) -> int:
    """Index of the first ``/netmask`` sub-block of ``block`` starting at or after ``address``."""
    size = 1 << (MAX_PREFIX - netmask)
    distance = max(address - int(block.network_address), 0)
    return -(-distance // size)


def contains(outer: AddressBlock, inner: AddressBlock) -> bool:
    return inner.subnet_of(outer)


def overlaps(a: AddressBlock, b: AddressBlock) -> bool:
    return a.overlaps(b)


def sort_key(block: AddressBlock) -> tuple[int, int]:
    return int(block.network_address), block.prefixlen
