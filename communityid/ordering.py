"""Direction-independent ordering of flow endpoints.

A flow observed from either end must serialize to the same bytes. This
module decides which endpoint goes first:

- TCP, UDP, SCTP and every protocol without special handling: endpoints
  are compared as (raw address bytes, port) tuples and the smaller one is
  placed first.
- ICMP and ICMPv6: the source type is looked up in a request/reply table.
  For a known type the endpoint values become (type, counterpart type), so
  a request and its reply carry identical values, and then the normal
  comparison applies. Unknown types make the flow one-way: nothing is
  swapped and the values stay (type, code).

The protocol number never moves; only whole endpoints (address + value)
are swapped.
"""

from __future__ import annotations

import ipaddress
from enum import IntEnum
from typing import NamedTuple

from communityid.utils.logger import get_logger

logger = get_logger(__name__)

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address

ICMP_PROTOCOL = 1
ICMP6_PROTOCOL = 58


class IcmpType(IntEnum):
    """ICMPv4 message types that take part in a request/reply pair."""
    ECHO_REPLY = 0
    ECHO = 8
    ROUTER_ADVERT = 9
    ROUTER_SOLICIT = 10
    TIMESTAMP = 13
    TIMESTAMP_REPLY = 14
    INFO = 15
    INFO_REPLY = 16
    MASK = 17
    MASK_REPLY = 18


class Icmp6Type(IntEnum):
    """ICMPv6 message types that take part in a request/reply pair."""
    ECHO_REQUEST = 128
    ECHO_REPLY = 129
    MLD_LISTENER_QUERY = 130
    MLD_LISTENER_REPORT = 131
    ND_ROUTER_SOLICIT = 133
    ND_ROUTER_ADVERT = 134
    ND_NEIGHBOR_SOLICIT = 135
    ND_NEIGHBOR_ADVERT = 136
    WRU_REQUEST = 139
    WRU_REPLY = 140
    HAAD_REQUEST = 144
    HAAD_REPLY = 145


def _symmetric(pairs: dict[int, int]) -> dict[int, int]:
    """Expand request -> reply pairs into a lookup that works both ways."""
    table: dict[int, int] = {}
    for request, reply in pairs.items():
        table[int(request)] = int(reply)
        table[int(reply)] = int(request)
    return table


ICMP_COUNTERPARTS: dict[int, int] = _symmetric({
    IcmpType.ECHO: IcmpType.ECHO_REPLY,
    IcmpType.TIMESTAMP: IcmpType.TIMESTAMP_REPLY,
    IcmpType.INFO: IcmpType.INFO_REPLY,
    IcmpType.ROUTER_SOLICIT: IcmpType.ROUTER_ADVERT,
    IcmpType.MASK: IcmpType.MASK_REPLY,
})

ICMP6_COUNTERPARTS: dict[int, int] = _symmetric({
    Icmp6Type.ECHO_REQUEST: Icmp6Type.ECHO_REPLY,
    Icmp6Type.MLD_LISTENER_QUERY: Icmp6Type.MLD_LISTENER_REPORT,
    Icmp6Type.ND_ROUTER_SOLICIT: Icmp6Type.ND_ROUTER_ADVERT,
    Icmp6Type.ND_NEIGHBOR_SOLICIT: Icmp6Type.ND_NEIGHBOR_ADVERT,
    Icmp6Type.WRU_REQUEST: Icmp6Type.WRU_REPLY,
    Icmp6Type.HAAD_REQUEST: Icmp6Type.HAAD_REPLY,
})

_COUNTERPART_TABLES: dict[int, dict[int, int]] = {
    ICMP_PROTOCOL: ICMP_COUNTERPARTS,
    ICMP6_PROTOCOL: ICMP6_COUNTERPARTS,
}


class FlowSide(IntEnum):
    """Outcome of canonical ordering."""
    ONE_WAY = 0   # ICMP type without a counterpart, never reordered
    ORIGINAL = 1  # Source endpoint already first
    SWAPPED = 2   # Destination endpoint moved first


class CanonicalTuple(NamedTuple):
    """Endpoints of a flow in canonical order.

    Attributes:
        first_address: Address placed first in the serialized layout.
        first_port: Port (or ICMP port equivalent) of the first endpoint,
            None for port-less flows.
        second_address: Address placed second.
        second_port: Port (or ICMP port equivalent) of the second endpoint.
        side: Whether the original endpoints were kept, swapped, or left
            alone because the flow is one-way.
    """
    first_address: IPAddress
    first_port: int | None
    second_address: IPAddress
    second_port: int | None
    side: FlowSide


def port_equivalents(protocol: int, src_value: int, dst_value: int) -> tuple[int, int, bool]:
    """
    Map ICMP type/code values to comparable port equivalents.

    For protocols other than ICMP and ICMPv6 the values are returned as-is.

    Args:
        protocol: IANA protocol number
        src_value: Source port, or ICMP type
        dst_value: Destination port, or ICMP code

    Returns:
        Tuple of (src_value, dst_value, one_way). For a known ICMP type the
        destination value is replaced by the counterpart type; for an
        unknown ICMP type one_way is True.

    Example:
        >>> port_equivalents(1, 8, 0)
        (8, 0, False)
        >>> port_equivalents(1, 0, 0)
        (0, 8, False)
        >>> port_equivalents(1, 3, 1)
        (3, 1, True)
    """
    table = _COUNTERPART_TABLES.get(protocol)
    if table is None:
        return src_value, dst_value, False

    counterpart = table.get(src_value)
    if counterpart is None:
        return src_value, dst_value, True
    return src_value, counterpart, False


def _endpoint_key(address: IPAddress, port: int | None) -> tuple[bytes, int]:
    # Both sides are either port-less or not, so 0 never competes with a real port.
    return address.packed, 0 if port is None else port


def order_endpoints(
    src_address: IPAddress,
    src_port: int | None,
    dst_address: IPAddress,
    dst_port: int | None,
    one_way: bool = False,
) -> CanonicalTuple:
    """
    Place the smaller (address, port) endpoint first.

    Addresses are compared on their packed network-order bytes, then ports
    numerically. Equal endpoints keep their original order.

    Args:
        src_address: Source address
        src_port: Source port, or None for port-less flows
        dst_address: Destination address (same family as src_address)
        dst_port: Destination port, or None for port-less flows
        one_way: Skip ordering entirely

    Returns:
        CanonicalTuple in canonical order
    """
    if one_way:
        return CanonicalTuple(src_address, src_port, dst_address, dst_port, FlowSide.ONE_WAY)

    if _endpoint_key(src_address, src_port) > _endpoint_key(dst_address, dst_port):
        return CanonicalTuple(dst_address, dst_port, src_address, src_port, FlowSide.SWAPPED)
    return CanonicalTuple(src_address, src_port, dst_address, dst_port, FlowSide.ORIGINAL)


def canonicalize(
    protocol: int,
    src_address: IPAddress,
    src_port: int | None,
    dst_address: IPAddress,
    dst_port: int | None,
) -> CanonicalTuple:
    """
    Compute the canonical endpoint order of a flow.

    Flows that differ only in direction produce the same first/second
    endpoints (their ``side`` differs).

    Args:
        protocol: IANA protocol number
        src_address: Source address
        src_port: Source port or ICMP type, None for port-less flows
        dst_address: Destination address
        dst_port: Destination port or ICMP code, None for port-less flows

    Returns:
        CanonicalTuple ready for serialization

    Example:
        >>> from ipaddress import ip_address
        >>> a = canonicalize(17, ip_address("10.0.0.2"), 53, ip_address("10.0.0.1"), 5353)
        >>> b = canonicalize(17, ip_address("10.0.0.1"), 5353, ip_address("10.0.0.2"), 53)
        >>> a[:4] == b[:4]
        True
    """
    one_way = False
    if src_port is not None and dst_port is not None:
        src_port, dst_port, one_way = port_equivalents(protocol, src_port, dst_port)

    result = order_endpoints(src_address, src_port, dst_address, dst_port, one_way)
    logger.debug(
        "Canonical order for protocol %d: %s/%s -> %s/%s (%s)",
        protocol,
        result.first_address,
        result.first_port,
        result.second_address,
        result.second_port,
        result.side.name,
    )
    return result
