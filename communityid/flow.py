"""Flow data model and the Community ID compute entry points.

Example:
    >>> from communityid import Flow, Protocol
    >>> f = Flow.new(Protocol.UDP, "192.168.1.42", 4242, "8.8.8.8", 53)
    >>> f.community_id_v1(0).base64()
    '1:vTdrngJjlP5eZ9mw9JtnKyn99KM='
    >>> f.reversed().community_id_v1(0) == f.community_id_v1(0)
    True
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from enum import IntEnum

from communityid.digest import CommunityId, compute_v1
from communityid.ordering import CanonicalTuple, IPAddress, canonicalize
from communityid.utils.errors import (
    AddressFamilyMismatchError,
    FlowConstructionError,
    InvalidAddressError,
    InvalidPortError,
    InvalidProtocolError,
)


class Protocol(IntEnum):
    """IP protocols with a name; any other number 0..255 is accepted as a plain int."""
    ICMP = 1
    IGMP = 2
    TCP = 6
    UDP = 17
    GRE = 47
    ESP = 50
    AH = 51
    ICMP6 = 58
    PIM = 103
    SCTP = 132

    def into_flow(
        self,
        src_address: object,
        src_port: int,
        dst_address: object,
        dst_port: int,
    ) -> Flow:
        """Shortcut for Flow.new(self, ...)."""
        return Flow.new(self, src_address, src_port, dst_address, dst_port)


def coerce_protocol(value: int) -> Protocol | int:
    """
    Validate a protocol number.

    Args:
        value: Protocol member or IANA protocol number

    Returns:
        The matching Protocol member, or the int itself for unnamed protocols

    Raises:
        InvalidProtocolError: If value is not an integer in 0..255
    """
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 0xFF:
        raise InvalidProtocolError(value)
    try:
        return Protocol(value)
    except ValueError:
        return int(value)


def coerce_address(value: object) -> IPAddress:
    """
    Turn a string, packed bytes or address object into an ipaddress value.

    Raises:
        InvalidAddressError: If the value is not an IPv4 or IPv6 address
    """
    if isinstance(value, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return value
    if isinstance(value, bool):
        raise InvalidAddressError(value)
    try:
        return ipaddress.ip_address(value)
    except ValueError as e:
        raise InvalidAddressError(value) from e


def _check_port(name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 0xFFFF:
        raise InvalidPortError(name, value)


@dataclass(frozen=True)
class Endpoint:
    """An address plus a port, or an ICMP type/code for ICMP flows.

    The port is None for protocols without ports (see Flow.partial).
    """
    address: IPAddress
    port: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", coerce_address(self.address))
        if self.port is not None:
            _check_port("port", self.port)

    @property
    def family(self) -> str:
        return f"IPv{self.address.version}"

    def __str__(self) -> str:
        host = f"[{self.address}]" if self.address.version == 6 else str(self.address)
        if self.port is None:
            return host
        return f"{host}:{self.port}"


@dataclass(frozen=True)
class Flow:
    """One observed direction of a conversation.

    Both endpoints must be in the same address family and must either both
    carry a port or both omit it. Flows are hashed with community_id_v1();
    a flow and its reverse give the same CommunityId.
    """
    protocol: Protocol | int
    source: Endpoint
    destination: Endpoint

    def __post_init__(self) -> None:
        object.__setattr__(self, "protocol", coerce_protocol(self.protocol))

        for name, endpoint in (("source", self.source), ("destination", self.destination)):
            if not isinstance(endpoint, Endpoint):
                raise FlowConstructionError(
                    f"Invalid {name} endpoint: {endpoint!r}",
                    "Pass Endpoint values, or use Flow.new() / Flow.partial() with plain addresses.",
                )

        src, dst = self.source.address, self.destination.address
        if src.version != dst.version:
            raise AddressFamilyMismatchError(src, dst)

        if (self.source.port is None) != (self.destination.port is None):
            raise FlowConstructionError(
                f"Port mismatch: source port is {self.source.port!r}, "
                f"destination port is {self.destination.port!r}",
                "Give ports for both endpoints, or use Flow.partial() for port-less protocols.",
            )

    @classmethod
    def new(
        cls,
        protocol: Protocol | int,
        src_address: object,
        src_port: int,
        dst_address: object,
        dst_port: int,
    ) -> Flow:
        """
        Create a flow from a 5-tuple.

        For ICMP and ICMPv6 the ports are the ICMP type (source) and code
        (destination).

        Args:
            protocol: Protocol member or IANA protocol number
            src_address: Source address (string, packed bytes or ipaddress value)
            src_port: Source port or ICMP type
            dst_address: Destination address, same family as src_address
            dst_port: Destination port or ICMP code

        Returns:
            The validated Flow

        Raises:
            AddressFamilyMismatchError: If one address is IPv4 and the other IPv6
            FlowConstructionError: If any other field is invalid
        """
        _check_port("source port", src_port)
        _check_port("destination port", dst_port)
        return cls(protocol, Endpoint(src_address, src_port), Endpoint(dst_address, dst_port))

    @classmethod
    def partial(cls, protocol: Protocol | int, src_address: object, dst_address: object) -> Flow:
        """Create a flow for a protocol without ports (e.g. GRE, ESP)."""
        return cls(protocol, Endpoint(src_address), Endpoint(dst_address))

    @property
    def has_ports(self) -> bool:
        return self.source.port is not None

    def reversed(self) -> Flow:
        """The same conversation as seen from the other end."""
        return Flow(self.protocol, self.destination, self.source)

    def canonical(self) -> CanonicalTuple:
        return canonicalize(
            self.protocol,
            self.source.address,
            self.source.port,
            self.destination.address,
            self.destination.port,
        )

    def community_id_v1(self, seed: int = 0) -> CommunityId:
        """
        Compute the version 1 Community ID of this flow.

        Args:
            seed: 16-bit seed; flows only correlate when hashed with the same seed

        Returns:
            CommunityId

        Raises:
            InvalidSeedError: If the seed is outside 0..65535
        """
        return compute_v1(self.canonical(), self.protocol, seed)

    def __str__(self) -> str:
        name = self.protocol.name if isinstance(self.protocol, Protocol) else f"proto-{self.protocol}"
        return f"{name} {self.source} -> {self.destination}"


def community_id_v1(
    protocol: Protocol | int,
    src_address: object,
    src_port: int | None,
    dst_address: object,
    dst_port: int | None,
    seed: int = 0,
) -> CommunityId:
    """
    Build a flow and compute its version 1 Community ID in one call.

    Pass None for both ports to hash a port-less flow.

    Example:
        >>> community_id_v1(6, "192.168.1.10", 12345, "192.168.1.20", 80).base64()
        '1:To62PWNVuiriSZDHqB4YZp+VAYM='
    """
    if src_port is None and dst_port is None:
        flow = Flow.partial(protocol, src_address, dst_address)
    else:
        flow = Flow.new(protocol, src_address, src_port, dst_address, dst_port)
    return flow.community_id_v1(seed)
