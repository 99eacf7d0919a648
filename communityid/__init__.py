"""Community ID flow hashing.

Computes the Community ID of a network flow: a SHA-1 based identifier that
is the same whichever end of the conversation a sensor saw first, so flow
records from different tools can be joined on it.

Example:
    >>> from communityid import Flow, Protocol
    >>> f = Flow.new(Protocol.UDP, "192.168.1.42", 4242, "8.8.8.8", 53)
    >>> f2 = Flow.new(Protocol.UDP, "8.8.8.8", 53, "192.168.1.42", 4242)
    >>> f.community_id_v1(0).base64()
    '1:vTdrngJjlP5eZ9mw9JtnKyn99KM='
    >>> f2.community_id_v1(0).hexdigest()
    '1:bd376b9e026394fe5e67d9b0f49b672b29fdf4a3'
    >>> f.community_id_v1(0) == f2.community_id_v1(0)
    True
"""

from .config import Settings, load_settings
from .digest import CommunityId
from .flow import Endpoint, Flow, Protocol, community_id_v1
from .ordering import CanonicalTuple, FlowSide, Icmp6Type, IcmpType
from .utils.errors import (
    AddressFamilyMismatchError,
    CommunityIdError,
    CommunityIdFormatError,
    ConfigurationError,
    FlowConstructionError,
    InvalidAddressError,
    InvalidPortError,
    InvalidProtocolError,
    InvalidSeedError,
)

__version__ = "1.0.0"

__all__ = [
    "CommunityId",
    "Endpoint",
    "Flow",
    "Protocol",
    "community_id_v1",
    "CanonicalTuple",
    "FlowSide",
    "IcmpType",
    "Icmp6Type",
    "Settings",
    "load_settings",
    "CommunityIdError",
    "FlowConstructionError",
    "AddressFamilyMismatchError",
    "InvalidAddressError",
    "InvalidPortError",
    "InvalidProtocolError",
    "InvalidSeedError",
    "CommunityIdFormatError",
    "ConfigurationError",
]
