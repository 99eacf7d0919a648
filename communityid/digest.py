"""Community ID v1 serialization, digest and rendering.

The v1 hash input is laid out in network byte order:

1. Seed (2 bytes)
2. First address (4 bytes for IPv4, 16 for IPv6)
3. Second address (same length)
4. Protocol (1 byte)
5. Padding (1 byte, value=0)
6. First port or ICMP port equivalent (2 bytes), omitted for port-less flows
7. Second port or ICMP port equivalent (2 bytes), omitted for port-less flows

The buffer is hashed with SHA-1 and the 20-byte digest is rendered as
``"1:" + base64`` or ``"1:" + lowercase hex``.
"""

from __future__ import annotations

import hashlib
import struct
from base64 import b64decode, b64encode
from dataclasses import dataclass

from communityid.ordering import CanonicalTuple
from communityid.utils.errors import CommunityIdFormatError, InvalidSeedError
from communityid.utils.logger import get_logger

logger = get_logger(__name__)

VERSION_1 = 1
DIGEST_SIZE = 20
SUPPORTED_VERSIONS = frozenset({VERSION_1})

# Exact prefix text per version; "01" or non-ASCII digits are not versions.
_VERSION_PREFIXES = {str(v): v for v in SUPPORTED_VERSIONS}

_PADDING = 0


def validate_seed(seed: int) -> int:
    """
    Check that a seed fits the 16-bit seed field.

    Args:
        seed: Caller-supplied seed

    Returns:
        The seed as a plain int

    Raises:
        InvalidSeedError: If the seed is not an integer in 0..65535
    """
    if isinstance(seed, bool) or not isinstance(seed, int) or not 0 <= seed <= 0xFFFF:
        raise InvalidSeedError(seed)
    return int(seed)


def serialize_v1(canonical: CanonicalTuple, protocol: int, seed: int) -> bytes:
    """
    Build the v1 hash input for a canonically ordered flow.

    Args:
        canonical: Endpoints in canonical order
        protocol: IANA protocol number
        seed: 16-bit seed

    Returns:
        The byte buffer to be digested
    """
    parts = [
        struct.pack("!H", seed),
        canonical.first_address.packed,
        canonical.second_address.packed,
        struct.pack("!BB", protocol, _PADDING),
    ]
    if canonical.first_port is not None and canonical.second_port is not None:
        parts.append(struct.pack("!HH", canonical.first_port, canonical.second_port))
    return b"".join(parts)


def compute_v1(canonical: CanonicalTuple, protocol: int, seed: int = 0) -> CommunityId:
    """
    Hash a canonically ordered flow into a version 1 CommunityId.

    Args:
        canonical: Endpoints in canonical order
        protocol: IANA protocol number
        seed: 16-bit seed (default: 0)

    Returns:
        CommunityId holding the SHA-1 digest
    """
    seed = validate_seed(seed)
    data = serialize_v1(canonical, protocol, seed)
    digest = hashlib.sha1(data).digest()
    logger.debug("Community ID v1 input %s -> %s", data.hex(), digest.hex())
    return CommunityId(VERSION_1, digest)


@dataclass(frozen=True, order=True)
class CommunityId:
    """A versioned flow identifier.

    Equality and ordering compare (version, digest). ``str()`` gives the
    base64 rendering and ``repr()`` shows the hexdigest.

    Example:
        >>> cid = CommunityId.from_string("1:vTdrngJjlP5eZ9mw9JtnKyn99KM=")
        >>> cid.hexdigest()
        '1:bd376b9e026394fe5e67d9b0f49b672b29fdf4a3'
    """
    version: int
    digest: bytes

    def __post_init__(self) -> None:
        if isinstance(self.version, bool) or self.version not in SUPPORTED_VERSIONS:
            raise CommunityIdFormatError(self.version, f"unknown community-id version: {self.version}")
        if not isinstance(self.digest, (bytes, bytearray)) or len(self.digest) != DIGEST_SIZE:
            raise CommunityIdFormatError(self.digest, f"digest must be {DIGEST_SIZE} bytes long")
        object.__setattr__(self, "digest", bytes(self.digest))

    @property
    def prefix(self) -> str:
        return f"{self.version}:"

    def hexdigest(self) -> str:
        """Render as version prefix + 40 lowercase hex characters."""
        return self.prefix + self.digest.hex()

    def base64(self) -> str:
        """Render as version prefix + standard padded base64."""
        return self.prefix + b64encode(self.digest).decode("ascii")

    def to_bytes(self) -> bytes:
        return self.digest

    @classmethod
    def from_string(cls, text: str) -> CommunityId:
        """
        Parse either textual rendering back into a CommunityId.

        Args:
            text: ``"1:<base64>"`` or ``"1:<40 hex characters>"``

        Returns:
            CommunityId equal to the one that produced the text

        Raises:
            CommunityIdFormatError: If the prefix, version or payload is invalid
        """
        if not isinstance(text, str):
            raise CommunityIdFormatError(text, "expected a string")

        version_text, sep, payload = text.partition(":")
        if not sep:
            raise CommunityIdFormatError(text, "missing version prefix")
        version = _VERSION_PREFIXES.get(version_text)
        if version is None:
            raise CommunityIdFormatError(text, f"unknown community-id version: {version_text}")

        if len(payload) == DIGEST_SIZE * 2:
            try:
                digest = bytes.fromhex(payload)
            except ValueError as e:
                raise CommunityIdFormatError(text, f"invalid hex payload ({e})") from e
        else:
            try:
                digest = b64decode(payload, validate=True)
            except ValueError as e:
                raise CommunityIdFormatError(text, f"invalid base64 payload ({e})") from e

        if len(digest) != DIGEST_SIZE:
            raise CommunityIdFormatError(text, f"data must be {DIGEST_SIZE} bytes long")
        return cls(version, digest)

    def __str__(self) -> str:
        return self.base64()

    def __repr__(self) -> str:
        return f"CommunityId({self.hexdigest()!r})"
