"""Exception hierarchy for flow construction, hashing and parsing."""

from __future__ import annotations

from pathlib import Path

from communityid.utils.logger import console_err


class CommunityIdError(Exception):
    """Base exception for communityid errors."""

    def __init__(self, message: str, suggestion: str | None = None):
        """
        Initialize error with message and optional suggestion.

        Args:
            message: Error message
            suggestion: Optional suggestion for fixing the error
        """
        self.message = message
        self.suggestion = suggestion
        super().__init__(message)

    def display(self) -> None:
        """Display error message with suggestion."""
        console_err.print(f"[bold red]Error:[/bold red] {self.message}")
        if self.suggestion:
            console_err.print(f"[yellow]Suggestion:[/yellow] {self.suggestion}")


class FlowConstructionError(CommunityIdError, ValueError):
    """Error raised when a Flow or Endpoint cannot be built from its inputs."""


class AddressFamilyMismatchError(FlowConstructionError):
    """Error when source and destination addresses belong to different IP families."""

    def __init__(self, source: object, destination: object):
        """
        Initialize address family mismatch error.

        Args:
            source: Source address (IPv4Address or IPv6Address)
            destination: Destination address (IPv4Address or IPv6Address)
        """
        self.source_family = _family_name(source)
        self.destination_family = _family_name(destination)
        message = (
            f"Address family mismatch: source {source} is {self.source_family}, "
            f"destination {destination} is {self.destination_family}"
        )
        suggestion = "Both endpoints of a flow must be IPv4 or both must be IPv6."
        super().__init__(message, suggestion)


class InvalidAddressError(FlowConstructionError):
    """Error when a value cannot be interpreted as an IP address."""

    def __init__(self, value: object):
        message = f"Invalid IP address: {value!r}"
        suggestion = "Pass an ipaddress.IPv4Address/IPv6Address, packed bytes, or a dotted/colon string."
        super().__init__(message, suggestion)


class InvalidPortError(FlowConstructionError):
    """Error when a port, ICMP type or ICMP code is outside the 16-bit range."""

    def __init__(self, name: str, value: object):
        """
        Initialize invalid port error.

        Args:
            name: Which field was rejected (e.g. "source port")
            value: The rejected value
        """
        message = f"Invalid {name}: {value!r}"
        suggestion = "Ports and ICMP type/code values must be integers between 0 and 65535."
        super().__init__(message, suggestion)


class InvalidProtocolError(FlowConstructionError):
    """Error when a protocol number is not a valid 8-bit IANA value."""

    def __init__(self, value: object):
        message = f"Invalid protocol number: {value!r}"
        suggestion = "Use a communityid.Protocol member or an integer between 0 and 255."
        super().__init__(message, suggestion)


class InvalidSeedError(CommunityIdError, ValueError):
    """Error when a hash seed does not fit in 16 bits."""

    def __init__(self, seed: object):
        message = f"Invalid seed: {seed!r}"
        suggestion = "The seed must be an integer between 0 and 65535."
        super().__init__(message, suggestion)


class CommunityIdFormatError(CommunityIdError, ValueError):
    """Error when a textual community ID cannot be parsed."""

    def __init__(self, text: object, reason: str):
        """
        Initialize format error.

        Args:
            text: The rejected input
            reason: Why the input was rejected
        """
        message = f"Invalid community ID {text!r}: {reason}"
        suggestion = 'Expected "1:" followed by base64 or 40 hexadecimal characters.'
        super().__init__(message, suggestion)


class ConfigurationError(CommunityIdError):
    """Error when configuration is invalid."""

    def __init__(self, source: Path | str, reason: str):
        """
        Initialize configuration error.

        Args:
            source: Path to the configuration file, or a label for in-memory settings
            reason: Reason for the error
        """
        message = f"Invalid configuration in {source}: {reason}"
        suggestion = "Please check the configuration file format and contents."
        super().__init__(message, suggestion)


def _family_name(address: object) -> str:
    version = getattr(address, "version", None)
    if version == 4:
        return "IPv4"
    if version == 6:
        return "IPv6"
    return type(address).__name__


def handle_error(error: Exception, *, show_traceback: bool = False) -> int:
    """
    Report an error on stderr and return an exit code.

    Args:
        error: The exception to handle
        show_traceback: Whether to show full traceback (keyword-only)

    Returns:
        Exit code (non-zero)
    """
    if isinstance(error, CommunityIdError):
        error.display()
    else:
        console_err.print(f"[bold red]Unexpected error:[/bold red] {error}")

    if show_traceback:
        import traceback

        console_err.print("\n[dim]Traceback:[/dim]")
        traceback.print_exc()
    return 1
