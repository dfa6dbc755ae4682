"""Address arithmetic for IPv4 subnets."""

import re
from collections.abc import Iterator

from ..models.scan import clamp_prefix
from .exceptions import InvalidAddressError, NoUsableHostsError

_OCTET = r"(25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)"
IPV4_PATTERN = re.compile(rf"^({_OCTET}\.){{3}}{_OCTET}$")

_MAX_ADDRESS = 0xFFFFFFFF


def is_valid_ipv4(address: str) -> bool:
    return IPV4_PATTERN.fullmatch(address) is not None


def ipv4_to_int(address: str) -> int:
    """Convert a dotted quad to a 32-bit unsigned integer.

    Raises:
        InvalidAddressError: If `address` is not exactly four octets 0-255.
    """
    if not is_valid_ipv4(address):
        raise InvalidAddressError(address)
    value = 0
    for octet in address.split("."):
        value = (value << 8) | int(octet)
    return value


def int_to_ipv4(value: int) -> str:
    return ".".join(str((value >> shift) & 0xFF) for shift in (24, 16, 8, 0))


def network_mask(prefix_length: int) -> int:
    host_bits = 32 - prefix_length
    return (_MAX_ADDRESS << host_bits) & _MAX_ADDRESS


def host_count_for_prefix(prefix_length: int) -> int:
    """Number of usable hosts for an unclamped prefix.

    Raises:
        NoUsableHostsError: If the prefix leaves zero or fewer usable hosts.
    """
    if not 0 <= prefix_length <= 32:
        raise NoUsableHostsError(prefix_length, f"Prefix /{prefix_length} is not a valid IPv4 prefix")
    count = (1 << (32 - prefix_length)) - 2
    if count <= 0:
        raise NoUsableHostsError(prefix_length)
    return count


class AddressRange:
    """
    The usable hosts of one IPv4 subnet.

    Iterating yields dotted-quad host addresses in ascending numeric order,
    skipping the network and broadcast addresses. Iteration is lazy and can be
    repeated.
    """

    def __init__(self, network_base: int, prefix_length: int):
        self.network_base = network_base
        self.prefix_length = prefix_length
        self.host_count = host_count_for_prefix(prefix_length)

    @classmethod
    def compute(cls, base_address: str, prefix_length: int) -> "AddressRange":
        """Build the range containing `base_address`, clamping the prefix into [1, 30].

        Raises:
            InvalidAddressError: If `base_address` is malformed.
            NoUsableHostsError: If the prefix leaves no usable hosts.
        """
        address_int = ipv4_to_int(base_address)
        prefix = clamp_prefix(prefix_length)
        return cls(address_int & network_mask(prefix), prefix)

    @property
    def network_address(self) -> str:
        return int_to_ipv4(self.network_base)

    @property
    def broadcast_address(self) -> str:
        return int_to_ipv4(self.network_base + self.host_count + 1)

    @property
    def cidr(self) -> str:
        return f"{self.network_address}/{self.prefix_length}"

    @property
    def first(self) -> str:
        return int_to_ipv4(self.network_base + 1)

    @property
    def last(self) -> str:
        return int_to_ipv4(self.network_base + self.host_count)

    def __len__(self) -> int:
        return self.host_count

    def __iter__(self) -> Iterator[str]:
        for host in range(1, self.host_count + 1):
            yield int_to_ipv4(self.network_base + host)

    def __contains__(self, address: object) -> bool:
        if not isinstance(address, str) or not is_valid_ipv4(address):
            return False
        offset = ipv4_to_int(address) - self.network_base
        return 1 <= offset <= self.host_count

    def __repr__(self) -> str:
        return f"<AddressRange cidr='{self.cidr}' hosts={self.host_count}>"
