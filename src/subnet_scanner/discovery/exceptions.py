"""
Exceptions raised while preparing a scan.
"""
from typing import Optional


class ScanError(Exception):
    """Base class for all scan errors."""
    pass

class InvalidAddressError(ScanError):
    """Raised when the base address is not four dot-separated octets 0-255."""
    def __init__(self, address: str):
        super().__init__(f"Invalid IPv4 address: {address!r}")
        self.address = address

class NoUsableHostsError(ScanError):
    """Raised when a prefix leaves no usable host between network and broadcast."""
    def __init__(self, prefix_length: int, message: Optional[str] = None):
        super().__init__(message or f"Prefix /{prefix_length} leaves no usable hosts")
        self.prefix_length = prefix_length
