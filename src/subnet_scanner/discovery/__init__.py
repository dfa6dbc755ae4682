"""
Subnet discovery: address arithmetic, TCP probing, the bounded worker pool
and the coordinator that ties them to an update channel.
"""

from .address_range import AddressRange, host_count_for_prefix, int_to_ipv4, ipv4_to_int, is_valid_ipv4
from .coordinator import ScanCoordinator
from .exceptions import InvalidAddressError, NoUsableHostsError, ScanError
from .probe import PortProbe
from .progress import ProgressTracker
from .result_set import ResultSet
from .update_channel import UpdateChannel
from .worker_pool import WorkerPool

__all__ = [
    "AddressRange",
    "InvalidAddressError",
    "NoUsableHostsError",
    "PortProbe",
    "ProgressTracker",
    "ResultSet",
    "ScanCoordinator",
    "ScanError",
    "UpdateChannel",
    "WorkerPool",
    "host_count_for_prefix",
    "int_to_ipv4",
    "ipv4_to_int",
    "is_valid_ipv4",
]
