"""Subnet Scanner - finds hosts with an open service port on an IPv4 subnet.

Probes every usable host address of a CIDR range concurrently, collects the
responders and streams progress to a single consumer.
"""

__version__ = "0.1.0"

from .config import Config

__all__ = ["Config", "__version__"]
