import re

from pydantic import Field

from .common import BasePydanticModel

MIN_PREFIX = 1
MAX_PREFIX = 30
DEFAULT_PREFIX = 24

_PREFIX_TEXT_RE = re.compile(r"^[+-]?\d+$")

# Prefix text is read as a signed 32-bit integer; anything wider is unparsable.
_PREFIX_TEXT_MIN = -(2 ** 31)
_PREFIX_TEXT_MAX = 2 ** 31 - 1


def clamp_prefix(prefix_length: int) -> int:
    """Clamp a CIDR prefix into the range that still leaves usable hosts."""
    return max(MIN_PREFIX, min(MAX_PREFIX, prefix_length))


def parse_prefix(value: int | str | None, default: int = DEFAULT_PREFIX) -> int:
    """Parse prefix input as typed by a user. Unparsable text yields `default`."""
    if isinstance(value, int):
        return value
    if value is None:
        return default
    text = value.strip()
    if not _PREFIX_TEXT_RE.match(text):
        return default
    number = int(text)
    if not _PREFIX_TEXT_MIN <= number <= _PREFIX_TEXT_MAX:
        return default
    return number


class Endpoint(BasePydanticModel):
    """A host/port pair that accepted a TCP connection."""

    model_config = {**BasePydanticModel.model_config, "frozen": True}

    host: str = Field(..., description="Dotted-quad IPv4 address.")
    port: int = Field(..., ge=1, le=65535)

    @property
    def name(self) -> str:
        return f"Server #{self.host}"

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    def __str__(self) -> str:
        return self.address


class ScanRequest(BasePydanticModel):
    """Validated scan input. The prefix is always clamped, never rejected."""

    base_address: str
    prefix_length: int = DEFAULT_PREFIX

    @classmethod
    def from_input(cls, address: str, prefix: int | str | None, default_prefix: int = DEFAULT_PREFIX) -> "ScanRequest":
        return cls(
            base_address=address.strip(),
            prefix_length=clamp_prefix(parse_prefix(prefix, default_prefix)),
        )


class ProgressSnapshot(BasePydanticModel):
    model_config = {**BasePydanticModel.model_config, "frozen": True}

    processed: int = Field(..., ge=0)
    total: int = Field(..., ge=0)

    @property
    def percent(self) -> float:
        if self.total == 0:
            return 0.0
        return self.processed / self.total * 100

    @property
    def finished(self) -> bool:
        return self.processed >= self.total
