"""Value types passed between the builder, encoders and the output layer."""

import enum
from dataclasses import dataclass, field
from pathlib import Path

from certtool.errors import FileWriteError


class IPOptionKind(enum.Enum):
    ABSENT = "absent"
    EMPTY = "empty"
    VALUE = "value"


@dataclass(frozen=True)
class IPOption:
    """The ``--ip`` option as given on the command line.

    ``ABSENT`` adds no extra IP entry, ``EMPTY`` asks for the host's external
    IPv4 address, ``VALUE`` carries a literal address.
    """

    kind: IPOptionKind
    value: str | None = None

    @classmethod
    def absent(cls) -> "IPOption":
        return cls(IPOptionKind.ABSENT)

    @classmethod
    def empty(cls) -> "IPOption":
        return cls(IPOptionKind.EMPTY)

    @classmethod
    def of(cls, value: str) -> "IPOption":
        return cls(IPOptionKind.VALUE, value)

    @classmethod
    def from_arg(cls, value: str | None) -> "IPOption":
        """Map a raw argument (None when the flag was omitted) to an option."""
        if value is None:
            return cls.absent()
        if value == "":
            return cls.empty()
        return cls.of(value)


@dataclass(frozen=True)
class BuildConfig:
    """Per-invocation inputs to the certificate builder."""

    ip: IPOption = field(default_factory=IPOption.absent)
    hostname: str | None = None


class OutputFormat(enum.Enum):
    PEM_SEPARATE = "pem-separate"
    PEM_COMBINED = "pem-combined"
    PFX = "pfx"


@dataclass(frozen=True)
class OutputArtifact:
    """An encoded payload and the file name it is written to."""

    filename: str
    payload: bytes
    description: str = "certificate"


@dataclass(frozen=True)
class WriteResult:
    path: Path
    error: FileWriteError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
