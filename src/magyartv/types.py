"""Type definitions for magyartv."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import TypeAlias

from .errors import ResolutionError

# Common type aliases
Channel: TypeAlias = str
StreamURL: TypeAlias = str


class ReachabilityStatus:
    """Network path states reported by the connectivity monitor."""

    REACHABLE = "reachable"
    UNREACHABLE = "unreachable"


@dataclass(frozen=True)
class ResolvedStream:
    """A playable stream URL resolved for a channel.

    Attributes:
        channel: The channel identifier the stream was resolved for.
        url: The stream URL with escapes resolved and the query stripped.
        resolved_at: When the resolution finished.
        elapsed_seconds: Wall-clock time from request dispatch to extraction.
    """

    channel: Channel
    url: StreamURL
    resolved_at: datetime = field(default_factory=datetime.now)
    elapsed_seconds: float = 0.0


@dataclass(frozen=True)
class ResolutionResult:
    """Outcome of one resolution attempt: either a stream or an error."""

    stream: ResolvedStream | None = None
    error: ResolutionError | None = None

    def __post_init__(self) -> None:
        if (self.stream is None) == (self.error is None):
            msg = "ResolutionResult needs exactly one of stream or error"
            raise ValueError(msg)

    @property
    def ok(self) -> bool:
        return self.stream is not None

    @classmethod
    def success(cls, stream: ResolvedStream) -> "ResolutionResult":
        return cls(stream=stream)

    @classmethod
    def failure(cls, error: ResolutionError) -> "ResolutionResult":
        return cls(error=error)
