# src/core/models.py - v1
"""Shared domain models used across modules.

PartitionKey identifies one tenant/year/month index partition, StatRecord is
the stat shape returned through the stream wrapper, and the resolution
outcome types carry a resolver's verdict back to the proxy.
"""

from __future__ import annotations

import enum
import stat as stat_module
import time
from dataclasses import dataclass, field
from typing import Literal, Union

from pydantic import BaseModel


# === PARTITIONS ===


@dataclass(frozen=True)
class PartitionKey:
    """Tenant/year/month triple an object path belongs to.

    ``network_id`` is recorded for multi-tenant paths but does not take part
    in equality, hashing or any derived name.
    """

    tenant_id: str
    year: str
    month: str
    network_id: str | None = field(default=None, compare=False)

    @classmethod
    def create(
        cls,
        tenant_id: str | int,
        year: str | int,
        month: str | int,
        network_id: str | int | None = None,
    ) -> PartitionKey:
        """Build a key, zero-padding the month to two digits."""
        tenant, y, m = str(tenant_id), str(year), str(month)
        if not tenant.isdigit():
            raise ValueError(f"tenant_id must be numeric, got {tenant!r}")
        if len(y) != 4 or not y.isdigit():
            raise ValueError(f"year must be 4 digits, got {y!r}")
        if not m.isdigit() or not 1 <= len(m) <= 2:
            raise ValueError(f"month must be 1 or 2 digits, got {m!r}")
        return cls(
            tenant_id=tenant,
            year=y,
            month=m.zfill(2),
            network_id=None if network_id is None else str(network_id),
        )

    @classmethod
    def from_token(cls, token: str) -> PartitionKey:
        """Parse a ``{tenant}-{year}-{month}`` rebuild token."""
        parts = token.split("-")
        if len(parts) != 3:
            raise ValueError(f"Invalid partition token: {token!r}")
        return cls.create(*parts)

    @property
    def cache_key(self) -> str:
        return f"index_{self.tenant_id}_{self.year}_{self.month}"

    @property
    def file_name(self) -> str:
        return f"index-{self.tenant_id}-{self.year}-{self.month}.json"

    @property
    def token(self) -> str:
        return f"{self.tenant_id}-{self.year}-{self.month}"

    def __str__(self) -> str:
        return self.token


# === STAT ===


class StatFlags(enum.IntFlag):
    """Flags accompanying a stat query."""

    NONE = 0
    LINK = 1
    QUIET = 2


class StatRecord(BaseModel):
    """Stat information for a stream path.

    ``size`` is None when unknown (index-synthesized records never know it).
    """

    dev: int = 0
    ino: int = 0
    mode: int = 0
    nlink: int = 1
    uid: int = 0
    gid: int = 0
    rdev: int = 0
    size: int | None = None
    atime: int = 0
    mtime: int = 0
    ctime: int = 0
    blksize: int = -1
    blocks: int = -1

    @classmethod
    def synthetic(cls, kind: Literal["file", "dir"] = "file") -> StatRecord:
        """Placeholder record signalling existence only.

        Times are the current time and size is unknown; callers must not
        rely on either.
        """
        if kind == "file":
            mode = stat_module.S_IFREG | 0o644
        elif kind == "dir":
            mode = stat_module.S_IFDIR | 0o755
        else:
            raise ValueError('kind must be either "file" or "dir"')
        now = int(time.time())
        return cls(mode=mode, atime=now, mtime=now, ctime=now)

    @property
    def is_file(self) -> bool:
        return stat_module.S_ISREG(self.mode)

    @property
    def is_dir(self) -> bool:
        return stat_module.S_ISDIR(self.mode)


# === RESOLUTION OUTCOMES ===


class InconclusiveReason(str, enum.Enum):
    """Why local state could not answer a query."""

    INDEX_MISSING = "index_missing"
    INDEX_CORRUPT = "index_corrupt"
    PATH_UNPARSEABLE = "path_unparseable"
    NO_RESOLVER = "no_resolver"


@dataclass(frozen=True)
class Found:
    """The path exists; ``stat`` is a synthesized placeholder."""

    stat: StatRecord


@dataclass(frozen=True)
class DefinitiveNotFound:
    """The partition index was consulted and the path is absent."""


@dataclass(frozen=True)
class Inconclusive:
    """Local state cannot answer; the authoritative backend must be asked."""

    reason: InconclusiveReason


ResolutionOutcome = Union[Found, DefinitiveNotFound, Inconclusive]
