"""
SSH config domain models
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Tuple, FrozenSet, Dict, Any

from ...core.constants import TAG_KEY


@dataclass(frozen=True)
class Host:
    """
    One Host block.

    Options are keyed by the lower-cased option name and keep file order.
    The mapping is read-only: a reload builds new Host objects instead of
    touching existing ones.
    """
    name: str
    options: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def build(cls, name: str, options: Dict[str, str]) -> "Host":
        """Freeze a block's collected options into a Host"""
        return cls(name=name, options=MappingProxyType(dict(options)))

    @property
    def pairs(self) -> Tuple[Tuple[str, str], ...]:
        """Ordered (key, value) option pairs"""
        return tuple(self.options.items())

    @property
    def tag(self) -> str:
        """Tag label, empty when untagged"""
        return self.options.get(TAG_KEY, "")

    @property
    def is_tagged(self) -> bool:
        return TAG_KEY in self.options

    @property
    def is_empty(self) -> bool:
        """True for the lookup sentinel"""
        return not self.name

    def get(self, key: str) -> str:
        """Option value for key (case-insensitive), empty string when absent"""
        return self.options.get(key.lower(), "")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "name": self.name,
            "options": dict(self.options),
        }


# Returned by lookups that find nothing
NO_HOST = Host(name="")


@dataclass(frozen=True)
class Config:
    """Result of one top-level parse"""
    path: str
    hosts: Tuple[Host, ...] = ()
    watch_set: FrozenSet[str] = frozenset()

    def get_host(self, name: str) -> Host:
        """
        Find the first host with the given name.

        Returns:
            The host, or NO_HOST when absent
        """
        for host in self.hosts:
            if host.name == name:
                return host
        return NO_HOST

    def get_param(self, host: Host, key: str) -> str:
        """
        Option value for a host, looked up by the host's name.

        Absence and an empty value are indistinguishable.
        """
        return self.get_host(host.name).get(key)

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(host.name for host in self.hosts)

    def __len__(self) -> int:
        return len(self.hosts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "path": self.path,
            "hosts": [host.to_dict() for host in self.hosts],
            "watch_set": sorted(self.watch_set),
        }
