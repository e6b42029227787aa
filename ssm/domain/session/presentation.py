"""
Host list presentation

Projects parsed hosts into display rows and keeps the filter and cursor
state of the list.
"""
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from ...core.constants import DEFAULT_SSH_PORT, FILTER_CHAR_LIMIT
from ..sshconf.models import Host, Config


@dataclass(frozen=True)
class HostRow:
    """One display row"""
    title: str
    description: str
    tag: str
    host: Host

    @property
    def filter_value(self) -> str:
        return f"{self.title} {self.description}".lower()


def describe(host: Host) -> str:
    """
    Build the row description: [user@]hostname[:port] [#tag].

    The alias stands in for a missing hostname when user or port is set.
    Falls back to the bare alias when nothing recognizable is present.
    """
    user = host.get("user")
    hostname = host.get("hostname")
    port = host.get("port")
    if port == DEFAULT_SSH_PORT:
        port = ""
    if not hostname and (user or port):
        hostname = host.name

    address = ""
    if hostname:
        address = f"{user}@{hostname}" if user else hostname
        if port:
            address += f":{port}"

    tag = f"#{host.tag}" if host.tag else ""
    out = f"{address} {tag}".strip()
    return out or host.name


def row_from(host: Host) -> HostRow:
    return HostRow(title=host.name, description=describe(host), tag=host.tag, host=host)


def rows_from(config: Config) -> List[HostRow]:
    return [row_from(host) for host in config.hosts]


class FilterState(Enum):
    UNFILTERED = "unfiltered"
    FILTERING = "filtering"
    APPLIED = "applied"


class HostList:
    """
    Filterable, single-selection list of host rows.

    The cursor indexes the visible (filtered) rows. Filtering is live:
    every edit of the filter text re-filters immediately.
    """

    def __init__(self, rows: Sequence[HostRow] = (), page_size: int = 10):
        self._rows: List[HostRow] = list(rows)
        self._visible: List[HostRow] = list(self._rows)
        self.filter_text = ""
        self.filter_state = FilterState.UNFILTERED
        self.cursor = 0
        self.page_size = max(1, page_size)

    # ------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------

    @property
    def rows(self) -> List[HostRow]:
        return list(self._rows)

    @property
    def visible(self) -> List[HostRow]:
        return list(self._visible)

    @property
    def is_filtering(self) -> bool:
        """True while the filter box has focus"""
        return self.filter_state is FilterState.FILTERING

    @property
    def filter_active(self) -> bool:
        """True while any filter text constrains the list"""
        return self.filter_state is not FilterState.UNFILTERED

    def selected(self) -> Optional[HostRow]:
        """Currently selected row, None when the visible list is empty"""
        if not self._visible:
            return None
        return self._visible[self.cursor]

    def page(self) -> Tuple[List[HostRow], int, int, int]:
        """
        Rows on the cursor's page.

        Returns:
            (rows, index of the cursor within them, page number, page count)
        """
        if not self._visible:
            return [], -1, 0, 1
        number = self.cursor // self.page_size
        count = (len(self._visible) + self.page_size - 1) // self.page_size
        start = number * self.page_size
        return self._visible[start:start + self.page_size], self.cursor - start, number, count

    # ------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------

    def _refilter(self) -> None:
        selected = self.selected()
        needle = self.filter_text.lower()
        if needle:
            self._visible = [row for row in self._rows if needle in row.filter_value]
        else:
            self._visible = list(self._rows)
        self._reselect(selected.title if selected else None)

    def _reselect(self, title: Optional[str]) -> None:
        if title is not None:
            for index, row in enumerate(self._visible):
                if row.title == title:
                    self.cursor = index
                    return
        self._clamp()

    def start_filtering(self) -> None:
        """Focus the filter box, keeping any text already applied"""
        self.filter_state = FilterState.FILTERING

    def type_text(self, text: str) -> None:
        room = FILTER_CHAR_LIMIT - len(self.filter_text)
        if room <= 0:
            return
        self.filter_text += text[:room]
        self._refilter()
        self.cursor = 0

    def delete_char(self) -> None:
        self.filter_text = self.filter_text[:-1]
        self._refilter()

    def apply_filter(self) -> None:
        """Leave the filter box; an empty filter resets the list"""
        if not self.filter_text:
            self.reset_filter()
            return
        self.filter_state = FilterState.APPLIED

    def set_filter_text(self, text: str) -> None:
        """Apply filter text without going through the filter box"""
        self.filter_text = text[:FILTER_CHAR_LIMIT]
        self._refilter()
        self.filter_state = FilterState.APPLIED if self.filter_text else FilterState.UNFILTERED

    def reset_filter(self) -> None:
        """Clear the filter text and show every row again"""
        self.filter_text = ""
        self.filter_state = FilterState.UNFILTERED
        self._refilter()

    # ------------------------------------------------------------
    # Cursor
    # ------------------------------------------------------------

    def _clamp(self) -> None:
        if not self._visible:
            self.cursor = 0
        else:
            self.cursor = min(max(self.cursor, 0), len(self._visible) - 1)

    def cursor_up(self, steps: int = 1) -> None:
        self.cursor -= steps
        self._clamp()

    def cursor_down(self, steps: int = 1) -> None:
        self.cursor += steps
        self._clamp()

    def page_up(self) -> None:
        self.cursor_up(self.page_size)

    def page_down(self) -> None:
        self.cursor_down(self.page_size)

    def half_page_up(self) -> None:
        self.cursor_up(max(1, self.page_size // 2))

    def half_page_down(self) -> None:
        self.cursor_down(max(1, self.page_size // 2))

    def go_to_start(self) -> None:
        self.cursor = 0

    def go_to_end(self) -> None:
        self.cursor = len(self._visible) - 1
        self._clamp()

    def set_page_size(self, size: int) -> None:
        self.page_size = max(1, size)

    # ------------------------------------------------------------
    # Reload
    # ------------------------------------------------------------

    def replace_rows(self, rows: Sequence[HostRow]) -> None:
        """
        Swap in freshly projected rows.

        Filter text and state survive; the selection follows the selected
        host's name when it still exists, otherwise the cursor is clamped.
        """
        self._rows = list(rows)
        self._refilter()
