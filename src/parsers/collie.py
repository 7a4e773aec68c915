# --- START OF FILE parsers/collie.py ---
"""
Parsers for `collie` raw-mode report outputs (node info, vdi list).

Raw mode (-r) prints space separated fields, one record per line:

    node info -r:
        0 15245667872 117571104 0%
        Total 15245667872 117571104 0% 20972341

    vdi list -r:
        s test 1 10 0 0 1336556634 7c2b25
        = test 2 10 0 0 1336557216 7c2b27

Parsing is strict. Any malformed record fails the whole report, nothing
partially parsed is ever returned.
"""

from typing import Iterator, List, Tuple

import constants
from debug_logging import log_debug
from models import Volume
from storage_errors import SheepdogParsingError

_DIGITS = "0123456789"
_SEPARATORS = " \t"


def _iter_lines(raw_output: str) -> Iterator[Tuple[str, bool]]:
    """Yields (line, terminated) pairs; an empty tail after the last newline is dropped."""
    pos = 0
    while pos < len(raw_output):
        nl = raw_output.find('\n', pos)
        if nl == -1:
            yield raw_output[pos:], False
            return
        yield raw_output[pos:nl], True
        pos = nl + 1


class _FieldCursor:
    """Reads positional fields from a single report line."""

    def __init__(self, line: str, pos: int = 0):
        self.line = line
        self.pos = pos

    def _fail(self, message: str):
        raise SheepdogParsingError(message, raw_line=self.line)

    def at_end(self) -> bool:
        return self.pos >= len(self.line)

    def read_uint(self, field_name: str) -> int:
        start = self.pos
        while not self.at_end() and self.line[self.pos] in _DIGITS:
            self.pos += 1
        if self.pos == start:
            self._fail(f"Expected unsigned integer for field '{field_name}' at column {start}.")
        # A number must end at a separator or at the end of the line ('12ab' is not 12)
        if not self.at_end() and self.line[self.pos] not in _SEPARATORS:
            self._fail(f"Malformed integer for field '{field_name}' at column {start}.")
        value = int(self.line[start:self.pos])
        if value > constants.UINT64_MAX:
            self._fail(f"Value for field '{field_name}' does not fit in 64 bits.")
        return value

    def skip_whitespace(self) -> None:
        while not self.at_end() and self.line[self.pos] in _SEPARATORS:
            self.pos += 1

    def skip_separator(self, next_field: str) -> None:
        if self.at_end() or self.line[self.pos] not in _SEPARATORS:
            self._fail(f"Missing separator before field '{next_field}'.")
        self.skip_whitespace()

    def expect_space(self, next_field: str) -> None:
        if self.at_end() or self.line[self.pos] != ' ':
            self._fail(f"Missing separator before field '{next_field}'.")
        self.pos += 1

    def read_escaped_name(self) -> str:
        """Reads a volume name; a backslash escapes the next character (kept verbatim)."""
        start = self.pos
        while not self.at_end() and self.line[self.pos] != ' ':
            if self.line[self.pos] == '\\':
                self.pos += 1
            self.pos += 1
        # A trailing backslash would step past the end of the line
        self.pos = min(self.pos, len(self.line))
        if self.pos == start:
            self._fail("Empty volume name.")
        return self.line[start:self.pos]


class CollieParser:
    """Parses output from `collie node info -r` and `collie vdi list -r`."""

    @staticmethod
    def parse_node_info(raw_output: str) -> Tuple[int, int]:
        """
        Parses the aggregate capacity from `collie node info -r`.

        Only the first line starting with 'Total ' is consumed, all other
        lines are ignored.

        Args:
            raw_output: The stdout text of the command.

        Returns:
            A (capacity, allocation) tuple in bytes.

        Raises:
            SheepdogParsingError: No 'Total' line, a truncated line, or a malformed field.
        """
        for line, terminated in _iter_lines(raw_output):
            if not terminated:
                raise SheepdogParsingError("Truncated node info output (missing trailing newline).", raw_line=line)
            if not line.startswith(constants.NODE_INFO_TOTAL_PREFIX):
                continue

            cursor = _FieldCursor(line, len(constants.NODE_INFO_TOTAL_PREFIX))
            cursor.skip_whitespace() # "Total" may be padded
            capacity = cursor.read_uint("total")
            cursor.skip_separator("used")
            allocation = cursor.read_uint("used")
            log_debug("PARSER", f"node info: capacity={capacity} allocation={allocation}")
            return capacity, allocation

        raise SheepdogParsingError("No 'Total' line found in node info output.")

    @staticmethod
    def _read_current_line_fields(cursor: _FieldCursor) -> Tuple[str, int, int]:
        """Reads name, id, capacity and allocation from a '=' line positioned after the marker."""
        name = cursor.read_escaped_name()
        cursor.expect_space("id")
        cursor.read_uint("id") # Discarded, only advances the cursor
        cursor.skip_separator("size")
        capacity = cursor.read_uint("size")
        cursor.skip_separator("used")
        allocation = cursor.read_uint("used")
        return name, capacity, allocation

    @staticmethod
    def _current_line_cursor(line: str, terminated: bool):
        """Returns a cursor past the '= ' prefix, or None for snapshot/other lines."""
        if not line.startswith(constants.VDI_CURRENT_MARKER):
            return None
        if not terminated:
            raise SheepdogParsingError("Truncated vdi list output (missing trailing newline).", raw_line=line)
        if len(line) < 3 or line[1] != ' ':
            raise SheepdogParsingError("Malformed vdi list line: expected '= <name> ...'.", raw_line=line)
        return _FieldCursor(line, 2)

    @classmethod
    def parse_vdi_list(cls, raw_output: str, pool_name: str) -> List[Volume]:
        """
        Parses `collie vdi list -r` into the pool's current volumes.

        Snapshot and clone lines (marker other than '=') are skipped. Names
        are stored raw, a backslash-escaped space stays as '\\ ' in the name.

        Args:
            raw_output: The stdout text of the command.
            pool_name: Owning pool name, used to build each volume key.

        Returns:
            A fresh list of Volume objects in report order.

        Raises:
            SheepdogParsingError: On any malformed current line. No partial list is returned.
        """
        volumes: List[Volume] = []
        for line, terminated in _iter_lines(raw_output):
            cursor = cls._current_line_cursor(line, terminated)
            if cursor is None:
                continue
            name, capacity, allocation = cls._read_current_line_fields(cursor)
            volumes.append(Volume(
                name=name,
                kind=constants.VOLUME_KIND_NETWORK,
                capacity=capacity,
                allocation=allocation,
                target=name,
                key=f"{pool_name}/{name}",
            ))
        log_debug("PARSER", f"vdi list: {len(volumes)} current volume(s) in pool '{pool_name}'")
        return volumes

    @classmethod
    def parse_vdi(cls, raw_output: str) -> Tuple[int, int]:
        """
        Parses `collie vdi list <name> -r` for a single volume.

        The first current ('=') line wins; the name field is skipped since
        the caller already knows which volume it asked for.

        Returns:
            A (capacity, allocation) tuple in bytes.
        """
        for line, terminated in _iter_lines(raw_output):
            cursor = cls._current_line_cursor(line, terminated)
            if cursor is None:
                continue
            _name, capacity, allocation = cls._read_current_line_fields(cursor)
            return capacity, allocation

        raise SheepdogParsingError("No current volume line found in vdi list output.")

# --- END OF FILE parsers/collie.py ---
