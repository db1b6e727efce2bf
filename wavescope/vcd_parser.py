"""
This module parses VCD (Value Change Dump) files into WaveformData.

Parsing is line oriented and lenient: anything in the body that is not a
timestamp or a recognized value change is skipped, because real-world dumps
carry vendor extensions this grammar does not know about.
"""

import logging
import os
import re
import time
from typing import Dict, Iterable, Iterator, List, Optional, Union

from .data_model import (
    Binary, Bus, ChangeLog, Time, Timescale, TimeUnit, Value, WaveformData
)

logger = logging.getLogger(__name__)

# Identifier characters are the printable ASCII range '!'..'~'
_SCALAR_RE = re.compile(r"([01xXzZ])([!-~]+)")
_VECTOR_RE = re.compile(r"[bB]([01xXzZ]+)\s+([!-~]+)")
_REAL_RE = re.compile(r"[rR]([0-9.eE+\-]+)\s+([!-~]+)")
_TIME_RE = re.compile(r"#(\d+)")
_TIMESCALE_RE = re.compile(r"(\d+)\s*([a-zA-Zμ]+)")

_BINARY_DIGITS = frozenset("01")


def binary_to_hex(bits: str) -> str:
    """Pack a 0/1 string into uppercase hex digits, MSB first.

    The string is left-padded with zeros to a multiple of 4 bits, so "1" packs
    to "1" and "00000" packs to "00". An empty string packs to "".

    Raises:
        ValueError: if bits contains anything other than '0' and '1'
    """
    if not bits:
        return ""
    if not set(bits) <= _BINARY_DIGITS:
        raise ValueError(f"Not a binary string: {bits!r}")
    padding = (4 - len(bits) % 4) % 4
    padded = "0" * padding + bits
    return "".join(
        format(int(padded[i:i + 4], 2), "X") for i in range(0, len(padded), 4)
    )


def canonicalize_change_log(changes: ChangeLog) -> None:
    """Replace fully defined raw-bit Bus values with their hex form, in place.

    Bus strings containing x/z stay in raw bit form; real values ("r...") are
    untouched.
    """
    for i, (t, value) in enumerate(changes):
        if isinstance(value, Bus) and value.value and set(value.value) <= _BINARY_DIGITS:
            changes[i] = (t, Bus(binary_to_hex(value.value)))


class VCDParser:
    """
    Line-oriented VCD parser.

    Parameters:
        filename (str): Path to the VCD file. Optional when feeding lines
                        directly through parse_lines().
    """
    def __init__(self, filename: Optional[Union[str, os.PathLike]] = None) -> None:
        self.filename = filename
        self.skipped_lines = 0

    def parse(self) -> WaveformData:
        """
        Parse the VCD file given at construction.

        Returns:
            The parsed WaveformData.

        Raises:
            OSError: if the file cannot be opened or read.
        """
        if self.filename is None:
            raise ValueError("No VCD file name given")
        start_time = time.perf_counter()
        with open(self.filename, "r", encoding="utf-8", errors="ignore") as f:
            data = self.parse_lines(f)
        logger.info(
            "Loaded %s: %d signals, max time %d (%.2f s)",
            os.path.basename(os.fspath(self.filename)), len(data.signals),
            data.max_time, time.perf_counter() - start_time,
        )
        return data

    def parse_lines(self, lines: Iterable[str]) -> WaveformData:
        """Parse VCD content from an iterable of text lines."""
        data = WaveformData()
        # VCD id -> full names sharing it (aliases)
        id_to_names: Dict[str, List[str]] = {}
        current_scope: List[str] = []
        current_time: Time = 0
        in_header = True
        self.skipped_lines = 0

        # Cache local variables to speed up inner-loop lookups.
        values = data.values
        scalar_match = _SCALAR_RE.match
        vector_match = _VECTOR_RE.match
        real_match = _REAL_RE.match

        line_iter = iter(lines)
        for raw_line in line_iter:
            line = raw_line.strip()
            if not line:
                continue

            # Process header until "$enddefinitions" is encountered.
            if in_header:
                if line[0] != '$':
                    continue
                tokens = line.split()
                directive = tokens[0]

                if directive == "$scope":
                    if len(tokens) >= 3 and tokens[2] != "$end":
                        current_scope.append(tokens[2])

                elif directive == "$upscope":
                    if current_scope:
                        current_scope.pop()

                elif directive == "$var":
                    self._declare_var(tokens, current_scope, data, id_to_names)

                elif directive == "$timescale":
                    text = self._collect_block(tokens[1:], line_iter)
                    data.timescale = self._parse_timescale(text)

                elif directive in ("$date", "$version"):
                    text = self._collect_block(tokens[1:], line_iter)
                    data.metadata[directive[1:]] = text

                elif directive == "$comment":
                    self._collect_block(tokens[1:], line_iter)

                elif directive == "$enddefinitions":
                    in_header = False
                continue

            # Process simulation data (after header).
            c = line[0]
            if c == '#':
                m = _TIME_RE.match(line)
                if m:
                    current_time = int(m.group(1))
                    if current_time > data.max_time:
                        data.max_time = current_time
                else:
                    self.skipped_lines += 1
                continue

            if c == '$':
                # $dumpvars / $dumpall / $end and friends bracket changes
                if line.startswith("$comment"):
                    self._collect_block(line.split()[1:], line_iter)
                continue

            if c in 'bB':
                m = vector_match(line)
                value = Bus(m.group(1)) if m else None
            elif c in 'rR':
                m = real_match(line)
                value = Bus("r" + m.group(1)) if m else None
            else:
                m = scalar_match(line)
                scalar = Value.from_char(m.group(1)) if m else None
                value = Binary(scalar) if scalar is not None else None

            if m is None or value is None:
                self.skipped_lines += 1
                continue

            names = id_to_names.get(m.group(2))
            if names is None:
                self.skipped_lines += 1
                continue
            for name in names:
                values[name].append((current_time, value))

        for changes in values.values():
            canonicalize_change_log(changes)

        if self.skipped_lines:
            logger.debug("Skipped %d unrecognized body lines", self.skipped_lines)
        return data

    @staticmethod
    def _declare_var(tokens: List[str], scope: List[str], data: WaveformData,
                     id_to_names: Dict[str, List[str]]) -> None:
        """Register "$var <type> <width> <id> <name> $end"."""
        if len(tokens) < 5 or tokens[4] == "$end":
            return
        try:
            width = int(tokens[2])
        except ValueError:
            return
        var_id = tokens[3]
        full_name = '.'.join(scope + [tokens[4]])

        names = id_to_names.setdefault(var_id, [])
        if full_name in names:
            return
        names.append(full_name)
        if full_name not in data.values:
            data.signals.append(full_name)
            data.values[full_name] = []
            data.widths[full_name] = width

    @staticmethod
    def _collect_block(first_tokens: List[str], line_iter: Iterator[str]) -> str:
        """Collect the text of a header block up to its "$end", which may span lines."""
        collected: List[str] = []
        tokens = first_tokens
        while True:
            for token in tokens:
                if token == "$end":
                    return ' '.join(collected)
                collected.append(token)
            next_line = next(line_iter, None)
            if next_line is None:
                return ' '.join(collected)
            tokens = next_line.split()

    @staticmethod
    def _parse_timescale(text: str) -> Optional[Timescale]:
        m = _TIMESCALE_RE.search(text)
        if not m:
            return None
        unit = TimeUnit.from_string(m.group(2))
        if unit is None:
            return None
        return Timescale(factor=int(m.group(1)), unit=unit)


def parse_vcd_file(path: Union[str, os.PathLike]) -> WaveformData:
    """Parse a VCD file from disk. Raises OSError on I/O failure."""
    return VCDParser(path).parse()


def parse_vcd_text(text: str) -> WaveformData:
    """Parse VCD content held in a string."""
    return VCDParser().parse_lines(text.splitlines())
