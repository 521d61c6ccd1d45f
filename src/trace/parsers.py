"""
Parser for NS2 trace files.

Each line of a trace holds 12 space-separated fields:

    event time from_node to_node packet_type packet_size flags flow_id
    source_addr dest_addr sequence_num unique_packet_id

Example line:
    r 1.0 0 1 tcp 1000 ------- 7 0.0 1.0 1 100

Lines with any other number of fields are skipped. A required numeric
field that cannot be decoded aborts the whole parse with a FormatError.
"""

import os
import re
import typing as tp

from loguru import logger

from src.trace.records import EVENT_CODES, Address, EventType, TraceRecord

FIELD_COUNT = 12

FIELD_NAMES: tp.Tuple[str, ...] = (
    "event",
    "time",
    "from_node",
    "to_node",
    "packet_type",
    "packet_size",
    "flags",
    "flow_id",
    "source_addr",
    "dest_addr",
    "sequence_num",
    "unique_packet_id",
)

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")


class FormatError(ValueError):
    """A required field of a trace line could not be decoded."""

    def __init__(
        self,
        field_index: int,
        value: str,
        line_number: tp.Optional[int] = None,
    ):
        self.field_index = field_index
        self.field_name = FIELD_NAMES[field_index]
        self.value = value
        self.line_number = line_number

        location = f" on line {line_number}" if line_number is not None else ""
        super().__init__(
            f"invalid {self.field_name} (field {field_index}){location}: {value!r}"
        )


def _parse_int(value: str, field_index: int, line_number: tp.Optional[int]) -> int:
    if not _INT_PATTERN.fullmatch(value):
        raise FormatError(field_index, value, line_number)
    return int(value)


def _parse_float(value: str, field_index: int, line_number: tp.Optional[int]) -> float:
    if "_" in value or not value.isascii():
        raise FormatError(field_index, value, line_number)
    try:
        return float(value)
    except ValueError:
        raise FormatError(field_index, value, line_number) from None


def parse_address(value: str) -> Address:
    """
    Parse an NS2 pseudo-address such as ``0.1``.

    Missing or malformed components are read as 0 instead of failing.
    """
    parts = value.split(".")
    components = []
    for part in parts[:2]:
        components.append(int(part) if _INT_PATTERN.fullmatch(part) else 0)
    while len(components) < 2:
        components.append(0)
    return Address(address=components[0], port=components[1])


def parse_trace_line(
    line: str,
    line_number: tp.Optional[int] = None,
    strict_event_codes: bool = False,
) -> tp.Optional[TraceRecord]:
    """
    Parse a single trace line.

    Args:
        line: Raw line, with or without its trailing newline
        line_number: 1-based position in the file, used in error messages
        strict_event_codes: Reject unknown event codes instead of reading
            them as receive events

    Returns:
        TraceRecord, or None if the line does not have exactly 12 fields

    Raises:
        FormatError: If a required field cannot be decoded
    """
    parts = line.rstrip("\r\n").split(" ")
    if len(parts) != FIELD_COUNT:
        return None

    event = EVENT_CODES.get(parts[0])
    if event is None:
        if strict_event_codes:
            raise FormatError(0, parts[0], line_number)
        event = EventType.RECEIVE

    return TraceRecord(
        event=event,
        time=_parse_float(parts[1], 1, line_number),
        from_node=_parse_int(parts[2], 2, line_number),
        to_node=_parse_int(parts[3], 3, line_number),
        packet_type=parts[4],
        packet_size=_parse_int(parts[5], 5, line_number),
        # TODO decode the flags field (parts[6]) into TraceFlag bits
        flags=0,
        flow_id=_parse_int(parts[7], 7, line_number),
        source_addr=parse_address(parts[8]),
        dest_addr=parse_address(parts[9]),
        sequence_num=_parse_int(parts[10], 10, line_number),
        unique_packet_id=_parse_int(parts[11], 11, line_number),
    )


def parse_trace(
    lines: tp.Iterable[str],
    strict_event_codes: bool = False,
) -> tp.List[TraceRecord]:
    """
    Parse trace lines into records, preserving input order.

    The parse is all-or-nothing: the first FormatError propagates and
    no records are returned.

    Args:
        lines: Raw trace lines
        strict_event_codes: Reject unknown event codes

    Returns:
        List of TraceRecord objects
    """
    records: tp.List[TraceRecord] = []
    skipped = 0
    unknown_events = 0

    for line_number, line in enumerate(lines, start=1):
        record = parse_trace_line(line, line_number, strict_event_codes)
        if record is None:
            skipped += 1
            continue
        if line.split(" ", 1)[0] not in EVENT_CODES:
            unknown_events += 1
        records.append(record)

    if skipped:
        logger.warning(f"Skipped {skipped} lines without {FIELD_COUNT} fields")
    if unknown_events:
        logger.warning(
            f"{unknown_events} records had an unknown event code and were read as receive events"
        )
    logger.debug(f"Parsed {len(records)} trace records")

    return records


def parse_trace_file(
    filepath: str,
    strict_event_codes: bool = False,
) -> tp.List[TraceRecord]:
    """
    Parse an NS2 trace file.

    Args:
        filepath: Path to the trace file
        strict_event_codes: Reject unknown event codes

    Returns:
        List of TraceRecord objects
    """
    if not os.path.exists(filepath):
        raise FileNotFoundError(f"Trace file not found: {filepath}")

    logger.info(f"Parsing trace file {filepath}")
    with open(filepath, "r") as f:
        return parse_trace(f, strict_event_codes)
