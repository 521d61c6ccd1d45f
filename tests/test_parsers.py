import pytest

from src.trace.parsers import (
    FormatError,
    parse_address,
    parse_trace,
    parse_trace_file,
    parse_trace_line,
)
from src.trace.records import EVENT_CODES, Address, EventType


def test_parse_trace_line_decodes_all_fields():
    record = parse_trace_line("+ 0.1234 3 4 tcp 1040 ------- 2 3.0 4.1 17 42\n")

    assert record.event is EventType.ENQUEUE
    assert record.time == 0.1234
    assert record.from_node == 3
    assert record.to_node == 4
    assert record.packet_type == "tcp"
    assert record.packet_size == 1040
    assert record.flags == 0
    assert record.flow_id == 2
    assert record.source_addr == Address(3, 0)
    assert record.dest_addr == Address(4, 1)
    assert record.sequence_num == 17
    assert record.unique_packet_id == 42


@pytest.mark.parametrize(
    "code, expected",
    [
        ("r", EventType.RECEIVE),
        ("+", EventType.ENQUEUE),
        ("-", EventType.DEQUEUE),
        ("d", EventType.DROP),
    ],
)
def test_parse_trace_line_event_codes(code, expected):
    record = parse_trace_line(f"{code} 1.0 0 1 cbr 210 ------- 1 0.0 1.0 0 0")
    assert record.event is expected


def test_unknown_event_code_reads_as_receive():
    record = parse_trace_line("x 1.0 0 1 cbr 210 ------- 1 0.0 1.0 0 0")
    assert record.event is EventType.RECEIVE


def test_unknown_event_code_rejected_when_strict():
    with pytest.raises(FormatError) as exc_info:
        parse_trace_line(
            "c 1.0 0 1 cbr 210 ------- 1 0.0 1.0 0 0", strict_event_codes=True
        )
    assert exc_info.value.field_index == 0
    assert exc_info.value.value == "c"


@pytest.mark.parametrize(
    "line",
    [
        "",
        "r 1.0 0 1 tcp 1000 0 7 0.0 1.0 1",
        "r 1.0 0 1 tcp 1000 0 7 0.0 1.0 1 100 extra",
        "r  1.0 0 1 tcp 1000 0 7 0.0 1.0 1 100",
        "not a trace line at all",
    ],
)
def test_lines_without_twelve_fields_are_skipped(line):
    assert parse_trace_line(line) is None


def test_carriage_return_is_stripped():
    record = parse_trace_line("r 1.0 0 1 tcp 1000 0 7 0.0 1.0 1 100\r\n")
    assert record.unique_packet_id == 100


@pytest.mark.parametrize(
    "field_index, line",
    [
        (1, "r abc 0 1 tcp 1000 0 7 0.0 1.0 1 100"),
        (2, "r 1.0 x 1 tcp 1000 0 7 0.0 1.0 1 100"),
        (3, "r 1.0 0 1.5 tcp 1000 0 7 0.0 1.0 1 100"),
        (5, "r 1.0 0 1 tcp big 0 7 0.0 1.0 1 100"),
        (7, "r 1.0 0 1 tcp 1000 0 - 0.0 1.0 1 100"),
        (10, "r 1.0 0 1 tcp 1000 0 7 0.0 1.0 seq 100"),
        (11, "r 1.0 0 1 tcp 1000 0 7 0.0 1.0 1 id"),
        (1, "r 1_0.5 0 1 tcp 1000 0 7 0.0 1.0 1 100"),
        (1, "r \u0663.0 0 1 tcp 1000 0 7 0.0 1.0 1 100"),
        (2, "r 1.0 \u0663 1 tcp 1000 0 7 0.0 1.0 1 100"),
        (10, "r 1.0 0 1 tcp 1000 0 7 0.0 1.0 1_0 100"),
    ],
)
def test_bad_numeric_field_raises_format_error(field_index, line):
    with pytest.raises(FormatError) as exc_info:
        parse_trace_line(line, line_number=9)

    err = exc_info.value
    assert err.field_index == field_index
    assert err.line_number == 9
    assert err.value == line.split(" ")[field_index]
    assert err.field_name in str(err)


def test_flags_field_is_not_decoded():
    record = parse_trace_line("r 1.0 0 1 tcp 1000 ---A--- 7 0.0 1.0 1 100")
    assert record.flags == 0


@pytest.mark.parametrize(
    "value, expected",
    [
        ("0.1", Address(0, 1)),
        ("12.3", Address(12, 3)),
        ("1.2.3", Address(1, 2)),
        ("a.4", Address(0, 4)),
        ("5.b", Address(5, 0)),
        ("7", Address(7, 0)),
        ("", Address(0, 0)),
    ],
)
def test_parse_address_is_lenient(value, expected):
    assert parse_address(value) == expected


def test_malformed_address_does_not_fail_the_record():
    record = parse_trace_line("r 1.0 0 1 tcp 1000 0 7 zz.yy 1 1 100")
    assert record.source_addr == Address(0, 0)
    assert record.dest_addr == Address(1, 0)


def test_parse_trace_keeps_order_and_skips_short_lines(sample_lines):
    lines = ["", sample_lines[0], "garbage", sample_lines[1], ""]
    records = parse_trace(lines)

    assert [r.sequence_num for r in records] == [1, 2]
    assert [r.time for r in records] == [1.0, 2.0]


def test_parse_trace_is_all_or_nothing(sample_lines):
    lines = sample_lines + ["r 3.0 0 1 tcp 1000 0 7 0.0 1.0 three 102"]

    with pytest.raises(FormatError) as exc_info:
        parse_trace(lines)
    assert exc_info.value.line_number == 3
    assert exc_info.value.field_name == "sequence_num"


def test_parse_trace_file(tmp_path, sample_lines):
    path = tmp_path / "out.tr"
    path.write_text("\n".join(sample_lines) + "\n")

    records = parse_trace_file(str(path))
    assert len(records) == 2
    assert records[1].unique_packet_id == 101


def test_parse_trace_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        parse_trace_file(str(tmp_path / "missing.tr"))


_EVENT_SYMBOLS = {event: code for code, event in EVENT_CODES.items()}


@pytest.mark.parametrize(
    "line",
    [
        "r 1.0 0 1 tcp 1000 ------- 7 0.0 1.0 1 100",
        "+ 1.5e-3 12 3 udp 64 ------- 2 12.255 3.0 0 0",
        "- 250.125 3 12 cbr 210 ---A--- -1 3.0 12.1 -4 99999",
        "d 7E2 -2 +5 tcp +40 ------- +3 1.20 5.6 +8 -7",
    ],
)
def test_known_fields_round_trip(line):
    """Fields 0-5 and 7-11 can be rebuilt from the parsed record."""
    tokens = line.split(" ")
    record = parse_trace_line(line)

    assert _EVENT_SYMBOLS[record.event] == tokens[0]
    assert record.time == float(tokens[1])
    assert record.from_node == int(tokens[2])
    assert record.to_node == int(tokens[3])
    assert record.packet_type == tokens[4]
    assert record.packet_size == int(tokens[5])
    assert record.flow_id == int(tokens[7])
    for addr, token in ((record.source_addr, tokens[8]), (record.dest_addr, tokens[9])):
        address, port = token.split(".")
        assert (addr.address, addr.port) == (int(address), int(port))
    assert record.sequence_num == int(tokens[10])
    assert record.unique_packet_id == int(tokens[11])
