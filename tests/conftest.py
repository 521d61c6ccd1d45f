import pytest

from src.trace.records import Address, EventType, TraceRecord


def _make_record(
    event: EventType = EventType.RECEIVE,
    time: float = 0.0,
    from_node: int = 0,
    to_node: int = 1,
    packet_type: str = "tcp",
    packet_size: int = 1000,
    sequence_num: int = 0,
    unique_packet_id: int = 0,
    flow_id: int = 0,
) -> TraceRecord:
    return TraceRecord(
        event=event,
        time=time,
        from_node=from_node,
        to_node=to_node,
        packet_type=packet_type,
        packet_size=packet_size,
        flags=0,
        flow_id=flow_id,
        source_addr=Address(from_node, 0),
        dest_addr=Address(to_node, 0),
        sequence_num=sequence_num,
        unique_packet_id=unique_packet_id,
    )


@pytest.fixture
def sample_lines():
    """Two receives on the 0->1 tcp flow."""
    return [
        "r 1.0 0 1 tcp 1000 0 7 0.0 1.0 1 100",
        "r 2.0 0 1 tcp 1000 0 7 0.0 1.0 2 101",
    ]


@pytest.fixture
def hop_trace_lines():
    """A packet enqueued, dequeued and received over one link, plus a drop."""
    return [
        "+ 0.5 0 2 cbr 210 ------- 1 0.0 3.1 0 0",
        "- 0.5 0 2 cbr 210 ------- 1 0.0 3.1 0 0",
        "r 0.75 0 2 cbr 210 ------- 1 0.0 3.1 0 0",
        "+ 0.6 0 2 cbr 210 ------- 1 0.0 3.1 1 1",
        "- 0.6 0 2 cbr 210 ------- 1 0.0 3.1 1 1",
        "d 0.7 2 3 cbr 210 ------- 1 0.0 3.1 1 1",
        "",
    ]


@pytest.fixture
def make_record():
    """Factory for TraceRecord objects with sensible defaults."""
    return _make_record
