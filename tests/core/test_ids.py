from __future__ import annotations

import re

import pytest

from ticketer.core.exceptions import InvalidTicketError
from ticketer.core.ids import (
    TICKET_LENGTH,
    decode_ticket,
    encode_ticket,
    is_ticket,
    parse_ticket,
    random_ticket_bytes,
    sequential_ticket_bytes,
)

TICKET_PATTERN = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{16}$")
ENTROPY = bytes.fromhex("de8d9c7cb21451fac9c1")


def test_sequential_layout_matches_fixture() -> None:
    raw = sequential_ticket_bytes(1, now=0x5D9B95D2, entropy=ENTROPY)
    assert raw == bytes.fromhex("00000001" "5d9b95d2" "de8d9c7cb21451fac9c1")
    assert encode_ticket(raw) == "00000001-5d9b-95d2-de8d-9c7cb21451fac9c1"


def test_sequence_overwrites_high_half_of_timestamp() -> None:
    now = (0xABCD1234 << 32) | 0x5D9B95D2
    raw = sequential_ticket_bytes(0x01020304, now=now, entropy=bytes(10))
    assert raw[:4] == bytes.fromhex("01020304")
    assert raw[4:8] == bytes.fromhex("5d9b95d2")
    assert raw[8:] == bytes(10)


def test_sequence_is_rendered_as_unsigned_32_bit() -> None:
    raw = sequential_ticket_bytes(-1, now=0, entropy=bytes(10))
    assert raw[:4] == b"\xff\xff\xff\xff"


def test_random_ticket_is_well_formed() -> None:
    ticket = encode_ticket(random_ticket_bytes())
    assert len(ticket) == TICKET_LENGTH == 40
    assert TICKET_PATTERN.match(ticket)


def test_random_tickets_do_not_repeat() -> None:
    tickets = {encode_ticket(random_ticket_bytes()) for _ in range(5000)}
    assert len(tickets) == 5000


def test_encode_rejects_wrong_length() -> None:
    with pytest.raises(InvalidTicketError):
        encode_ticket(b"\x00" * 16)


def test_decode_round_trips_fields() -> None:
    fields = decode_ticket("0000002a-5d9b-95d2-de8d-9c7cb21451fac9c1")
    assert fields.sequence == 42
    assert fields.timestamp_low == 0x5D9B95D2
    assert fields.entropy == ENTROPY


@pytest.mark.parametrize(
    "text",
    [
        "",
        "not-a-ticket",
        "0000002A-5d9b-95d2-de8d-9c7cb21451fac9c1",
        "0000002a-5d9b-95d2-de8d-9c7cb21451fac9",
        "0000002a5d9b95d2de8d9c7cb21451fac9c1abcd",
    ],
)
def test_malformed_tickets_are_rejected(text: str) -> None:
    assert is_ticket(text) is False
    with pytest.raises(InvalidTicketError):
        parse_ticket(text)


def test_invalid_ticket_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        decode_ticket("nope")


def test_surrounding_whitespace_is_accepted_consistently() -> None:
    text = "  00000001-5d9b-95d2-de8d-9c7cb21451fac9c1\n"
    assert is_ticket(text) is True
    assert decode_ticket(text).sequence == 1
