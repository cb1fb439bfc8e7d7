"""Tests for TokenStream."""

import io

import pytest

from mocap_bvh.core.errors import (
    ErrorKind,
    MalformedNumber,
    StreamUnavailable,
    UnexpectedEndOfInput,
    UnexpectedToken,
)
from mocap_bvh.core.tokenizer import TokenStream


def test_splits_on_any_whitespace():
    tokens = TokenStream("HIERARCHY\n  ROOT\tHips\r\n{\n\n}")
    assert [tokens.next_token() for _ in range(5)] == ["HIERARCHY", "ROOT", "Hips", "{", "}"]
    assert tokens.at_end()


def test_tracks_line_numbers():
    tokens = TokenStream(io.StringIO("a b\n\nc\n"))

    tokens.next_token()
    assert tokens.line == 1
    tokens.next_token()
    assert tokens.line == 1
    tokens.next_token()
    assert tokens.line == 3
    assert tokens.last_token == "c"
    assert tokens.tokens_consumed == 3


def test_accepts_iterable_of_lines():
    tokens = TokenStream(["1.5 2", "-3e2"])
    assert tokens.next_number() == 1.5
    assert tokens.next_int() == 2
    assert tokens.next_number() == -300.0


def test_at_end_does_not_consume():
    tokens = TokenStream("only")
    assert not tokens.at_end()
    assert not tokens.at_end()
    assert tokens.next_token() == "only"
    assert tokens.at_end()


def test_end_of_input_names_expected_token():
    tokens = TokenStream("HIERARCHY")
    tokens.next_token()

    with pytest.raises(UnexpectedEndOfInput) as excinfo:
        tokens.next_token(expected="ROOT", context="hierarchy")

    error = excinfo.value
    assert error.kind is ErrorKind.UNEXPECTED_END_OF_INPUT
    assert error.expected == "ROOT"
    assert error.token == "HIERARCHY"
    assert error.context == "hierarchy"


def test_expect():
    tokens = TokenStream("OFFSET CHANNELS")
    assert tokens.expect("OFFSET") == "OFFSET"

    with pytest.raises(UnexpectedToken) as excinfo:
        tokens.expect("OFFSET", context="joint 'Hips'")

    assert excinfo.value.token == "CHANNELS"
    assert excinfo.value.expected == "OFFSET"
    assert "while parsing joint 'Hips'" in str(excinfo.value)


def test_malformed_numbers():
    tokens = TokenStream("1.0.0 2.5")

    with pytest.raises(MalformedNumber) as excinfo:
        tokens.next_number(expected="OFFSET component")
    assert excinfo.value.token == "1.0.0"

    with pytest.raises(MalformedNumber):
        tokens.next_int(expected="channel count")


def test_read_failure_is_stream_unavailable():
    def lines():
        yield "HIERARCHY"
        raise OSError("device not ready")

    tokens = TokenStream(lines())
    assert tokens.next_token() == "HIERARCHY"

    with pytest.raises(StreamUnavailable) as excinfo:
        tokens.next_token()
    assert "device not ready" in str(excinfo.value)


@pytest.mark.parametrize("token", ["1.", ".5", "-0.25", "+3", "1e-3", "2.5E+02"])
def test_decimal_numbers(token):
    assert TokenStream(token).next_number() == float(token)


@pytest.mark.parametrize("token", ["1_0", "nan", "inf", "Infinity", "٣", "1e999", "e5", "."])
def test_rejects_non_decimal_numbers(token):
    with pytest.raises(MalformedNumber) as excinfo:
        TokenStream(token).next_number()
    assert excinfo.value.token == token


@pytest.mark.parametrize("token", ["0_3", "٣", "3.0", "1e2"])
def test_rejects_non_decimal_integers(token):
    with pytest.raises(MalformedNumber):
        TokenStream(token).next_int()


def test_signed_integers():
    tokens = TokenStream("-4 +7 007")
    assert [tokens.next_int() for _ in range(3)] == [-4, 7, 7]
