import json

import pytest

from hello3d_mcp.protocol import (
    make_error,
    make_request_state,
    make_session_registered,
    parse_message,
    serialize_message,
)
from hello3d_mcp.shared.errors import ProtocolError


def test_parse_message_accepts_tagged_object():
    message = parse_message('{"type": "registerSession", "sessionId": "abc"}')
    assert message == {"type": "registerSession", "sessionId": "abc"}


def test_parse_message_accepts_bytes():
    assert parse_message(b'{"type": "stateUpdate"}')["type"] == "stateUpdate"


@pytest.mark.parametrize("raw", ["not json", "[1, 2]", '"text"', "{}", '{"type": 3}'])
def test_parse_message_rejects_bad_frames(raw):
    with pytest.raises(ProtocolError):
        parse_message(raw)


def test_builders():
    assert make_session_registered("s1") == {"type": "sessionRegistered", "sessionId": "s1"}
    assert make_request_state("r1", False) == {"type": "requestState", "requestId": "r1", "forceRefresh": False}
    assert make_error("boom") == {"type": "error", "message": "boom"}


def test_serialize_message_is_compact_json():
    text = serialize_message({"type": "changeColor", "color": "#ff0000"})
    assert " " not in text
    assert json.loads(text) == {"type": "changeColor", "color": "#ff0000"}
