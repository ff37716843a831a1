import pytest

from shared.protocol import (
    MESSAGE_TYPES,
    BaseMsg,
    EndTurnMsg,
    ErrorCode,
    MsgType,
    NewGameWithOptionsMsg,
    ParseFailure,
    ProtocolError,
    SetSeatLockMsg,
    StatusMessageMsg,
    UnknownMessageType,
    UnknownMsg,
    decode_frame,
    decode_msg,
    encode_frame,
    encode_msg,
    parse_line,
)
from shared.protocol.commands import commands_in_group, is_command


def test_end_turn_decodes_and_reencodes():
    msg = decode_msg("109|MyGame")
    assert isinstance(msg, EndTurnMsg)
    assert msg.msg_type == MsgType.END_TURN
    assert msg.game == "MyGame"
    assert encode_msg(msg) == "109|MyGame"


def test_message_type_registry_entry():
    entry = MESSAGE_TYPES[109]
    assert entry.name == "END_TURN"
    assert entry.arity == 1
    assert entry.field_types == (str,)

    seat_lock = MESSAGE_TYPES[int(MsgType.SET_SEAT_LOCK)]
    assert seat_lock.field_names == ("game", "player_number", "locked")
    assert seat_lock.field_types == (str, int, bool)


def test_every_registered_type_is_a_known_command():
    for type_id in MESSAGE_TYPES:
        assert is_command(type_id)
    assert set(commands_in_group("options")) == {1078, 1079, 1080}


@pytest.mark.parametrize(
    "msg",
    [
        EndTurnMsg(game=""),
        StatusMessageMsg(status=426, text="Please upgrade"),
        NewGameWithOptionsMsg(game="g", options="BC=3,N7=t5", min_version=-1),
        SetSeatLockMsg(game="g", player_number=-2, locked=True),
        SetSeatLockMsg(game="g", player_number=3, locked=False),
    ],
)
def test_encoded_lines_survive_decode_encode(msg):
    line = encode_msg(msg)
    decoded = decode_msg(line)
    assert decoded == msg
    assert encode_msg(decoded) == line


def test_unknown_type_is_preserved():
    msg = decode_msg("9999|a|b||c")
    assert isinstance(msg, UnknownMsg)
    assert msg.unknown_type_id == 9999
    assert msg.msg_type is None
    assert encode_msg(msg) == "9999|a|b||c"

    bare = decode_msg("4242")
    assert isinstance(bare, UnknownMsg)
    assert bare.data is None
    assert encode_msg(bare) == "4242"


def test_unknown_type_can_be_refused():
    with pytest.raises(UnknownMessageType) as excinfo:
        decode_msg("9999|x", allow_unknown=False)
    assert excinfo.value.type_id == 9999
    assert excinfo.value.code == ErrorCode.UNKNOWN_MESSAGE_TYPE


def test_arity_mismatch_is_parse_failure():
    with pytest.raises(ParseFailure):
        decode_msg("109|a|b")
    with pytest.raises(ParseFailure):
        decode_msg("109")


def test_field_type_failure_names_the_field():
    with pytest.raises(ParseFailure) as excinfo:
        decode_msg("1083|g|x|true")
    assert excinfo.value.field == "player_number"

    with pytest.raises(ParseFailure) as excinfo:
        decode_msg("1083|g|2|yes")
    assert excinfo.value.field == "locked"


def test_bad_type_id_is_parse_failure():
    for line in ("", "|x", "abc|x", "-5|x", "0|x", " 109|x"):
        with pytest.raises(ParseFailure) as excinfo:
            decode_msg(line)
        assert excinfo.value.field == "type_id"


@pytest.mark.parametrize(
    "line",
    [
        "",
        "|",
        "||||",
        "\n",
        "109|",
        "1069|",
        "1069|12|",
        "1069|x|y",
        "1079|g|o|99999999999999999999999",
        "9" * 5000,
        "1083|g|" + "9" * 5000 + "|true",
        "é|x",
        "1078|a|b|c|d|e|f",
    ],
)
def test_parse_line_is_total(line):
    result = parse_line(line)
    assert isinstance(result, (BaseMsg, ParseFailure))


def test_parse_line_rejects_non_text():
    assert isinstance(parse_line(None), ParseFailure)
    assert isinstance(parse_line(b"109|x"), ParseFailure)


def test_encode_rejects_separator_in_field():
    with pytest.raises(ProtocolError) as excinfo:
        encode_msg(EndTurnMsg(game="a|b"))
    assert excinfo.value.code == ErrorCode.INVALID_FIELD_TEXT

    with pytest.raises(ProtocolError):
        encode_msg(StatusMessageMsg(status=200, text="two\nlines"))


def test_frame_roundtrip():
    msg = NewGameWithOptionsMsg(game="Spiel", options="PL=5", min_version=1108)
    data = encode_frame(msg)
    assert data.endswith(b"\n")
    assert decode_frame(data) == msg
    assert msg.minimum_version == 1108
    assert NewGameWithOptionsMsg(game="g", options="").minimum_version is None


def test_frame_accepts_crlf_delimiter():
    msg = decode_frame(b"109|MyGame\r\n")
    assert msg == EndTurnMsg(game="MyGame")
    assert decode_frame(b"1069|200|ok\r\n").text == "ok"


def test_frame_rejects_bad_encoding():
    with pytest.raises(ParseFailure):
        decode_frame(b"\xff\xfe\n")


def test_error_payload():
    err = ParseFailure("broken", field="game")
    payload = err.to_payload()
    assert payload["status"] == 400
    assert payload["error_code"] == int(ErrorCode.PARSE_FAILURE)
    assert payload["error_message"] == "broken"
