import pytest

from client.features import CreateStatus, ErrorPolicy, GameOptionsExchange, OptionEdit
from client.features.game_options import (
    TXT_DIGITS_ONLY,
    TXT_GAME_EXISTS,
    TXT_SERVER_TOO_OLD,
    TXT_UNSUPPORTED_EDIT,
)
from shared.options import DEFAULT_OPTIONS_FILE, OptionRegistry, OptionValue, TextEditor
from shared.protocol import ErrorCode, NewGameWithOptionsRequestMsg, decode_msg, encode_msg
from shared.settings import Settings


def _exchange(policy=None, **kwargs):
    registry = OptionRegistry.from_file(DEFAULT_OPTIONS_FILE)
    return GameOptionsExchange(
        registry.new_option_set(),
        registry=registry,
        settings=Settings(),
        policy=policy,
        **kwargs,
    )


def test_valid_edits_are_applied():
    exchange = _exchange()
    report = exchange.read_edits(
        {
            "BC": OptionEdit(choice=0),
            "RD": OptionEdit(checked=True),
            "BL": OptionEdit(choice=2),
            "GN": OptionEdit(text="  be nice  "),
        }
    )
    assert report.ok
    assert report.errors == []
    assert exchange.options["BC"].int_value == 3
    assert exchange.options["RD"].bool_value is True
    assert exchange.options["BL"].int_value == 3
    assert exchange.options["GN"].str_value == "be nice"


def test_out_of_range_text_keeps_previous_value():
    exchange = _exchange()
    report = exchange.read_edits({"N7": OptionEdit(text="1000", checked=True)})
    assert not report.ok
    assert report.key == "N7"
    assert report.message == "Out of range: Should be 1 to 999"
    assert report.errors[0].error.code == ErrorCode.OPTION_OUT_OF_RANGE
    assert exchange.options["N7"].int_value == 7


def test_non_digit_text_is_rejected():
    exchange = _exchange()
    report = exchange.read_edits({"N7": OptionEdit(text="abc", checked=True)})
    assert report.message == TXT_DIGITS_ONLY
    assert exchange.options["N7"].int_value == 7


def test_forbidden_string_text_is_rejected():
    exchange = _exchange()
    exchange.options["GN"].set_string_value("old note")
    report = exchange.read_edits({"GN": OptionEdit(text="a|b")})
    assert report.key == "GN"
    assert report.message == "Please use only a single line of text here."
    assert exchange.options["GN"].str_value == "old note"


def test_enum_choice_out_of_range():
    exchange = _exchange()
    report = exchange.read_edits({"BL": OptionEdit(choice=3)})
    assert report.key == "BL"
    assert exchange.options["BL"].int_value == 1


@pytest.mark.parametrize(
    "key, edit",
    [
        ("BL", OptionEdit(text="3")),
        ("RD", OptionEdit(text="t")),
        ("RD", OptionEdit()),
        ("BC", OptionEdit(checked=True)),
        ("GN", OptionEdit(choice=0)),
        ("TL", OptionEdit(text="2", choice=1)),
    ],
)
def test_edit_the_option_cannot_use_is_rejected(key, edit):
    exchange = _exchange()
    before = exchange.options[key].copy()
    report = exchange.read_edits({key: edit})
    assert not report.ok
    assert report.key == key
    assert report.message == TXT_UNSUPPORTED_EDIT
    after = exchange.options[key]
    assert (after.bool_value, after.int_value, after.str_value) == (
        before.bool_value,
        before.int_value,
        before.str_value,
    )


def _two_bad_edits():
    return {
        "N7": OptionEdit(text="5000", checked=True),
        "BC": OptionEdit(choice=0),
        "GN": OptionEdit(text="line\nbreak"),
    }


def test_default_policy_reports_the_last_error():
    exchange = _exchange()
    assert exchange.policy == ErrorPolicy.LAST
    report = exchange.read_edits(_two_bad_edits())
    assert not report.ok
    assert report.key == "GN"
    assert report.message == "Please use only a single line of text here."
    assert [err.key for err in report.errors] == ["N7", "GN"]
    # Fields after a failure are still validated and applied
    assert exchange.options["BC"].int_value == 3


def test_first_and_all_policies():
    first = _exchange(policy=ErrorPolicy.FIRST).read_edits(_two_bad_edits())
    assert first.key == "N7"
    assert first.message == "Out of range: Should be 1 to 999"

    every = _exchange(policy=ErrorPolicy.ALL).read_edits(_two_bad_edits())
    assert every.key == "N7"
    assert every.message.splitlines() == [
        "N7: Out of range: Should be 1 to 999",
        "GN: Please use only a single line of text here.",
    ]


def test_policy_from_settings():
    registry = OptionRegistry.from_file(DEFAULT_OPTIONS_FILE)
    exchange = GameOptionsExchange(
        registry.new_option_set(), registry=registry, settings=Settings(error_policy="first")
    )
    assert exchange.policy == ErrorPolicy.FIRST


def test_checkbox_follows_text_and_choice():
    exchange = _exchange()
    exchange.read_edits({"N7": OptionEdit(text="5"), "TL": OptionEdit(choice=0)})
    assert exchange.options["N7"].bool_value is True
    assert exchange.options["N7"].int_value == 5
    assert exchange.options["TL"].bool_value is True
    assert exchange.options["TL"].int_value == 1

    report = exchange.read_edits({"N7": OptionEdit(text="")})
    assert report.ok
    assert exchange.options["N7"].bool_value is False
    assert exchange.options["N7"].int_value == 5


def test_editors_are_keyed_by_option():
    exchange = _exchange()
    exchange.read_edits({"N7": OptionEdit(text="12")})
    editor = exchange.editors["N7"]
    assert isinstance(editor, TextEditor)
    assert editor.text == "12"
    assert list(exchange.editors)[0] == "BL"


def test_unknown_edit_key_is_an_error():
    report = _exchange().read_edits({"ZZ": OptionEdit(checked=True)})
    assert not report.ok
    assert report.errors[0].error.code == ErrorCode.UNKNOWN_OPTION


def test_unknown_options_removed_before_display():
    registry = OptionRegistry.from_file(DEFAULT_OPTIONS_FILE)
    options = registry.new_option_set()
    options.add(OptionValue.unknown("ZZ", "t3"))
    exchange = GameOptionsExchange(options, registry=registry, settings=Settings())
    assert "ZZ" not in exchange.options
    assert "ZZ" not in exchange.editors


def test_read_only_and_old_server():
    read_only = _exchange(read_only=True)
    assert not read_only.read_edits({"RD": OptionEdit(checked=True)}).ok
    assert read_only.options["RD"].bool_value is False
    assert read_only.create_game("g", nickname="alice").status == CreateStatus.REJECTED

    registry = OptionRegistry.from_file(DEFAULT_OPTIONS_FILE)
    old = GameOptionsExchange(None, registry=registry, settings=Settings())
    assert old.status_text == TXT_SERVER_TOO_OLD
    outcome = old.create_game("g", nickname="alice")
    assert outcome.ok
    assert outcome.request.options == ""


def test_create_with_defaults():
    outcome = _exchange().create_game(" My Game ", nickname="alice", host="localhost")
    assert outcome.status == CreateStatus.CREATED
    assert outcome.negotiation.minimum_version is None
    request = outcome.request
    assert request.game == "My Game"
    line = encode_msg(request)
    assert line.startswith("1078|alice||localhost|My Game|")
    assert decode_msg(line) == request


def test_networked_game_needs_confirmation():
    exchange = _exchange()
    edits = {"BC": OptionEdit(choice=0)}
    outcome = exchange.create_game("g", nickname="alice", edits=edits)
    assert outcome.status == CreateStatus.NEEDS_CONFIRMATION
    assert outcome.request is None
    assert outcome.negotiation.minimum_version == 1107
    assert outcome.message.startswith("Client version 1107 or higher is required")

    again = exchange.create_game("g", nickname="alice", confirmed=True)
    assert again.ok
    assert isinstance(again.request, NewGameWithOptionsRequestMsg)
    assert "BC=3" in again.request.options.split(",")


def test_practice_game_skips_confirmation():
    exchange = _exchange(for_practice=True)
    outcome = exchange.create_game("Practice", nickname="alice", edits={"BC": OptionEdit(choice=0)})
    assert outcome.ok
    assert outcome.negotiation.minimum_version == 1107


def test_invalid_edits_block_creation():
    outcome = _exchange().create_game("g", nickname="alice", edits={"N7": OptionEdit(text="x", checked=True)})
    assert outcome.status == CreateStatus.REJECTED
    assert outcome.key == "N7"


def test_game_name_checks():
    exchange = _exchange()
    assert exchange.create_game("   ", nickname="a").status == CreateStatus.REJECTED
    assert exchange.create_game("a|b", nickname="a").status == CreateStatus.REJECTED
    assert exchange.create_game("a,b", nickname="a").status == CreateStatus.REJECTED
    taken = exchange.create_game("Taken", nickname="a", existing_games={"Taken"})
    assert taken.message == TXT_GAME_EXISTS


def test_apply_remote_drops_unknown_keys():
    exchange = _exchange()
    dropped = exchange.apply_remote("BC=3,ZZ=1")
    assert dropped == ["ZZ"]
    assert exchange.options["BC"].int_value == 3
    assert "ZZ" not in exchange.options
