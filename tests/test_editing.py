import pytest

from shared.options import (
    DEFAULT_OPTIONS_FILE,
    CheckboxEditor,
    ChoiceEditor,
    OptionRegistry,
    OptionValue,
    TextEditor,
    choice_to_value,
    editor_for,
    int_field_width,
)
from shared.options.editing import uses_int_choice


def _value(key):
    return OptionValue.from_definition(OptionRegistry.from_file(DEFAULT_OPTIONS_FILE)[key])


@pytest.mark.parametrize(
    "min_int, max_int, width",
    [
        (3, 4, 3),
        (0, 0, 3),
        (0, 9, 3),
        (0, 99, 3),
        (1, 999, 4),
        (0, 1000, 4),
        (0, 1001, 5),
        (-5000, 10, 5),
        (0, 100000, 6),
    ],
)
def test_int_field_width(min_int, max_int, width):
    assert int_field_width(min_int, max_int) == width


def test_choice_threshold():
    assert uses_int_choice(0, 21)
    assert not uses_int_choice(0, 22)
    assert uses_int_choice(7, 7)
    assert not uses_int_choice(5, 4)


def test_small_int_range_is_a_choice():
    editor = editor_for(_value("BC"))
    assert isinstance(editor, ChoiceEditor)
    assert editor.labels == ("3", "4")
    assert editor.values == (3, 4)
    assert editor.selected_index == 1
    assert not editor.has_checkbox
    assert choice_to_value(_value("BC"), 0) == 3


def test_wide_int_range_is_free_text():
    editor = editor_for(_value("N7"))
    assert isinstance(editor, TextEditor)
    assert editor.width == 4
    assert editor.text == "7"
    assert editor.digits_only
    assert editor.has_checkbox
    assert editor.checked is False


def test_enum_editors():
    layout = editor_for(_value("BL"))
    assert isinstance(layout, ChoiceEditor)
    assert layout.labels == ("Standard", "Shuffled ports", "Balanced")
    assert layout.values == (1, 2, 3)
    assert layout.selected_index == 0

    timer = editor_for(_value("TL"))
    assert timer.selected_index == 1
    assert timer.has_checkbox
    assert choice_to_value(_value("TL"), 3) == 4


def test_string_and_bool_editors():
    note = editor_for(_value("GN"))
    assert isinstance(note, TextEditor)
    assert note.width == 20
    assert not note.masked

    password = _value("PW")
    password.set_string_value("hunter2")
    hidden = editor_for(password)
    assert hidden.masked
    assert hidden.text == ""
    assert password.str_value == "hunter2"

    assert editor_for(_value("RD")) == CheckboxEditor(checked=False)


def test_unknown_values_have_no_editor():
    with pytest.raises(ValueError):
        editor_for(OptionValue.unknown("ZZ", "1"))
