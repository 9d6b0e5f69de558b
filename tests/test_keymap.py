# SPDX-License-Identifier: GPL-3.0-or-later
from macromate import keymap


def test_letters_and_modifiers():
    assert keymap.name_to_keycode("W") == 17
    assert keymap.name_to_keycode("A") == 30
    assert keymap.name_to_keycode("SHIFT") == 42
    assert keymap.name_to_keycode("F1") == 59
    assert keymap.keycode_to_name(17) == "W"
    assert keymap.keycode_to_name(0x110) == "MOUSE_LEFT"


def test_lookup_is_case_sensitive():
    assert keymap.name_to_keycode("w") is None
    assert keymap.name_to_keycode("Shift") is None
    assert keymap.name_to_keycode("") is None


def test_uncatalogued_codes_get_generic_names():
    assert keymap.keycode_to_name(240) == "KEY_240"
    assert keymap.name_to_keycode("KEY_240") == 240
    # a catalogued code only has its canonical name
    assert keymap.name_to_keycode("KEY_17") is None
    assert keymap.name_to_keycode("KEY_0240") is None
    assert keymap.keycode_to_name(keymap.KEY_MAX + 1) is None


def test_catalog_is_bidirectional():
    for name in keymap.key_names():
        assert keymap.keycode_to_name(keymap.name_to_keycode(name)) == name
