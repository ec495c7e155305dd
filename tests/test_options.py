from __future__ import annotations

from settingsync.options import OptionList


def test_selection_follows_key_while_list_grows():
    options = OptionList()
    options.select_key("wlan0")
    assert options.selected_index == 0

    options.append("Default", "0")
    options.append("eth0", "eth0")
    assert options.selected_index == 0
    options.append("wlan0", "wlan0")
    assert options.selected_index == 2
    options.append("docker0", "docker0")
    assert options.selected_index == 2
    assert options.key_at(options.selected_index) == "wlan0"


def test_missing_key_falls_back_to_default_index():
    options = OptionList()
    options.select_key("gone")
    options.extend([("a", "a"), ("b", "b")])
    assert options.selected_index == 0
    assert options.index_of("gone") == 0
    assert options.index_of("gone", -1) == -1


def test_out_of_range_selection_clamps_to_zero():
    options = OptionList()
    options.extend([("a", "a"), ("b", "b")])
    assert options.select(5) == 0
    assert options.select(-1) == 0
    assert options.select(1) == 1
    assert options.key_at(9) == "a"


def test_empty_list_key_is_blank():
    options = OptionList()
    assert options.key_at(0) == ""
    assert "x" not in options


def test_clear_keeps_resolved_key():
    options = OptionList()
    options.extend([("a", "a"), ("b", "b")])
    options.select(1)
    options.clear()
    assert len(options) == 0
    assert options.selected_key == "b"
    options.extend([("b", "b"), ("c", "c")])
    assert options.selected_index == 0
    options.append("a", "a")
    assert options.labels() == ["b", "c", "a"]
    assert options.selected_index == 0
