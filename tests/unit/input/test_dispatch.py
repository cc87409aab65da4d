"""Tests for key bindings, pure key mapping and the mode state machine."""

from __future__ import annotations

import unittest

from lazybrowse.input import (
    NO_ACTION,
    Action,
    ActionCategory,
    ActionKind,
    BindingTable,
    Dispatcher,
    Mode,
    PromptKind,
    map_key,
    normalize_chord,
)


class ActionKindTests(unittest.TestCase):
    def test_from_name_rejects_unknown_and_dispatcher_only_kinds(self) -> None:
        self.assertIs(ActionKind.from_name("move_down"), ActionKind.MOVE_DOWN)
        self.assertIsNone(ActionKind.from_name("launch_rockets"))
        self.assertIsNone(ActionKind.from_name("search_input"))
        self.assertIsNone(ActionKind.from_name("filter_changed"))

    def test_every_action_has_exactly_one_category(self) -> None:
        self.assertIs(Action(ActionKind.MOVE_DOWN).category, ActionCategory.TREE)
        self.assertIs(Action(ActionKind.TOGGLE_HEX).category, ActionCategory.PREVIEW)
        self.assertIs(Action(ActionKind.OPEN_EDITOR).category, ActionCategory.SUSPEND)
        self.assertIs(Action(ActionKind.PASTE).category, ActionCategory.FILESYSTEM)
        self.assertIs(Action(ActionKind.SEARCH_START).category, ActionCategory.MODE)
        self.assertIs(NO_ACTION.category, ActionCategory.NONE)
        self.assertTrue(NO_ACTION.is_noop)
        for kind in ActionKind:
            self.assertIsInstance(kind.category, ActionCategory)


class BindingTableTests(unittest.TestCase):
    def test_normalize_chord_aliases(self) -> None:
        self.assertEqual(normalize_chord("ctrl+r"), "CTRL_R")
        self.assertEqual(normalize_chord("Page-Down"), "PAGE_DOWN")
        self.assertEqual(normalize_chord("space"), " ")
        self.assertEqual(normalize_chord("J"), "J")

    def test_from_config_overlays_defaults_and_skips_bad_entries(self) -> None:
        raw = {
            "normal": {"w": "move_up", "j": "launch_rockets", "z": 3},
            "search": {"x": "quit"},
            "nowhere": {"a": "quit"},
            "g_prefix": {"ctrl+t": "go_to_top"},
        }
        with self.assertLogs("lazybrowse.input.bindings", level="WARNING") as logs:
            table = BindingTable.from_config(raw)

        self.assertIs(table.lookup(Mode.NORMAL, "w"), ActionKind.MOVE_UP)
        self.assertIs(table.lookup(Mode.NORMAL, "j"), ActionKind.MOVE_DOWN)
        self.assertIsNone(table.lookup(Mode.NORMAL, "z"))
        self.assertIsNone(table.lookup(Mode.SEARCH, "x"))
        self.assertIs(table.lookup(Mode.G_PREFIX, "CTRL_T"), ActionKind.GO_TO_TOP)
        self.assertEqual(len(logs.records), 4)

    def test_from_config_does_not_mutate_defaults(self) -> None:
        BindingTable.from_config({"normal": {"j": "quit"}})
        self.assertIs(BindingTable().lookup(Mode.NORMAL, "j"), ActionKind.MOVE_DOWN)

    def test_non_mapping_config_falls_back_to_defaults(self) -> None:
        with self.assertLogs("lazybrowse.input.bindings", level="WARNING"):
            table = BindingTable.from_config(["nope"])
        self.assertIs(table.lookup(Mode.NORMAL, "q"), ActionKind.QUIT)
        self.assertIn("j", table.chords_for(Mode.NORMAL, ActionKind.MOVE_DOWN))


class MapKeyTests(unittest.TestCase):
    def setUp(self) -> None:
        self.bindings = BindingTable()

    def test_normal_mode_lookup_is_pure(self) -> None:
        self.assertEqual(map_key("j", Mode.NORMAL, self.bindings), Action(ActionKind.MOVE_DOWN))
        self.assertEqual(map_key("@", Mode.NORMAL, self.bindings), NO_ACTION)
        self.assertEqual(map_key("", Mode.NORMAL, self.bindings), NO_ACTION)

    def test_text_entry_modes_treat_bound_letters_as_text(self) -> None:
        self.assertEqual(map_key("q", Mode.SEARCH, self.bindings), Action(ActionKind.SEARCH_INPUT, text="q"))
        self.assertEqual(map_key("q", Mode.PROMPT, self.bindings), Action(ActionKind.PROMPT_INPUT, text="q"))
        self.assertEqual(map_key("9", Mode.CHMOD, self.bindings), NO_ACTION)
        self.assertEqual(map_key("ENTER", Mode.CHMOD, self.bindings), Action(ActionKind.CHMOD_APPLY))
        self.assertEqual(
            {mode for mode in Mode if mode.is_text_entry},
            {Mode.SEARCH, Mode.PROMPT, Mode.CHMOD},
        )

    def test_g_prefix_breadcrumb_carries_index(self) -> None:
        self.assertEqual(map_key("3", Mode.G_PREFIX, self.bindings), Action(ActionKind.GO_TO_BREADCRUMB, index=3))
        self.assertEqual(map_key("h", Mode.G_PREFIX, self.bindings), Action(ActionKind.GO_HOME))

    def test_delete_confirm_accepts_only_y(self) -> None:
        self.assertEqual(map_key("y", Mode.DELETE_CONFIRM, self.bindings).kind, ActionKind.DELETE_CONFIRM)
        self.assertEqual(map_key("n", Mode.DELETE_CONFIRM, self.bindings).kind, ActionKind.DELETE_CANCEL)
        self.assertEqual(map_key("ESC", Mode.DELETE_CONFIRM, self.bindings).kind, ActionKind.DELETE_CANCEL)


class DispatcherTests(unittest.TestCase):
    def test_g_prefix_consumes_exactly_one_key(self) -> None:
        dispatcher = Dispatcher()
        self.assertIs(dispatcher.handle_key("g").kind, ActionKind.G_PRESS)
        self.assertIs(dispatcher.mode, Mode.G_PREFIX)
        self.assertIs(dispatcher.handle_key("g").kind, ActionKind.GO_TO_TOP)
        self.assertIs(dispatcher.mode, Mode.NORMAL)

        dispatcher.handle_key("g")
        self.assertTrue(dispatcher.handle_key("z").is_noop)
        self.assertIs(dispatcher.mode, Mode.NORMAL)

    def test_search_emits_filter_changes_and_confirm_carries_text(self) -> None:
        dispatcher = Dispatcher()
        dispatcher.handle_key("/")
        self.assertIs(dispatcher.mode, Mode.SEARCH)
        self.assertEqual(dispatcher.handle_key("m"), Action(ActionKind.FILTER_CHANGED, text="m"))
        self.assertEqual(dispatcher.handle_key("a"), Action(ActionKind.FILTER_CHANGED, text="ma"))
        self.assertEqual(dispatcher.handle_key("BACKSPACE"), Action(ActionKind.FILTER_CHANGED, text="m"))
        self.assertEqual(dispatcher.handle_key("ENTER"), Action(ActionKind.SEARCH_CONFIRM, text="m"))
        self.assertIs(dispatcher.mode, Mode.NORMAL)

    def test_ctrl_s_saves_search_buffer_and_leaves(self) -> None:
        dispatcher = Dispatcher()
        dispatcher.handle_key("/")
        dispatcher.handle_key("m")
        self.assertEqual(dispatcher.handle_key("CTRL_S"), Action(ActionKind.SEARCH_SAVE, text="m"))
        self.assertIs(dispatcher.mode, Mode.NORMAL)
        self.assertIsNone(ActionKind.from_name("search_save"))

    def test_search_backspace_on_empty_buffer_is_noop_and_escape_cancels(self) -> None:
        dispatcher = Dispatcher()
        dispatcher.handle_key("/")
        self.assertTrue(dispatcher.handle_key("BACKSPACE").is_noop)
        self.assertIs(dispatcher.handle_key("ESC").kind, ActionKind.SEARCH_CANCEL)
        self.assertIs(dispatcher.mode, Mode.NORMAL)

    def test_prompt_line_editing(self) -> None:
        dispatcher = Dispatcher()
        dispatcher.enter(Mode.PROMPT, PromptKind.RENAME, initial="main.rs")
        for key in ("LEFT", "LEFT", "LEFT", "BACKSPACE", "DELETE", "HOME", "x", "END", "!"):
            dispatcher.handle_key(key)
        self.assertEqual(dispatcher.state.buffer, "xmairs!")
        # "q" is text here, not quit
        dispatcher.handle_key("q")
        confirm = dispatcher.handle_key("ENTER")
        self.assertEqual(confirm, Action(ActionKind.PROMPT_CONFIRM, text="xmairs!q", prompt=PromptKind.RENAME))
        self.assertIs(dispatcher.mode, Mode.NORMAL)

    def test_chmod_apply_carries_digits(self) -> None:
        dispatcher = Dispatcher()
        dispatcher.enter(Mode.CHMOD, initial="644")
        dispatcher.handle_key("BACKSPACE")
        dispatcher.handle_key("5")
        dispatcher.handle_key("z")
        self.assertEqual(dispatcher.handle_key("ENTER"), Action(ActionKind.CHMOD_APPLY, text="645"))

    def test_delete_confirm_leaves_on_any_key(self) -> None:
        dispatcher = Dispatcher()
        dispatcher.enter(Mode.DELETE_CONFIRM)
        self.assertIs(dispatcher.handle_key("k").kind, ActionKind.DELETE_CANCEL)
        self.assertIs(dispatcher.mode, Mode.NORMAL)

    def test_overlays_own_input_until_closed(self) -> None:
        dispatcher = Dispatcher()
        dispatcher.handle_key("?")
        self.assertIs(dispatcher.mode, Mode.HELP)
        self.assertTrue(dispatcher.handle_key("j").is_noop)
        dispatcher.handle_key("ESC")
        self.assertIs(dispatcher.mode, Mode.NORMAL)

        dispatcher.enter(Mode.FAVORITES)
        self.assertIs(dispatcher.handle_key("j").kind, ActionKind.FAVORITES_DOWN)
        self.assertIs(dispatcher.mode, Mode.FAVORITES)
        self.assertIs(dispatcher.handle_key("ENTER").kind, ActionKind.FAVORITES_SELECT)
        self.assertIs(dispatcher.mode, Mode.NORMAL)

    def test_picker_digits_carry_their_number(self) -> None:
        dispatcher = Dispatcher()
        dispatcher.enter(Mode.COMPRESS)
        self.assertTrue(dispatcher.handle_key("9").is_noop)
        self.assertIs(dispatcher.mode, Mode.COMPRESS)
        self.assertEqual(dispatcher.handle_key("2"), Action(ActionKind.COMPRESS_SELECT, index=2))
        self.assertIs(dispatcher.mode, Mode.NORMAL)

        dispatcher.enter(Mode.SAVED_SEARCHES)
        self.assertEqual(dispatcher.handle_key("ENTER"), Action(ActionKind.SAVED_SEARCH_SELECT))
        self.assertIs(dispatcher.mode, Mode.NORMAL)


if __name__ == "__main__":
    unittest.main()
