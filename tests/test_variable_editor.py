"""Tests for the VariableEditor component."""

from __future__ import annotations

from vartext.catalog import TemplateVariable, VariableCatalog
from vartext.components.variable_editor import VariableEditor, VariableEditorOptions
from vartext.mention import IDLE

# Raw escape codes for key sequences
KEY_UP = "\x1b[A"
KEY_DOWN = "\x1b[B"
KEY_LEFT = "\x1b[D"
KEY_RIGHT = "\x1b[C"
KEY_HOME = "\x1b[H"
KEY_END = "\x1b[F"
KEY_ENTER = "\r"
KEY_SHIFT_ENTER = "\x1b[13;2u"
KEY_TAB = "\t"
KEY_ESCAPE = "\x1b"
KEY_BACKSPACE = "\x7f"
KEY_DELETE = "\x1b[3~"
KEY_CTRL_J = "\n"
KEY_RELEASE_A = "\x1b[97;1:3u"

PASTE_START = "\x1b[200~"
PASTE_END = "\x1b[201~"

REVERSE_ON = "\x1b[7m"
REVERSE_OFF = "\x1b[27m"


# ---------------------------------------------------------------------------
# A simple identity theme for testing
# ---------------------------------------------------------------------------


class _IdentitySuggestionTheme:
    @staticmethod
    def selected_text(text: str) -> str:
        return text

    @staticmethod
    def description(text: str) -> str:
        return text

    @staticmethod
    def scroll_info(text: str) -> str:
        return text

    @staticmethod
    def no_match(text: str) -> str:
        return text


class _IdentityTheme:
    """Theme that returns text unmodified, satisfying the VariableEditorTheme protocol."""

    suggestion_list = _IdentitySuggestionTheme()

    @staticmethod
    def variable(text: str) -> str:
        return text


class _MarkedTheme(_IdentityTheme):
    """Wraps chips in brackets so tests can see where they are."""

    @staticmethod
    def variable(text: str) -> str:
        return f"[{text}]"


def _editor(value: str = "", **options) -> tuple[VariableEditor, list[str]]:
    editor = VariableEditor(_IdentityTheme(), VariableEditorOptions(**options), value)
    changes: list[str] = []
    editor.on_change = changes.append
    editor.focus()
    return editor, changes


def _type(editor: VariableEditor, text: str) -> None:
    for ch in text:
        editor.handle_input(ch)


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


class TestVariableEditorOptions:
    """Options have sensible defaults and clamp the suggestion rows."""

    def test_defaults(self) -> None:
        options = VariableEditorOptions()
        assert options.single_line is True
        assert options.trigger == "@"
        assert options.suggestions_max_visible == 5

    def test_rows_clamped(self) -> None:
        assert VariableEditorOptions(suggestions_max_visible=1).suggestions_max_visible == 3
        assert VariableEditorOptions(suggestions_max_visible=99).suggestions_max_visible == 20


# ---------------------------------------------------------------------------
# Value synchronization
# ---------------------------------------------------------------------------


class TestValueSync:
    """The owner sees one on_change per input event, only on net change."""

    def test_initial_value(self) -> None:
        editor, _ = _editor("Hi {{first_name}}")
        assert editor.get_value() == "Hi {{first_name}}"
        assert editor.is_cursor_at_end()

    def test_typing_notifies_each_event(self) -> None:
        editor, changes = _editor()
        _type(editor, "Hi")
        assert changes == ["H", "Hi"]

    def test_multi_char_chunk_notifies_once(self) -> None:
        editor, changes = _editor()
        editor.handle_input("Hello")
        assert changes == ["Hello"]

    def test_set_value_does_not_notify(self) -> None:
        editor, changes = _editor("a")
        editor.set_value("Dear {{first_name}}")
        assert editor.get_value() == "Dear {{first_name}}"
        assert changes == []

    def test_set_value_same_value_keeps_cursor(self) -> None:
        editor, _ = _editor("abc")
        editor.handle_input(KEY_LEFT)
        editor.set_value("abc")
        assert editor.get_cursor_position() == 2

    def test_navigation_does_not_notify(self) -> None:
        editor, changes = _editor("abc")
        editor.handle_input(KEY_LEFT)
        editor.handle_input(KEY_HOME)
        editor.handle_input(KEY_END)
        assert changes == []

    def test_noop_delete_does_not_notify(self) -> None:
        editor, changes = _editor("abc")
        editor.handle_input(KEY_DELETE)
        assert changes == []

    def test_key_release_ignored(self) -> None:
        editor, changes = _editor()
        editor.handle_input(KEY_RELEASE_A)
        assert editor.get_value() == ""
        assert changes == []

    def test_control_characters_not_inserted(self) -> None:
        editor, _ = _editor()
        editor.handle_input("\x07")
        assert editor.get_value() == ""


# ---------------------------------------------------------------------------
# Mention autocomplete
# ---------------------------------------------------------------------------


class TestMentionFlow:
    """Typing @query composes, Enter commits, Escape cancels."""

    def test_type_then_enter_inserts_chip(self) -> None:
        editor, changes = _editor()
        _type(editor, "Hi @fir")
        state = editor.get_mention_state()
        assert state.active is True
        assert state.query == "fir"
        assert state.anchor_offset == 3
        assert state.candidates == ("first_name",)

        editor.handle_input(KEY_ENTER)
        assert editor.get_value() == "Hi {{first_name}} "
        assert editor.get_cursor_position() == 18
        assert editor.get_mention_state() == IDLE
        assert changes[-1] == "Hi {{first_name}} "

    def test_commit_notifies_once(self) -> None:
        editor, changes = _editor()
        _type(editor, "@em")
        count = len(changes)
        editor.handle_input(KEY_ENTER)
        assert len(changes) == count + 1

    def test_tab_commits(self) -> None:
        editor, _ = _editor()
        _type(editor, "@pos")
        editor.handle_input(KEY_TAB)
        assert editor.get_value() == "{{position}} "

    def test_escape_cancels_and_keeps_text(self) -> None:
        editor, changes = _editor()
        _type(editor, "Hi @fir")
        count = len(changes)
        editor.handle_input(KEY_ESCAPE)
        assert editor.get_mention_state() == IDLE
        assert editor.get_value() == "Hi @fir"
        assert len(changes) == count

    def test_escape_with_no_matches(self) -> None:
        editor, _ = _editor()
        _type(editor, "@zzz")
        assert editor.get_mention_state().active is True
        editor.handle_input(KEY_ESCAPE)
        assert editor.get_mention_state() == IDLE

    def test_down_and_up_wrap(self) -> None:
        editor, _ = _editor()
        editor.handle_input("@")
        editor.handle_input(KEY_DOWN)
        assert editor.get_mention_state().selected_index == 1
        editor.handle_input(KEY_UP)
        editor.handle_input(KEY_UP)
        assert editor.get_mention_state().selected_index == 5

    def test_down_then_enter_commits_selected(self) -> None:
        editor, _ = _editor()
        editor.handle_input("@")
        editor.handle_input(KEY_DOWN)
        editor.handle_input(KEY_ENTER)
        assert editor.get_value() == "{{email}} "

    def test_enter_without_matches_submits(self) -> None:
        editor, _ = _editor()
        submitted: list[str] = []
        editor.on_submit = submitted.append
        _type(editor, "@zzz")
        editor.handle_input(KEY_ENTER)
        assert submitted == ["@zzz"]

    def test_arrow_keys_move_cursor_when_idle(self) -> None:
        editor, _ = _editor("ab")
        editor.handle_input(KEY_UP)
        assert editor.get_cursor_position() == 2

    def test_typing_space_ends_composing(self) -> None:
        editor, _ = _editor()
        _type(editor, "@fir ")
        assert editor.get_mention_state() == IDLE

    def test_moving_cursor_rederives_query(self) -> None:
        editor, _ = _editor()
        _type(editor, "@fir")
        editor.handle_input(KEY_LEFT)
        assert editor.get_mention_state().query == "fi"

    def test_blur_returns_to_idle(self) -> None:
        editor, _ = _editor()
        _type(editor, "@fir")
        editor.blur()
        assert editor.get_mention_state() == IDLE
        assert editor.focused is False

    def test_custom_trigger(self) -> None:
        editor, _ = _editor(trigger="#")
        _type(editor, "#camp")
        editor.handle_input(KEY_ENTER)
        assert editor.get_value() == "{{campaign_name}} "

    def test_custom_catalog_names(self) -> None:
        editor, _ = _editor(catalog=["first_name", "last_name", "referral_link"])
        _type(editor, "@nam")
        assert editor.get_mention_state().candidates == ("first_name", "last_name")

    def test_set_catalog(self) -> None:
        editor, _ = _editor()
        editor.set_catalog(VariableCatalog(variables=(TemplateVariable(name="coupon"),)))
        editor.handle_input("@")
        assert editor.get_mention_state().candidates == ("coupon",)


class TestPointerSuggestions:
    """Pointer hover and click go through the same transitions as keys."""

    def test_select_then_commit(self) -> None:
        editor, _ = _editor()
        _type(editor, "Hi @")
        editor.select_suggestion(2)
        assert editor.get_mention_state().selected_index == 2
        assert editor.commit_suggestion() is True
        assert editor.get_value() == "Hi {{position}} "

    def test_commit_by_index(self) -> None:
        editor, _ = _editor()
        _type(editor, "@em")
        editor.commit_suggestion(0)
        assert editor.get_value() == "{{email}} "

    def test_commit_when_idle(self) -> None:
        editor, _ = _editor("abc")
        assert editor.commit_suggestion() is False
        assert editor.get_value() == "abc"

    def test_cancel_suggestions(self) -> None:
        editor, _ = _editor()
        _type(editor, "@em")
        editor.cancel_suggestions()
        assert editor.get_mention_state() == IDLE
        assert editor.get_value() == "@em"


class TestVariableMenu:
    """Ctrl+J opens a menu that inserts at the cursor."""

    def test_open_and_commit(self) -> None:
        editor, _ = _editor("Hello ")
        editor.handle_input(KEY_CTRL_J)
        state = editor.get_mention_state()
        assert state.active is True
        assert state.anchor_offset == 6
        editor.handle_input(KEY_DOWN)
        editor.handle_input(KEY_ENTER)
        assert editor.get_value() == "Hello {{email}} "

    def test_toggle_closes(self) -> None:
        editor, _ = _editor()
        editor.handle_input(KEY_CTRL_J)
        editor.handle_input(KEY_CTRL_J)
        assert editor.get_mention_state() == IDLE

    def test_typing_closes_menu(self) -> None:
        editor, _ = _editor()
        editor.handle_input(KEY_CTRL_J)
        editor.handle_input("x")
        assert editor.get_mention_state() == IDLE
        assert editor.get_value() == "x"

    def test_insert_variable_directly(self) -> None:
        editor, changes = _editor("Hi")
        editor.insert_variable("email")
        assert editor.get_value() == "Hi{{email}} "
        assert changes == ["Hi{{email}} "]


# ---------------------------------------------------------------------------
# Deletion
# ---------------------------------------------------------------------------


class TestAtomicDeletionKeys:
    """Backspace and Delete remove chips whole."""

    def test_backspace_after_separator(self) -> None:
        editor, changes = _editor("Hi {{first_name}} , go")
        editor.set_cursor_position(18)
        editor.handle_input(KEY_BACKSPACE)
        assert editor.get_value() == "Hi , go"
        assert changes == ["Hi , go"]

    def test_backspace_after_chip(self) -> None:
        editor, _ = _editor("Hi {{first_name}}, go")
        editor.set_cursor_position(17)
        editor.handle_input(KEY_BACKSPACE)
        assert editor.get_value() == "Hi , go"

    def test_backspace_plain_text(self) -> None:
        editor, _ = _editor("Hi {{first_name}} xy")
        editor.handle_input(KEY_BACKSPACE)
        assert editor.get_value() == "Hi {{first_name}} x"

    def test_backspace_right_after_commit(self) -> None:
        editor, _ = _editor()
        _type(editor, "Hi @fir")
        editor.handle_input(KEY_ENTER)
        editor.handle_input(KEY_BACKSPACE)
        assert editor.get_value() == "Hi "

    def test_delete_before_chip(self) -> None:
        editor, _ = _editor("Hi {{first_name}} there")
        editor.set_cursor_position(3)
        editor.handle_input(KEY_DELETE)
        assert editor.get_value() == "Hi there"

    def test_delete_plain_text(self) -> None:
        editor, _ = _editor("abc")
        editor.handle_input(KEY_HOME)
        editor.handle_input(KEY_DELETE)
        assert editor.get_value() == "bc"


class TestCursorKeys:
    """Arrow keys step over chips."""

    def test_left_over_chip(self) -> None:
        editor, _ = _editor("Hi {{first_name}}")
        editor.handle_input(KEY_LEFT)
        assert editor.get_cursor_position() == 3

    def test_right_over_chip(self) -> None:
        editor, _ = _editor("{{email}}x")
        editor.handle_input(KEY_HOME)
        editor.handle_input(KEY_RIGHT)
        assert editor.get_cursor_position() == 9

    def test_home_and_end(self) -> None:
        editor, _ = _editor("{{email}} x")
        editor.handle_input(KEY_HOME)
        assert editor.is_cursor_at_start()
        editor.handle_input(KEY_END)
        assert editor.is_cursor_at_end()


# ---------------------------------------------------------------------------
# Paste and line handling
# ---------------------------------------------------------------------------


class TestPasteAndLines:
    """Bracketed paste inserts plain text; line breaks depend on the mode."""

    def test_single_line_paste_collapses_breaks(self) -> None:
        editor, changes = _editor()
        editor.handle_input(f"{PASTE_START}line1\nline2{PASTE_END}")
        assert editor.get_value() == "line1 line2"
        assert changes == ["line1 line2"]

    def test_paste_split_across_chunks(self) -> None:
        editor, _ = _editor()
        editor.handle_input(f"{PASTE_START}ab")
        assert editor.get_value() == ""
        editor.handle_input(f"c{PASTE_END}")
        assert editor.get_value() == "abc"

    def test_input_after_paste_end_is_processed(self) -> None:
        editor, _ = _editor()
        editor.handle_input(f"{PASTE_START}ab{PASTE_END}c")
        assert editor.get_value() == "abc"

    def test_paste_strips_control_characters(self) -> None:
        editor, _ = _editor(single_line=False)
        editor.handle_input(f"{PASTE_START}a\tb\x1b[31mc\r\nd{PASTE_END}")
        assert editor.get_value() == "a    bc\nd"

    def test_pasted_token_is_deleted_whole(self) -> None:
        editor, changes = _editor()
        editor.handle_input(f"{PASTE_START}Hi {{{{first_name}}}}{PASTE_END}")
        editor.handle_input(KEY_BACKSPACE)
        assert changes == ["Hi {{first_name}}", "Hi "]

    def test_single_line_value_with_breaks_is_collapsed(self) -> None:
        editor, changes = _editor("a\nb", single_line=True)
        assert editor.get_value() == "a b"
        editor.handle_input("c")
        assert changes == ["a bc"]

    def test_single_line_set_value_with_breaks_is_collapsed(self) -> None:
        editor, changes = _editor(single_line=True)
        editor.set_value("{{email}}\nthanks")
        assert editor.get_value() == "{{email}} thanks"
        assert changes == []

    def test_enter_submits_in_single_line(self) -> None:
        editor, changes = _editor("Hi")
        submitted: list[str] = []
        editor.on_submit = submitted.append
        editor.handle_input(KEY_ENTER)
        assert submitted == ["Hi"]
        assert changes == []

    def test_enter_inserts_newline_in_multi_line(self) -> None:
        editor, _ = _editor("a", single_line=False)
        editor.handle_input(KEY_ENTER)
        assert editor.get_value() == "a\n"

    def test_shift_enter_inserts_newline_in_multi_line(self) -> None:
        editor, _ = _editor("a", single_line=False)
        editor.handle_input(KEY_SHIFT_ENTER)
        assert editor.get_value() == "a\n"

    def test_shift_enter_ignored_in_single_line(self) -> None:
        editor, changes = _editor("a")
        editor.handle_input(KEY_SHIFT_ENTER)
        assert editor.get_value() == "a"
        assert changes == []


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TestRender:
    """render draws chips, the caret and the suggestion list."""

    def test_unfocused_plain(self) -> None:
        editor = VariableEditor(_IdentityTheme(), value="Hi {{first_name}} ")
        assert editor.render(40) == ["Hi {{first_name}} "]

    def test_focused_caret_at_end(self) -> None:
        editor, _ = _editor("Hi")
        assert editor.render(40) == [f"Hi{REVERSE_ON} {REVERSE_OFF}"]

    def test_caret_on_character(self) -> None:
        editor, _ = _editor("ab")
        editor.handle_input(KEY_HOME)
        assert editor.render(40) == [f"{REVERSE_ON}a{REVERSE_OFF}b"]

    def test_chip_uses_theme(self) -> None:
        editor = VariableEditor(_MarkedTheme(), value="Hi {{email}}!")
        assert editor.render(40) == ["Hi [{{email}}]!"]

    def test_wraps_without_splitting_chip(self) -> None:
        editor = VariableEditor(_IdentityTheme(), value="abcd{{email}}")
        assert editor.render(10) == ["abcd", "{{email}}"]

    def test_multi_line_value(self) -> None:
        editor = VariableEditor(
            _IdentityTheme(), VariableEditorOptions(single_line=False), "a\nb"
        )
        assert editor.render(40) == ["a ", "b"]

    def test_suggestions_below_text(self) -> None:
        editor, _ = _editor()
        editor.handle_input("@")
        lines = editor.render(40)
        assert lines[1] == "→ {{first_name}}"
        assert lines[-1] == "  (1/6)"
        assert len(lines) == 1 + 5 + 1

    def test_no_matches_line(self) -> None:
        editor, _ = _editor()
        editor.handle_input("@zzz")
        assert editor.render(40)[-1] == "  No matching variables"

    def test_idle_has_no_suggestions(self) -> None:
        editor, _ = _editor("abc")
        assert len(editor.render(40)) == 1

    def test_catalog_descriptions_shown(self) -> None:
        catalog = VariableCatalog(
            variables=(TemplateVariable(name="coupon", description="Coupon code"),)
        )
        editor, _ = _editor(catalog=catalog)
        editor.handle_input("@")
        assert editor.render(80)[1] == "→ {{coupon}}" + " " * 18 + "Coupon code"

    def test_plain_name_catalog_has_no_descriptions(self) -> None:
        editor, _ = _editor(catalog=["coupon"])
        editor.handle_input("@")
        assert editor.render(80)[1] == "→ {{coupon}}"
