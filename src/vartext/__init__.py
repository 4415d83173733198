"""vartext: template text editing with atomic ``{{variable}}`` chips."""

# Catalog
from vartext.catalog import (
    DEFAULT_CATALOG,
    SAMPLE_TEMPLATE_DATA,
    TemplateVariable,
    VariableCatalog,
    load_catalog,
)

# Components
from vartext.components import (
    SuggestionItem,
    SuggestionList,
    SuggestionListTheme,
    VariableEditor,
    VariableEditorOptions,
    VariableEditorTheme,
)

# Atomic deletion
from vartext.deletion import (
    atomic_span_after,
    atomic_span_before,
    handle_backspace,
    handle_forward_delete,
)

# Errors
from vartext.exceptions import CatalogError, VartextError

# Keybindings
from vartext.keybindings import (
    DEFAULT_EDITOR_KEYBINDINGS,
    EditorAction,
    EditorKeybindingsManager,
    get_editor_keybindings,
    set_editor_keybindings,
)

# Keyboard input handling
from vartext.keys import Key, KeyId, is_key_release, matches_key

# Mention autocomplete
from vartext.mention import (
    DEFAULT_TRIGGER,
    MentionState,
    MentionStateMachine,
    filter_candidates,
)

# Editable nodes
from vartext.nodes import SEPARATOR, Caret, EditableNode, TextNode, VariableNode

# Editable surface
from vartext.surface import EditableSurface, clean_pasted_text

# Template parsing and serialization
from vartext.template import (
    Segment,
    TextSegment,
    VariableSegment,
    extract_variables,
    format_variable,
    parse,
    render_template,
    serialize,
    serialize_single_line,
    unknown_variables,
)

__all__ = [
    # Catalog
    "DEFAULT_CATALOG",
    "SAMPLE_TEMPLATE_DATA",
    "TemplateVariable",
    "VariableCatalog",
    "load_catalog",
    # Components
    "SuggestionItem",
    "SuggestionList",
    "SuggestionListTheme",
    "VariableEditor",
    "VariableEditorOptions",
    "VariableEditorTheme",
    # Atomic deletion
    "atomic_span_after",
    "atomic_span_before",
    "handle_backspace",
    "handle_forward_delete",
    # Errors
    "CatalogError",
    "VartextError",
    # Keybindings
    "DEFAULT_EDITOR_KEYBINDINGS",
    "EditorAction",
    "EditorKeybindingsManager",
    "get_editor_keybindings",
    "set_editor_keybindings",
    # Keyboard input handling
    "Key",
    "KeyId",
    "is_key_release",
    "matches_key",
    # Mention autocomplete
    "DEFAULT_TRIGGER",
    "MentionState",
    "MentionStateMachine",
    "filter_candidates",
    # Editable nodes
    "SEPARATOR",
    "Caret",
    "EditableNode",
    "TextNode",
    "VariableNode",
    # Editable surface
    "EditableSurface",
    "clean_pasted_text",
    # Template parsing and serialization
    "Segment",
    "TextSegment",
    "VariableSegment",
    "extract_variables",
    "format_variable",
    "parse",
    "render_template",
    "serialize",
    "serialize_single_line",
    "unknown_variables",
]
