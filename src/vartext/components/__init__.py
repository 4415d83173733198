"""Terminal components."""

from vartext.components.suggestion_list import (
    SuggestionItem,
    SuggestionList,
    SuggestionListTheme,
)
from vartext.components.variable_editor import (
    VariableEditor,
    VariableEditorOptions,
    VariableEditorTheme,
)

__all__ = [
    "SuggestionItem",
    "SuggestionList",
    "SuggestionListTheme",
    "VariableEditor",
    "VariableEditorOptions",
    "VariableEditorTheme",
]
