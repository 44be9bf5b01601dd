"""ncq-tui: multi-line prompt editor with inline suggestions and scrolling."""

# Text model
from ncq.tui.buffer import TextBuffer

# Editor
from ncq.tui.editor import EditorOptions, EditorStatus, EditorTheme, PromptEditor

# Errors
from ncq.tui.errors import (
    ConfigurationError,
    EditorError,
    KeyBindingError,
    RenderError,
    SpanRangeError,
)

# Output
from ncq.tui.frame import Frame, FrameWriter, OutputSink

# Keybindings
from ncq.tui.keybindings import (
    DEFAULT_EDITOR_KEYBINDINGS,
    REQUIRED_ACTIONS,
    EditorAction,
    KeyBindings,
)

# Keyboard input handling
from ncq.tui.keys import KeyChord, chord_from_descriptor, chord_from_id, parse_chord

# Layout
from ncq.tui.line_mapper import Coordinate, WrappedLines, to_coordinate, to_offset, wrap
from ncq.tui.navigation import NavigationEngine

# Session
from ncq.tui.session import run_prompt

# Input buffering
from ncq.tui.stdin_buffer import StdinBuffer

# Suggestions
from ncq.tui.suggestions import Choice, SuggestionEngine, filter_choices

# Terminal
from ncq.tui.terminal import ProcessTerminal, Terminal, acquire_terminal

# Utilities
from ncq.tui.utils import truncate_to_width, visible_width

# Viewport
from ncq.tui.viewport import Viewport, scrollbar

__all__ = [
    # Text model
    "TextBuffer",
    # Editor
    "EditorOptions",
    "EditorStatus",
    "EditorTheme",
    "PromptEditor",
    # Errors
    "ConfigurationError",
    "EditorError",
    "KeyBindingError",
    "RenderError",
    "SpanRangeError",
    # Output
    "Frame",
    "FrameWriter",
    "OutputSink",
    # Keybindings
    "DEFAULT_EDITOR_KEYBINDINGS",
    "REQUIRED_ACTIONS",
    "EditorAction",
    "KeyBindings",
    # Keyboard input handling
    "KeyChord",
    "chord_from_descriptor",
    "chord_from_id",
    "parse_chord",
    # Layout
    "Coordinate",
    "NavigationEngine",
    "WrappedLines",
    "to_coordinate",
    "to_offset",
    "wrap",
    # Session
    "run_prompt",
    # Input buffering
    "StdinBuffer",
    # Suggestions
    "Choice",
    "SuggestionEngine",
    "filter_choices",
    # Terminal
    "ProcessTerminal",
    "Terminal",
    "acquire_terminal",
    # Utilities
    "truncate_to_width",
    "visible_width",
    # Viewport
    "Viewport",
    "scrollbar",
]
