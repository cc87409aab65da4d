"""Input layer: key decoding, modes, bindings, and action dispatch.

``read_key`` is the only part that touches the terminal; everything else is
pure data and can be driven from tests with plain key tokens.
"""

from .actions import NO_ACTION, Action, ActionCategory, ActionKind
from .bindings import DEFAULT_BINDINGS, BindingTable, normalize_chord
from .dispatcher import Dispatcher, map_key
from .modes import Mode, ModeState, PromptKind
from .reader import ESC_SEQUENCE_TIMEOUT_MS, read_key

__all__ = [
    "read_key",
    "ESC_SEQUENCE_TIMEOUT_MS",
    "Action",
    "ActionCategory",
    "ActionKind",
    "NO_ACTION",
    "BindingTable",
    "DEFAULT_BINDINGS",
    "normalize_chord",
    "Dispatcher",
    "map_key",
    "Mode",
    "ModeState",
    "PromptKind",
]
