"""Key -> action resolution and the mode state machine.

``map_key`` is a pure function of ``(key, mode, bindings)``. ``Dispatcher``
wraps it with the mutable ``ModeState``: it applies line edits in text-entry
modes, drops back to Normal after confirmations, cancellations and the one
key consumed by the ``g`` prefix, and lets the app open prompts and overlays
with ``enter``.
"""

from __future__ import annotations

from .actions import NO_ACTION, Action, ActionKind
from .bindings import BindingTable
from .modes import Mode, ModeState, PromptKind

_PROMPT_EDIT_KEYS = {
    "ESC": ActionKind.PROMPT_CANCEL,
    "ENTER": ActionKind.PROMPT_CONFIRM,
    "BACKSPACE": ActionKind.PROMPT_BACKSPACE,
    "DELETE": ActionKind.PROMPT_DELETE,
    "LEFT": ActionKind.PROMPT_LEFT,
    "RIGHT": ActionKind.PROMPT_RIGHT,
    "HOME": ActionKind.PROMPT_HOME,
    "END": ActionKind.PROMPT_END,
}

_SEARCH_KEYS = {
    "ESC": ActionKind.SEARCH_CANCEL,
    "ENTER": ActionKind.SEARCH_CONFIRM,
    "BACKSPACE": ActionKind.SEARCH_BACKSPACE,
    "CTRL_S": ActionKind.SEARCH_SAVE,
}

# Modes that return to Normal once one of these actions resolves.
_CLOSING_ACTIONS = frozenset(
    {
        ActionKind.SEARCH_CONFIRM,
        ActionKind.SEARCH_CANCEL,
        ActionKind.PROMPT_CONFIRM,
        ActionKind.PROMPT_CANCEL,
        ActionKind.DELETE_CONFIRM,
        ActionKind.DELETE_CANCEL,
        ActionKind.CHMOD_APPLY,
        ActionKind.OVERLAY_CLOSE,
        ActionKind.FAVORITES_SELECT,
        ActionKind.OPEN_WITH_SELECT,
        ActionKind.SAVED_SEARCH_SELECT,
        ActionKind.COMPRESS_SELECT,
    }
)

# Picker actions whose digit chords carry the picked number.
_INDEXED_ACTIONS = frozenset(
    {
        ActionKind.GO_TO_BREADCRUMB,
        ActionKind.SAVED_SEARCH_SELECT,
        ActionKind.COMPRESS_SELECT,
    }
)


def is_text_key(key: str) -> bool:
    """Whether ``key`` is a printable character rather than a named key."""
    return len(key) == 1 and key.isprintable()


def map_key(key: str, mode: Mode, bindings: BindingTable) -> Action:
    """Resolve one key token in ``mode`` without touching any state."""
    if not key:
        return NO_ACTION

    if mode is Mode.SEARCH:
        if key in _SEARCH_KEYS:
            return Action(_SEARCH_KEYS[key])
        if is_text_key(key):
            return Action(ActionKind.SEARCH_INPUT, text=key)
        return NO_ACTION

    if mode in (Mode.PROMPT, Mode.CHMOD):
        kind = _PROMPT_EDIT_KEYS.get(key)
        if kind is ActionKind.PROMPT_CONFIRM and mode is Mode.CHMOD:
            return Action(ActionKind.CHMOD_APPLY)
        if kind is not None:
            return Action(kind)
        if is_text_key(key):
            if mode is Mode.CHMOD and key not in "01234567":
                return NO_ACTION
            return Action(ActionKind.PROMPT_INPUT, text=key)
        return NO_ACTION

    if mode is Mode.DELETE_CONFIRM:
        if key in ("y", "Y"):
            return Action(ActionKind.DELETE_CONFIRM)
        return Action(ActionKind.DELETE_CANCEL)

    kind = bindings.lookup(mode, key)
    if kind is None:
        return NO_ACTION
    if kind in _INDEXED_ACTIONS and key.isdigit():
        return Action(kind, index=int(key))
    return Action(kind)


class Dispatcher:
    """Owns the input mode and turns key tokens into resolved actions."""

    def __init__(self, bindings: BindingTable | None = None) -> None:
        self.bindings = bindings if bindings is not None else BindingTable()
        self.state = ModeState()

    @property
    def mode(self) -> Mode:
        return self.state.mode

    def enter(self, mode: Mode, prompt: PromptKind | None = None, initial: str = "") -> None:
        """Switch modes, seeding the edit buffer for prompts and chmod."""
        self.state.reset(mode, prompt, initial)

    def leave(self) -> None:
        self.state.reset(Mode.NORMAL)

    def handle_key(self, key: str) -> Action:
        mode = self.state.mode
        action = map_key(key, mode, self.bindings)

        if mode is Mode.G_PREFIX:
            # exactly one key is consumed whatever it resolves to
            self.leave()
            return action
        if mode is Mode.SEARCH:
            return self._handle_search(action)
        if mode in (Mode.PROMPT, Mode.CHMOD):
            return self._handle_prompt(action)

        if action.kind in _CLOSING_ACTIONS:
            self.leave()
            return action
        if mode is Mode.HELP and action.kind is ActionKind.TOGGLE_HELP:
            self.leave()
            return action
        if mode is Mode.NORMAL:
            return self._handle_normal(action)
        return action

    def _handle_normal(self, action: Action) -> Action:
        if action.kind is ActionKind.G_PRESS:
            self.enter(Mode.G_PREFIX)
        elif action.kind is ActionKind.SEARCH_START:
            self.enter(Mode.SEARCH)
        elif action.kind is ActionKind.TOGGLE_HELP:
            self.enter(Mode.HELP)
        return action

    def _handle_search(self, action: Action) -> Action:
        state = self.state
        if action.kind is ActionKind.SEARCH_INPUT:
            state.insert(action.text)
            return Action(ActionKind.FILTER_CHANGED, text=state.buffer)
        if action.kind is ActionKind.SEARCH_BACKSPACE:
            if not state.buffer:
                return NO_ACTION
            state.backspace()
            return Action(ActionKind.FILTER_CHANGED, text=state.buffer)
        if action.kind in (ActionKind.SEARCH_CONFIRM, ActionKind.SEARCH_SAVE):
            text = state.buffer
            self.leave()
            return Action(action.kind, text=text)
        if action.kind is ActionKind.SEARCH_CANCEL:
            self.leave()
        return action

    def _handle_prompt(self, action: Action) -> Action:
        state = self.state
        kind = action.kind
        if kind is ActionKind.PROMPT_INPUT:
            state.insert(action.text)
        elif kind is ActionKind.PROMPT_BACKSPACE:
            state.backspace()
        elif kind is ActionKind.PROMPT_DELETE:
            state.delete()
        elif kind is ActionKind.PROMPT_LEFT:
            state.move(-1)
        elif kind is ActionKind.PROMPT_RIGHT:
            state.move(1)
        elif kind is ActionKind.PROMPT_HOME:
            state.home()
        elif kind is ActionKind.PROMPT_END:
            state.end()
        elif kind in (ActionKind.PROMPT_CONFIRM, ActionKind.CHMOD_APPLY):
            text, prompt = state.buffer, state.prompt
            self.leave()
            return Action(kind, text=text, prompt=prompt)
        elif kind is ActionKind.PROMPT_CANCEL:
            self.leave()
        return action


__all__ = [
    "is_text_key",
    "map_key",
    "Dispatcher",
]
