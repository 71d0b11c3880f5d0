"""
Manifest grammar as a flat state machine

The manifest grammar has a fixed depth and shape, so a single State value
is enough to know where we are: every state is entered from exactly one
enclosing construct, which also tells each closing event where to return.

    Manifest   := { textures?: Textures, files?: Files, globFiles?: Globs }
    Textures   := { <name>: TextureDef, ... }
    TextureDef := { maxWidth?: int, maxHeight?: int, pow2?: bool, images?: Images }
    Images     := { <name>: ImageDef, ... }
    ImageDef   := { anchor?: AnchorName | AnchorPoint, path: string }
    AnchorPoint:= { x: number, y: number }
    Files      := { <name>: { path: string }, ... }
    Globs      := [ { glob: string, prefix: string }, ... ]

transition() is pure: it maps (state, event) to the next state and at most
one effect for the session to carry out. It never touches drafts, the
filesystem or the bundle builder.
"""

import math
from enum import Enum, auto
from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

from ..models.events import Event, EventKind, ScalarValue
from ..models.manifest import NAMED_ANCHORS, Anchor, DraftKind
from .errors import GrammarViolation, ManifestError, UnknownKey, ValueConstraint


class State(Enum):
    START = auto()
    TOP_LEVEL_PROP = auto()
    DONE = auto()
    TEXTURES = auto()
    TEXTURE_NAME = auto()
    EXPECT_TEXTURE_OBJECT = auto()
    TEXTURE_PROP = auto()
    TEXTURE_MAX_WIDTH = auto()
    TEXTURE_MAX_HEIGHT = auto()
    TEXTURE_POW2 = auto()
    EXPECT_IMAGES_OBJECT = auto()
    IMAGE_NAME = auto()
    IMAGE_OBJECT_BEGIN = auto()
    IMAGE_PROP_NAME = auto()
    IMAGE_PROP_ANCHOR = auto()
    ANCHOR_PROP_NAME = auto()
    ANCHOR_X = auto()
    ANCHOR_Y = auto()
    IMAGE_PROP_PATH = auto()
    EXPECT_FILES_OBJECT = auto()
    FILE_NAME = auto()
    FILE_OBJECT_BEGIN = auto()
    FILE_PROP_NAME = auto()
    FILE_PROP_PATH = auto()
    EXPECT_GLOB_ARRAY = auto()
    GLOB_OBJECT = auto()
    GLOB_PROP_NAME = auto()
    GLOB_VALUE_GLOB = auto()
    GLOB_VALUE_PREFIX = auto()


# What each state is waiting for, used in "expected X, not Y" diagnostics
EXPECTS: Dict[State, str] = {
    State.START: "top-level object",
    State.TOP_LEVEL_PROP: "top level property or end of object",
    State.DONE: "end of input",
    State.TEXTURES: "textures object",
    State.TEXTURE_NAME: "texture name or end of textures",
    State.EXPECT_TEXTURE_OBJECT: "texture object",
    State.TEXTURE_PROP: "texture property or end of texture",
    State.TEXTURE_MAX_WIDTH: "integer",
    State.TEXTURE_MAX_HEIGHT: "integer",
    State.TEXTURE_POW2: "true or false",
    State.EXPECT_IMAGES_OBJECT: "images object",
    State.IMAGE_NAME: "image name or end of images",
    State.IMAGE_OBJECT_BEGIN: "image properties object",
    State.IMAGE_PROP_NAME: "image property or end of image",
    State.IMAGE_PROP_ANCHOR: "anchor name or anchor point object",
    State.ANCHOR_PROP_NAME: "anchor point property or end of anchor point",
    State.ANCHOR_X: "number",
    State.ANCHOR_Y: "number",
    State.IMAGE_PROP_PATH: "string",
    State.EXPECT_FILES_OBJECT: "files object",
    State.FILE_NAME: "file name or end of files",
    State.FILE_OBJECT_BEGIN: "file properties object",
    State.FILE_PROP_NAME: "file property or end of file",
    State.FILE_PROP_PATH: "string",
    State.EXPECT_GLOB_ARRAY: "globFiles array",
    State.GLOB_OBJECT: "glob object or end of globFiles",
    State.GLOB_PROP_NAME: "glob property or end of glob",
    State.GLOB_VALUE_GLOB: "string",
    State.GLOB_VALUE_PREFIX: "string",
}


@dataclass(frozen=True)
class OpenDraft:
    kind: DraftKind
    key: str = ""


@dataclass(frozen=True)
class RecordField:
    name: str
    value: Union[ScalarValue, Anchor]


@dataclass(frozen=True)
class CommitDraft:
    kind: DraftKind


@dataclass(frozen=True)
class ReportError:
    error: ManifestError


Effect = Union[OpenDraft, RecordField, CommitDraft, ReportError]
Transition = Tuple[State, Optional[Effect]]


# Property name -> next state, per property-name state
PROPERTIES: Dict[State, Tuple[str, Dict[str, State]]] = {
    State.TOP_LEVEL_PROP: ("top level property", {
        "textures": State.TEXTURES,
        "files": State.EXPECT_FILES_OBJECT,
        "globFiles": State.EXPECT_GLOB_ARRAY,
    }),
    State.TEXTURE_PROP: ("texture property", {
        "images": State.EXPECT_IMAGES_OBJECT,
        "maxWidth": State.TEXTURE_MAX_WIDTH,
        "maxHeight": State.TEXTURE_MAX_HEIGHT,
        "pow2": State.TEXTURE_POW2,
    }),
    State.IMAGE_PROP_NAME: ("image property", {
        "anchor": State.IMAGE_PROP_ANCHOR,
        "path": State.IMAGE_PROP_PATH,
    }),
    State.ANCHOR_PROP_NAME: ("anchor point property", {
        "x": State.ANCHOR_X,
        "y": State.ANCHOR_Y,
    }),
    State.FILE_PROP_NAME: ("file property", {
        "path": State.FILE_PROP_PATH,
    }),
    State.GLOB_PROP_NAME: ("glob property", {
        "glob": State.GLOB_VALUE_GLOB,
        "prefix": State.GLOB_VALUE_PREFIX,
    }),
}

# Object-opening states: state -> state inside the object
OBJECT_OPENS: Dict[State, State] = {
    State.START: State.TOP_LEVEL_PROP,
    State.TEXTURES: State.TEXTURE_NAME,
    State.EXPECT_TEXTURE_OBJECT: State.TEXTURE_PROP,
    State.EXPECT_IMAGES_OBJECT: State.IMAGE_NAME,
    State.IMAGE_OBJECT_BEGIN: State.IMAGE_PROP_NAME,
    State.EXPECT_FILES_OBJECT: State.FILE_NAME,
    State.FILE_OBJECT_BEGIN: State.FILE_PROP_NAME,
}

# Object-closing states: state -> (state after the close, draft committed)
OBJECT_CLOSES: Dict[State, Tuple[State, Optional[DraftKind]]] = {
    State.TOP_LEVEL_PROP: (State.DONE, None),
    State.TEXTURE_NAME: (State.TOP_LEVEL_PROP, None),
    State.TEXTURE_PROP: (State.TEXTURE_NAME, DraftKind.PAGE),
    State.IMAGE_NAME: (State.TEXTURE_PROP, None),
    State.IMAGE_PROP_NAME: (State.IMAGE_NAME, DraftKind.IMAGE),
    State.ANCHOR_PROP_NAME: (State.IMAGE_PROP_NAME, DraftKind.ANCHOR),
    State.FILE_NAME: (State.TOP_LEVEL_PROP, None),
    State.FILE_PROP_NAME: (State.FILE_NAME, DraftKind.FILE),
    State.GLOB_PROP_NAME: (State.GLOB_OBJECT, DraftKind.GLOB),
}

# Name states: a string here names a new draft
DRAFT_NAMES: Dict[State, Tuple[DraftKind, State]] = {
    State.TEXTURE_NAME: (DraftKind.PAGE, State.EXPECT_TEXTURE_OBJECT),
    State.IMAGE_NAME: (DraftKind.IMAGE, State.IMAGE_OBJECT_BEGIN),
    State.FILE_NAME: (DraftKind.FILE, State.FILE_OBJECT_BEGIN),
}

# String-valued fields: state -> (field name, state after the value)
STRING_FIELDS: Dict[State, Tuple[str, State]] = {
    State.IMAGE_PROP_PATH: ("path", State.IMAGE_PROP_NAME),
    State.FILE_PROP_PATH: ("path", State.FILE_PROP_NAME),
    State.GLOB_VALUE_GLOB: ("glob", State.GLOB_PROP_NAME),
    State.GLOB_VALUE_PREFIX: ("prefix", State.GLOB_PROP_NAME),
}


def violation(state: State, event: Event) -> Transition:
    """Reject an event that does not fit the current position"""
    if state is State.DONE:
        message = "unexpected content after EOF"
    else:
        message = f"expected {EXPECTS[state]}, not {event.kind.noun}"
    return state, ReportError(GrammarViolation(message, event.line, event.column))


def constraint(state: State, event: Event, message: str) -> Transition:
    return state, ReportError(ValueConstraint(message, event.line, event.column))


def transition(state: State, event: Event) -> Transition:
    """
    Advance the grammar by one event

    Args:
        state: Current grammar position
        event: Next parse event

    Returns:
        (next_state, effect) where effect is None, OpenDraft, RecordField,
        CommitDraft or ReportError. On ReportError the state is unchanged.

    Example:
        >>> transition(State.START, Event(EventKind.BEGIN_OBJECT, None, 1, 1))
        (<State.TOP_LEVEL_PROP: 2>, None)
    """
    kind = event.kind

    if kind is EventKind.BEGIN_OBJECT:
        if state in OBJECT_OPENS:
            return OBJECT_OPENS[state], None
        if state is State.IMAGE_PROP_ANCHOR:
            return State.ANCHOR_PROP_NAME, OpenDraft(DraftKind.ANCHOR)
        if state is State.GLOB_OBJECT:
            return State.GLOB_PROP_NAME, OpenDraft(DraftKind.GLOB)
        return violation(state, event)

    if kind is EventKind.BEGIN_ARRAY:
        if state is State.EXPECT_GLOB_ARRAY:
            return State.GLOB_OBJECT, None
        return violation(state, event)

    if kind is EventKind.END_OBJECT:
        if state in OBJECT_CLOSES:
            next_state, committed = OBJECT_CLOSES[state]
            return next_state, CommitDraft(committed) if committed else None
        return violation(state, event)

    if kind is EventKind.END_ARRAY:
        if state is State.GLOB_OBJECT:
            return State.TOP_LEVEL_PROP, None
        return violation(state, event)

    if kind is EventKind.STRING:
        return string_transition(state, event)

    if kind is EventKind.NUMBER:
        return number_transition(state, event)

    # booleans and null
    if state is State.TEXTURE_POW2:
        if kind is EventKind.BOOLEAN:
            return State.TEXTURE_PROP, RecordField("pow2", event.value)
        return constraint(state, event, "expected true or false")
    return violation(state, event)


def string_transition(state: State, event: Event) -> Transition:
    value = event.value

    if state in PROPERTIES:
        noun, allowed = PROPERTIES[state]
        if value in allowed:
            return allowed[value], None
        error = UnknownKey(f"unknown {noun}: {value}", event.line, event.column)
        return state, ReportError(error)

    if state in DRAFT_NAMES:
        draft_kind, next_state = DRAFT_NAMES[state]
        return next_state, OpenDraft(draft_kind, value)

    if state in STRING_FIELDS:
        name, next_state = STRING_FIELDS[state]
        return next_state, RecordField(name, value)

    if state is State.IMAGE_PROP_ANCHOR:
        if value not in NAMED_ANCHORS:
            return constraint(state, event, f"unknown anchor value: {value}")
        return State.IMAGE_PROP_NAME, RecordField("anchor", NAMED_ANCHORS[value])

    if state is State.TEXTURE_POW2:
        return constraint(state, event, "expected true or false")

    return violation(state, event)


def number_transition(state: State, event: Event) -> Transition:
    value = event.value

    if state in (State.TEXTURE_MAX_WIDTH, State.TEXTURE_MAX_HEIGHT):
        if not math.isfinite(value) or value != int(value):
            return constraint(state, event, "expected integer")
        name = "maxWidth" if state is State.TEXTURE_MAX_WIDTH else "maxHeight"
        return State.TEXTURE_PROP, RecordField(name, int(value))

    if state is State.ANCHOR_X:
        return State.ANCHOR_PROP_NAME, RecordField("x", value)
    if state is State.ANCHOR_Y:
        return State.ANCHOR_PROP_NAME, RecordField("y", value)

    if state is State.TEXTURE_POW2:
        return constraint(state, event, "expected true or false")

    return violation(state, event)
