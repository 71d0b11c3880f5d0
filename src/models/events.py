"""
Token event models

Events are what the tokenizer hands to the manifest interpreter: one per
structural token or scalar value, each stamped with the source position of
the token's first character.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Union


class EventKind(Enum):
    """
    Kinds of events produced by the tokenizer

    Object keys arrive as STRING events; the interpreter's grammar position
    tells keys and values apart.
    """
    BEGIN_OBJECT = "begin object"
    BEGIN_ARRAY = "begin array"
    END_OBJECT = "end object"
    END_ARRAY = "end array"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"

    @property
    def noun(self) -> str:
        """Short name used in diagnostics ("expected ..., not <noun>")"""
        return _NOUNS[self]


_NOUNS = {
    EventKind.BEGIN_OBJECT: "object",
    EventKind.BEGIN_ARRAY: "array",
    EventKind.END_OBJECT: "end of object",
    EventKind.END_ARRAY: "end of array",
    EventKind.STRING: "string",
    EventKind.NUMBER: "number",
    EventKind.BOOLEAN: "boolean",
    EventKind.NULL: "null",
}


ScalarValue = Union[str, float, bool, None]


@dataclass(frozen=True)
class Event:
    """
    A single parse event

    Attributes:
        kind: What kind of token this is
        value: Scalar payload (str, float or bool); None for structural
               tokens and for null
        line: 1-based source line of the token start
        column: 1-based source column of the token start

    Example:
        For source '{"textures": {}}':
        Event(EventKind.BEGIN_OBJECT, None, 1, 1)
        Event(EventKind.STRING, "textures", 1, 2)
    """
    kind: EventKind
    value: ScalarValue = None
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        if self.kind in (EventKind.STRING, EventKind.NUMBER, EventKind.BOOLEAN):
            return f"{self.kind.value}: {self.value!r}"
        return self.kind.value
