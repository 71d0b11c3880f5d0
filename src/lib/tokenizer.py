"""
Streaming tokenizer for lax JSON manifests

Turns manifest bytes into parse events (see models.events) one chunk at a
time. All lexical state lives on the Tokenizer instance, so the same input
split at any byte boundaries produces the same events.

Accepted syntax is JSON plus the relaxations manifests are usually written
with:
- // line comments and /* block comments */
- unquoted object keys (letters, digits, _ and $)
- single-quoted strings
- trailing commas in objects and arrays

Example:
    >>> tokenizer = Tokenizer()
    >>> events = tokenizer.feed(b'{textures: {}}')
    >>> [e.kind.name for e in events]
    ['BEGIN_OBJECT', 'STRING', 'BEGIN_OBJECT', 'END_OBJECT', 'END_OBJECT']
"""

import codecs
from enum import Enum, auto
from typing import List, Optional, Union

from ..models.events import Event, EventKind, ScalarValue
from .errors import TokenizeError


class Mode(Enum):
    VALUE = auto()
    KEY = auto()
    COLON = auto()
    AFTER = auto()
    DONE = auto()
    STRING = auto()
    ESCAPE = auto()
    UNICODE = auto()
    BARE = auto()
    NUMBER = auto()
    COMMENT_START = auto()
    LINE_COMMENT = auto()
    BLOCK_COMMENT = auto()
    BLOCK_COMMENT_END = auto()


ESCAPES = {
    'n': '\n',
    't': '\t',
    'r': '\r',
    'b': '\b',
    'f': '\f',
    '/': '/',
    '\\': '\\',
    '"': '"',
    "'": "'",
}

NUMBER_START = set('-0123456789')
NUMBER_CHARS = set('+-.0123456789eE')
HEX_DIGITS = set('0123456789abcdefABCDEF')
LITERALS = {'true': (EventKind.BOOLEAN, True), 'false': (EventKind.BOOLEAN, False), 'null': (EventKind.NULL, None)}


def bare_is(ch: str) -> bool:
    return ch.isalnum() or ch in '_$'


class Tokenizer:
    """
    Incremental lax-JSON tokenizer

    Attributes:
        line: Current 1-based line
        column: 1-based column of the last character consumed
        stack: Open containers, '{' or '['
        mode: Lexical mode for the next character
    """

    def __init__(self, max_value_size: int = 16384, max_depth: int = 64) -> None:
        self.max_value_size = max_value_size
        self.max_depth = max_depth
        self.decoder = codecs.getincrementaldecoder("utf-8")()
        self.mode = Mode.VALUE
        self.resume = Mode.VALUE
        self.stack: List[str] = []
        self.allow_close = False
        self.line = 1
        self.column = 0
        self.buffer: List[str] = []
        self.quote = ''
        self.is_key = False
        self.unicode_digits = ''
        self.high_surrogate: Optional[int] = None
        self.token_line = 0
        self.token_column = 0
        self.events: List[Event] = []

    def feed(self, chunk: Union[bytes, str]) -> List[Event]:
        """
        Consume a chunk of input

        Args:
            chunk: Raw bytes (decoded incrementally as UTF-8) or text

        Returns:
            Events completed by this chunk, in source order

        Raises:
            TokenizeError: On malformed input, positioned at the offending char
        """
        if isinstance(chunk, bytes):
            try:
                text = self.decoder.decode(chunk)
            except UnicodeDecodeError as e:
                raise self.error("invalid utf-8") from e
        else:
            text = chunk

        for ch in text:
            self.column += 1
            self.char_handle(ch)
            if ch == '\n':
                self.line += 1
                self.column = 0

        events, self.events = self.events, []
        return events

    def eof(self) -> List[Event]:
        """
        Signal end of input and flush any pending token

        Raises:
            TokenizeError: "unexpected EOF" if the document is incomplete
        """
        try:
            tail = self.decoder.decode(b'', final=True)
        except UnicodeDecodeError as e:
            raise self.error("invalid utf-8") from e
        events = self.feed(tail) if tail else []

        if self.mode is Mode.NUMBER:
            self.number_finish()
        elif self.mode is Mode.BARE:
            self.bare_finish()
        elif self.mode is Mode.LINE_COMMENT:
            self.mode = self.resume

        events.extend(self.events)
        self.events = []
        if self.mode is not Mode.DONE:
            raise self.error("unexpected EOF")
        return events

    # ------------------------------------------------------------------
    # helpers

    def error(self, message: str, at_token: bool = False) -> TokenizeError:
        if at_token:
            return TokenizeError(message, self.token_line, self.token_column)
        return TokenizeError(message, self.line, max(self.column, 1))

    def emit(self, kind: EventKind, value: ScalarValue = None, at_token: bool = False) -> None:
        if at_token:
            self.events.append(Event(kind, value, self.token_line, self.token_column))
        else:
            self.events.append(Event(kind, value, self.line, self.column))

    def token_start(self, mode: Mode, is_key: bool, first: str = '') -> None:
        self.token_line = self.line
        self.token_column = self.column
        self.buffer = [first] if first else []
        self.is_key = is_key
        self.mode = mode

    def buffer_push(self, ch: str) -> None:
        if len(self.buffer) >= self.max_value_size:
            raise self.error("exceeded max value size")
        self.buffer.append(ch)

    def value_complete(self) -> None:
        self.mode = Mode.AFTER if self.stack else Mode.DONE

    def container_begin(self, opener: str, kind: EventKind) -> None:
        if len(self.stack) >= self.max_depth:
            raise self.error("exceeded max stack")
        self.emit(kind)
        self.stack.append(opener)

    def container_end(self, kind: EventKind) -> None:
        self.emit(kind)
        self.stack.pop()
        self.value_complete()

    # ------------------------------------------------------------------
    # per-character state machine

    def char_handle(self, ch: str) -> None:
        mode = self.mode

        if mode is Mode.STRING:
            return self.string_char(ch)
        if mode is Mode.ESCAPE:
            return self.escape_char(ch)
        if mode is Mode.UNICODE:
            return self.unicode_char(ch)

        if mode is Mode.NUMBER:
            if ch in NUMBER_CHARS:
                return self.buffer_push(ch)
            self.number_finish()
        elif mode is Mode.BARE:
            if bare_is(ch):
                return self.buffer_push(ch)
            self.bare_finish()
        elif mode is Mode.COMMENT_START:
            if ch == '/':
                self.mode = Mode.LINE_COMMENT
            elif ch == '*':
                self.mode = Mode.BLOCK_COMMENT
            else:
                raise self.error("unexpected char")
            return
        elif mode is Mode.LINE_COMMENT:
            if ch == '\n':
                self.mode = self.resume
            return
        elif mode is Mode.BLOCK_COMMENT:
            if ch == '*':
                self.mode = Mode.BLOCK_COMMENT_END
            return
        elif mode is Mode.BLOCK_COMMENT_END:
            if ch == '/':
                self.mode = self.resume
            elif ch != '*':
                self.mode = Mode.BLOCK_COMMENT
            return

        # structural position: whitespace and comments are allowed anywhere
        if ch.isspace():
            return
        if ch == '/':
            self.resume = self.mode
            self.mode = Mode.COMMENT_START
            return

        mode = self.mode
        if mode is Mode.VALUE:
            self.value_char(ch)
        elif mode is Mode.KEY:
            self.key_char(ch)
        elif mode is Mode.COLON:
            if ch != ':':
                raise self.error("expected colon")
            self.mode = Mode.VALUE
            self.allow_close = False
        elif mode is Mode.AFTER:
            self.after_char(ch)
        else:
            raise self.error("expected EOF")

    def value_char(self, ch: str) -> None:
        if ch == '{':
            self.container_begin('{', EventKind.BEGIN_OBJECT)
            self.mode = Mode.KEY
        elif ch == '[':
            self.container_begin('[', EventKind.BEGIN_ARRAY)
            self.mode = Mode.VALUE
            self.allow_close = True
        elif ch == ']' and self.allow_close and self.stack and self.stack[-1] == '[':
            self.container_end(EventKind.END_ARRAY)
        elif ch in '"\'':
            self.token_start(Mode.STRING, is_key=False)
            self.quote = ch
        elif ch in NUMBER_START:
            self.token_start(Mode.NUMBER, is_key=False, first=ch)
        elif ch.isalpha():
            self.token_start(Mode.BARE, is_key=False, first=ch)
        else:
            raise self.error("unexpected char")

    def key_char(self, ch: str) -> None:
        if ch == '}':
            self.container_end(EventKind.END_OBJECT)
        elif ch in '"\'':
            self.token_start(Mode.STRING, is_key=True)
            self.quote = ch
        elif bare_is(ch):
            self.token_start(Mode.BARE, is_key=True, first=ch)
        else:
            raise self.error("unexpected char")

    def after_char(self, ch: str) -> None:
        top = self.stack[-1]
        if ch == ',':
            if top == '{':
                self.mode = Mode.KEY
            else:
                self.mode = Mode.VALUE
                self.allow_close = True
        elif ch == '}' and top == '{':
            self.container_end(EventKind.END_OBJECT)
        elif ch == ']' and top == '[':
            self.container_end(EventKind.END_ARRAY)
        else:
            raise self.error("unexpected char")

    def string_char(self, ch: str) -> None:
        if ch == '\\':
            self.mode = Mode.ESCAPE
            return
        if self.high_surrogate is not None:
            raise self.error("invalid unicode point")
        if ch == self.quote:
            self.string_finish()
        else:
            self.buffer_push(ch)

    def escape_char(self, ch: str) -> None:
        self.mode = Mode.STRING
        if ch == 'u':
            self.unicode_digits = ''
            self.mode = Mode.UNICODE
            return
        if self.high_surrogate is not None:
            raise self.error("invalid unicode point")
        if ch == '\n':
            # backslash-newline continues the string on the next line
            return
        self.buffer_push(ESCAPES.get(ch, ch))

    def unicode_char(self, ch: str) -> None:
        if ch not in HEX_DIGITS:
            raise self.error("invalid hex digit")
        self.unicode_digits += ch
        if len(self.unicode_digits) < 4:
            return

        code = int(self.unicode_digits, 16)
        self.mode = Mode.STRING
        if 0xD800 <= code < 0xDC00:
            if self.high_surrogate is not None:
                raise self.error("invalid unicode point")
            self.high_surrogate = code
        elif 0xDC00 <= code < 0xE000:
            if self.high_surrogate is None:
                raise self.error("invalid unicode point")
            combined = 0x10000 + ((self.high_surrogate - 0xD800) << 10) + (code - 0xDC00)
            self.high_surrogate = None
            self.buffer_push(chr(combined))
        else:
            if self.high_surrogate is not None:
                raise self.error("invalid unicode point")
            self.buffer_push(chr(code))

    def string_finish(self) -> None:
        self.emit(EventKind.STRING, ''.join(self.buffer), at_token=True)
        self.buffer = []
        if self.is_key:
            self.mode = Mode.COLON
        else:
            self.value_complete()

    def number_finish(self) -> None:
        text = ''.join(self.buffer)
        self.buffer = []
        try:
            value = float(text)
        except ValueError:
            raise self.error("unexpected char", at_token=True) from None
        self.emit(EventKind.NUMBER, value, at_token=True)
        self.value_complete()

    def bare_finish(self) -> None:
        word = ''.join(self.buffer)
        self.buffer = []
        if self.is_key:
            self.emit(EventKind.STRING, word, at_token=True)
            self.mode = Mode.COLON
            return
        if word not in LITERALS:
            raise self.error("unexpected char", at_token=True)
        kind, value = LITERALS[word]
        self.emit(kind, value, at_token=True)
        self.value_complete()
