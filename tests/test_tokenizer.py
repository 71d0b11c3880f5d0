"""
Tokenizer tests - lax JSON to parse events

Covers event kinds and values, source positions, the lax syntax manifests
are written in, chunk-boundary independence, and malformed input.
"""

import pytest

from rucksack.lib.errors import TokenizeError
from rucksack.lib.tokenizer import Tokenizer
from rucksack.models.events import EventKind


def tokenize(source, chunk_size=None, **kwargs):
    """Tokenize a whole document, optionally in fixed-size byte chunks"""
    tokenizer = Tokenizer(**kwargs)
    data = source.encode("utf-8") if isinstance(source, str) else source
    events = []
    if chunk_size is None:
        events.extend(tokenizer.feed(data))
    else:
        for i in range(0, len(data), chunk_size):
            events.extend(tokenizer.feed(data[i:i + chunk_size]))
    events.extend(tokenizer.eof())
    return events


def kinds(events):
    return [event.kind for event in events]


class TestBasicEvents:
    """Test event kinds and scalar values"""

    def test_empty_object(self):
        """{} is a begin/end pair"""
        events = tokenize("{}")
        assert kinds(events) == [EventKind.BEGIN_OBJECT, EventKind.END_OBJECT]

    def test_keys_arrive_as_strings(self):
        """Object keys and string values are both STRING events"""
        events = tokenize('{"path": "a.png"}')
        assert kinds(events) == [
            EventKind.BEGIN_OBJECT,
            EventKind.STRING,
            EventKind.STRING,
            EventKind.END_OBJECT,
        ]
        assert events[1].value == "path"
        assert events[2].value == "a.png"

    def test_numbers_are_floats(self):
        """Numbers carry float values, including exponents and negatives"""
        events = tokenize("[256, 256.5, -3, 1e2]")
        values = [e.value for e in events if e.kind is EventKind.NUMBER]
        assert values == [256.0, 256.5, -3.0, 100.0]

    def test_literals(self):
        """true, false and null"""
        events = tokenize("[true, false, null]")
        assert kinds(events)[1:4] == [EventKind.BOOLEAN, EventKind.BOOLEAN, EventKind.NULL]
        assert [e.value for e in events[1:4]] == [True, False, None]

    def test_escapes(self):
        """Standard escapes, \\u escapes and surrogate pairs"""
        events = tokenize(r'["a\nb\u00e9\ud83d\ude00\"q"]')
        assert events[1].value == 'a\nbé\U0001F600"q'

    def test_nested_arrays_and_objects(self):
        """Containers nest and close in order"""
        events = tokenize('{"g": [{"glob": "*"}]}')
        assert kinds(events) == [
            EventKind.BEGIN_OBJECT,
            EventKind.STRING,
            EventKind.BEGIN_ARRAY,
            EventKind.BEGIN_OBJECT,
            EventKind.STRING,
            EventKind.STRING,
            EventKind.END_OBJECT,
            EventKind.END_ARRAY,
            EventKind.END_OBJECT,
        ]


class TestPositions:
    """Test line/column stamping"""

    def test_token_start_positions(self):
        """Each event is stamped with its first character's position"""
        events = tokenize('{\n  "a": 1\n}')
        positions = [(e.line, e.column) for e in events]
        assert positions == [(1, 1), (2, 3), (2, 8), (3, 1)]

    def test_positions_survive_chunking(self):
        """Byte-at-a-time feeding yields the same positions"""
        source = '{\n  "textures": {\n    "ui": {"maxWidth": 64}\n  }\n}\n'
        whole = tokenize(source)
        split = tokenize(source, chunk_size=1)
        assert whole == split


class TestLaxSyntax:
    """Test the relaxations manifests rely on"""

    def test_comments_bare_keys_single_quotes_trailing_commas(self):
        """All lax features in one document"""
        source = "{// c\n a: 'x', /* b */ b: [1, 2,], }"
        events = tokenize(source)
        assert kinds(events) == [
            EventKind.BEGIN_OBJECT,
            EventKind.STRING,
            EventKind.STRING,
            EventKind.STRING,
            EventKind.BEGIN_ARRAY,
            EventKind.NUMBER,
            EventKind.NUMBER,
            EventKind.END_ARRAY,
            EventKind.END_OBJECT,
        ]
        assert [e.value for e in events if e.kind is EventKind.STRING] == ["a", "x", "b"]

    def test_trailing_comment(self):
        """A line comment after the document is fine without a final newline"""
        events = tokenize("{} // done")
        assert kinds(events) == [EventKind.BEGIN_OBJECT, EventKind.END_OBJECT]


class TestStreaming:
    """Test chunk-boundary independence"""

    @pytest.mark.parametrize("chunk_size", [1, 2, 3, 5, 8])
    def test_chunking_does_not_change_events(self, chunk_size):
        """Any chunk size produces the same events as one feed"""
        source = "{textures: {'übersicht': {pow2: true, maxWidth: 1024,}}, files: {}}"
        assert tokenize(source, chunk_size=chunk_size) == tokenize(source)

    def test_split_utf8_sequence(self):
        """A multi-byte character split across chunks decodes once"""
        data = '["ü"]'.encode("utf-8")
        tokenizer = Tokenizer()
        events = []
        for i in range(len(data)):
            events.extend(tokenizer.feed(data[i:i + 1]))
        events.extend(tokenizer.eof())
        assert events[1].value == "ü"


class TestMalformedInput:
    """Test tokenizer errors and their positions"""

    def test_expected_colon(self):
        """A key must be followed by a colon"""
        with pytest.raises(TokenizeError) as exc:
            tokenize('{"a" 1}')
        assert exc.value.message == "expected colon"
        assert (exc.value.line, exc.value.column) == (1, 6)

    def test_content_after_document(self):
        """Only one top-level value is allowed"""
        with pytest.raises(TokenizeError) as exc:
            tokenize('{"a": 1} x')
        assert exc.value.message == "expected EOF"
        assert exc.value.column == 10

    def test_unexpected_eof(self):
        """Input ending inside a container"""
        with pytest.raises(TokenizeError, match="unexpected EOF"):
            tokenize('{"a": ')

    def test_unknown_bare_word(self):
        """Bare words are only allowed as keys or literals"""
        with pytest.raises(TokenizeError) as exc:
            tokenize("[yes]")
        assert exc.value.message == "unexpected char"
        assert exc.value.column == 2

    def test_invalid_hex_digit(self):
        """\\u must be followed by four hex digits"""
        with pytest.raises(TokenizeError, match="invalid hex digit"):
            tokenize(r'["\uzz00"]')

    def test_lone_low_surrogate(self):
        """A low surrogate without a high one is not a code point"""
        with pytest.raises(TokenizeError, match="invalid unicode point"):
            tokenize(r'["\ude00"]')

    def test_max_depth(self):
        """Nesting beyond max_depth is rejected"""
        with pytest.raises(TokenizeError) as exc:
            Tokenizer(max_depth=2).feed(b"[[[")
        assert exc.value.message == "exceeded max stack"
        assert exc.value.column == 3

    def test_max_value_size(self):
        """Scalars longer than max_value_size are rejected"""
        with pytest.raises(TokenizeError, match="exceeded max value size"):
            Tokenizer(max_value_size=3).feed(b'["abcd"]')

    def test_bad_number(self):
        """A lone minus is not a number"""
        with pytest.raises(TokenizeError, match="unexpected char"):
            tokenize("[-]")
