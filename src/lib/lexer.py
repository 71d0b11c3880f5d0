"""
Pygments lexer for rucksack manifests

Highlights manifest source in diagnostics. Manifests are lax JSON, so on
top of the JSON tokens this also understands comments, unquoted keys and
single-quoted strings, and marks the grammar's known property names.

Token types:
- Keyword: Known manifest properties (textures, images, anchor, glob, ...)
- Name.Tag: Other object keys (texture, image and file names)
- String: String values
- Number: Numeric values
- Keyword.Constant: true, false, null
- Comment: // and /* */ comments
"""

import re

from pygments.lexer import RegexLexer, bygroups
from pygments.token import (
    Comment,
    Keyword,
    Name,
    Number,
    Punctuation,
    String,
    Text,
)


MANIFEST_PROPERTIES = (
    'textures', 'files', 'globFiles',
    'images', 'maxWidth', 'maxHeight', 'pow2',
    'anchor', 'path', 'x', 'y',
    'glob', 'prefix',
)


class ManifestLexer(RegexLexer):
    """
    Lexer for rucksack manifest files

    Example:
        {textures: {ui: {images: {ok: {path: 'ok.png'}}}}}

    Tokens:
        textures → Keyword
        ui → Name.Tag
        'ok.png' → String
    """

    name = 'Rucksack manifest'
    aliases = ['rucksack', 'rucksack-manifest']
    filenames = ['*.rucksack.json']
    flags = re.MULTILINE | re.DOTALL

    tokens = {
        'root': [
            (r'\s+', Text),
            (r'//.*?$', Comment.Single),
            (r'/\*.*?\*/', Comment.Multiline),

            # Known properties, quoted or bare, followed by a colon
            (r'(["\']?)(' + '|'.join(MANIFEST_PROPERTIES) + r')\b(["\']?)(\s*)(:)',
             bygroups(Punctuation, Keyword, Punctuation, Text, Punctuation)),

            # Other keys (entry names)
            (r'("(?:\\.|[^"\\])*"|\'(?:\\.|[^\'\\])*\'|[\w$]+)(\s*)(:)',
             bygroups(Name.Tag, Text, Punctuation)),

            (r'"(?:\\.|[^"\\])*"', String.Double),
            (r"'(?:\\.|[^'\\])*'", String.Single),
            (r'-?\d+(\.\d+)?([eE][+-]?\d+)?', Number),
            (r'\b(true|false|null)\b', Keyword.Constant),
            (r'[{}\[\],:]', Punctuation),
            (r'.', Text),
        ],
    }


def get_lexer() -> ManifestLexer:
    """
    Get the ManifestLexer instance

    Returns:
        ManifestLexer instance ready for use with Pygments
    """
    return ManifestLexer()
