"""Reader and writer for the data-notation subset used by lockfiles.

Supported values: ``nil``, ``true``, ``false``, integers, floats, strings,
keywords (``:name``), symbols, arrays/tuples (``@[...]``, ``[...]``,
``(...)``) and structs/tables (``{...}``, ``@{...}``). Keywords and symbols
load as plain strings; structs load as dicts with string keys.
"""

import re
from typing import Any

KEYWORD_PATTERN = re.compile(r'^[A-Za-z_][A-Za-z0-9_\-]*$')
NUMBER_PATTERN = re.compile(r'^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$')
DELIMITERS = set('()[]{}"@')

ESCAPES = {'n': '\n', 't': '\t', 'r': '\r', '0': '\0', '"': '"', '\\': '\\', 'e': '\x1b', 'f': '\f', 'v': '\v'}
REVERSE_ESCAPES = {'\n': 'n', '\t': 't', '\r': 'r', '\0': '0', '"': '"', '\\': '\\'}


class JDNError(ValueError):
    """Raised on malformed input."""


class Keyword(str):
    """A string written as a keyword (``:name``) instead of a quoted string."""

    __slots__ = ()


def _dump_string(value: str) -> str:
    escaped = ''.join(f'\\{REVERSE_ESCAPES[ch]}' if ch in REVERSE_ESCAPES else ch for ch in value)
    return f'"{escaped}"'


def _dump_key(key: Any) -> str:
    if isinstance(key, str) and KEYWORD_PATTERN.match(key):
        return f':{key}'
    return _dump_value(key, 0)


def _dump_value(value: Any, depth: int) -> str:
    if value is None:
        return 'nil'
    if value is True:
        return 'true'
    if value is False:
        return 'false'
    if isinstance(value, Keyword):
        if not KEYWORD_PATTERN.match(value):
            msg = f'not a valid keyword: {value!r}'
            raise JDNError(msg)
        return f':{value}'
    if isinstance(value, str):
        return _dump_string(value)
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, dict):
        pairs = ' '.join(f'{_dump_key(k)} {_dump_value(v, depth + 1)}' for k, v in value.items())
        return f'{{{pairs}}}'
    if isinstance(value, (list, tuple)):
        if not value:
            return '@[]'
        pad = '  ' * (depth + 1)
        items = '\n'.join(f'{pad}{_dump_value(item, depth + 1)}' for item in value)
        return f'@[\n{items}]'
    msg = f'cannot encode {type(value).__name__}'
    raise JDNError(msg)


def dumps(value: Any) -> str:
    """Encode ``value``; the output always ends with a newline."""
    return _dump_value(value, 0) + '\n'


class _Reader:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def error(self, message: str) -> JDNError:
        line = self.text.count('\n', 0, self.pos) + 1
        return JDNError(f'{message} (line {line})')

    def skip_space(self) -> None:
        while self.pos < len(self.text):
            ch = self.text[self.pos]
            if ch == '#':
                end = self.text.find('\n', self.pos)
                self.pos = len(self.text) if end == -1 else end + 1
            elif ch.isspace() or ch == ',':
                self.pos += 1
            else:
                return

    def peek(self) -> str:
        self.skip_space()
        if self.pos >= len(self.text):
            raise self.error('unexpected end of input')
        return self.text[self.pos]

    def read(self) -> Any:
        ch = self.peek()
        if ch == '@':
            self.pos += 1
            nxt = self.text[self.pos : self.pos + 1]
            if nxt not in ('[', '(', '{'):
                raise self.error('expected collection after @')
            return self.read()
        if ch in '[(':
            return self.read_sequence(']' if ch == '[' else ')')
        if ch == '{':
            return self.read_struct()
        if ch == '"':
            return self.read_string()
        if ch in ')]}':
            raise self.error(f'unexpected {ch!r}')
        return self.read_atom()

    def read_sequence(self, close: str) -> list[Any]:
        self.pos += 1
        items = []
        while self.peek() != close:
            items.append(self.read())
        self.pos += 1
        return items

    def read_struct(self) -> dict[Any, Any]:
        self.pos += 1
        result = {}
        while self.peek() != '}':
            key = self.read()
            if self.peek() == '}':
                raise self.error('struct has an odd number of forms')
            if isinstance(key, (list, dict)):
                raise self.error('unhashable struct key')
            result[key] = self.read()
        self.pos += 1
        return result

    def read_string(self) -> str:
        self.pos += 1
        chars = []
        while True:
            if self.pos >= len(self.text):
                raise self.error('unterminated string')
            ch = self.text[self.pos]
            self.pos += 1
            if ch == '"':
                return ''.join(chars)
            if ch == '\\':
                esc = self.text[self.pos : self.pos + 1]
                self.pos += 1
                if esc not in ESCAPES:
                    raise self.error(f'unknown escape \\{esc}')
                chars.append(ESCAPES[esc])
            else:
                chars.append(ch)

    def read_atom(self) -> Any:
        start = self.pos
        while self.pos < len(self.text):
            ch = self.text[self.pos]
            if ch.isspace() or ch in DELIMITERS or ch == ',':
                break
            self.pos += 1
        token = self.text[start : self.pos]
        if token == 'nil':
            return None
        if token == 'true':
            return True
        if token == 'false':
            return False
        if NUMBER_PATTERN.match(token):
            return float(token) if any(c in token for c in '.eE') else int(token)
        if token.startswith(':'):
            return Keyword(token[1:])
        return token


def loads(text: str) -> Any:
    """Decode exactly one value from ``text``."""
    reader = _Reader(text)
    value = reader.read()
    reader.skip_space()
    if reader.pos != len(text):
        raise reader.error('trailing data after value')
    return value


__all__ = ['JDNError', 'Keyword', 'dumps', 'loads']
