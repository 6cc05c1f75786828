"""src/agentry/http/header_words.py

Parser and serializer for structured header values.

A structured value is a comma separated list of *words*, each word being a
semicolon separated list of ``name`` or ``name=value`` parameters, where a
value is either a bare token or a quoted string with backslash escapes::

    >>> words = split_header_words('foo="bar"; port="80,81"; discard, bar=baz')
    >>> words
    [[('foo', 'bar'), ('port', '80,81'), ('discard', None)], [('bar', 'baz')]]
    >>> join_header_words(words)
    'foo=bar; port="80,81"; discard, bar=baz'

The scanner works left to right over compiled patterns and never backtracks
over consumed input. Malformed input is tolerated rather than rejected.
"""

import re
from typing import List, Optional, Sequence, Tuple, Union

__all__ = [
    "HeaderWord",
    "QUOTED_STRING",
    "split_header_words",
    "join_header_words",
]

HeaderWord = List[Tuple[str, Optional[str]]]

# Body of a quoted string, shared with the ETag scanner.
QUOTED_STRING = r'"(?:[^"\\]|\\.)*"'

_TOKEN = re.compile(r"\s*(=*[^\s=;,]+)")
# The closing quote may be missing at the very end of the input.
_QUOTED_VALUE = re.compile(r'\s*=\s*"((?:[^"\\]|\\.)*)(?:"|\\?\Z)', re.DOTALL)
_UNQUOTED_VALUE = re.compile(r"\s*=\s*([^;,\s]*)")
_WORD_SEPARATOR = re.compile(r"\s*,")
_SKIP = re.compile(r"\s*;|\s+|=+")
_ESCAPED_CHAR = re.compile(r"\\(.)", re.DOTALL)

_NEEDS_QUOTING = re.compile(r'[^\x21-\x7e]|[()<>@,;:\\"/\[\]?={}]')
_QUOTE_SPECIALS = re.compile(r'["\\]')


def split_header_words(*values: str) -> List[HeaderWord]:
    """
    Split structured header values into words of ``(name, value)`` pairs.

    Repeated header instances are equivalent to a single comma joined
    value, so all ``values`` are joined with ``,`` before scanning.

    Args:
        values: Raw header values.

    Returns:
        One list of parameters per non-empty word. A parameter without
        ``=`` has ``None`` as its value.
    """
    text = ",".join(values)
    words: List[HeaderWord] = []
    current: HeaderWord = []
    pos = 0
    end = len(text)

    while pos < end:
        match = _TOKEN.match(text, pos)
        if match:
            name = match.group(1)
            pos = match.end()
            value: Optional[str] = None

            value_match = _QUOTED_VALUE.match(text, pos)
            if value_match:
                value = _ESCAPED_CHAR.sub(r"\1", value_match.group(1))
            else:
                value_match = _UNQUOTED_VALUE.match(text, pos)
                if value_match:
                    value = value_match.group(1)

            if value_match:
                pos = value_match.end()
            current.append((name, value))
            continue

        match = _WORD_SEPARATOR.match(text, pos)
        if match:
            if current:
                words.append(current)
                current = []
            pos = match.end()
            continue

        match = _SKIP.match(text, pos)
        # A lone "=" without a name in front of it is dropped.
        pos = match.end() if match else pos + 1

    if current:
        words.append(current)
    return words


def _quote(value: str) -> str:
    return '"' + _QUOTE_SPECIALS.sub(r"\\\g<0>", value) + '"'


def join_header_words(
    words: Sequence[Union[Sequence[Tuple[str, Optional[str]]], Tuple[str, Optional[str]]]],
) -> str:
    """
    Render words of ``(name, value)`` pairs back into a header value.

    Values that are empty or contain separators, whitespace, control or
    non-ASCII characters are quoted; everything else is emitted as a bare
    token. A flat sequence of pairs is treated as a single word.

    Args:
        words: Words as produced by :func:`split_header_words`.

    Returns:
        The canonical header value.
    """
    if words and isinstance(words[0], tuple) and isinstance(words[0][0], str):
        words = [words]  # type: ignore[list-item]

    rendered = []
    for word in words:
        params = []
        for name, value in word:  # type: ignore[misc]
            if value is None:
                params.append(name)
            elif not value or _NEEDS_QUOTING.search(value):
                params.append(f"{name}={_quote(value)}")
            else:
                params.append(f"{name}={value}")
        if params:
            rendered.append("; ".join(params))
    return ", ".join(rendered)
