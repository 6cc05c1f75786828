"""src/agentry/http/headers.py

Robust HTTP header management for Agentry.
"""

import base64
import binascii
import re
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    MutableMapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from agentry.exceptions import InvalidArgument
from agentry.http.dates import str2time, time2str
from agentry.http.header_words import split_header_words

__all__ = ["Headers", "HEADER_ORDER", "ENTITY_HEADERS"]

FieldValue = Union[str, int, Sequence[Union[str, int]]]

# "Good Practice" order of HTTP message headers:
#    - General-Headers
#    - Request-Headers
#    - Response-Headers
#    - Entity-Headers
HEADER_ORDER = (
    "Cache-Control", "Connection", "Date", "Pragma", "Trailer",
    "Transfer-Encoding", "Upgrade", "Via", "Warning",

    "Accept", "Accept-Charset", "Accept-Encoding", "Accept-Language",
    "Authorization", "Expect", "From", "Host",
    "If-Match", "If-Modified-Since", "If-None-Match", "If-Range",
    "If-Unmodified-Since", "Max-Forwards", "Proxy-Authorization", "Range",
    "Referer", "TE", "User-Agent",

    "Accept-Ranges", "Age", "ETag", "Location", "Proxy-Authenticate",
    "Retry-After", "Server", "Vary", "WWW-Authenticate",

    "Allow", "Content-Encoding", "Content-Language", "Content-Length",
    "Content-Location", "Content-MD5", "Content-Range", "Content-Type",
    "Expires", "Last-Modified",
)  # fmt: skip

ENTITY_HEADERS = frozenset(
    name.lower()
    for name in (
        "Allow", "Content-Encoding", "Content-Language", "Content-Length",
        "Content-Location", "Content-MD5", "Content-Range", "Content-Type",
        "Expires", "Last-Modified",
    )
)  # fmt: skip

INTERNAL_PREFIX = "_"
_UNKNOWN_RANK = 999

# Static ranking and casing of the well-known fields.
_header_rank: Dict[str, int] = {}
_standard_case: Dict[str, str] = {}
for _rank, _name in enumerate(HEADER_ORDER, start=1):
    _header_rank[_name.lower()] = _rank
    _standard_case[_name.lower()] = _name

_WORD_START = re.compile(r"\b(\w)")
_BASIC_CREDENTIALS = re.compile(r"^\s*Basic\s+(.*)$", re.IGNORECASE | re.DOTALL)


def _sort_key(key: str) -> Tuple[int, str]:
    return (_header_rank.get(key, _UNKNOWN_RANK), key)


def _as_values(value: FieldValue) -> List[str]:
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [str(value)]


def _date_property(name: str) -> property:
    def fget(self: "Headers") -> Optional[float]:
        return self._date_header(name)  # pylint: disable=protected-access

    def fset(self: "Headers", epoch: Optional[float]) -> None:
        self._set_date_header(name, epoch)  # pylint: disable=protected-access

    def fdel(self: "Headers") -> None:
        self.remove(name)

    return property(fget, fset, fdel, f"{name} as epoch seconds.")


def _text_property(name: str) -> property:
    def fget(self: "Headers") -> Optional[str]:
        return self._first(name)  # pylint: disable=protected-access

    def fset(self: "Headers", value: Optional[FieldValue]) -> None:
        if value is None:
            self.remove(name)
        else:
            self.set(name, value)

    def fdel(self: "Headers") -> None:
        self.remove(name)

    return property(fget, fset, fdel, f"First value of {name}.")


class Headers(MutableMapping[str, str]):
    """
    Case-insensitive, ordered collection of HTTP header fields.

    A field may hold several values. Item access and :meth:`get` join them
    with ``", "``; :meth:`get_all` returns the list. Iteration, :meth:`scan`
    and :meth:`as_string` visit the fields in the recommended "Good
    Practice" order (general, request, response, then entity headers,
    unknown fields last in alphabetical order) using their standard case,
    e.g. ``Content-Type`` or ``WWW-Authenticate``.

    An underscore may be used in place of a hyphen in field names
    (``Content_Type``) unless :attr:`translate_underscore` is turned off.
    Field names starting with ``_`` are then reserved for bookkeeping and
    never iterated or serialized.
    """

    __slots__ = ("_fields", "_names")

    translate_underscore = True

    def __init__(
        self,
        fields: Optional[
            Union[Mapping[str, FieldValue], Iterable[Tuple[str, FieldValue]]]
        ] = None,
    ):
        self._fields: Dict[str, List[str]] = {}
        self._names: Dict[str, str] = {}
        if fields:
            items = fields.items() if isinstance(fields, Mapping) else fields
            for name, value in items:
                self.set(name, value)

    # -- core ---------------------------------------------------------------

    def _field_key(self, name: str) -> str:
        if self.translate_underscore:
            name = name.replace("_", "-")
        if not name:
            raise InvalidArgument("Need a field name")
        return name.lower()

    def _learn_name(self, key: str, name: str) -> None:
        # Unknown fields keep the case this instance first saw them in.
        if key not in _standard_case and key not in self._names:
            if self.translate_underscore:
                name = name.replace("_", "-")
            self._names[key] = _WORD_START.sub(lambda m: m.group(1).upper(), name)

    def _display_name(self, key: str) -> str:
        return _standard_case.get(key) or self._names.get(key, key)

    def _header(
        self, name: str, value: Optional[FieldValue] = None, op: str = ""
    ) -> List[str]:
        key = self._field_key(name)
        old = list(self._fields.get(key, ()))
        if op == "init" and old:
            value = None
        if value is not None:
            new = old + _as_values(value) if op == "push" else _as_values(value)
            if new:
                self._fields[key] = new
                self._learn_name(key, name)
            else:
                self._fields.pop(key, None)
                self._names.pop(key, None)
        return old

    def header(self, name: str, value: Optional[FieldValue] = None) -> Optional[str]:
        """
        Get, and optionally replace, the value of a field.

        Args:
            name: Field name (case-insensitive).
            value: New value or list of values. None leaves the field as is.

        Returns:
            The previous values joined with ``", "``, or None.
        """
        old = self._header(name, value)
        return ", ".join(old) if old else None

    def set(self, name: str, value: FieldValue) -> List[str]:
        """Replace all values of a field, returning the old ones."""
        return self._header(name, value)

    def push(self, name: str, value: FieldValue) -> List[str]:
        """Append values to a field, creating it if needed."""
        return self._header(name, value, "push")

    def init(self, name: str, value: FieldValue) -> List[str]:
        """Set a field only when it has no value yet."""
        return self._header(name, value, "init")

    def remove(self, *names: str) -> List[str]:
        """
        Remove fields.

        Args:
            names: Field names (case-insensitive).

        Returns:
            All values that were removed, in argument order.
        """
        removed: List[str] = []
        for name in names:
            key = self._field_key(name)
            removed.extend(self._fields.pop(key, ()))
            self._names.pop(key, None)
        return removed

    def get(self, name: str, default: Any = None) -> Any:
        """
        Get header value.

        Args:
            name: Header name (case-insensitive).
            default: Default value if header not found.

        Returns:
            Comma-joined string for multiple values, or default if not found.
        """
        values = self.get_all(name)
        if not values:
            return default
        return ", ".join(values)

    def get_all(self, name: str) -> List[str]:
        """
        Get all values of a header.

        Args:
            name: Header name (case-insensitive).

        Returns:
            List of all values for the header, empty list if not found.
        """
        return list(self._fields.get(self._field_key(name), ()))

    # -- ordering and serialization -----------------------------------------

    def _visible_keys(self) -> List[str]:
        keys = [k for k in self._fields if not k.startswith(INTERNAL_PREFIX)]
        return sorted(keys, key=_sort_key)

    def field_names(self) -> List[str]:
        """Names of the present fields, in standard case and canonical order."""
        return [self._display_name(key) for key in self._visible_keys()]

    def scan(self, callback: Callable[[str, str], Any]) -> None:
        """
        Call ``callback(name, value)`` once for every field value.

        Fields are visited in canonical order with their standard case;
        a multi-valued field produces one call per value.
        """
        for key in self._visible_keys():
            name = self._display_name(key)
            for value in self._fields[key]:
                callback(name, value)

    def as_string(self, endl: str = "\n") -> str:
        """
        Format the fields as a MIME style header block.

        Embedded newlines in a value are turned into continuation lines
        and every line, the last one included, is terminated by ``endl``.
        """
        lines: List[str] = []

        def _format(name: str, value: str) -> None:
            if "\n" in value:
                value = value.rstrip()
                value = re.sub(r"\n\n+", "\n", value)
                value = re.sub(r"\n([^ \t])", r"\n \1", value)
                value = value.replace("\n", endl)
            lines.append(f"{name}: {value}")

        self.scan(_format)
        return "".join(line + endl for line in lines)

    def clone(self) -> "Headers":
        """Return an independent copy."""
        clone = Headers()
        self.scan(clone.push)
        return clone

    __copy__ = clone

    def remove_content_headers(self) -> "Headers":
        """
        Remove the entity headers (``Content-*``, ``Allow``, ``Expires``,
        ``Last-Modified``) and return them as a new collection.
        """
        removed = Headers()
        for key in list(self._fields):
            if key in ENTITY_HEADERS or key.startswith("content-"):
                removed.set(self._display_name(key), self._fields.pop(key))
                self._names.pop(key, None)
        return removed

    # -- mapping protocol ---------------------------------------------------

    def __getitem__(self, name: str) -> str:
        """Get header value (comma-joined if multiple)."""
        value = self.get(name)
        if value is None:
            raise KeyError(name)
        return value

    def __setitem__(self, name: str, value: FieldValue) -> None:  # type: ignore[override]
        self.set(name, value)

    def __delitem__(self, name: str) -> None:
        if not self.remove(name):
            raise KeyError(name)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        try:
            return bool(self._fields.get(self._field_key(name)))
        except InvalidArgument:
            return False

    def __iter__(self) -> Iterator[str]:
        return iter(self.field_names())

    def __len__(self) -> int:
        return len(self._visible_keys())

    def __str__(self) -> str:
        return self.as_string()

    def __repr__(self) -> str:
        return f"Headers({[(k, v) for k in self for v in self.get_all(k)]!r})"

    # -- convenience accessors ----------------------------------------------

    def _date_header(self, name: str) -> Optional[float]:
        values = self.get_all(name)
        return str2time(values[0]) if values else None

    def _set_date_header(self, name: str, epoch: Optional[float]) -> None:
        if epoch is None:
            self.remove(name)
        else:
            self.set(name, time2str(epoch))

    def _first(self, name: str) -> Optional[str]:
        values = self.get_all(name)
        return values[0] if values else None

    def _basic_auth(self, name: str) -> Optional[Tuple[str, str]]:
        value = self._first(name)
        if value is None:
            return None
        match = _BASIC_CREDENTIALS.match(value)
        if not match:
            return None
        try:
            decoded = base64.b64decode(match.group(1).strip()).decode("utf-8", "replace")
        except (binascii.Error, ValueError):
            return None
        user, _, password = decoded.partition(":")
        return user, password

    def _set_basic_auth(self, name: str, credentials: Optional[Tuple[str, ...]]) -> None:
        if credentials is None:
            self.remove(name)
            return
        user = credentials[0]
        password = credentials[1] if len(credentials) > 1 else ""
        if ":" in user:
            raise InvalidArgument("Basic authorization user name can't contain ':'")
        token = base64.b64encode(f"{user}:{password}".encode("utf-8")).decode("ascii")
        self.set(name, f"Basic {token}")

    @property
    def content_type(self) -> str:
        """Lowercased media type without parameters, ``""`` when absent."""
        value = self._first("Content-Type")
        if not value:
            return ""
        return value.lower().split(";", 1)[0].strip()

    @content_type.setter
    def content_type(self, value: Optional[str]) -> None:
        if value is None:
            self.remove("Content-Type")
        else:
            self.set("Content-Type", value)

    @property
    def content_type_params(self) -> Dict[str, Optional[str]]:
        """Parameters of the Content-Type field, names lowercased."""
        value = self._first("Content-Type")
        if not value:
            return {}
        words = split_header_words(value)
        if not words:
            return {}
        return {name.lower(): param for name, param in words[0][1:]}

    @property
    def authorization_basic(self) -> Optional[Tuple[str, str]]:
        """``(user, password)`` from a Basic Authorization field."""
        return self._basic_auth("Authorization")

    @authorization_basic.setter
    def authorization_basic(self, credentials: Optional[Tuple[str, ...]]) -> None:
        self._set_basic_auth("Authorization", credentials)

    @property
    def proxy_authorization_basic(self) -> Optional[Tuple[str, str]]:
        """``(user, password)`` from a Basic Proxy-Authorization field."""
        return self._basic_auth("Proxy-Authorization")

    @proxy_authorization_basic.setter
    def proxy_authorization_basic(self, credentials: Optional[Tuple[str, ...]]) -> None:
        self._set_basic_auth("Proxy-Authorization", credentials)

    date = _date_property("Date")
    expires = _date_property("Expires")
    if_modified_since = _date_property("If-Modified-Since")
    if_unmodified_since = _date_property("If-Unmodified-Since")
    last_modified = _date_property("Last-Modified")
    # Set on responses when they are received.
    client_date = _date_property("Client-Date")

    title = _text_property("Title")
    content_encoding = _text_property("Content-Encoding")
    content_language = _text_property("Content-Language")
    content_length = _text_property("Content-Length")
    user_agent = _text_property("User-Agent")
    server = _text_property("Server")
    from_ = _text_property("From")
    referer = _text_property("Referer")
    referrer = referer
    warning = _text_property("Warning")
    www_authenticate = _text_property("WWW-Authenticate")
    authorization = _text_property("Authorization")
    proxy_authenticate = _text_property("Proxy-Authenticate")
    proxy_authorization = _text_property("Proxy-Authorization")
