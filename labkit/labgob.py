"""Checked serialisation for values sent over RPC or persisted as state.

Values are written as length-prefixed records. Every record is a
self-contained copy, so a decoded value never shares references with the
value that was encoded.

Two kinds of mistake are reported on standard output and counted:

* a dataclass field whose name does not start with an upper-case letter;
* decoding into an object whose fields already hold non-default values.
"""

from __future__ import annotations

import base64
import dataclasses
import json
import struct
import threading
import typing
from typing import Any

_lock = threading.Lock()
_error_count = 0
_checked: set = set()
_types_by_name: dict[str, type] = {}
_names_by_type: dict[type, str] = {}
_explicit: set[type] = set()

_HEADER = struct.Struct(">I")
_SCALARS = (bool, int, float, str, bytes, bytearray)


class LabgobError(Exception):
    """Base class for encoding and decoding failures."""


class EncodingError(LabgobError, TypeError):
    """A value cannot be encoded."""


class DecodingError(LabgobError, ValueError):
    """A record cannot be decoded into the requested target."""


def error_count() -> int:
    """Return how many problems have been reported so far."""
    with _lock:
        return _error_count


def register(value: Any) -> None:
    """Register the type of ``value`` (or ``value`` itself, if a type) under its default name."""
    _check_value(value)
    cls = value if isinstance(value, type) else type(value)
    _register(_default_name(cls), cls, explicit=True)


def register_name(name: str, value: Any) -> None:
    """Register the type of ``value`` (or ``value`` itself, if a type) under ``name``."""
    _check_value(value)
    cls = value if isinstance(value, type) else type(value)
    _register(name, cls, explicit=True)


class LabEncoder:
    """Writes checked values as records to a binary writer."""

    def __init__(self, writer: typing.BinaryIO) -> None:
        self._writer = writer

    def encode(self, value: Any) -> None:
        """Check ``value`` and append it to the stream."""
        _check_value(value)
        tree = _to_tree(value)
        payload = json.dumps(tree, separators=(",", ":")).encode("utf-8")
        self._writer.write(_HEADER.pack(len(payload)) + payload)


class LabDecoder:
    """Reads records written by :class:`LabEncoder` from a binary reader."""

    def __init__(self, reader: typing.BinaryIO) -> None:
        self._reader = reader

    def decode(self, into: Any) -> Any:
        """Read the next value.

        ``into`` is either a type (or type hint) the value must match, or a
        dataclass instance whose fields are overwritten in place. The decoded
        value is returned. Raises ``EOFError`` at the end of the stream.
        """
        _check_value(into)
        _check_default(into)
        header = self._read_exact(_HEADER.size, at_start=True)
        (length,) = _HEADER.unpack(header)
        payload = self._read_exact(length, at_start=False)
        try:
            tree = json.loads(payload.decode("utf-8"))
        except ValueError as exc:
            raise DecodingError(f"labgob: malformed record: {exc}") from exc
        return _conform(_from_tree(tree), into)

    def _read_exact(self, size: int, *, at_start: bool) -> bytes:
        chunks = bytearray()
        while len(chunks) < size:
            chunk = self._reader.read(size - len(chunks))
            if not chunk:
                break
            chunks.extend(chunk)
        if not chunks and at_start and size:
            raise EOFError("labgob: no more records")
        if len(chunks) < size:
            raise DecodingError("labgob: truncated record")
        return bytes(chunks)


def _default_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def _register(name: str, cls: type, *, explicit: bool) -> str:
    with _lock:
        holder = _types_by_name.get(name)
        if holder is not None and holder is not cls and holder in _explicit:
            raise ValueError(
                f"labgob: name {name!r} is already registered for {holder.__qualname__}"
            )
        current = _names_by_type.get(cls)
        if current is not None and current != name and cls in _explicit:
            if explicit:
                raise ValueError(
                    f"labgob: {cls.__qualname__} is already registered as {current!r}"
                )
            return current
        _types_by_name[name] = cls
        _names_by_type[cls] = name
        if explicit:
            _explicit.add(cls)
        return name


def _name_for(cls: type) -> str:
    with _lock:
        current = _names_by_type.get(cls)
    if current is not None:
        return current
    try:
        return _register(_default_name(cls), cls, explicit=False)
    except ValueError as exc:
        raise EncodingError(str(exc)) from exc


def _report(message: str) -> None:
    global _error_count
    print(message)
    with _lock:
        _error_count += 1


def _check_value(value: Any) -> None:
    if isinstance(value, type) or typing.get_origin(value) is not None:
        _check_type(value)
        return
    _check_type(type(value))
    if dataclasses.is_dataclass(value):
        for field in dataclasses.fields(value):
            _check_nested(getattr(value, field.name))
    elif isinstance(value, (list, tuple)):
        for item in value:
            _check_nested(item)
    elif isinstance(value, dict):
        for key, item in value.items():
            _check_nested(key)
            _check_nested(item)


def _check_nested(value: Any) -> None:
    if value is None or isinstance(value, _SCALARS):
        return
    _check_value(value)


def _field_hints(cls: type) -> dict[str, Any]:
    # Annotations kept as text are skipped; their values are still checked.
    return {
        field.name: field.type
        for field in dataclasses.fields(cls)
        if not isinstance(field.type, str)
    }


def _check_type(tp: Any) -> None:
    try:
        with _lock:
            if tp in _checked:
                return
            _checked.add(tp)
    except TypeError:
        return

    if (
        isinstance(tp, type)
        and typing.get_origin(tp) is None
        and dataclasses.is_dataclass(tp)
    ):
        hints = _field_hints(tp)
        for field in dataclasses.fields(tp):
            if not field.name[:1].isupper():
                _report(
                    f"labgob error: lower-case field {field.name} of {tp.__name__} "
                    "in RPC or persist/snapshot will break your Raft"
                )
            hint = hints.get(field.name)
            if hint is not None:
                _check_type(hint)
        return

    for arg in typing.get_args(tp):
        if arg is not Ellipsis and not isinstance(arg, list):
            _check_type(arg)


def _check_default(value: Any) -> None:
    if value is None or isinstance(value, type) or typing.get_origin(value) is not None:
        return
    _check_default1(value, 1, "")


def _check_default1(value: Any, depth: int, name: str) -> None:
    global _error_count
    if depth > 3:
        return
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        for field in dataclasses.fields(value):
            qualified = f"{name}.{field.name}" if name else field.name
            _check_default1(getattr(value, field.name), depth + 1, qualified)
        return
    if isinstance(value, (bool, int, float, str)) and value:
        with _lock:
            first = _error_count < 1
            _error_count += 1
        if first:
            what = name or type(value).__name__
            print(
                "labgob warning: Decoding into a non-default variable/field "
                f"{what} may not work"
            )


def _to_tree(value: Any) -> Any:
    if value is None or isinstance(value, (bool, str)):
        return value
    if type(value) in (int, float):
        return value
    if isinstance(value, (bytes, bytearray)):
        return {"bytes": base64.b64encode(bytes(value)).decode("ascii")}
    if isinstance(value, list):
        return {"list": [_to_tree(item) for item in value]}
    if isinstance(value, tuple):
        return {"tuple": [_to_tree(item) for item in value]}
    if isinstance(value, dict):
        return {"map": [[_to_tree(k), _to_tree(v)] for k, v in value.items()]}
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            "struct": _name_for(type(value)),
            "fields": {
                field.name: _to_tree(getattr(value, field.name))
                for field in dataclasses.fields(value)
            },
        }
    raise EncodingError(f"labgob: type {type(value).__name__} cannot be encoded")


def _from_tree(node: Any) -> Any:
    if node is None or isinstance(node, (bool, int, float, str)):
        return node
    if isinstance(node, dict):
        if "bytes" in node:
            return base64.b64decode(node["bytes"])
        if "list" in node:
            return [_from_tree(item) for item in node["list"]]
        if "tuple" in node:
            return tuple(_from_tree(item) for item in node["tuple"])
        if "map" in node:
            return {_from_tree(k): _from_tree(v) for k, v in node["map"]}
        if "struct" in node:
            return _build_struct(node["struct"], node.get("fields", {}))
    raise DecodingError("labgob: malformed record")


def _build_struct(name: str, raw_fields: dict[str, Any]) -> Any:
    with _lock:
        cls = _types_by_name.get(name)
    if cls is None:
        raise DecodingError(f"labgob: type {name!r} is not registered")
    known = {field.name: field for field in dataclasses.fields(cls)}
    values = {key: _from_tree(item) for key, item in raw_fields.items() if key in known}
    try:
        obj = cls(**{key: item for key, item in values.items() if known[key].init})
    except TypeError as exc:
        raise DecodingError(f"labgob: cannot build {name!r}: {exc}") from exc
    for key, item in values.items():
        if not known[key].init:
            object.__setattr__(obj, key, item)
    return obj


def _conform(value: Any, into: Any) -> Any:
    if into is None or into is Any:
        return value
    origin = typing.get_origin(into)
    if origin is not None:
        if isinstance(origin, type) and not isinstance(value, origin):
            raise DecodingError(
                f"labgob: cannot decode {type(value).__name__} into {into}"
            )
        return value
    if isinstance(into, type):
        return _coerce(value, into)
    if dataclasses.is_dataclass(into):
        if type(value) is not type(into):
            raise DecodingError(
                f"labgob: cannot decode {type(value).__name__} into {type(into).__name__}"
            )
        try:
            for field in dataclasses.fields(into):
                setattr(into, field.name, getattr(value, field.name))
        except dataclasses.FrozenInstanceError:
            return value
        return into
    return _coerce(value, type(into))


def _coerce(value: Any, target: type) -> Any:
    if target is object:
        return value
    if target is float and type(value) is int:
        return float(value)
    if isinstance(value, target) and not (target is int and isinstance(value, bool)):
        return value
    raise DecodingError(
        f"labgob: cannot decode {type(value).__name__} into {target.__name__}"
    )