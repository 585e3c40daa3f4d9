"""Typed view of CBOR documents.

The attestation object, its statement and the credential public key are all
CBOR. ``cbor2`` does the byte level work; this module turns its output into a
closed set of immutable value types so that every consumer checks shapes
explicitly instead of probing arbitrary Python objects.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from io import BytesIO
from typing import Any, Iterator, Optional, Tuple, Union

import cbor2

from .errors import EncodingError

__all__ = [
    "Array",
    "Bool",
    "Bytes",
    "Document",
    "Float",
    "Integer",
    "Map",
    "NULL",
    "Null",
    "Tagged",
    "Text",
    "decode_document",
    "decode_document_prefix",
    "encode_document",
    "from_native",
]

LOGGER = logging.getLogger("webauthn_decoder.document")


class Document:
    """Base class of all CBOR document variants."""

    __slots__ = ()

    def to_native(self) -> Any:
        raise NotImplementedError

    def as_int(self) -> Optional[int]:
        return None

    def as_bool(self) -> Optional[bool]:
        return None

    def as_bytes(self) -> Optional[bytes]:
        return None

    def as_text(self) -> Optional[str]:
        return None

    def as_map(self) -> Optional["Map"]:
        return None

    def as_array(self) -> Optional["Array"]:
        return None

    @property
    def kind(self) -> str:
        return type(self).__name__.lower()


@dataclass(frozen=True)
class Null(Document):
    def to_native(self) -> Any:
        return None


NULL = Null()


@dataclass(frozen=True)
class Bool(Document):
    value: bool

    def to_native(self) -> Any:
        return self.value

    def as_bool(self) -> Optional[bool]:
        return self.value


@dataclass(frozen=True)
class Integer(Document):
    value: int

    def to_native(self) -> Any:
        return self.value

    def as_int(self) -> Optional[int]:
        return self.value


@dataclass(frozen=True)
class Float(Document):
    value: float

    def to_native(self) -> Any:
        return self.value


@dataclass(frozen=True)
class Bytes(Document):
    value: bytes

    def to_native(self) -> Any:
        return self.value

    def as_bytes(self) -> Optional[bytes]:
        return self.value


@dataclass(frozen=True)
class Text(Document):
    value: str

    def to_native(self) -> Any:
        return self.value

    def as_text(self) -> Optional[str]:
        return self.value


@dataclass(frozen=True)
class Array(Document):
    items: Tuple[Document, ...] = ()

    def to_native(self) -> Any:
        return [item.to_native() for item in self.items]

    def as_array(self) -> Optional["Array"]:
        return self

    def __iter__(self) -> Iterator[Document]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class Map(Document):
    """A CBOR map, kept in the order the entries were decoded."""

    entries: Tuple[Tuple[Document, Document], ...] = ()

    def to_native(self) -> Any:
        return {_native_key(key): value.to_native() for key, value in self.entries}

    def as_map(self) -> Optional["Map"]:
        return self

    def get(self, key: Document) -> Optional[Document]:
        for candidate, value in self.entries:
            if candidate == key:
                return value
        return None

    def get_int(self, index: int) -> Optional[Document]:
        """Look up the value stored under the integer key ``index``."""
        return self.get(Integer(index))

    def get_text(self, name: str) -> Optional[Document]:
        """Look up the value stored under the text key ``name``."""
        return self.get(Text(name))

    def keys(self) -> Iterator[Document]:
        return (key for key, _ in self.entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, Document) and self.get(key) is not None

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class Tagged(Document):
    tag: int
    value: Document

    def to_native(self) -> Any:
        return cbor2.CBORTag(self.tag, self.value.to_native())


def _native_key(key: Document) -> Any:
    """Convert ``key`` into a hashable value usable as a dict key."""
    if isinstance(key, Array):
        return tuple(_native_key(item) for item in key.items)
    if isinstance(key, Map):
        return cbor2.FrozenDict(
            {_native_key(name): _native_key(value) for name, value in key.entries}
        )
    if isinstance(key, Tagged):
        return cbor2.CBORTag(key.tag, _native_key(key.value))
    return key.to_native()


def from_native(value: Any) -> Document:
    """Convert a value produced by ``cbor2`` into a :class:`Document`."""

    if value is None or value is cbor2.undefined:
        return NULL
    # bool is a subclass of int and must be matched first.
    if isinstance(value, bool):
        return Bool(value)
    if isinstance(value, int):
        return Integer(value)
    if isinstance(value, float):
        return Float(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return Bytes(bytes(value))
    if isinstance(value, str):
        return Text(value)
    if isinstance(value, (list, tuple)):
        return Array(tuple(from_native(item) for item in value))
    if isinstance(value, cbor2.CBORTag):
        return Tagged(value.tag, from_native(value.value))
    if isinstance(value, Mapping):
        return Map(
            tuple((from_native(key), from_native(item)) for key, item in value.items())
        )
    raise EncodingError(f"Unsupported CBOR item of type {type(value).__name__}")


def decode_document_prefix(data: Union[bytes, bytearray, memoryview]) -> Tuple[Document, int]:
    """Decode the first CBOR item in ``data``.

    :return: The document and the number of bytes it occupied.
    """

    fp = BytesIO(data)
    try:
        value = cbor2.CBORDecoder(fp).decode()
        document = from_native(value)
    except cbor2.CBORDecodeError as exc:
        LOGGER.debug("Rejected CBOR input of %d bytes: %s", len(data), exc)
        raise EncodingError(f"Invalid CBOR data: {exc}") from exc
    except RecursionError as exc:
        raise EncodingError("CBOR data is nested too deeply") from exc
    return document, fp.tell()


def decode_document(data: Union[bytes, bytearray, memoryview]) -> Document:
    """Decode ``data`` as exactly one CBOR item."""

    document, consumed = decode_document_prefix(data)
    if consumed != len(data):
        raise EncodingError(
            f"Unexpected {len(data) - consumed} trailing bytes after CBOR data"
        )
    return document


def encode_document(document: Document, canonical: bool = False) -> bytes:
    """Serialise ``document`` back to CBOR."""

    try:
        return cbor2.dumps(document.to_native(), canonical=canonical)
    except (cbor2.CBOREncodeError, TypeError, ValueError, RuntimeError) as exc:
        raise EncodingError(f"Unable to encode CBOR data: {exc}") from exc
