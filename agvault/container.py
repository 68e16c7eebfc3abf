"""Binary container format.

Layout, little-endian throughout::

    u32 version
    u32 filename length   | filename (UTF-8)
    u32 mime type length  | mime type (UTF-8)
    u32 salt length       | salt
    u32 iv length         | iv
    u32 content length    | ciphertext || GCM tag
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import List, Tuple

from .config import DEFAULT_MIME_TYPE
from .errors import FormatError

CONTAINER_VERSION = 1
SALT_LENGTH = 16
IV_LENGTH = 12
TAG_LENGTH = 16
FIELD_COUNT = 5
HEADER_BYTES = 4 + 4 * FIELD_COUNT
_U32 = struct.Struct("<I")
_U32_MAX = 0xFFFFFFFF


@dataclass(frozen=True)
class EncryptedContainer:
    version: int
    original_filename: str
    original_mime_type: str
    salt: bytes
    iv: bytes
    encrypted_content: bytes

    @classmethod
    def create(
        cls,
        original_filename: str,
        original_mime_type: str,
        salt: bytes,
        iv: bytes,
        encrypted_content: bytes,
    ) -> "EncryptedContainer":
        return cls(
            version=CONTAINER_VERSION,
            original_filename=original_filename,
            original_mime_type=original_mime_type or DEFAULT_MIME_TYPE,
            salt=bytes(salt),
            iv=bytes(iv),
            encrypted_content=bytes(encrypted_content),
        )

    def encoded_size(self) -> int:
        return HEADER_BYTES + sum(len(part) for part in self._parts())

    def _parts(self) -> Tuple[bytes, ...]:
        return (
            self.original_filename.encode("utf-8"),
            self.original_mime_type.encode("utf-8"),
            self.salt,
            self.iv,
            self.encrypted_content,
        )


@dataclass(frozen=True)
class ContainerHeader:
    version: int
    original_filename: str
    original_mime_type: str
    salt_length: int
    iv_length: int
    content_length: int


def _pack_length_prefixed(version: int, *parts: bytes) -> bytes:
    total = 4 + 4 * len(parts) + sum(len(p) for p in parts)
    out = bytearray(total)
    mv = memoryview(out)
    _U32.pack_into(out, 0, version)
    offset = 4
    for part in parts:
        if len(part) > _U32_MAX:
            raise OverflowError("container field exceeds 4 GiB")
        _U32.pack_into(out, offset, len(part))
        offset += 4
        mv[offset:offset + len(part)] = part
        offset += len(part)
    return bytes(out)


def _unpack_length_prefixed(data: bytes, count: int) -> Tuple[int, Tuple[bytes, ...]]:
    mv = memoryview(data)
    total_len = len(mv)
    if total_len < 4:
        raise FormatError("Malformed container (missing version)")
    version = _U32.unpack_from(mv, 0)[0]
    if version != CONTAINER_VERSION:
        raise FormatError(f"Unsupported encryption version: {version}")
    offset = 4
    parts: List[bytes] = []
    for _ in range(count):
        if offset + 4 > total_len:
            raise FormatError("Malformed container (missing length)")
        length = _U32.unpack_from(mv, offset)[0]
        offset += 4
        if offset + length > total_len:
            raise FormatError("Malformed container (truncated field)")
        parts.append(bytes(mv[offset:offset + length]))
        offset += length
    if offset != total_len:
        raise FormatError("Malformed container (extra bytes)")
    return version, tuple(parts)


def _decode_text(raw: bytes, field: str) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise FormatError(f"Malformed container ({field} is not UTF-8)") from exc


def encode(container: EncryptedContainer) -> bytes:
    """Serialize ``container``; the result is exactly ``encoded_size()`` bytes."""
    return _pack_length_prefixed(container.version, *container._parts())


def decode(data: bytes) -> EncryptedContainer:
    """Parse a container, raising :class:`FormatError` on any malformation."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError("decode expects bytes")
    version, (filename, mime_type, salt, iv, content) = _unpack_length_prefixed(
        bytes(data), FIELD_COUNT
    )
    return EncryptedContainer(
        version=version,
        original_filename=_decode_text(filename, "filename"),
        original_mime_type=_decode_text(mime_type, "mime type"),
        salt=salt,
        iv=iv,
        encrypted_content=content,
    )


def peek_header(data: bytes) -> ContainerHeader:
    container = decode(data)
    return ContainerHeader(
        version=container.version,
        original_filename=container.original_filename,
        original_mime_type=container.original_mime_type,
        salt_length=len(container.salt),
        iv_length=len(container.iv),
        content_length=len(container.encrypted_content),
    )
