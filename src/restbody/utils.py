import os
import typing
import mimetypes
import filetype

CHUNK_SIZE = 65536
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def _int_to_urlenc() -> typing.Dict[int, bytes]:
    """Creates a mapping of ordinals to bytes encoded via url-encoding"""
    values = {}
    special = {0x2A, 0x2D, 0x2E, 0x5F}
    for byte in range(256):
        if (
            (0x61 <= byte <= 0x7A)
            or (0x41 <= byte <= 0x5A)
            or (0x30 <= byte <= 0x39)
            or (byte in special)
        ):  # Keep the ASCII
            values[byte] = bytes((byte,))
        elif byte == 0x020:  # Space -> '+'
            values[byte] = b"+"
        else:  # Percent-encoded
            values[byte] = b"%" + hex(byte)[2:].upper().zfill(2).encode()
    return values


INT_TO_URLENC = _int_to_urlenc()


def urlencode_bytes(value: str) -> bytes:
    return b"".join([INT_TO_URLENC[byte] for byte in value.encode("utf-8")])


def guess_content_type(data: bytes, name: typing.Optional[str] = None) -> str:
    """Guesses the content type of a body from its first bytes and
    falls back on the name of the file, then 'application/octet-stream'.
    """
    content_type = filetype.guess_mime(data) if data else None

    # Couldn't guess by the contents of the file, so
    # we try the name of the file as a last-ditch effort.
    if content_type is None and name:
        content_type, _ = mimetypes.guess_type(os.path.basename(name), strict=False)
    return content_type or DEFAULT_CONTENT_TYPE
