"""
Multipart decoding over a fully-buffered request body.

The body is read completely before parsing starts, then served to a pull
loop driving python-multipart's `MultipartParser`. The loop keeps reading
until the first part is complete, so an empty read is not treated as the
end of the stream: the cursor serves a bounded number of empty reads once
the buffer is drained and only then reports EOF.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, MultipartState, parse_options_header

from statics.api.errors import ParseError

logger = logging.getLogger(__name__)

# Empty reads served after the buffer is drained before reporting EOF
EOF_RETRIES = 2
CHUNK_SIZE = 64 * 1024


class EofCursor:
    """Blocking reader over in-memory bytes with a retry budget at the end"""

    def __init__(self, body: bytes, retries: int = EOF_RETRIES):
        self._body = memoryview(body)
        self._pos = 0
        self.retries = retries

    @property
    def remaining(self) -> int:
        return len(self._body) - self._pos

    def read(self, size: int = -1) -> bytes:
        """
        Read up to `size` bytes.

        Once the buffer is drained, each call spends one retry and returns
        b"". Reads that return data never replenish the budget.

        Raises:
            EOFError: when the buffer is drained and no retries are left
        """
        remaining = self.remaining
        if remaining == 0:
            if self.retries > 0:
                self.retries -= 1
                return b""
            raise EOFError("Unexpected EOF")

        if size is None or size < 0:
            size = remaining
        n = min(size, remaining)
        chunk = self._body[self._pos:self._pos + n].tobytes()
        self._pos += n
        return chunk


class MultipartRequest:
    """Request method, headers and buffered body as seen by the decoder"""

    def __init__(self, method: str, headers: Mapping[str, str], body: bytes, retries: int = EOF_RETRIES):
        self.method = method.upper()
        self.headers = {key.lower(): value for key, value in headers.items()}
        self.body = EofCursor(body, retries=retries)

    def resolve_boundary(self) -> Optional[str]:
        """
        Boundary of a `POST` with a `multipart/form-data; boundary=...`
        content type, None otherwise.
        """
        if self.method != "POST":
            return None

        content_type = self.headers.get("content-type")
        if not content_type:
            return None

        mime, params = parse_options_header(content_type)
        if mime.strip().lower() != b"multipart/form-data":
            return None

        boundary = params.get(b"boundary")
        if not boundary:
            return None
        return boundary.decode("latin-1")

    def read(self, size: int = -1) -> bytes:
        return self.body.read(size)


@dataclass
class FilePart:
    """First entry of a multipart body"""
    headers: Dict[str, str] = field(default_factory=dict)
    data: bytes = b""

    @property
    def content_type(self) -> Optional[str]:
        return self.headers.get("content-type")

    @property
    def subtype(self) -> Optional[str]:
        """Subtype of the part's content type, e.g. `png` for `image/png`"""
        if not self.content_type:
            return None
        mime, _ = parse_options_header(self.content_type)
        _, _, subtype = mime.decode("latin-1").strip().partition("/")
        return subtype or None

    def _disposition_param(self, name: bytes) -> Optional[str]:
        disposition = self.headers.get("content-disposition")
        if not disposition:
            return None
        _, params = parse_options_header(disposition)
        value = params.get(name)
        return value.decode("latin-1") if value is not None else None

    @property
    def field_name(self) -> Optional[str]:
        return self._disposition_param(b"name")

    @property
    def filename(self) -> Optional[str]:
        return self._disposition_param(b"filename")


class _FirstPartCollector:
    """Parser callbacks that keep the headers and data of the first part"""

    def __init__(self):
        self.part = FilePart()
        self.parts_seen = 0
        self.complete = False
        self._data = bytearray()
        self._header_field = bytearray()
        self._header_value = bytearray()

    @property
    def _in_first_part(self) -> bool:
        return self.parts_seen == 1 and not self.complete

    def on_part_begin(self):
        self.parts_seen += 1

    def on_header_field(self, data: bytes, start: int, end: int):
        if self._in_first_part:
            self._header_field += data[start:end]

    def on_header_value(self, data: bytes, start: int, end: int):
        if self._in_first_part:
            self._header_value += data[start:end]

    def on_header_end(self):
        if self._in_first_part:
            name = bytes(self._header_field).decode("latin-1").strip().lower()
            self.part.headers[name] = bytes(self._header_value).decode("latin-1").strip()
        self._header_field.clear()
        self._header_value.clear()

    def on_part_data(self, data: bytes, start: int, end: int):
        if self._in_first_part:
            self._data += data[start:end]

    def on_part_end(self):
        if self.parts_seen == 1:
            self.part.data = bytes(self._data)
            self.complete = True

    def on_end(self):
        self.complete = True

    def callbacks(self) -> dict:
        return {
            "on_part_begin": self.on_part_begin,
            "on_header_field": self.on_header_field,
            "on_header_value": self.on_header_value,
            "on_header_end": self.on_header_end,
            "on_part_data": self.on_part_data,
            "on_part_end": self.on_part_end,
            "on_end": self.on_end,
        }


def read_file_field(request: MultipartRequest, chunk_size: int = CHUNK_SIZE) -> FilePart:
    """
    Decode the first entry of a multipart request.

    Args:
        request: Buffered request to decode
        chunk_size: Bytes requested from the body per read

    Returns:
        FilePart with the entry's headers and raw bytes

    Raises:
        ParseError: if the boundary, the entry or its content type is missing,
            or the body ends before the entry does
    """
    boundary = request.resolve_boundary()
    if boundary is None:
        raise ParseError("Couldn't convert request body to multipart")

    collector = _FirstPartCollector()
    parser = MultipartParser(boundary, callbacks=collector.callbacks())
    try:
        while not collector.complete and parser.state != MultipartState.END:
            parser.write(request.read(chunk_size))
    except EOFError as e:
        raise ParseError("Multipart body ended before the first entry was complete") from e
    except MultipartParseError as e:
        raise ParseError(f"Failed to parse multipart body: {e}") from e

    if collector.parts_seen == 0:
        raise ParseError("Parsed multipart, but couldn't read the next entry")

    part = collector.part
    if not part.content_type:
        raise ParseError("Parsed and read entry, but couldn't read content-type")

    logger.debug(f"Read multipart entry {part.field_name!r} ({len(part.data)} bytes, {part.content_type})")
    return part
