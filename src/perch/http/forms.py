"""Request body fields and uploads.

``parse_form_data`` understands the two encodings HTML forms submit:
``application/x-www-form-urlencoded`` (decoded with ``urllib.parse``) and
``multipart/form-data`` (streamed through ``python-multipart``). Uploaded
files land in ``FormData.files`` as ``UploadFile`` objects, apart from the
string fields.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs

from perch._internal.multimap import MultiDict
from perch.errors import ConfigurationError

URLENCODED = "application/x-www-form-urlencoded"
MULTIPART = "multipart/form-data"


@dataclass(frozen=True, slots=True)
class UploadFile:
    """One uploaded file, held in memory."""

    filename: str
    content_type: str
    size: int
    _content: bytes

    def read(self) -> bytes:
        return self._content

    def save(self, path: Path) -> None:
        """Write the upload to *path* (the directory must already exist)."""
        path.write_bytes(self._content)

    def __repr__(self) -> str:
        return f"UploadFile({self.filename!r}, {self.content_type!r}, {self.size} bytes)"


class FormData(MultiDict):
    """Parsed body fields plus uploaded files.

    String fields behave like ``QueryParams``; uploads are reached through
    ``files`` and never appear among the fields.
    """

    __slots__ = ("_files",)

    def __init__(
        self,
        data: dict[str, list[str]] | None = None,
        files: dict[str, UploadFile] | None = None,
    ) -> None:
        super().__init__(data)
        object.__setattr__(self, "_files", files or {})

    @property
    def files(self) -> Mapping[str, UploadFile]:
        return self._files


def parse_form_data(body: bytes, content_type: str) -> FormData:
    """Decode *body* according to its Content-Type.

    Bodies in any other encoding (JSON, plain text, ...) carry no form
    fields and produce an empty ``FormData``.

    Raises:
        ConfigurationError: ``python-multipart`` is needed but missing.
        ValueError: The multipart body is malformed or has no boundary.
    """
    media_type = content_type.partition(";")[0].strip().lower()
    if media_type == URLENCODED:
        return FormData(parse_qs(body.decode("utf-8"), keep_blank_values=True))
    if media_type == MULTIPART:
        return _MultipartCollector(content_type).feed(body)
    return FormData()


def _multipart_api() -> Any:
    try:
        from python_multipart import multipart
    except ImportError:
        msg = (
            "Parsing multipart/form-data bodies requires 'python-multipart'. "
            "Install it with: pip install python-multipart"
        )
        raise ConfigurationError(msg) from None
    return multipart


class _MultipartCollector:
    """Callback target for ``python_multipart.MultipartParser``.

    Header names and values may arrive in several chunks, so each is
    buffered until the parser reports the end of that header.
    """

    def __init__(self, content_type: str) -> None:
        self._api = _multipart_api()
        _, options = self._api.parse_options_header(content_type)
        boundary = options.get(b"boundary")
        if not boundary:
            msg = "multipart/form-data body has no boundary parameter"
            raise ValueError(msg)
        self._boundary: bytes = boundary
        self.fields: dict[str, list[str]] = {}
        self.files: dict[str, UploadFile] = {}
        self._header_name = bytearray()
        self._header_value = bytearray()
        self._headers: dict[str, bytes] = {}
        self._content = bytearray()

    def feed(self, body: bytes) -> FormData:
        parser = self._api.MultipartParser(
            self._boundary,
            {
                "on_part_begin": self._part_begin,
                "on_header_field": self._header_field,
                "on_header_value": self._header_value_chunk,
                "on_header_end": self._header_end,
                "on_part_data": self._part_data,
                "on_part_end": self._part_end,
            },
        )
        parser.write(body)
        parser.finalize()
        return FormData(self.fields, self.files)

    # -- parser callbacks --

    def _part_begin(self) -> None:
        self._headers = {}
        self._content = bytearray()

    def _header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_name += data[start:end]

    def _header_value_chunk(self, data: bytes, start: int, end: int) -> None:
        self._header_value += data[start:end]

    def _header_end(self) -> None:
        name = self._header_name.decode("latin-1").lower()
        self._headers[name] = bytes(self._header_value)
        self._header_name = bytearray()
        self._header_value = bytearray()

    def _part_data(self, data: bytes, start: int, end: int) -> None:
        self._content += data[start:end]

    def _part_end(self) -> None:
        _, params = self._api.parse_options_header(self._headers.get("content-disposition", b""))
        name = params.get(b"name")
        if name is None:
            return
        field = name.decode("utf-8")
        filename = params.get(b"filename")
        if filename is None:
            text = self._content.decode("utf-8", errors="replace")
            self.fields.setdefault(field, []).append(text)
            return
        content = bytes(self._content)
        media_type = self._headers.get("content-type", b"application/octet-stream")
        self.files[field] = UploadFile(
            filename=filename.decode("utf-8"),
            content_type=media_type.decode("latin-1"),
            size=len(content),
            _content=content,
        )
