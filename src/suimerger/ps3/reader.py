"""Pull-style reader over the ``<ins>`` elements of a PS3 XML export."""

from __future__ import annotations

import io
from collections import deque
from collections.abc import Iterator
from pathlib import Path
from types import TracebackType
from typing import IO, Any
from xml.parsers import expat

from suimerger.config import get_logger
from suimerger.exceptions import MalformedInstructionStreamError

logger = get_logger(__name__)

INSTRUCTION_TAG = "ins"

_QUOTES = b"\"'"
_TAG_CLOSE = ord(">")
_SLASH = ord("/")


def _tag_end(buffer: bytearray, start: int) -> int:
    """Return the index just past the ``>`` closing the tag at ``start``."""
    quote = None
    for i in range(start, len(buffer)):
        byte = buffer[i]
        if quote is not None:
            if byte == quote:
                quote = None
        elif byte in _QUOTES:
            quote = byte
        elif byte == _TAG_CLOSE:
            return i + 1
    return len(buffer)


class PS3InstructionReader:
    """Walk a PS3 instruction stream one ``ins`` element at a time.

    The PS3 exports only carry meaningful content inside ``ins`` elements.
    Any other non-whitespace text, or a processing instruction, means the
    input is not what we think it is, so the reader refuses to continue
    rather than silently dropping data. Element boundaries, whitespace,
    the XML declaration and comments are skipped.

    ``outer_xml`` returns the element exactly as it appears in the input.
    Only the bytes from the start of the outermost open ``ins`` element
    onwards are buffered, so long exports are read in constant memory.

    Example:
        with PS3InstructionReader.from_string(chunk) as reader:
            while reader.advance_to_next_instruction():
                print(reader.get_attribute("type"))
    """

    def __init__(self, stream: IO[str] | IO[bytes], owns_stream: bool = False) -> None:
        """Create a reader over an open text or binary stream.

        Args:
            stream: Stream to read XML from, consumed line by line
            owns_stream: Close the stream when the reader is closed
        """
        self._stream = stream
        self._owns_stream = owns_stream
        self._parser: Any = None
        # Text streams are re-encoded as UTF-8 before parsing
        self._encoding = "utf-8"
        self._buffer = bytearray()
        self._buffer_offset = 0
        self._last_event_index = 0
        # (start index, attributes) of each open ins element
        self._open: list[tuple[int, dict[str, str]]] = []
        self._queue: deque[tuple[str, Any]] = deque()
        self._events = self._iter_events()
        self._text: list[str] = []
        self._attributes: dict[str, str] | None = None
        self._source: str | None = None

    @classmethod
    def from_string(cls, xml: str) -> PS3InstructionReader:
        """Create a reader over an in-memory XML string."""
        return cls(io.StringIO(xml), owns_stream=True)

    @classmethod
    def open(cls, path: Path | str) -> PS3InstructionReader:
        """Open an XML file for reading, closed again with the reader."""
        return cls(Path(path).open("rb"), owns_stream=True)

    def __enter__(self) -> PS3InstructionReader:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Release the underlying stream if this reader opened it."""
        if self._owns_stream:
            self._stream.close()

    def advance_to_next_instruction(self) -> bool:
        """Move to the next ``ins`` element.

        Returns:
            True if positioned on an instruction, False once the stream is
            exhausted.

        Raises:
            MalformedInstructionStreamError: On non-whitespace text, processing
                instructions or XML syntax errors.
        """
        self._attributes = None
        self._source = None
        for event, value in self._events:
            if event == "text":
                self._text.append(value)
                continue
            self._check_text()
            if event == "pi":
                self._reject("processing instruction", value)
            elif event == "instruction":
                self._attributes, self._source = value
                return True
        self._check_text()
        return False

    def get_attribute(self, name: str) -> str | None:
        """Return an attribute of the current instruction, or None if absent."""
        if self._attributes is None:
            raise RuntimeError("Reader is not positioned on an instruction")
        return self._attributes.get(name)

    def outer_xml(self) -> str:
        """Return the source text of the current instruction element."""
        if self._source is None:
            raise RuntimeError("Reader is not positioned on an instruction")
        return self._source

    def _iter_events(self) -> Iterator[tuple[str, Any]]:
        try:
            while True:
                while self._queue:
                    yield self._queue.popleft()
                line = self._stream.readline()
                if not line:
                    break
                self._feed(line)
            self._feed(b"", final=True)
            while self._queue:
                yield self._queue.popleft()
        except expat.ExpatError as e:
            raise MalformedInstructionStreamError(
                message=f"Invalid XML in PS3 instruction stream: {e}",
                hint="Check that the PS3 section was exported completely",
                details={"position": (e.lineno, e.offset)},
            ) from e

    def _feed(self, data: str | bytes, final: bool = False) -> None:
        if self._parser is None:
            self._parser = self._create_parser(text=isinstance(data, str))
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._buffer += data
        self._parser.Parse(data, final)

        # Bytes before the outermost open instruction, or before the last
        # reported markup, are never sliced again.
        keep_from = self._open[0][0] if self._open else self._last_event_index
        del self._buffer[: keep_from - self._buffer_offset]
        self._buffer_offset = keep_from

    def _create_parser(self, text: bool) -> Any:
        parser = expat.ParserCreate("utf-8" if text else None)
        parser.buffer_text = True
        if not text:
            parser.XmlDeclHandler = self._on_declaration
        parser.StartElementHandler = self._on_start
        parser.EndElementHandler = self._on_end
        parser.CharacterDataHandler = self._on_text
        parser.ProcessingInstructionHandler = self._on_pi
        # comments are section banners in the merged scripts
        parser.CommentHandler = self._on_comment
        return parser

    def _on_declaration(
        self, version: str, encoding: str | None, standalone: int
    ) -> None:
        self._encoding = encoding or "utf-8"
        self._last_event_index = self._parser.CurrentByteIndex

    def _on_start(self, name: str, attributes: dict[str, str]) -> None:
        index = self._parser.CurrentByteIndex
        self._last_event_index = index
        if name == INSTRUCTION_TAG:
            self._open.append((index, attributes))
        self._queue.append(("start", name))

    def _on_end(self, name: str) -> None:
        index = self._parser.CurrentByteIndex
        self._last_event_index = index
        if name != INSTRUCTION_TAG:
            self._queue.append(("end", name))
            return

        start, attributes = self._open.pop()
        start_tag_end = _tag_end(self._buffer, start - self._buffer_offset)
        if self._buffer[start_tag_end - 2] == _SLASH:
            end = start_tag_end
        else:
            end = _tag_end(self._buffer, index - self._buffer_offset)
        source = self._buffer[start - self._buffer_offset : end].decode(
            self._encoding
        )
        self._queue.append(("instruction", (attributes, source)))

    def _on_text(self, data: str) -> None:
        self._queue.append(("text", data))

    def _on_pi(self, target: str, data: str) -> None:
        self._last_event_index = self._parser.CurrentByteIndex
        self._queue.append(("pi", f"{target} {data}"))

    def _on_comment(self, data: str) -> None:
        self._last_event_index = self._parser.CurrentByteIndex

    def _check_text(self) -> None:
        """Reject the text collected since the last tag."""
        text = "".join(self._text)
        self._text.clear()
        self._reject("text node", text)

    def _reject(self, kind: str, value: str | None) -> None:
        value = (value or "").strip()
        if not value:
            return
        logger.error(
            "Unexpected content in PS3 instruction stream", kind=kind, value=value
        )
        raise MalformedInstructionStreamError(
            message=f"Non-empty {kind} found outside of an instruction: {value!r}",
            hint="PS3 exports may only contain text inside <ins> attributes",
            details={"kind": kind, "value": value},
        )
