"""Tests for the pull reader over PS3 instruction streams."""

import io

import pytest

from suimerger.exceptions import MalformedInstructionStreamError, ParseError
from suimerger.ps3.reader import PS3InstructionReader

SECTION = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    "<PS3_SECTION>  <!-- ~~~~~~~~~~~~~~~~START~~~~~~~~~~~~~~~~ -->\n"
    '<ins type="BGM_PLAY" bgm_file="bgm01"></ins>\n'
    '<ins type="BGM_FADE" duration="60"/>\n'
    "</PS3_SECTION> <!-- ~~~~~~~~~~~~~~~~~END~~~~~~~~~~~~~~~~~ -->\n"
)


def read_types(xml: str) -> list[str | None]:
    types = []
    with PS3InstructionReader.from_string(xml) as reader:
        while reader.advance_to_next_instruction():
            types.append(reader.get_attribute("type"))
    return types


class TestAdvance:
    """Test moving through the instructions of a stream."""

    def test_visits_instructions_in_document_order(self):
        """Each ins element is visited once, in order."""
        assert read_types(SECTION) == ["BGM_PLAY", "BGM_FADE"]

    def test_stays_exhausted(self):
        """Once the stream is exhausted every call returns False."""
        reader = PS3InstructionReader.from_string(SECTION)
        while reader.advance_to_next_instruction():
            pass
        assert reader.advance_to_next_instruction() is False
        with pytest.raises(RuntimeError):
            reader.get_attribute("type")

    def test_instructions_inside_other_elements(self):
        """Wrapper elements are walked through."""
        xml = '<root><group><ins type="A"/></group><ins type="B"/></root>'
        assert read_types(xml) == ["A", "B"]

    def test_empty_root(self):
        """A document without instructions yields nothing."""
        assert read_types("<root>\n  \n</root>") == []

    def test_comments_are_skipped(self):
        """Comments anywhere in the stream are ignored."""
        xml = '<root><!-- a --><ins type="A"><!-- b --></ins><!-- c --></root>'
        assert read_types(xml) == ["A"]

    def test_binary_stream_honours_declaration(self):
        """Byte streams are decoded per the XML declaration."""
        xml = (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<root><ins type="DIALOGUE" data="こんにちは"/></root>\n'
        )
        with PS3InstructionReader(io.BytesIO(xml.encode("utf-8"))) as reader:
            assert reader.advance_to_next_instruction()
            assert reader.get_attribute("data") == "こんにちは"


class TestRejectsUnexpectedContent:
    """Test that content outside ins attributes stops the reader."""

    def test_text_before_instruction(self):
        """Text in a parent element is rejected."""
        reader = PS3InstructionReader.from_string('<root>hello<ins type="A"/></root>')
        with pytest.raises(MalformedInstructionStreamError) as exc_info:
            reader.advance_to_next_instruction()
        assert exc_info.value.details["value"] == "hello"

    def test_text_inside_instruction(self):
        """Text content of an ins element is rejected."""
        xml = '<root><ins type="A">oops</ins></root>'
        reader = PS3InstructionReader.from_string(xml)
        with pytest.raises(MalformedInstructionStreamError):
            reader.advance_to_next_instruction()

    def test_text_between_instructions(self):
        """The first instruction is returned before the stray text is found."""
        reader = PS3InstructionReader.from_string(
            '<root><ins type="A"/>junk<ins type="B"/></root>'
        )
        assert reader.advance_to_next_instruction()
        assert reader.get_attribute("type") == "A"
        with pytest.raises(MalformedInstructionStreamError):
            reader.advance_to_next_instruction()

    def test_text_before_closing_tag(self):
        """Trailing text in the root is rejected."""
        reader = PS3InstructionReader.from_string('<root><ins type="A"/> end </root>')
        assert reader.advance_to_next_instruction()
        with pytest.raises(MalformedInstructionStreamError):
            reader.advance_to_next_instruction()

    def test_processing_instruction(self):
        """Processing instructions are rejected."""
        reader = PS3InstructionReader.from_string(
            '<root><?render fast?><ins type="A"/></root>'
        )
        with pytest.raises(MalformedInstructionStreamError) as exc_info:
            reader.advance_to_next_instruction()
        assert exc_info.value.details["kind"] == "processing instruction"

    def test_syntax_error_is_wrapped(self):
        """XML syntax errors surface as a ParseError subclass."""
        reader = PS3InstructionReader.from_string('<root><ins type="A"></root>')
        with pytest.raises(ParseError) as exc_info:
            while reader.advance_to_next_instruction():
                pass
        assert isinstance(exc_info.value, MalformedInstructionStreamError)


class TestCurrentInstruction:
    """Test access to the instruction the reader is positioned on."""

    def test_get_attribute_missing(self):
        """A missing attribute is None."""
        reader = PS3InstructionReader.from_string('<root><ins type="A"/></root>')
        assert reader.advance_to_next_instruction()
        assert reader.get_attribute("duration") is None

    def test_outer_xml_excludes_tail(self):
        """The element text ends at its closing tag."""
        reader = PS3InstructionReader.from_string(SECTION)
        reader.advance_to_next_instruction()
        reader.advance_to_next_instruction()
        assert reader.outer_xml() == '<ins type="BGM_FADE" duration="60"/>'

    def test_outer_xml_keeps_end_tag(self):
        reader = PS3InstructionReader.from_string(SECTION)
        reader.advance_to_next_instruction()
        assert reader.outer_xml() == '<ins type="BGM_PLAY" bgm_file="bgm01"></ins>'

    @pytest.mark.parametrize(
        "element",
        [
            "<ins type='BGM_PLAY' bgm_file=\"a\"></ins>",
            '<ins  type="A"   data="x > y" />',
            '<ins type="A" data="a/"></ins >',
            '<ins type="A" data="&amp;&quot;"/>',
            '<ins type="A"><!-- note --></ins>',
        ],
    )
    def test_outer_xml_is_source_text(self, element):
        """Quoting, spacing and entities are returned as written."""
        reader = PS3InstructionReader.from_string(f"<root>{element}</root>")
        assert reader.advance_to_next_instruction()
        assert reader.outer_xml() == element

    def test_outer_xml_across_lines(self):
        xml = '<root>\n<ins type="A"\n     data="x"\n/>\n</root>\n'
        reader = PS3InstructionReader.from_string(xml)
        assert reader.advance_to_next_instruction()
        assert reader.outer_xml() == '<ins type="A"\n     data="x"\n/>'

    def test_outer_xml_from_binary_stream(self):
        element = '<ins type="DIALOGUE" data=\'こんにちは\'/>'
        xml = f'<?xml version="1.0" encoding="UTF-8"?>\n<root>{element}</root>\n'
        with PS3InstructionReader(io.BytesIO(xml.encode("utf-8"))) as reader:
            assert reader.advance_to_next_instruction()
            assert reader.outer_xml() == element

    def test_outer_xml_from_latin1_stream(self):
        element = '<ins type="DIALOGUE" data="café"/>'
        xml = f'<?xml version="1.0" encoding="ISO-8859-1"?>\n<root>{element}</root>'
        with PS3InstructionReader(io.BytesIO(xml.encode("latin-1"))) as reader:
            assert reader.advance_to_next_instruction()
            assert reader.get_attribute("data") == "café"
            assert reader.outer_xml() == element

    def test_attribute_entities_are_decoded(self):
        reader = PS3InstructionReader.from_string(
            '<root><ins type="A" data="&amp;&quot;"/></root>'
        )
        assert reader.advance_to_next_instruction()
        assert reader.get_attribute("data") == '&"'

    def test_not_positioned(self):
        """Accessors fail before the first advance."""
        reader = PS3InstructionReader.from_string(SECTION)
        with pytest.raises(RuntimeError):
            reader.get_attribute("type")
        with pytest.raises(RuntimeError):
            reader.outer_xml()


class TestStreamOwnership:
    """Test when the reader closes its stream."""

    def test_borrowed_stream_left_open(self):
        stream = io.StringIO(SECTION)
        with PS3InstructionReader(stream):
            pass
        assert not stream.closed

    def test_owned_stream_closed(self):
        stream = io.StringIO(SECTION)
        with PS3InstructionReader(stream, owns_stream=True):
            pass
        assert stream.closed

    def test_open_reads_and_closes_file(self, tmp_path):
        path = tmp_path / "section.xml"
        path.write_text(SECTION, encoding="utf-8")

        with PS3InstructionReader.open(path) as reader:
            assert reader.advance_to_next_instruction()
            assert reader.get_attribute("bgm_file") == "bgm01"
        assert reader._stream.closed

    def test_open_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            PS3InstructionReader.open(tmp_path / "missing.xml")


class TestBuffering:
    """Test that only the XML still needed for outer_xml is held."""

    def test_buffer_stays_small_on_long_streams(self):
        lines = [f'<ins type="SE_PLAY" se_file="se{i:04d}"/>\n' for i in range(1000)]
        xml = "<root>\n" + "".join(lines) + "</root>\n"
        reader = PS3InstructionReader.from_string(xml)

        for _ in range(500):
            assert reader.advance_to_next_instruction()

        assert reader.outer_xml() == lines[499].rstrip("\n")
        assert len(reader._buffer) < 2 * len(lines[0])

    def test_open_instruction_is_kept_until_closed(self):
        xml = '<root>\n<ins type="A">\n' + "\n" * 100 + "</ins>\n</root>\n"
        reader = PS3InstructionReader.from_string(xml)

        assert reader.advance_to_next_instruction()
        assert reader.outer_xml() == '<ins type="A">\n' + "\n" * 100 + "</ins>"
