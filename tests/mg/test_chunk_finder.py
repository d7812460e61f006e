"""Tests for locating PS3 XML sections in a merged script."""

from suimerger.mg.chunk_finder import PS3XMLChunkFinder


class TestPS3XMLChunkFinder:
    """Test the line-by-line section state machine."""

    def test_returns_chunk_on_end_marker(self):
        finder = PS3XMLChunkFinder()
        lines = [
            '<?xml version="1.0"?>',
            '<ins type="BGM_PLAY" bgm_file="x"/>',
            "</PS3_SECTION -->",
        ]

        results = [finder.update(line) for line in lines]

        assert results[:2] == [None, None]
        assert results[2] == "".join(line + "\n" for line in lines)

    def test_plain_lines_return_none(self):
        finder = PS3XMLChunkFinder()
        assert finder.update('\tOutputLine(NULL, "a", NULL, "a", Line_Normal);') is None
        assert finder.last_line_was_xml() is False
        assert finder.in_progress is False

    def test_last_line_was_xml_tracks_section(self):
        finder = PS3XMLChunkFinder()
        seen = []
        for line in ["before", "<?xml?>", "<PS3_SECTION>", "</PS3_SECTION>", "after"]:
            finder.update(line)
            seen.append(finder.last_line_was_xml())
        assert seen == [False, True, True, True, False]

    def test_markers_are_case_insensitive(self):
        finder = PS3XMLChunkFinder()
        assert finder.update("<?XML version='1.0'?>") is None
        assert finder.in_progress
        chunk = finder.update("</ps3_section>")
        assert chunk == "<?XML version='1.0'?>\n</ps3_section>\n"

    def test_start_marker_may_follow_other_text(self):
        finder = PS3XMLChunkFinder()
        finder.update("  <?xml version='1.0'?>")
        assert finder.in_progress

    def test_successive_sections_are_independent(self):
        finder = PS3XMLChunkFinder()
        chunks = []
        lines = ["<?xml a?>", "</PS3_SECTION>", "mg", "<?xml b?>", "</PS3_SECTION>"]
        for line in lines:
            chunk = finder.update(line)
            if chunk is not None:
                chunks.append(chunk)
        assert chunks == [
            "<?xml a?>\n</PS3_SECTION>\n",
            "<?xml b?>\n</PS3_SECTION>\n",
        ]

    def test_uses_configured_newline(self):
        finder = PS3XMLChunkFinder(newline="\r\n")
        finder.update("<?xml?>")
        assert finder.update("</PS3_SECTION>") == "<?xml?>\r\n</PS3_SECTION>\r\n"

    def test_unterminated_section_stays_in_progress(self):
        finder = PS3XMLChunkFinder()
        finder.update("<?xml?>")
        finder.update('<ins type="BGM_FADE" duration="60"/>')
        assert finder.in_progress
