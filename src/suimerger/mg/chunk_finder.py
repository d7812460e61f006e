"""Find the PS3 XML sections embedded in a merged MG script."""

from __future__ import annotations

import re

PS3_SECTION_START = re.compile(r"<\?xml", re.IGNORECASE)
PS3_SECTION_END = re.compile(r"</PS3_SECTION", re.IGNORECASE)


class PS3XMLChunkFinder:
    """Consume a merged script line by line and return each PS3 XML chunk.

    The merged script is the original MG script with PS3 instructions
    written in between its lines, for example::

        OutputLine(NULL, "...", NULL, "...", Line_Normal);
        <?xml version="1.0" encoding="UTF-8"?>
        <PS3_SECTION>  <!-- ~~~~~~~~~~~~~~~~START~~~~~~~~~~~~~~~~ -->
        <ins type="BGM_FADE" duration="60"></ins>
        </PS3_SECTION> <!-- ~~~~~~~~~~~~~~~~~END~~~~~~~~~~~~~~~~~ -->

    ``update`` returns None for every line except the section end, where it
    returns the whole chunk (declaration through end marker) as one string.
    """

    def __init__(self, newline: str = "\n") -> None:
        self.newline = newline
        self._inside_ps3_xml = False
        self._last_line_was_xml = False
        self._lines: list[str] = []

    def update(self, line: str) -> str | None:
        """Feed one script line (without its line ending).

        Returns:
            The complete chunk when ``line`` closes a PS3 section, else None
        """
        if self._inside_ps3_xml:
            self._lines.append(line + self.newline)
            if PS3_SECTION_END.search(line):
                self._inside_ps3_xml = False
                chunk = "".join(self._lines)
                self._lines.clear()
                return chunk
        else:
            self._last_line_was_xml = PS3_SECTION_START.search(line) is not None
            if self._last_line_was_xml:
                self._lines.append(line + self.newline)
                self._inside_ps3_xml = True

        return None

    def last_line_was_xml(self) -> bool:
        """Whether the last line fed to ``update`` belonged to a PS3 section."""
        return self._last_line_was_xml

    @property
    def in_progress(self) -> bool:
        """True while a section has been opened but not yet closed."""
        return self._inside_ps3_xml
