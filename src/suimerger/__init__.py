"""SuiMerger: insert PS3 background music cues into MangaGamer scripts.

The PS3 release of the game carries its own BGM cues. After the PS3 dialogue
has been matched against the MangaGamer script, the matched PS3 XML sections
sit between the MangaGamer lines; this package turns those sections into
MangaGamer BGM instructions and writes a playable script.
"""

from .config import SuiMergerSettings, get_logger, get_settings
from .mg import ScriptMerger, insert_bgm_using_ps3_xml
from .ps3 import PS3InstructionReader, extract_dialogues

__version__ = "0.1.0"

__all__ = [
    "PS3InstructionReader",
    "ScriptMerger",
    "SuiMergerSettings",
    "__version__",
    "extract_dialogues",
    "get_logger",
    "get_settings",
    "insert_bgm_using_ps3_xml",
]
