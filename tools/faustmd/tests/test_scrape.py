from __future__ import annotations

import sys
import tempfile
import unittest
import xml.etree.ElementTree as ET
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))
from faustmd_core.common import ScrapeError  # noqa: E402
from faustmd_core.scrape import (  # noqa: E402
    RecoveredRecord,
    has_explicit_metadata,
    parse_declaration,
    scrape_lines,
    scrape_source,
)

GENERATED_SOURCE = """\
class mydsp : public dsp {
	void metadata(Meta* m) {
		m->declare("author", "Jane Doe");
		m->declare("filename", "gain.dsp");
		m->declare("description", "Line one\\nLine \\"two\\"");
	}
	virtual void buildUserInterface(UI* ui_interface) {
		ui_interface->openVerticalBox("gain");
		ui_interface->declare(&fHslider0, "unit", "dB");
		ui_interface->declare(&fHslider0, "scale", "log");
		ui_interface->addHorizontalSlider("Gain", &fHslider0, 0.0, -60.0, 6.0, 0.1);
		ui_interface->declare(&fVbargraph0, "2", "");
		ui_interface->closeBox();
	}
};
"""


class ParseDeclarationTests(unittest.TestCase):
    def test_global_declaration(self) -> None:
        record = parse_declaration('    m->declare("author", "Jane Doe");')
        self.assertEqual(record, RecoveredRecord(key="author", value="Jane Doe"))
        self.assertTrue(record.is_global)

    def test_widget_declaration(self) -> None:
        record = parse_declaration('\t\tui_interface->declare(&fGain, "unit", "dB");')
        self.assertEqual(record, RecoveredRecord(key="unit", value="dB", var="fGain"))
        self.assertFalse(record.is_global)

    def test_escaped_literals_are_decoded(self) -> None:
        record = parse_declaration(r'm->declare("note", "tab\there \"quoted\" back\\slash");')
        self.assertEqual(record.value, 'tab\there "quoted" back\\slash')

    def test_non_matching_lines_are_ignored(self) -> None:
        for line in [
            "",
            "// m->declare(\"author\", \"x\");",
            'm->declare("author", "x")',
            'm->declare("author","x");',
            'ui_interface->declare(fGain, "unit", "dB");',
            'ui_interface->declare(&0bad, "unit", "dB");',
            'm->declare("author", "unterminated);',
            'm->declare("author", "x"); // trailing',
        ]:
            with self.subTest(line=line):
                self.assertIsNone(parse_declaration(line))


class ScrapeSourceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def test_collects_records_in_source_order(self) -> None:
        path = self.root / "gain.dsp.cpp"
        path.write_text(GENERATED_SOURCE, encoding="utf-8")

        records = scrape_source(path)

        self.assertEqual(
            records,
            [
                RecoveredRecord("author", "Jane Doe"),
                RecoveredRecord("filename", "gain.dsp"),
                RecoveredRecord("description", 'Line one\nLine "two"'),
                RecoveredRecord("unit", "dB", "fHslider0"),
                RecoveredRecord("scale", "log", "fHslider0"),
                RecoveredRecord("2", "", "fVbargraph0"),
            ],
        )

    def test_handles_crlf_line_endings(self) -> None:
        records = scrape_lines(['m->declare("name", "gain");\r\n', 'm->declare("version", "1.0");\n'])
        self.assertEqual([r.key for r in records], ["name", "version"])

    def test_unreadable_source_is_fatal(self) -> None:
        with self.assertRaises(ScrapeError):
            scrape_source(self.root / "missing.cpp")

    def test_empty_source_yields_nothing(self) -> None:
        path = self.root / "empty.cpp"
        path.write_text("", encoding="utf-8")
        self.assertEqual(scrape_source(path), [])


class ExplicitMetadataTests(unittest.TestCase):
    def test_detects_meta_anywhere_under_root(self) -> None:
        root = ET.fromstring(
            "<faust><ui><activewidgets><widget type='button' id='1'>"
            "<meta key='tooltip'>press</meta></widget></activewidgets></ui></faust>"
        )
        self.assertTrue(has_explicit_metadata(root))

    def test_no_meta(self) -> None:
        root = ET.fromstring("<faust><name>x</name><ui/></faust>")
        self.assertFalse(has_explicit_metadata(root))


if __name__ == "__main__":
    unittest.main()
