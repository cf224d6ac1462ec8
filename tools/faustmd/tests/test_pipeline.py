from __future__ import annotations

import subprocess
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))
from faustmd_core.common import CompilerError, ExtractionError  # noqa: E402
from faustmd_core.invoke import CompilerConfig  # noqa: E402
from faustmd_core.pipeline import compile_metadata, generate_header  # noqa: E402
from faustmd_core.workspace import ScratchWorkspace  # noqa: E402


def make_report_xml(meta: str = "", widget_type: str = "hslider") -> str:
    return f"""<?xml version="1.0"?>
<faust>
  <name>gain</name>
  <author></author>
  <copyright></copyright>
  <license></license>
  <version></version>
  <classname>mydsp</classname>
  <inputs>1</inputs>
  <outputs>1</outputs>
  {meta}
  <ui>
    <activewidgets>
      <count>1</count>
      <widget type="{widget_type}" id="3">
        <label>Gain</label>
        <varname>fGain</varname>
        <init>0</init><min>-60</min><max>6</max><step>0.1</step>
      </widget>
    </activewidgets>
    <passivewidgets><count>0</count></passivewidgets>
  </ui>
</faust>
"""


GENERATED_CPP = """\
	void metadata(Meta* m) {
		m->declare("author", "Jane Doe");
	}
	virtual void buildUserInterface(UI* ui_interface) {
		ui_interface->declare(&fGain, "unit", "dB");
		ui_interface->addHorizontalSlider("Gain", &fGain, 0.0, -60.0, 6.0, 0.1);
	}
"""


class FakeCompiler:
    def __init__(self, report: str, source: str = "", returncode: int = 0) -> None:
        self.report = report
        self.source = source
        self.returncode = returncode
        self.commands: list[list[str]] = []

    def __call__(self, command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        self.commands.append(command)
        workdir = Path(command[command.index("-O") + 1])
        cpp_name = command[command.index("-o") + 1]
        dsp_name = Path(command[-1]).name
        (workdir / f"{dsp_name}.xml").write_text(self.report, encoding="utf-8")
        (workdir / cpp_name).write_text(self.source, encoding="utf-8")
        stderr = "" if self.returncode == 0 else "ERROR : syntax error\n"
        return subprocess.CompletedProcess(command, self.returncode, "", stderr)


class PipelineTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.scratch_parent = Path(self.temp_dir.name)
        self.dsp = Path("effects/gain.dsp")

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def _run(self, fake: FakeCompiler, render: bool = True) -> object:
        workspace = ScratchWorkspace(parent=self.scratch_parent)
        with mock.patch("faustmd_core.invoke.subprocess.run", side_effect=fake):
            if render:
                return generate_header(self.dsp, CompilerConfig(), workspace=workspace)
            return compile_metadata(self.dsp, CompilerConfig(), workspace=workspace)

    def assertWorkspaceRemoved(self) -> None:
        self.assertEqual(list(self.scratch_parent.iterdir()), [])

    def test_scrape_recovers_global_declaration(self) -> None:
        md = self._run(FakeCompiler(make_report_xml(), GENERATED_CPP), render=False)
        self.assertEqual(md.metadata, [("author", "Jane Doe")])
        self.assertWorkspaceRemoved()

    def test_scrape_recovers_widget_declaration(self) -> None:
        md = self._run(FakeCompiler(make_report_xml(), GENERATED_CPP), render=False)
        self.assertEqual(md.active[0].metadata, [("unit", "dB")])
        self.assertEqual(md.active[0].unit, "dB")

    def test_report_metadata_bypasses_scrape(self) -> None:
        report = make_report_xml(meta='<meta key="name">gain</meta>')
        with_source = self._run(FakeCompiler(report, GENERATED_CPP))
        without_source = self._run(FakeCompiler(report, ""))
        self.assertEqual(with_source, without_source)
        self.assertNotIn("Jane Doe", with_source)
        self.assertWorkspaceRemoved()

    def test_generated_header_contains_widget(self) -> None:
        header = self._run(FakeCompiler(make_report_xml(), GENERATED_CPP))
        self.assertIn("FMSTATIC constexpr int active_id[] = {3};", header)
        self.assertIn('FMSTATIC const char *const active_unit[] = {u8"dB"};', header)
        self.assertIn("get_Gain(const FAUSTCLASS &x) { return x.fGain; }", header)

    def test_compiler_receives_workspace_paths(self) -> None:
        fake = FakeCompiler(make_report_xml(), GENERATED_CPP)
        self._run(fake)
        (command,) = fake.commands
        self.assertEqual(command[-1], "effects/gain.dsp")
        self.assertEqual(command[command.index("-o") + 1], "gain.dsp.cpp")
        self.assertEqual(Path(command[command.index("-O") + 1]).parent, self.scratch_parent)

    def test_compiler_failure_cleans_up(self) -> None:
        with self.assertRaises(CompilerError):
            self._run(FakeCompiler(make_report_xml(), GENERATED_CPP, returncode=1))
        self.assertWorkspaceRemoved()

    def test_extraction_failure_cleans_up(self) -> None:
        with self.assertRaises(ExtractionError):
            self._run(FakeCompiler(make_report_xml(widget_type="knob"), GENERATED_CPP))
        self.assertWorkspaceRemoved()


if __name__ == "__main__":
    unittest.main()
