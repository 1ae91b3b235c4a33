# =============================================================================
# test_cli.py - lc3as Command-Line Tests
# =============================================================================
# Tests for the lc3as click command: options, artifacts and exit codes.
# =============================================================================

import pytest
from click.testing import CliRunner

from lc3asm import __version__
from lc3asm.cli.errors import ExitCode
from lc3asm.cli.lc3as import main


SOURCE = """\
        .ORIG x3000
        LEA R0, MSG
        PUTS
        HALT
MSG     .STRINGZ "Hi"
        .END
"""


@pytest.fixture
def source_file(tmp_path):
    path = tmp_path / "hello.asm"
    path.write_text(SOURCE, encoding="utf-8")
    return path


class TestLc3asCLI:
    """Tests for the lc3as CLI tool."""

    def test_cli_help(self):
        runner = CliRunner()
        result = runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "Assemble LC-3 source code" in result.output
        assert "--outfile" in result.output

    def test_cli_version(self):
        runner = CliRunner()
        result = runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_cli_assembles(self, source_file, tmp_path):
        runner = CliRunner()
        result = runner.invoke(main, ["-f", str(source_file), "-o", "hello"])

        assert result.exit_code == ExitCode.SUCCESS
        assert "Starting assembly process..." in result.output
        assert (tmp_path / "hello.obj").read_bytes()[:4] == b"\x30\x00\xe0\x02"
        assert (tmp_path / "hello.sym").read_text(encoding="utf-8") == "MSG 3003\n"

    def test_cli_default_outfile(self, source_file, tmp_path):
        runner = CliRunner()
        result = runner.invoke(main, ["--file", str(source_file)])

        assert result.exit_code == ExitCode.SUCCESS
        assert (tmp_path / "out.obj").exists()
        assert (tmp_path / "out.sym").exists()

    def test_cli_summary(self, source_file):
        runner = CliRunner()
        result = runner.invoke(main, ["-f", str(source_file)])

        assert "Assembled 6 words at x3000, 1 symbols" in result.output

    def test_cli_debug_flag(self, source_file):
        runner = CliRunner()
        result = runner.invoke(main, ["-f", str(source_file), "-d"])

        assert result.exit_code == ExitCode.SUCCESS

    def test_cli_requires_file(self):
        runner = CliRunner()
        result = runner.invoke(main, [])

        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_cli_missing_file(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(main, ["-f", str(tmp_path / "missing.asm")])

        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_cli_assembly_error(self, tmp_path):
        path = tmp_path / "broken.asm"
        path.write_text(".ORIG x3000\nBR NOWHERE\n.END\n", encoding="utf-8")

        runner = CliRunner()
        result = runner.invoke(main, ["-f", str(path), "-o", "broken"])

        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "undefined label 'NOWHERE'" in result.output
        assert not (tmp_path / "broken.obj").exists()
        assert not (tmp_path / "broken.sym").exists()

    def test_cli_range_error(self, tmp_path):
        path = tmp_path / "range.asm"
        path.write_text(".ORIG x3000\nADD R0, R0, #20\n.END\n", encoding="utf-8")

        runner = CliRunner()
        result = runner.invoke(main, ["-f", str(path)])

        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "does not fit in 5 bits" in result.output
