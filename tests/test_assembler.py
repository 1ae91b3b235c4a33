# =============================================================================
# test_assembler.py - Full Assembler Integration Tests
# =============================================================================
# End-to-end tests for the Assembler facade: source in, object and symbol
# artifacts out.
#
# Test coverage includes:
#   - Complete program assembly from strings and files
#   - Object file byte layout (big-endian, origin first)
#   - Symbol file format and ordering
#   - No artifacts on failure
#   - I/O error wrapping
# =============================================================================

import logging
from pathlib import Path

import pytest
from lc3asm import assemble, assemble_file
from lc3asm.assembler import Assembler, AssemblerConfig
from lc3asm.errors import (
    AssemblerError,
    AssemblerIOError,
    ErrorKind,
    Lc3Error,
    MissingLabelError,
)


HELLO = """\
; Print a greeting
        .ORIG x3000
        LEA R0, MSG     ; x3000
        PUTS            ; x3001
        HALT            ; x3002
MSG     .STRINGZ "Hi"   ; x3003
        .END
"""

HELLO_WORDS = [0x3000, 0xE002, 0xF022, 0xF025, 0x0048, 0x0069, 0x0000]


COUNTDOWN = """\
        .ORIG x3000
START   LD R1, COUNT        ; x3000
LOOP    ADD R1, R1, #-1     ; x3001
        BRp LOOP            ; x3002
        JSR DONE            ; x3003
        HALT                ; x3004
COUNT   .FILL #10           ; x3005
DONE    RET                 ; x3006
        .END
"""


# =============================================================================
# Full Assembly Pipeline Tests
# =============================================================================

class TestFullPipeline:
    """Test the complete assembly pipeline."""

    def test_hello(self):
        asm = Assembler()
        assert asm.assemble_string(HELLO) == HELLO_WORDS

    def test_symbols(self):
        asm = Assembler()
        asm.assemble_string(HELLO)
        assert asm.get_symbols() == {"MSG": 0x3003}

    def test_origin(self):
        asm = Assembler()
        asm.assemble_string(HELLO)
        assert asm.get_origin() == 0x3000

    def test_code_is_big_endian(self):
        asm = Assembler()
        asm.assemble_string(".ORIG x3000\nADD R1, R2, R3\n.END")
        assert asm.get_code() == bytes([0x30, 0x00, 0x12, 0x83])

    def test_countdown(self):
        words = assemble(COUNTDOWN)
        assert words == [
            0x3000,
            0x2204,     # LD R1, COUNT   (+4)
            0x127F,     # ADD R1, R1, #-1
            0x03FE,     # BRp LOOP       (-2)
            0x4802,     # JSR DONE       (+2)
            0xF025,     # HALT
            0x000A,     # .FILL #10
            0xC1C0,     # RET
        ]

    def test_convenience_assemble_file(self, tmp_path):
        source = tmp_path / "hello.asm"
        source.write_text(HELLO, encoding="utf-8")
        assert assemble_file(source) == HELLO_WORDS

    def test_bundled_example(self):
        example = Path(__file__).parent.parent / "examples" / "hello.asm"
        asm = Assembler()
        words = asm.assemble_file(example)
        assert asm.get_symbols() == {
            "START": 0x3000,
            "LOOP": 0x3003,
            "COUNT": 0x3006,
            "MSG": 0x3007,
        }
        assert len(words) == 1 + 7 + len("Hello, LC-3!\n") + 1

    def test_rerun_resets_state(self):
        asm = Assembler()
        asm.assemble_string(COUNTDOWN)
        asm.assemble_string(HELLO)
        assert asm.get_symbols() == {"MSG": 0x3003}

    def test_get_origin_before_assembly(self):
        """Asking for results too early is a usage error, not a source error."""
        with pytest.raises(RuntimeError) as exc_info:
            Assembler().get_origin()
        assert not isinstance(exc_info.value, AssemblerError)

    def test_debug_logs_symbol_table(self, caplog):
        asm = Assembler(AssemblerConfig(debug=True))
        with caplog.at_level(logging.DEBUG, logger="lc3asm"):
            asm.assemble_string(HELLO)
        assert "MSG" in caplog.text
        assert "x3003" in caplog.text


# =============================================================================
# Artifact Tests
# =============================================================================

class TestArtifacts:
    """Test the object and symbol output files."""

    def test_write_object(self, tmp_path):
        asm = Assembler()
        asm.assemble_string(HELLO)
        path = tmp_path / "hello.obj"
        asm.write_object(path)
        assert path.read_bytes() == bytes([
            0x30, 0x00, 0xE0, 0x02, 0xF0, 0x22, 0xF0, 0x25,
            0x00, 0x48, 0x00, 0x69, 0x00, 0x00,
        ])

    def test_write_symbols(self, tmp_path):
        asm = Assembler()
        asm.assemble_string(COUNTDOWN)
        path = tmp_path / "countdown.sym"
        asm.write_symbols(path)
        assert path.read_text(encoding="utf-8") == (
            "START 3000\n"
            "LOOP 3001\n"
            "COUNT 3005\n"
            "DONE 3006\n"
        )

    def test_symbols_sorted_by_address(self):
        asm = Assembler()
        asm.assemble_string(COUNTDOWN)
        addresses = [
            int(line.split()[1], 16)
            for line in asm.get_symbol_listing().splitlines()
        ]
        assert addresses == sorted(addresses)

    def test_no_labels_gives_empty_symbol_file(self, tmp_path):
        asm = Assembler()
        asm.assemble_string(".ORIG x3000\nHALT\n.END")
        path = tmp_path / "empty.sym"
        asm.write_symbols(path)
        assert path.read_text(encoding="utf-8") == ""

    def test_run_writes_next_to_source(self, tmp_path):
        source = tmp_path / "hello.asm"
        source.write_text(HELLO, encoding="utf-8")

        asm = Assembler(AssemblerConfig(source=source, outfile="hello"))
        obj_path, sym_path = asm.run()

        assert obj_path == tmp_path / "hello.obj"
        assert sym_path == tmp_path / "hello.sym"
        assert obj_path.read_bytes()[:2] == b"\x30\x00"
        assert sym_path.read_text(encoding="utf-8") == "MSG 3003\n"

    def test_default_outfile_name(self, tmp_path):
        source = tmp_path / "hello.asm"
        source.write_text(HELLO, encoding="utf-8")

        Assembler(AssemblerConfig(source=source)).run()

        assert (tmp_path / "out.obj").exists()
        assert (tmp_path / "out.sym").exists()

    def test_failure_writes_nothing(self, tmp_path):
        source = tmp_path / "broken.asm"
        source.write_text(".ORIG x3000\nBR NOWHERE\n.END\n", encoding="utf-8")

        asm = Assembler(AssemblerConfig(source=source, outfile="broken"))
        with pytest.raises(MissingLabelError):
            asm.run()

        assert not (tmp_path / "broken.obj").exists()
        assert not (tmp_path / "broken.sym").exists()

    def test_object_write_failure_leaves_no_symbol_file(self, tmp_path):
        source = tmp_path / "hello.asm"
        source.write_text(HELLO, encoding="utf-8")
        (tmp_path / "hello.obj").mkdir()

        asm = Assembler(AssemblerConfig(source=source, outfile="hello"))
        with pytest.raises(AssemblerIOError):
            asm.run()

        assert not (tmp_path / "hello.sym").exists()

    def test_symbol_write_failure_removes_object_file(self, tmp_path):
        source = tmp_path / "hello.asm"
        source.write_text(HELLO, encoding="utf-8")
        (tmp_path / "hello.sym").mkdir()

        asm = Assembler(AssemblerConfig(source=source, outfile="hello"))
        with pytest.raises(AssemblerIOError):
            asm.run()

        assert not (tmp_path / "hello.obj").exists()

    def test_run_requires_source(self):
        with pytest.raises(ValueError):
            Assembler().run()


# =============================================================================
# Error Reporting Tests
# =============================================================================

class TestErrorReporting:
    """Test error messages and I/O error wrapping."""

    def test_error_names_file_and_line(self, tmp_path):
        source = tmp_path / "broken.asm"
        source.write_text(".ORIG x3000\nHALT\nBR NOWHERE\n.END\n", encoding="utf-8")

        with pytest.raises(MissingLabelError) as exc_info:
            Assembler().assemble_file(source)

        message = str(exc_info.value)
        assert f"{source}:3: error: undefined label 'NOWHERE'" in message
        assert "BR NOWHERE" in message

    def test_missing_source_file(self, tmp_path):
        with pytest.raises(AssemblerIOError) as exc_info:
            Assembler().assemble_file(tmp_path / "missing.asm")
        assert exc_info.value.kind is ErrorKind.IO_ERROR
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_unwritable_output(self, tmp_path):
        asm = Assembler()
        asm.assemble_string(HELLO)
        with pytest.raises(AssemblerIOError):
            asm.write_object(tmp_path / "no_such_dir" / "out.obj")

    def test_all_errors_are_lc3_errors(self):
        with pytest.raises(Lc3Error):
            assemble(".ORIG x3000\nADD R0, R0, #99\n.END")
