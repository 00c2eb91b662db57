# =============================================================================
# test_tuasm.py - tuasm CLI Tests
# =============================================================================
# Tests for the tuasm command-line tool.
#
# Test coverage includes:
#   - Help and version output
#   - Successful assembly and exit status
#   - Missing arguments
#   - Error reporting and exit status
#   - Symbol file and include path options
# =============================================================================

from click.testing import CliRunner

from tushie.cli.errors import ExitCode
from tushie.cli.tuasm import main


def invoke(args):
    runner = CliRunner()
    return runner.invoke(main, [str(a) for a in args])


class TestTuasmCLI:
    """Tests for the tuasm CLI tool."""

    def test_cli_help(self):
        result = invoke(["--help"])
        assert result.exit_code == 0
        assert "Assemble a tushie source file" in result.output

    def test_cli_version(self):
        result = invoke(["--version"])
        assert result.exit_code == 0
        assert "1.0.0" in result.output

    def test_cli_assemble(self, tmp_path):
        src = tmp_path / "a.s"
        src.write_text("label1:\n\tdb 1, 2, 3\nlabel2:\n\tdb 4\n")
        out = tmp_path / "a.bin"

        result = invoke([src, out])

        assert result.exit_code == ExitCode.SUCCESS
        assert out.read_bytes() == bytes([1, 2, 3, 4])

    def test_cli_missing_arguments(self):
        result = invoke([])
        assert result.exit_code == 1
        assert "Usage" in result.output

    def test_cli_missing_output_argument(self, tmp_path):
        src = tmp_path / "a.s"
        src.write_text("db 1\n")
        result = invoke([src])
        assert result.exit_code == 1

    def test_cli_assembly_error(self, tmp_path):
        src = tmp_path / "a.s"
        src.write_text("db 1\ndb 256\n")

        result = invoke([src, tmp_path / "a.bin"])

        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "larger than 0xFF" in result.output

    def test_cli_missing_input(self, tmp_path):
        result = invoke([tmp_path / "none.s", tmp_path / "a.bin"])
        assert result.exit_code == 1
        assert "none.s" in result.output

    def test_cli_unwritable_output(self, tmp_path):
        src = tmp_path / "a.s"
        src.write_text("db 1\n")

        result = invoke([src, tmp_path / "no" / "such" / "dir" / "a.bin"])

        assert result.exit_code == ExitCode.BUILD_ERROR

    def test_cli_symbols(self, tmp_path):
        src = tmp_path / "a.s"
        src.write_text("start: db 1\nend:\n")
        sym = tmp_path / "a.sym"

        result = invoke(["-s", sym, src, tmp_path / "a.bin"])

        assert result.exit_code == 0
        assert "start $0000" in sym.read_text()
        assert "end $0001" in sym.read_text()

    def test_cli_include_path(self, tmp_path):
        inc = tmp_path / "inc"
        inc.mkdir()
        (inc / "defs.s").write_text("db 42\n")
        src = tmp_path / "a.s"
        src.write_text("#include defs.s\n")
        out = tmp_path / "a.bin"

        result = invoke(["-I", inc, src, out])

        assert result.exit_code == 0
        assert out.read_bytes() == b"\x2A"

    def test_cli_strict_labels(self, tmp_path):
        src = tmp_path / "a.s"
        src.write_text("x:\nx:\n")

        result = invoke(["--strict-labels", src, tmp_path / "a.bin"])

        assert result.exit_code == 1
        assert "duplicate label" in result.output

    def test_cli_verbose(self, tmp_path):
        src = tmp_path / "a.s"
        src.write_text("db 1, 2\n")

        result = invoke(["-v", src, tmp_path / "a.bin"])

        assert result.exit_code == 0
        assert "Wrote 2 bytes" in result.output
