"""Tests for terminal output formatting."""

import io

from rich.console import Console

from vaultsync.output import OutputFormatter


def _formatter(**kwargs):
    out = io.StringIO()
    err = io.StringIO()
    formatter = OutputFormatter(
        console=Console(file=out, width=200),
        err_console=Console(file=err, width=200),
        **kwargs,
    )
    return formatter, out, err


class TestOutputFormatter:
    """Tests for OutputFormatter."""

    def test_brackets_in_messages_are_literal(self):
        formatter, out, err = _formatter()

        formatter.info("Syncing vault from s3://b/vaults/notes[/old]/")
        formatter.success("Done: notes[/old]")
        formatter.warning("[bold]not markup[/bold]")
        formatter.error("closing [/red] tag")

        assert "s3://b/vaults/notes[/old]/" in out.getvalue()
        assert "Done: notes[/old]" in out.getvalue()
        assert "[bold]not markup[/bold]" in err.getvalue()
        assert "closing [/red] tag" in err.getvalue()

    def test_brackets_in_summary_values(self):
        formatter, out, _ = _formatter()

        formatter.print_summary("Run Complete", [("Archives", "notes[/old].tar.gz")])

        assert "notes[/old].tar.gz" in out.getvalue()

    def test_quiet_suppresses_info_but_not_errors(self):
        formatter, out, err = _formatter(quiet=True)

        formatter.info("hidden")
        formatter.print_summary("Run Complete", [("Vaults", 1)])
        formatter.error("shown")

        assert out.getvalue() == ""
        assert "shown" in err.getvalue()

    def test_json_mode_moves_info_to_stderr(self, capsys):
        formatter = OutputFormatter(json_output=True)

        formatter.info("progress")
        formatter.output_json({"ok": True})

        captured = capsys.readouterr()
        assert captured.out.strip() == '{\n  "ok": true\n}'
        assert "progress" in captured.err
