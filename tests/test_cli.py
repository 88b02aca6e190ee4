import datetime

import pytest
from loguru import logger
from typer.testing import CliRunner

from htrackr.cli import app

runner = CliRunner()

JUNE_HEADER = "2006-06  | 123456789012345678901234567890"


def row(name, num_days, marked, width=9):
    return name.ljust(width) + "| " + "".join("X" if d in marked else " " for d in range(1, num_days + 1))


@pytest.fixture
def cli(db_path):
    """Invoke htrackr against a temporary database."""

    def invoke(*args, input=None):
        return runner.invoke(app, ["--db", db_path, *args], input=input)

    return invoke


class TestCreateAndId:
    def test_create_then_id(self, cli):
        res = cli("create", "read")
        assert res.exit_code == 0

        res_id = cli("id", "read")
        assert res_id.exit_code == 0
        assert res_id.output.strip().startswith("hbt_")

    def test_create_duplicate_fails(self, cli):
        assert cli("create", "read").exit_code == 0
        res = cli("create", "read")
        assert res.exit_code == 1
        assert "already exists" in res.output

    def test_create_empty_name_fails(self, cli):
        res = cli("create", "")
        assert res.exit_code == 1
        assert "error" in res.output

    def test_id_not_found(self, cli):
        res = cli("id", "nope")
        assert res.exit_code == 1
        assert "not found" in res.output

    def test_create_requires_name(self, cli):
        res = cli("create")
        assert res.exit_code != 0


class TestMarkAndList:
    def test_mark_then_list_month(self, cli):
        cli("create", "read")
        cli("create", "exercise")
        assert cli("mark", "read", "2006-06-07").exit_code == 0
        assert cli("mark", "read", "2006-06-09").exit_code == 0
        assert cli("mark", "exercise", "2006-06-30").exit_code == 0

        res = cli("list", "2006-06")
        assert res.exit_code == 0
        assert res.output.splitlines() == [
            JUNE_HEADER,
            row("read", 30, {7, 9}),
            row("exercise", 30, {30}),
        ]

    def test_compact_flag_is_accepted(self, cli):
        cli("create", "read")
        cli("mark", "read", "2006-06-07")
        plain = cli("list", "2006-06")
        compact = cli("list", "2006-06", "--compact")
        assert compact.exit_code == 0
        assert compact.output == plain.output

    def test_mark_defaults_to_today(self, cli):
        today = datetime.date.today()
        cli("create", "read")
        assert cli("mark", "read").exit_code == 0

        res = cli("list")
        assert res.exit_code == 0
        lines = res.output.splitlines()
        assert lines[0].startswith(f"{today.year:04}-{today.month:02}")
        cells = lines[1].split("| ", 1)[1]
        assert cells[today.day - 1] == "X"
        assert cells.count("X") == 1

    def test_mark_yesterday_literal(self, cli):
        yesterday = datetime.date.today() - datetime.timedelta(days=1)
        cli("create", "read")
        assert cli("mark", "read", "y").exit_code == 0
        # Same date again through the long literal
        res = cli("mark", "read", "yesterday")
        assert res.exit_code == 1

        listing = cli("list", f"{yesterday.year:04}-{yesterday.month:02}")
        cells = listing.output.splitlines()[1].split("| ", 1)[1]
        assert cells[yesterday.day - 1] == "X"

    def test_mark_twice_fails(self, cli):
        cli("create", "read")
        assert cli("mark", "read", "2006-06-07").exit_code == 0
        res = cli("mark", "read", "2006-06-07")
        assert res.exit_code == 1
        assert "already marked" in res.output

    def test_unmark(self, cli):
        cli("create", "read")
        cli("mark", "read", "2006-06-07")
        assert cli("unmark", "read", "2006-06-07").exit_code == 0

        res = cli("unmark", "read", "2006-06-07")
        assert res.exit_code == 1
        assert "not marked" in res.output

        listing = cli("list", "2006-06")
        assert listing.output.splitlines()[1] == row("read", 30, set())

    @pytest.mark.parametrize("bad", ["2006-6-7", "2006-02-30", "tomorrow"])
    def test_mark_bad_date_fails(self, cli, bad):
        cli("create", "read")
        res = cli("mark", "read", bad)
        assert res.exit_code == 1
        assert "error" in res.output

    @pytest.mark.parametrize("bad", ["2006-13", "2006-6", "june"])
    def test_list_bad_month_fails(self, cli, bad):
        res = cli("list", bad)
        assert res.exit_code == 1

    def test_mark_unknown_habit(self, cli):
        res = cli("mark", "nope", "2006-06-07")
        assert res.exit_code == 1
        assert "not found" in res.output


class TestDeleteAndRename:
    def test_delete_confirmed(self, cli):
        cli("create", "read")
        cli("mark", "read", "2006-06-07")
        res = cli("delete", "read", input="y\n")
        assert res.exit_code == 0
        assert cli("id", "read").exit_code == 1

    def test_delete_declined_keeps_habit(self, cli):
        cli("create", "read")
        res = cli("delete", "read", input="n\n")
        assert res.exit_code == 0
        assert "aborted" in res.output
        assert cli("id", "read").exit_code == 0

    def test_delete_with_closed_stdin_declines(self, cli):
        cli("create", "read")
        res = cli("delete", "read")
        assert res.exit_code == 0
        assert "aborted" in res.output
        assert cli("id", "read").exit_code == 0

    def test_delete_yes_flag_skips_prompt(self, cli):
        cli("create", "read")
        res = cli("delete", "read", "--yes")
        assert res.exit_code == 0
        assert cli("list", "2006-06").output.splitlines() == [JUNE_HEADER]

    def test_delete_unknown_fails_before_prompt(self, cli):
        res = cli("delete", "nope", input="y\n")
        assert res.exit_code == 1
        assert "not found" in res.output
        assert "[y/N]" not in res.output

    def test_rename_keeps_id_and_marks(self, cli):
        cli("create", "abcde")
        before = cli("id", "abcde").output.strip()
        cli("mark", "abcde", "2006-06-07")

        assert cli("rename", "abcde", "asdfgh").exit_code == 0

        assert cli("id", "asdfgh").output.strip() == before
        assert cli("id", "abcde").exit_code == 1
        listing = cli("list", "2006-06")
        assert listing.output.splitlines()[1] == row("asdfgh", 30, {7})

    def test_rename_unknown_fails(self, cli):
        res = cli("rename", "nope", "other")
        assert res.exit_code == 1


class TestConfiguration:
    def test_db_path_from_environment(self, db_path, monkeypatch):
        monkeypatch.setenv("HTRACKR_DB_PATH", db_path)
        assert runner.invoke(app, ["create", "read"]).exit_code == 0
        # Same file reached through the explicit option
        res = runner.invoke(app, ["--db", db_path, "id", "read"])
        assert res.exit_code == 0

    def test_log_file_receives_debug_lines(self, cli, tmp_path, monkeypatch):
        log_file = tmp_path / "htrackr.log"
        monkeypatch.setenv("HTRACKR_LOG_FILE", str(log_file))
        assert cli("create", "read").exit_code == 0
        # Closing the sinks flushes the file
        logger.remove()
        assert "created habit read" in log_file.read_text(encoding="utf-8")

    def test_unusable_db_path_reports_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        res = runner.invoke(app, ["--db", str(blocker / "habits.db"), "list"])
        assert res.exit_code == 1
        assert "error:" in res.output
        assert not isinstance(res.exception, OSError)

    @pytest.mark.parametrize("args", [["mark", "--help"], ["create"], ["--help"]])
    def test_help_and_usage_errors_do_not_create_database(self, tmp_path, monkeypatch, args):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("HTRACKR_DB_PATH", raising=False)
        runner.invoke(app, args)
        assert not (tmp_path / "habits.db").exists()
