import logging
import re

from click.testing import CliRunner

from go_sortimports.cli import cli


UNSORTED = 'package widget\n\nimport (\n\t"github.com/acme/widget/util"\n\t"fmt"\n)\n'
SORTED = 'package widget\n\nimport (\n\t"fmt"\n\n\t"github.com/acme/widget/util"\n)\n'

ARGS = ["--formatter", "none", "--local-prefix", "github.com/acme/widget"]


def _package(tmp_path, **files):
    pkg = tmp_path / "widget"
    pkg.mkdir()
    for name, content in files.items():
        (pkg / name).write_text(content)
    return pkg


def test_check_reports_without_writing(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    pkg = _package(tmp_path, **{"main.go": UNSORTED, "ok.go": SORTED})
    result = CliRunner().invoke(cli, ["check", *ARGS, "widget"])
    assert result.exit_code == 0
    assert "main.go" in result.output
    assert "ok.go" not in result.output
    assert (pkg / "main.go").read_text() == UNSORTED


def test_check_diff(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _package(tmp_path, **{"main.go": UNSORTED})
    result = CliRunner().invoke(cli, ["check", "--diff", *ARGS, "widget"])
    assert result.exit_code == 0
    assert "+++ " in result.output
    assert "@@ " in result.output


def test_fix_rewrites_files(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    pkg = _package(tmp_path, **{"main.go": UNSORTED})
    result = CliRunner().invoke(cli, ["fix", *ARGS, "./..."])
    assert result.exit_code == 0
    assert "main.go" in result.output
    assert (pkg / "main.go").read_text() == SORTED

    result = CliRunner().invoke(cli, ["fix", *ARGS, "./..."])
    assert result.exit_code == 0
    assert "main.go" not in result.output


def test_fix_continues_after_bad_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    bad = 'package widget\n\nimport (\n\tx y "fmt" z\n)\n'
    pkg = _package(tmp_path, **{"a.go": bad, "b.go": UNSORTED})
    result = CliRunner().invoke(cli, ["fix", *ARGS, "widget"])
    assert result.exit_code == 1
    assert (pkg / "a.go").read_text() == bad
    assert (pkg / "b.go").read_text() == SORTED


def test_config_file_is_used(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".sortimports.toml").write_text('local-prefix = "github.com/acme/widget"\nformatter = "none"\n')
    pkg = _package(tmp_path, **{"main.go": UNSORTED})
    result = CliRunner().invoke(cli, ["fix", "widget"])
    assert result.exit_code == 0
    assert (pkg / "main.go").read_text() == SORTED


def test_unknown_package_sets_exit_status(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["check", *ARGS, "./missing"])
    assert result.exit_code == 1


def test_invalid_config_is_reported(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".sortimports.toml").write_text('strategy = "guess"\n')
    result = CliRunner().invoke(cli, ["check", "."])
    assert result.exit_code != 0
    assert "unknown strategy" in result.output


def test_file_warnings_name_the_file(tmp_path, monkeypatch, caplog):
    monkeypatch.chdir(tmp_path)
    _package(tmp_path, **{"a.go": 'package widget\n\nimport (\n\tx y "fmt" z\n)\n'})
    result = CliRunner().invoke(cli, ["check", *ARGS, "widget"])
    assert result.exit_code == 1
    messages = [record.getMessage() for record in caplog.records if record.levelno == logging.WARNING]
    assert any(re.match(r"^\[.*a\.go\] line 4: invalid import line", msg) for msg in messages)


def test_verbose_logs_settings(tmp_path, monkeypatch, caplog):
    monkeypatch.chdir(tmp_path)
    caplog.set_level(logging.DEBUG)
    _package(tmp_path, **{"main.go": SORTED})
    result = CliRunner().invoke(cli, ["-v", "check", *ARGS, "widget"])
    assert result.exit_code == 0
    assert "Strategy heuristic, formatter none, local prefix 'github.com/acme/widget'" in caplog.text
