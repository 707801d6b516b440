import csv
import io

import pytest

from storefront.adapters.sqlite.repos import SQLiteCategoryRepo
from storefront.api.auth_utils import AuthContext
from storefront.app_shell import cli


@pytest.fixture
def env(tmp_path, monkeypatch):
    monkeypatch.setenv("STOREFRONT_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("STOREFRONT_SECRET_KEY", "cli-secret")
    return tmp_path


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args([])


def test_parser_rejects_unknown_kind():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["seed-categories", "pages", "About"])


def test_every_command_has_handler():
    parser = cli.build_parser()
    subparsers = next(a for a in parser._actions if a.dest == "command")
    assert set(subparsers.choices) == set(cli.HANDLERS)


def test_migrate_then_seed(env, capsys):
    cli.main(["migrate"])
    assert "Applied 1 migration(s)." in capsys.readouterr().out

    cli.main(["seed-categories", "blog", "Company News", "Events", "Company News"])
    out = capsys.readouterr().out
    assert "Created 2 blog categories." in out

    repo = SQLiteCategoryRepo(str(env / "storefront.db"), "blog")
    assert [c.slug for c in repo.list_all()] == ["company-news", "events"]


def test_export_submissions_empty(env, capsys):
    cli.main(["migrate"])
    capsys.readouterr()

    out_file = env / "out.csv"
    cli.main(["export-submissions", "--status", "new", "--out", str(out_file)])

    rows = list(csv.reader(io.StringIO(out_file.read_text(encoding="utf-8"))))
    assert rows[0][0] == "ID"
    assert len(rows) == 1


def test_dev_token(env, capsys):
    cli.main(["dev-token", "admin-7", "--hours", "1"])
    token = capsys.readouterr().out.strip()
    user = AuthContext("cli-secret").verify(token)
    assert user is not None
    assert user.id == "admin-7"
