"""Unit tests for running Alembic migrations at startup."""

import sys
from pathlib import Path

from stellarbill import main
from stellarbill.core.config import settings

REPO_ROOT = Path(main.__file__).resolve().parent.parent


def test_upgrades_to_heads_from_the_repo_root(monkeypatch):
    calls = []
    monkeypatch.setattr(settings, "RUN_ALEMBIC_MIGRATIONS", True)
    monkeypatch.setattr(main.subprocess, "run", lambda args, **kwargs: calls.append((args, kwargs)))

    main.run_migrations()

    ((args, kwargs),) = calls
    assert args == [sys.executable, "-m", "alembic", "upgrade", "heads"]
    assert kwargs["check"] is True
    assert Path(kwargs["cwd"]) == REPO_ROOT
    assert kwargs["env"]["PYTHONPATH"] == kwargs["cwd"]


def test_disabled_migrations_run_nothing(monkeypatch):
    calls = []
    monkeypatch.setattr(settings, "RUN_ALEMBIC_MIGRATIONS", False)
    monkeypatch.setattr(main.subprocess, "run", lambda *args, **kwargs: calls.append(args))

    main.run_migrations()

    assert calls == []


def test_alembic_scripts_ship_with_the_repo():
    assert (REPO_ROOT / "alembic.ini").is_file()
    assert (REPO_ROOT / "alembic" / "env.py").is_file()
    assert list((REPO_ROOT / "alembic" / "versions").glob("*_initial_schema.py"))
