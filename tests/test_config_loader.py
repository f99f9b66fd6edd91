from __future__ import annotations

from pathlib import Path

import pytest

from buildstamp.config.errors import ConfigError
from buildstamp.config.loader import load_config


def test_load_config_expands_env_vars(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CI_ENV_FILE", "/tmp/ci.env")

    cfg_path = tmp_path / "buildstamp.yaml"
    cfg_path.write_text(
        """
publisher:
  env_file: ${CI_ENV_FILE}
toolchain:
  command:
    - python3
    - --version
nested:
  arr:
    - at-${CI_ENV_FILE}
""".lstrip(),
        encoding="utf-8",
    )

    cfg = load_config(cfg_path, load_dotenv_file=False)
    assert cfg["publisher"]["env_file"] == "/tmp/ci.env"
    assert cfg["nested"]["arr"][0] == "at-/tmp/ci.env"


def test_load_config_missing_env_var_is_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CI_ENV_FILE", raising=False)

    cfg_path = tmp_path / "buildstamp.yaml"
    cfg_path.write_text("publisher:\n  env_file: ${CI_ENV_FILE}\n", encoding="utf-8")

    with pytest.raises(ConfigError) as ei:
        load_config(cfg_path, load_dotenv_file=False)

    msg = str(ei.value)
    assert "CI_ENV_FILE" in msg
    assert "missing" in msg
    assert "publisher.env_file" in msg


def test_load_config_empty_env_var_is_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CI_ENV_FILE", "")

    cfg_path = tmp_path / "buildstamp.yaml"
    cfg_path.write_text("publisher:\n  env_file: ${CI_ENV_FILE}\n", encoding="utf-8")

    with pytest.raises(ConfigError) as ei:
        load_config(cfg_path, load_dotenv_file=False)

    assert "empty" in str(ei.value)


def test_later_files_override_earlier(tmp_path: Path) -> None:
    base = tmp_path / "base.yaml"
    base.write_text("resolver:\n  abbrev: 10\n  vcs_command: git\n", encoding="utf-8")
    overlay = tmp_path / "ci.yaml"
    overlay.write_text("resolver:\n  abbrev: 12\n", encoding="utf-8")

    cfg = load_config([base, overlay], load_dotenv_file=False)

    assert cfg["resolver"] == {"abbrev": 12, "vcs_command": "git"}


def test_dotenv_file_feeds_expansion(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    # setenv first so teardown removes whatever load_dotenv injects.
    monkeypatch.setenv("BUILDSTAMP_TEST_OUT", "placeholder")
    monkeypatch.delenv("BUILDSTAMP_TEST_OUT")
    dotenv = tmp_path / ".env"
    dotenv.write_text("BUILDSTAMP_TEST_OUT=/srv/out\n", encoding="utf-8")
    cfg_path = tmp_path / "buildstamp.yaml"
    cfg_path.write_text("resolver:\n  cwd: ${BUILDSTAMP_TEST_OUT}\n", encoding="utf-8")

    cfg = load_config(cfg_path, dotenv_path=dotenv)

    assert cfg["resolver"]["cwd"] == "/srv/out"


def test_missing_file_and_bad_root(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path / "nope.yaml", load_dotenv_file=False)

    p = tmp_path / "list.yaml"
    p.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError) as ei:
        load_config(p, load_dotenv_file=False)
    assert "mapping" in str(ei.value)


def test_empty_file_is_empty_config(tmp_path: Path) -> None:
    p = tmp_path / "empty.yaml"
    p.write_text("\n", encoding="utf-8")

    assert load_config(p, load_dotenv_file=False) == {}
