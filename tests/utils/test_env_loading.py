from __future__ import annotations

import os

from nf_metadata.utils.env import ENV_FILE_VAR, load_env


def test_explicit_env_file_is_loaded_without_overriding(tmp_path, monkeypatch) -> None:
    env_file = tmp_path / "gateway.env"
    env_file.write_text("API_KEY=from-file\nNF_METADATA_ENV_PROBE=30\n", encoding="utf-8")
    monkeypatch.setenv(ENV_FILE_VAR, str(env_file))
    monkeypatch.setenv("API_KEY", "from-process")

    try:
        assert load_env() == env_file
        assert os.environ["API_KEY"] == "from-process"
        assert os.environ["NF_METADATA_ENV_PROBE"] == "30"
    finally:
        os.environ.pop("NF_METADATA_ENV_PROBE", None)


def test_missing_explicit_file_loads_nothing(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv(ENV_FILE_VAR, str(tmp_path / "absent.env"))
    assert load_env() is None
