import os

import pytest


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    for name in list(os.environ):
        if name.startswith("PVPC_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
