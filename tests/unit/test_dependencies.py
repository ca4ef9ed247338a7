from __future__ import annotations

import pytest

from ecsmapper.dependencies import ensure_cli_dependencies, ensure_package_dependencies
from ecsmapper.exceptions import DependencyError


def test_ensure_cli_dependencies_succeeds(monkeypatch) -> None:
    monkeypatch.setattr("ecsmapper.dependencies._is_module_available", lambda module_name: True)
    ensure_cli_dependencies()


def test_ensure_cli_dependencies_raises(monkeypatch) -> None:
    monkeypatch.setattr("ecsmapper.dependencies._is_module_available", lambda module_name: module_name != "rich")
    with pytest.raises(DependencyError, match="rich"):
        ensure_cli_dependencies()


def test_ensure_package_dependencies_succeeds(monkeypatch) -> None:
    monkeypatch.setattr("ecsmapper.dependencies._is_module_available", lambda module_name: True)
    ensure_package_dependencies()


def test_ensure_package_dependencies_raises(monkeypatch) -> None:
    monkeypatch.setattr("ecsmapper.dependencies._is_module_available", lambda module_name: False)
    with pytest.raises(DependencyError, match="package import") as exc_info:
        ensure_package_dependencies()
    assert "pydantic-settings" in exc_info.value.missing_package
