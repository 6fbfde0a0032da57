"""Shared fixtures for problem_results tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from problem_results.dispatcher import ProblemDispatcher
from problem_results.problem_details import RequestInfo
from problem_results.translation import CatalogTranslator, load_bundled_catalogs

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def request_info() -> RequestInfo:
    """Metadata of a failing ``GET /users/42`` request."""
    return RequestInfo(method="GET", path="/users/42", protocol="HTTP/1.1", trace_id="trace-42")


@pytest.fixture(scope="session")
def bundled_translator() -> CatalogTranslator:
    """Translator over the catalogs shipped with the package."""
    return load_bundled_catalogs()


@pytest.fixture
def dispatcher() -> ProblemDispatcher:
    """Dispatcher rendering the English defaults."""
    return ProblemDispatcher()


@pytest.fixture
def localized_dispatcher(bundled_translator: CatalogTranslator) -> ProblemDispatcher:
    """Dispatcher rendering through the bundled catalogs."""
    return ProblemDispatcher(bundled_translator)


@pytest.fixture
def catalog_dir(tmp_path: Path) -> Path:
    """Directory with a small German and a Dutch catalog."""
    (tmp_path / "de.json").write_text(
        '{"FORBIDDEN_TITLE": "Zugriff verweigert!", '
        '"RESOURCE_NOT_FOUND": "Kein {0} mit {1}={2}."}',
        encoding="utf-8",
    )
    (tmp_path / "nl.json").write_text('{"FORBIDDEN_TITLE": "Toegang geweigerd!"}', encoding="utf-8")
    return tmp_path
