from pathlib import Path

import pytest

from landing_page_composer.models.document import Document

FIXTURES = Path(__file__).resolve().parent.parent / "data" / "pages"


def load_fixture(name: str) -> Document:
    fixture_path = FIXTURES / f"{name}.json"
    return Document.model_validate_json(fixture_path.read_text(encoding="utf-8"))


@pytest.fixture
def starter_document() -> Document:
    return load_fixture("starter")
