import pytest

from src.ingest.pipeline import PipelineServices
from tests.fakes import make_services


@pytest.fixture
def services() -> PipelineServices:
    """Fresh stores per test, with AI enrichment and image download disabled."""
    return make_services()
