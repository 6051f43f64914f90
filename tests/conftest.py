"""
Shared fixtures for the orchestrator test suite.

All fixtures are network-free: the weather lookup is replaced by a demo-mode
fetcher (no API key) and the generator backend is the template generator.
"""

import sys
from pathlib import Path

import pytest

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from convo_agent.config import AgentSettings
from convo_agent.core.factory import build_orchestrator


SAMPLE_DOC = (
    "# Sample\n\n"
    "Short line.\n\n"
    "Retrieval augmented generation attaches knowledge paragraphs to each request "
    "based on embedding similarity.\n\n"
    "Session memory keeps the most recent conversation messages for every session "
    "identifier and drops the oldest ones first.\n"
)


@pytest.fixture
def docs_dir(tmp_path):
    docs = tmp_path / "docs"
    docs.mkdir()
    (docs / "guide.md").write_text(SAMPLE_DOC, encoding="utf-8")
    return docs


@pytest.fixture
def settings(docs_dir):
    return AgentSettings(
        docs_path=str(docs_dir),
        session_sweep_interval=0,
        weather_api_key=None,
        generator_backend="template",
    )


@pytest.fixture
def orchestrator(settings):
    return build_orchestrator(settings)
