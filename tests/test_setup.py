"""Verify project setup, imports and bundled data."""

from pathlib import Path


ROOT = Path(__file__).parent.parent


def test_package_directories_have_init():
    """All source packages must have __init__.py."""
    for pkg in ["neurosoma", "neurosoma/agent", "neurosoma/tools", "neurosoma/memory", "neurosoma/interface"]:
        init_file = ROOT / pkg / "__init__.py"
        assert init_file.exists(), f"Missing {init_file}"


def test_technique_catalog_is_bundled():
    assert (ROOT / "neurosoma" / "data" / "technique_library.json").is_file()


def test_llm_import():
    """The LLM module must be importable without an API key."""
    from neurosoma.agent import llm
    assert hasattr(llm, "get_client")
    assert hasattr(llm, "generate_text")
    assert hasattr(llm, "check_llm_health")


def test_get_client_requires_api_key(monkeypatch):
    import pytest
    from neurosoma.agent.llm import get_client

    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    with pytest.raises(ValueError, match="GEMINI_API_KEY"):
        get_client()
