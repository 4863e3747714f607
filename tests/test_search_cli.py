"""Tests for the search CLI argument handling."""

import importlib.util
from pathlib import Path

import pytest

SCRIPT_PATH = Path(__file__).parent.parent / "scripts" / "search.py"


@pytest.fixture(scope="module")
def parser():
    module_spec = importlib.util.spec_from_file_location("search_cli", SCRIPT_PATH)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module.build_parser()


class TestModeFlags:
    def test_flags_default_to_config(self, parser):
        args = parser.parse_args(["refund policy"])
        assert args.hybrid is None
        assert args.rerank is None

    def test_flags_force_modes_on(self, parser):
        args = parser.parse_args(["refund policy", "--hybrid", "--rerank"])
        assert args.hybrid is True
        assert args.rerank is True

    def test_flags_force_modes_off(self, parser):
        args = parser.parse_args(["refund policy", "--no-hybrid", "--no-rerank"])
        assert args.hybrid is False
        assert args.rerank is False

    def test_filters(self, parser):
        args = parser.parse_args(["q", "--top-k", "3", "--document", "doc-1", "--tags", "hr", "legal"])
        assert (args.top_k, args.document, args.tags) == (3, "doc-1", ["hr", "legal"])
