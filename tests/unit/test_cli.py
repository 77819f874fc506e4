"""Tests for the command-line entry point."""

import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from main import load_json_list, main, parse_args

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"
PACKAGES = str(FIXTURES_DIR / "sample_packages.json")


class TestParseArgs:
    def test_search_defaults(self) -> None:
        args = parse_args(["search", "-q", "garden wedding", "--candidates", PACKAGES])
        assert args.command == "search"
        assert args.query == "garden wedding"
        assert args.no_llm is False
        assert args.limit is None

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            parse_args([])

    def test_unknown_provider_rejected(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["search", "-q", "x", "--candidates", PACKAGES, "--provider", "nope"])


class TestLoadJsonList:
    def test_loads_fixture(self) -> None:
        rows = load_json_list(PACKAGES)
        assert [r["id"] for r in rows] == ["pkg-seafood", "pkg-steak", "pkg-rooftop"]

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_json_list(tmp_path / "missing.json")

    def test_not_a_list(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text('{"id": 1}')
        with pytest.raises(ValueError, match="JSON array of objects"):
            load_json_list(path)


class TestMain:
    def test_providers(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["providers"])
        assert capsys.readouterr().out.split() == [
            "anthropic", "gemini", "offline", "ollama", "openai",
        ]

    def test_offline_search_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        main([
            "search", "-q", "seafood catering under $3000 for 150 guests",
            "--candidates", PACKAGES, "--no-llm", "--limit", "2", "--export", "json",
        ])
        data = json.loads(capsys.readouterr().out)
        assert [r["id"] for r in data["results"]] == ["pkg-seafood", "pkg-steak"]
        assert data["total_matches"] == 3
        assert data["extracted_params"]["budget_max"] == 3000

    def test_offline_search_text(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["search", "-q", "rooftop", "--candidates", PACKAGES, "--no-llm"])
        out = capsys.readouterr().out
        assert "3 of 3 packages" in out
        assert "Skyline Rooftop" in out

    def test_missing_candidates_exits(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["search", "-q", "x", "--candidates", "/nonexistent.json", "--no-llm"])
        assert exc_info.value.code == 1
        assert "File not found" in capsys.readouterr().err

    def test_backfill_writes_catalog(self, tmp_path: Path) -> None:
        output = tmp_path / "out.json"

        class StubGateway:
            def __init__(self, *args: Any) -> None:
                pass

            def embed_batch(self, texts: list[str]) -> list[list[float]]:
                return [[0.5] * 1536 for _ in texts]

        with patch("package_search.embeddings.gateway.OpenAIEmbeddingGateway", StubGateway):
            main(["backfill", "--catalog", PACKAGES, "--output", str(output)])

        rows = json.loads(output.read_text())
        assert all(len(r["embedding"]) == 1536 for r in rows)
        assert rows[0]["search_description"].startswith("Coastal Seafood Catering")
