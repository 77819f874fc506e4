"""CLI entry point for the event package search engine."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from package_search.core.config import SearchConfig, Settings
from package_search.core.schemas import Candidate, SearchResult
from package_search.llm import available_providers, get_provider


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Event package search - interpret, rerank and diversify packages",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- search subcommand ---
    search_parser = subparsers.add_parser("search", help="Search a candidate set")
    search_parser.add_argument("--query", "-q", required=True, help="Free-text search query")
    search_parser.add_argument(
        "--candidates",
        required=True,
        help="Path to a JSON array of retrieved packages",
    )
    search_parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML file (default: built-in defaults)",
    )
    search_parser.add_argument(
        "--provider",
        choices=available_providers(),
        help="LLM provider for query interpretation (overrides config)",
    )
    search_parser.add_argument(
        "--no-llm",
        action="store_true",
        help="Skip LLM calls; interpretation falls back to local preprocessing",
    )
    search_parser.add_argument(
        "--vector",
        action="store_true",
        help="Embed the query and compute similarity against stored 'embedding' fields",
    )
    search_parser.add_argument("--limit", type=int, help="Maximum number of results")
    search_parser.add_argument(
        "--diversify",
        action="store_true",
        help="Spread results across price tiers and venue types",
    )
    search_parser.add_argument(
        "--export",
        choices=["json"],
        help="Export results to format (json)",
    )
    search_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    # --- backfill subcommand ---
    backfill_parser = subparsers.add_parser(
        "backfill",
        help="Generate embeddings for a package catalog",
    )
    backfill_parser.add_argument(
        "--catalog",
        required=True,
        help="Path to a JSON array of packages",
    )
    backfill_parser.add_argument(
        "--output",
        required=True,
        help="Where to write the catalog with embeddings (JSON)",
    )
    backfill_parser.add_argument("--config", default=None, help="Path to settings YAML file")
    backfill_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    # --- providers subcommand ---
    subparsers.add_parser("providers", help="List available LLM providers")

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def load_settings(path: str | None) -> Settings:
    return Settings.from_yaml(path) if path else Settings()


def load_json_list(path: str | Path) -> list[dict[str, Any]]:
    """Load a JSON file that must contain an array of objects."""
    path = Path(path)
    if not path.exists():
        msg = f"File not found: {path}"
        raise FileNotFoundError(msg)
    data = json.loads(path.read_text())
    if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
        msg = f"{path} must contain a JSON array of objects"
        raise ValueError(msg)
    return data


def export_results_json(result: SearchResult) -> str:
    """Export search results as a JSON string."""
    data = []
    for rank, scored in enumerate(result.results, start=1):
        c = scored.candidate
        data.append({
            "rank": rank,
            "id": c.id,
            "name": c.name,
            "price_min": c.price_min,
            "price_max": c.price_max,
            "capacity": c.capacity,
            "final_score": round(scored.final_score, 4),
            "scores": scored.scores.model_dump(by_alias=True),
            "explanations": scored.explanations,
        })
    return json.dumps({
        "query": result.query.original,
        "expanded_query": result.query.expanded,
        "extracted_params": result.query.params.model_dump(),
        "total_matches": result.total_matches,
        "results": data,
    }, indent=2)


async def run_search(args: argparse.Namespace, settings: Settings) -> SearchResult:
    from package_search.pipeline.search import (
        CandidateProvider,
        StaticCandidateProvider,
        VectorCandidateProvider,
        search,
    )

    rows = load_json_list(args.candidates)
    candidates = [
        Candidate.model_validate({k: v for k, v in row.items() if k != "embedding"})
        for row in rows
    ]

    provider: CandidateProvider
    if args.vector:
        from package_search.embeddings.gateway import OpenAIEmbeddingGateway

        gateway = OpenAIEmbeddingGateway(
            settings.embeddings.model, settings.embeddings.dimensions
        )
        catalog = [
            (c, row["embedding"]) for c, row in zip(candidates, rows) if row.get("embedding")
        ]
        provider = VectorCandidateProvider(gateway, catalog, limit=settings.search.limit)
    else:
        provider = StaticCandidateProvider(candidates)

    provider_name = "offline" if args.no_llm else (args.provider or settings.llm.provider)
    completer = get_provider(provider_name)
    return await search(args.query, provider, completer, settings)


def cmd_search(args: argparse.Namespace) -> None:
    """Handle search subcommand."""
    settings = load_settings(args.config)
    updates: dict[str, Any] = {}
    if args.limit is not None:
        updates["limit"] = args.limit
    if args.diversify:
        updates["use_diversify"] = True
    if updates:
        search_config = SearchConfig.model_validate(
            {**settings.search.model_dump(), **updates}
        )
        settings = settings.model_copy(update={"search": search_config})

    result = asyncio.run(run_search(args, settings))

    if args.export == "json":
        print(export_results_json(result))
        return

    params = {k: v for k, v in result.query.params.model_dump().items() if v is not None}
    print(f"Query: {result.query.original}")
    print(f"Extracted: {params or 'none'}")
    print(f"{len(result.results)} of {result.total_matches} packages:")
    for rank, scored in enumerate(result.results, start=1):
        c = scored.candidate
        print(f"  {rank:>2}. [{scored.final_score:.3f}] {c.name} "
              f"(${c.price_min:,.0f}-${c.price_max:,.0f}, {c.capacity} guests)")
        print(f"      {'; '.join(scored.explanations)}")
    if result.quality and result.quality.suggestions:
        print("Tips: " + " | ".join(result.quality.suggestions))


def cmd_backfill(args: argparse.Namespace) -> None:
    """Handle backfill subcommand."""
    from package_search.embeddings.backfill import backfill_embeddings
    from package_search.embeddings.gateway import OpenAIEmbeddingGateway

    settings = load_settings(args.config)
    rows = load_json_list(args.catalog)
    by_id = {str(row.get("id")): row for row in rows}

    def store(package_id: str, embedding: list[float], description: str) -> None:
        by_id[package_id]["embedding"] = embedding
        by_id[package_id]["search_description"] = description

    gateway = OpenAIEmbeddingGateway(settings.embeddings.model, settings.embeddings.dimensions)
    print(f"Embedding {len(rows)} packages from {args.catalog}...")
    report = asyncio.run(backfill_embeddings(rows, gateway, store, settings.embeddings))

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(rows, indent=2))

    print(f"Embedded {report.succeeded}/{report.total} packages "
          f"({report.failed_batches}/{report.batches} batches failed).")
    if report.failed_ids:
        print(f"  Failed ids: {', '.join(report.failed_ids)}")
    print(f"Catalog written to {output}")


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    if args.command == "providers":
        for name in available_providers():
            print(name)
        return

    setup_logging(args.verbose)

    try:
        if args.command == "backfill":
            cmd_backfill(args)
        else:
            cmd_search(args)
    except (FileNotFoundError, ImportError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
