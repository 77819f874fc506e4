"""Batch embedding backfill for a package catalog.

Batches are embedded one request at a time with a fixed pause in between to
stay under the gateway's throughput limits. A failing batch is recorded and
skipped; the run always finishes and reports partial success.
"""

import asyncio
import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from package_search.core.config import EmbeddingConfig
from package_search.core.schemas import BackfillReport
from package_search.embeddings.gateway import (
    EmbeddingGateway,
    build_search_description,
    validate_embedding,
)

logger = logging.getLogger(__name__)

# Receives (package_id, embedding, search_description) for each embedded package.
EmbeddingSink = Callable[[str, list[float], str], None]


def _batches(items: Sequence[Any], size: int) -> list[Sequence[Any]]:
    return [items[i:i + size] for i in range(0, len(items), size)]


async def backfill_embeddings(
    packages: Sequence[Mapping[str, Any]],
    gateway: EmbeddingGateway,
    sink: EmbeddingSink,
    config: EmbeddingConfig | None = None,
) -> BackfillReport:
    """Embed every package and hand the vectors to ``sink``.

    Args:
        packages: Catalog rows; each needs an ``id`` plus the fields used by
            :func:`build_search_description`.
        gateway: Embedding backend.
        sink: Called once per successfully embedded package.
        config: Batch size, inter-batch delay and expected dimensions.

    Returns:
        BackfillReport with success and failure counts.
    """
    config = config or EmbeddingConfig()
    report = BackfillReport(total=len(packages))
    batches = _batches(packages, config.batch_size)

    if not batches:
        logger.info("No packages need embeddings")
        return report

    for index, batch in enumerate(batches, start=1):
        report.batches += 1
        ids = [str(pkg.get("id")) for pkg in batch]
        logger.info("Processing batch %d/%d (%d packages)", index, len(batches), len(batch))

        try:
            descriptions = [build_search_description(pkg) for pkg in batch]
            embeddings = await asyncio.to_thread(gateway.embed_batch, descriptions)
            if len(embeddings) != len(batch):
                msg = f"Gateway returned {len(embeddings)} vectors for {len(batch)} texts"
                raise ValueError(msg)
            for embedding in embeddings:
                if not validate_embedding(embedding, config.dimensions):
                    msg = f"Invalid embedding dimensions (expected {config.dimensions})"
                    raise ValueError(msg)
        except Exception:
            logger.warning("Batch %d failed - continuing with next batch", index, exc_info=True)
            report.failed += len(batch)
            report.failed_batches += 1
            report.failed_ids.extend(ids)
        else:
            for package_id, embedding, description in zip(ids, embeddings, descriptions):
                try:
                    sink(package_id, embedding, description)
                except Exception:
                    logger.warning("Failed to store embedding for %s", package_id, exc_info=True)
                    report.failed += 1
                    report.failed_ids.append(package_id)
                else:
                    report.succeeded += 1

        if index < len(batches) and config.batch_delay_s > 0:
            await asyncio.sleep(config.batch_delay_s)

    logger.info(
        "Backfill complete: %d/%d embedded, %d failed (%d/%d batches failed)",
        report.succeeded, report.total, report.failed, report.failed_batches, report.batches,
    )
    return report
