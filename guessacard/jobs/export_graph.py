"""
Export the synergy graph as JSON.

Run this job to precompute graph data for a static renderer:

    python -m guessacard.jobs.export_graph --fragments expPack1 --output graph.json
"""

import argparse
import asyncio
import json
import logging
from pathlib import Path

from guessacard.models.synergy import SynergyMode
from guessacard.services.dataset_loader import DatasetLoader
from guessacard.services.synergy_explorer import explore, load_explorer_dataset

logger = logging.getLogger(__name__)


async def run_export(
    output: Path,
    fragments: list[str],
    mode: SynergyMode,
    source: str | None = None,
) -> Path:
    """Load the dataset, build the unfiltered graph and write it to ``output``."""
    logger.info("Building %s synergy graph for %s", mode.value, ["core", *fragments])

    try:
        dataset = await load_explorer_dataset(DatasetLoader(source), fragments, mode)
    except Exception as e:
        logger.error("Failed to build synergy graph: %s", e)
        raise

    view = explore(dataset)
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", encoding="utf-8") as f:
        json.dump(view.graph.to_dict(), f, ensure_ascii=False, indent=2)

    logger.info(
        "Wrote %d nodes and %d links to %s",
        view.stats.total_cards,
        view.stats.total_links,
        output,
    )
    return output


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Export the card synergy graph")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("graph.json"),
        help="Where to write the graph JSON",
    )
    parser.add_argument(
        "--fragments",
        nargs="*",
        default=[],
        help="Expansion packs to load alongside core (e.g. expPack1 expPack2)",
    )
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in SynergyMode],
        default=SynergyMode.PAIRWISE.value,
        help="Synergy engine",
    )
    parser.add_argument(
        "--source",
        help="Data directory or base URL (defaults to settings.data_source)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_export(args.output, args.fragments, SynergyMode(args.mode), args.source))


if __name__ == "__main__":
    main()
