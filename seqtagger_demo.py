"""
SeqTagger Demo Script
---------------------
This script tags a sentence with every configured tagger model.
"""

import asyncio

from seqtagger import ModelRegistry, TaggingPipeline, Unavailable
from seqtagger.pipeline import WARMUP_TEXT


async def demo():
    # Load the embedder and all taggers up front
    print("Loading models...")
    registry = ModelRegistry()
    statuses = await registry.load_all()
    pipeline = TaggingPipeline(registry)

    for model_name, status in statuses.items():
        print(f"\n[{model_name}] {status.value}")
        outcome = await pipeline.run(WARMUP_TEXT, model_name)
        if isinstance(outcome, Unavailable):
            print("  skipped: model not available")
            continue
        for tag in outcome.tags:
            print(f"  {tag.token:<12} {tag.display_label:<8} {tag.percent}")

    print("\nDemo completed successfully!")


if __name__ == '__main__':
    asyncio.run(demo())
