"""Command-line interface for tagging text.

Usage:
    seqtagger tag "What is the weather in Cambridge MA?" --model dense
    seqtagger tag --input-file sentences.txt --output-file tags.json
    seqtagger status --models-dir ./models
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from .config import DEFAULT_CONFIG
from .exceptions import SeqTaggerError
from .pipeline import TaggingPipeline
from .registry import ModelRegistry
from .results import Unavailable


def _format_result(text: str, outcome) -> str:
    if isinstance(outcome, Unavailable):
        return f"\nText: {text}\nModel '{outcome.model_name}' is not available."
    lines = [f"\nText: {text}"]
    if not outcome.tags:
        lines.append("No tokens.")
    for tag in outcome.tags:
        lines.append(f"  {tag.token} -> {tag.display_label} ({tag.percent})")
    return '\n'.join(lines)


def _outcome_to_dict(text: str, outcome) -> dict:
    if isinstance(outcome, Unavailable):
        return {'text': text, 'unavailable': outcome.model_name}
    return {'text': text, **outcome.to_dict(include_embeddings=False)}


async def _tag(args: argparse.Namespace) -> int:
    if args.input_file:
        with open(args.input_file, 'r', encoding='utf-8') as f:
            texts = [line.strip() for line in f if line.strip()]
    elif args.text:
        texts = [' '.join(args.text)]
    else:
        print("Enter text to tag (press Ctrl+D when done):")
        texts = [line.strip() for line in sys.stdin if line.strip()]

    registry = ModelRegistry(models_dir=args.models_dir)
    pipeline = TaggingPipeline(registry)
    outcomes = await pipeline.run_many(texts, args.model, show_progress=len(texts) > 1)

    if args.json or args.output_file:
        payload = [_outcome_to_dict(text, outcome) for text, outcome in zip(texts, outcomes)]
        if args.output_file:
            with open(args.output_file, 'w', encoding='utf-8') as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            print(f"Results saved to {args.output_file}")
        else:
            print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        for text, outcome in zip(texts, outcomes):
            print(_format_result(text, outcome))

    return 1 if any(isinstance(outcome, Unavailable) for outcome in outcomes) else 0


async def _status(args: argparse.Namespace) -> int:
    registry = ModelRegistry(models_dir=args.models_dir)
    statuses = await registry.load_all()
    print(f"embedder: {registry.embedder_status().value}")
    for name, status in statuses.items():
        print(f"{name}: {status.value}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Sequence tagging over sentence embeddings')
    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    tag_parser = subparsers.add_parser('tag', help='Tag text with a tagger model')
    tag_parser.add_argument('text', nargs='*', help='Text to tag')
    tag_parser.add_argument('--model', default=DEFAULT_CONFIG['default_model'], help='Tagger name')
    tag_parser.add_argument('--models-dir', default=DEFAULT_CONFIG['models_dir'],
                            help='Directory the model locations are relative to')
    tag_parser.add_argument('--input-file', help='Path to input text file (one sentence per line)')
    tag_parser.add_argument('--output-file', help='Path to save the tagged output as JSON')
    tag_parser.add_argument('--json', action='store_true', help='Print JSON instead of text')

    status_parser = subparsers.add_parser('status', help='Load all models and show their status')
    status_parser.add_argument('--models-dir', default=DEFAULT_CONFIG['models_dir'],
                               help='Directory the model locations are relative to')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == 'tag':
        handler = _tag
    elif args.command == 'status':
        handler = _status
    else:
        parser.print_help()
        return 2

    try:
        return asyncio.run(handler(args))
    except SeqTaggerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
