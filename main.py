# file: main.py

import argparse

from seqtagger.tagger_models import TAGGER_KINDS, build_tagger, export_tagger


def main():
    parser = argparse.ArgumentParser(description="seqtagger: Developer Toolkit CLI")
    parser.add_argument("command", choices=['export-tagger'], help="Action to perform.")
    parser.add_argument('--kind', choices=TAGGER_KINDS, default='dense', help="Tagger architecture to export.")
    parser.add_argument('--labels', nargs='+', help="Output labels, in score order.")
    parser.add_argument('--sequence-length', type=int, default=20, help="Fixed number of input positions.")
    parser.add_argument('--sentinel-label', type=str, default=None, help="Label shown for padding positions.")
    parser.add_argument('--output-dir', type=str, help="Directory receiving model.pt and tagger_metadata.json.")

    args = parser.parse_args()

    if args.command == 'export-tagger':
        if not args.labels or not args.output_dir:
            print("Error: Please provide --labels and --output-dir")
            return
        # Weights are untrained; useful only to exercise the serving path
        tagger = build_tagger(args.kind, num_labels=len(args.labels))
        model_path = export_tagger(
            tagger,
            args.output_dir,
            args.labels,
            args.sequence_length,
            sentinel_label=args.sentinel_label,
        )
        print(f"Exported untrained '{args.kind}' tagger to {model_path}")

if __name__ == '__main__':
    main()
