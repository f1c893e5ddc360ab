"""Command-line entry point.

Usage:
    prosody-annotate utterance.xml --voices voices/ -o annotated.xml
    prosody-annotate utterance.xml --voices voices/ --voice demo -v
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import Settings
from .exceptions import ProsodyAnnotatorError
from .features import LocaleFeatureResolver
from .markup import load_markup, to_markup_string
from .pipeline import AcousticModeller
from .voices import VoiceCatalog


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prosody-annotate",
        description="Predict segment durations and F0 targets for a markup document",
    )
    parser.add_argument("input", help="Path to the input markup file")
    parser.add_argument("-o", "--output", help="Write annotated markup here (default: stdout)")
    parser.add_argument("--voices", help="Directory of voice YAML files")
    parser.add_argument("--features", help="Directory of feature-set YAML files")
    parser.add_argument("--voice", help="Voice to use when the document names none")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def run(args: argparse.Namespace, settings: Settings | None = None) -> int:
    settings = settings if settings is not None else Settings()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )

    catalog = VoiceCatalog.from_directory(args.voices or settings.voices_dir)
    features_dir = args.features or settings.features_dir
    if features_dir:
        resolver = LocaleFeatureResolver.from_directory(features_dir)
    else:
        resolver = LocaleFeatureResolver.default()

    root = load_markup(args.input)
    result = AcousticModeller(catalog, resolver, settings).process(root, default_voice=args.voice)
    text = to_markup_string(result.document)

    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
    else:
        sys.stdout.write(text + "\n")

    if result.report is None:
        print("No acoustic models applied (voice not configured)", file=sys.stderr)
    else:
        print(
            f"Voice {result.voice}: applied {', '.join(result.applied)}; "
            f"{result.report.skip_count} of {result.report.syllable_count} syllables skipped",
            file=sys.stderr,
        )
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return run(args)
    except (ProsodyAnnotatorError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
