from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from app.core.config import settings
from app.modules.study_cards.errors import StudyCardError
from app.modules.study_cards.pipeline import StudyCardPipeline


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="study-cards", description="Study cards generator CLI"
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    g = sub.add_parser("generate", help="Generate study cards from a PDF file")
    g.add_argument("path", help="Path to the PDF document")
    g.add_argument("--model", "-m", help="Preferred Gemini model (tried first)")

    args = parser.parse_args(argv)
    if args.cmd == "generate":
        path = Path(args.path)
        if not path.is_file():
            raise SystemExit(f"File not found: {path}")
        try:
            pipeline = StudyCardPipeline.from_settings(
                settings, preferred_model=args.model
            )
            result = asyncio.run(pipeline.run(path.read_bytes()))
        except StudyCardError as exc:
            print(exc.message, file=sys.stderr)
            return 1
        payload = {
            "model": result.model,
            "cards": [c.model_dump(by_alias=True) for c in result.cards],
        }
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return 0

    parser.print_help()
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
