"""
Command line entry point for the teams file organizer.
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

from categorization import FileCategory
from config import AppConfig
from database import DatabaseManager
from organizer import CategorizationService
from utils import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="teams-organizer", description=__doc__)
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    commands = parser.add_subparsers(dest="command", required=True)

    categorize = commands.add_parser("categorize", help="Rule-based categorization of a name and path")
    categorize.add_argument("name")
    categorize.add_argument("path")
    categorize.add_argument("--mime-type", default="")
    categorize.add_argument("--content-file", default=None, help="Text file to send for AI analysis")

    analyze = commands.add_parser("analyze", help="AI analysis of stored files")
    analyze.add_argument("file_ids", nargs="+")

    recategorize = commands.add_parser("recategorize", help="Set a file's category manually")
    recategorize.add_argument("file_id")
    recategorize.add_argument("category", choices=[item.value for item in FileCategory])

    keywords = commands.add_parser("keywords", help="Show rule and learned keywords for a department")
    keywords.add_argument("category", choices=[item.value for item in FileCategory])
    keywords.add_argument("--limit", type=int, default=20)

    stats = commands.add_parser("stats", help="File counts and learned keywords per department")
    stats.add_argument("--department", default=None, choices=[item.value for item in FileCategory])

    analysis = commands.add_parser("analysis", help="Show the stored content analysis of a file")
    analysis.add_argument("file_id")
    return parser


async def _run(args: argparse.Namespace, service: CategorizationService) -> object:
    if args.command == "categorize":
        if args.content_file:
            with open(args.content_file, "r", encoding="utf-8", errors="ignore") as handle:
                content = handle.read()
            result = await service.categorize_file_with_ai(args.name, args.path, args.mime_type, content)
            return result.to_dict()
        rule = service.categorize_file(args.name, args.path, args.mime_type)
        return {"category": rule.category.value, "confidence": rule.confidence, "reason": rule.reason}
    if args.command == "analyze":
        results = await service.analyze_files(args.file_ids)
        return {file_id: result.to_dict() if result else None for file_id, result in results.items()}
    if args.command == "recategorize":
        record = await service.recategorize_file(args.file_id, args.category)
        return {"file_id": record.file_id, "category": record.category.value, "confidence": record.confidence}
    if args.command == "stats":
        return service.department_stats(args.department)
    if args.command == "analysis":
        stored = service.get_content_analysis(args.file_id)
        return dataclasses.asdict(stored) if stored else None
    category = FileCategory(args.category)
    return {
        "rules": service.get_category_keywords(category),
        "learned": service.department_top_keywords(category, limit=args.limit),
    }


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    config = AppConfig.load(Path(args.config) if args.config else None)
    loggers = setup_logging(config.resolve_path("paths", "logs", default="logs"), config.log_level)
    db_manager = DatabaseManager(config.resolve_path("database", "path", default="data/organizer.sqlite"))
    db_manager.initialize()
    service = CategorizationService.from_config(config, db_manager, loggers=loggers)
    try:
        output = asyncio.run(_run(args, service))
    except (KeyError, ValueError) as exc:
        loggers["main"].error("%s", exc)
        return 1
    finally:
        db_manager.close()
    json.dump(output, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
