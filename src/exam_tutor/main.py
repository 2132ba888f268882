"""Entry point — wires Config → AnalysisClient → HistoryCache → RequestOrchestrator."""
import argparse
import asyncio
import logging
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from exam_tutor.config import Config
from exam_tutor.constants import (
    MSG_ANALYZING,
    MSG_FACT_CHECK,
    MSG_FACT_CHECK_CORRECT,
    MSG_FACT_CHECK_RESULT,
    MSG_FACT_CHECK_SKIPPED,
    MSG_FACT_CHECK_WRONG,
    MSG_FILE_NOT_FOUND,
    MSG_HISTORY_DELETED,
    MSG_HISTORY_EMPTY,
    MSG_HISTORY_NOT_FOUND,
    MSG_PRACTICE_EMPTY,
    MSG_PRACTICE_PROBLEM,
    PRACTICE_FALSE_WORDS,
    PRACTICE_TRUE_WORDS,
)
from exam_tutor.history import HistoryCache, HistoryItem
from exam_tutor.orchestrator import RequestOrchestrator, Status
from exam_tutor.storage import JsonFileStorage
from exam_tutor.validation import CandidateFile
from exam_tutor.vision.claude import ClaudeAnalysisClient
from exam_tutor.vision.client import AnalysisClient
from exam_tutor.vision.openai import OpenAIAnalysisClient

console = Console()


def _setup_logging(level: str) -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    list(map(root.removeHandler, root.handlers[:]))
    root.addHandler(RichHandler(rich_tracebacks=True))


def build_client(config: Config) -> AnalysisClient | None:
    match (config.anthropic_api_key, config.openai_api_key):
        case (str() as k, _) if k:
            return ClaudeAnalysisClient(k, model=config.claude_model)
        case (_, str() as k) if k:
            return OpenAIAnalysisClient(k, model=config.openai_model)
        case _:
            return None


def build_orchestrator(config: Config) -> RequestOrchestrator:
    storage = JsonFileStorage(config.history_dir, quota_bytes=config.history_quota_bytes)
    return RequestOrchestrator(build_client(config), HistoryCache(storage))


def _parse_answer(text: str) -> tuple[int, bool]:
    number, _, word = text.partition("=")
    match (number.strip().isdigit(), word.strip().lower()):
        case (True, w) if w in PRACTICE_TRUE_WORDS:
            return int(number), True
        case (True, w) if w in PRACTICE_FALSE_WORDS:
            return int(number), False
        case _:
            raise argparse.ArgumentTypeError(f"expected N=true|false, got {text!r}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="exam-tutor", description="AI exam question analysis")
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="Analyze an exam question image")
    analyze.add_argument("image", type=Path)
    analyze.add_argument("--query", default=None, help="Optional question for the tutor")

    history = sub.add_parser("history", help="Review past analyses")
    history_sub = history.add_subparsers(dest="history_command", required=True)
    history_sub.add_parser("list", help="List stored analyses")
    show = history_sub.add_parser("show", help="Print a stored analysis")
    show.add_argument("item_id")
    delete = history_sub.add_parser("delete", help="Delete a stored analysis")
    delete.add_argument("item_id")

    practice = sub.add_parser("practice", help="Quiz yourself on a stored analysis")
    practice.add_argument("item_id")
    practice.add_argument(
        "--answer",
        action="append",
        default=[],
        type=_parse_answer,
        metavar="N=O|X",
        help="Answer fact-check question N (repeatable)",
    )
    return parser


def _label(item: HistoryItem) -> str:
    section = item.analysis.single_question_analysis or {}
    return str(section.get("evaluationArea", ""))


def _history_table(items: tuple[HistoryItem, ...]) -> Table:
    table = Table("id", "when", "evaluation area")
    list(map(
        lambda item: table.add_row(
            item.id,
            datetime.fromtimestamp(item.timestamp / 1000).strftime("%Y-%m-%d %H:%M"),
            _label(item),
        ),
        items,
    ))
    return table


async def _run_analyze(orchestrator: RequestOrchestrator, image: Path, query: str | None) -> int:
    try:
        candidate = CandidateFile.from_path(image)
    except FileNotFoundError:
        console.print(MSG_FILE_NOT_FOUND % escape(str(image)))
        return 2
    if not orchestrator.select_image(candidate):
        console.print(orchestrator.state.error)
        return 2
    console.print(MSG_ANALYZING % image.name)
    state = await orchestrator.analyze(query)
    match state.status:
        case Status.RESOLVED:
            console.print_json(data=state.result.to_dict())
            return 0
        case _:
            console.print(state.error)
            return 1


def _run_history(orchestrator: RequestOrchestrator, args: argparse.Namespace) -> int:
    match (args.history_command, orchestrator.history.items):
        case ("list", ()):
            console.print(MSG_HISTORY_EMPTY)
            return 0
        case ("list", items):
            console.print(_history_table(items))
            return 0
        case ("show", _):
            match orchestrator.load_history_item(args.item_id):
                case True:
                    console.print_json(data=orchestrator.state.result.to_dict())
                    return 0
                case False:
                    console.print(MSG_HISTORY_NOT_FOUND % args.item_id)
                    return 1
        case ("delete", _):
            match orchestrator.history.get(args.item_id):
                case None:
                    console.print(MSG_HISTORY_NOT_FOUND % args.item_id)
                    return 1
                case _:
                    orchestrator.delete_history_item(args.item_id)
                    console.print(MSG_HISTORY_DELETED % args.item_id)
                    return 0
    return 1


def _print_problem(problem: object) -> None:
    match problem:
        case Mapping():
            console.print(MSG_PRACTICE_PROBLEM % tuple(map(
                lambda key: escape(str(problem.get(key, ""))),
                ("title", "question", "instructions"),
            )))
        case _:
            pass


def _check_answer(orchestrator: RequestOrchestrator, number: int, selected: bool) -> bool:
    match orchestrator.practice.check(number - 1, selected):
        case None:
            console.print(MSG_FACT_CHECK_SKIPPED % number)
            return False
        case checked:
            verdict = MSG_FACT_CHECK_CORRECT if checked.correct else MSG_FACT_CHECK_WRONG
            console.print(MSG_FACT_CHECK_RESULT % (number, verdict, escape(checked.explanation)))
            return True


def _run_practice(orchestrator: RequestOrchestrator, args: argparse.Namespace) -> int:
    if not orchestrator.load_history_item(args.item_id):
        console.print(MSG_HISTORY_NOT_FOUND % args.item_id)
        return 1
    orchestrator.reveal_practice_problems()
    problems = orchestrator.state.result.practice_problems
    fact_checks = orchestrator.practice.state.fact_checks
    match (problems, fact_checks):
        case (None, ()):
            console.print(MSG_PRACTICE_EMPTY)
            return 0
        case (Mapping(), _):
            list(map(lambda key: _print_problem(problems.get(key)), ("variation", "nextStep")))
        case _:
            pass
    list(map(
        lambda pair: console.print(MSG_FACT_CHECK % (pair[0] + 1, escape(pair[1].question))),
        enumerate(fact_checks),
    ))
    checked = list(map(lambda answer: _check_answer(orchestrator, *answer), args.answer))
    return 0 if all(checked) else 1


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    config = Config.from_env(require_api_key=args.command == "analyze")
    _setup_logging(config.log_level)

    orchestrator = build_orchestrator(config)
    match args.command:
        case "analyze":
            return asyncio.run(_run_analyze(orchestrator, args.image, args.query))
        case "practice":
            return _run_practice(orchestrator, args)
        case _:
            return _run_history(orchestrator, args)


if __name__ == "__main__":
    raise SystemExit(main())
