"""Entry point for the vidplan command line."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path


def _setup_logging(verbose: bool = False) -> None:
    from .config import CONFIG_DIR, LOG_FILE

    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=str(LOG_FILE),
        level=logging.DEBUG,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if verbose:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(logging.INFO)
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        logging.getLogger().addHandler(handler)


def _read_scenario(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError:
        return Path(path).read_text(encoding="cp1252")


def _print_models() -> None:
    from .model_registry import list_models

    print(f"{'MODEL':<26}{'PROVIDER':<11}{'MAX S':>6}{'CHARS':>7}  DIALOGUE  STYLE")
    for caps in list_models():
        print(
            f"{caps.model_id:<26}{caps.provider:<11}{caps.max_duration_sec:>6}"
            f"{caps.max_prompt_chars:>7}  {caps.supports_dialogue:<9} {caps.prompt_style}"
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vidplan",
        description="Split a scenario into a segment-by-segment video generation plan",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--text", type=str, help="Scenario text")
    source.add_argument("--scenario", type=str, help="Path to a scenario text file")
    parser.add_argument("--model", type=str, default=None, help="Target video model id")
    parser.add_argument("--duration", type=float, default=None, help="Target total duration in seconds")
    parser.add_argument("--seed", type=int, default=None, help="Base seed for reproducible plans")
    parser.add_argument("--no-llm", action="store_true", help="Use rule-based prompts only")
    parser.add_argument("--no-frame-chaining", action="store_true", help="Do not chain first frames")
    parser.add_argument("--output", type=str, default=None, help="Directory for plan runs")
    parser.add_argument("--improve", action="store_true", help="Rewrite the scenario before planning")
    parser.add_argument("--list-models", action="store_true", help="List known models and exit")
    parser.add_argument("--verbose", action="store_true", help="Also log to stderr")
    return parser


def run_headless(args: argparse.Namespace) -> int:
    """Plan the scenario from ``args``, printing progress to stdout."""
    from schemas import PlanOptions
    from utils import RunManager

    from .config import Config
    from .improver import build_improvers
    from .pipeline import PipelineCancelled, PlanningPipeline
    from .scenario_assistant import improve_scenario

    config = Config.load()
    text = args.text if args.text is not None else _read_scenario(args.scenario)
    model_id = args.model or config.default_model_id
    improvers = [] if args.no_llm else build_improvers(config)

    if not improvers and not args.no_llm:
        print("⚠  No LLM credentials found, using rule-based prompts.")

    if args.improve:
        improvement = improve_scenario(
            text, improvers, target_model_id=model_id,
            target_duration_sec=args.duration, language=config.language,
        )
        print(f"📝 Scenario improved: {', '.join(improvement.changes_made)}")
        text = improvement.improved_scenario

    options = PlanOptions(enable_frame_chaining=not args.no_frame_chaining, seed=args.seed)
    pipeline = PlanningPipeline(config=config, progress_cb=print, improvers=improvers)

    try:
        result = pipeline.run(text, model_id, args.duration, options)
    except PipelineCancelled:
        print("Cancelled.")
        return 1
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    rm = RunManager(base_dir=args.output or str(config.output_dir))
    run_dir = rm.create_run()
    rm.save_plan(run_dir, result)
    print(f"\n✅ Plan written to {run_dir}")
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    if args.list_models:
        _print_models()
        return

    if args.text is None and args.scenario is None:
        parser.error("one of --text or --scenario is required")

    sys.exit(run_headless(args))


if __name__ == "__main__":
    main()
