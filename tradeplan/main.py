"""TradePlan — application entry point.

Boots the FastAPI internal server and provides the CLI entry point for
serving the API and printing the trade plan or budget from the console.
"""

import logging

from fastapi import FastAPI

from tradeplan.api.routers import router

app = FastAPI(title="TradePlan Internal API", version="0.1.0")
app.include_router(router)

logger = logging.getLogger("tradeplan")


@app.get("/health")
async def health():
    """Liveness check."""
    return {"status": "ok"}


def build_coordinator(config):
    """Return an ``InsightCoordinator`` or None when no API key is configured."""
    from tradeplan.insights.client import InsightClient
    from tradeplan.insights.coordinator import InsightCoordinator

    if not config.insights_enabled:
        logger.warning("INSIGHT_API_KEY not set; insight generation disabled.")
        return None
    return InsightCoordinator(InsightClient(config), default_top_n=config.insight_top_n)


# ── CLI ──────────────────────────────────────────────────────────────────


def _run_cli(argv=None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command."""
    import argparse

    from tradeplan.config import load_config
    from tradeplan.repos.db import init_db
    from tradeplan.repos.session_repo import SessionRepo

    parser = argparse.ArgumentParser(description="TradePlan Forex trade planner")
    sub = parser.add_subparsers(dest="command", required=True)
    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=None)
    plan = sub.add_parser("plan", help="Print the correlation table and trade plan")
    plan.add_argument("--paste", help="Tab-separated file of Currency/D1/4H/1H rows to import first")
    plan.add_argument("--bias", choices=["all", "actionable", "neutral"], default="all")
    sub.add_parser("budget", help="Print the budget summary")
    args = parser.parse_args(argv)

    config = load_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    init_db(config.db_path)
    repo = SessionRepo(config.db_path, default_capital=config.default_capital)

    if args.command == "serve":
        _serve(config, repo, args.host, args.port or config.port)
    elif args.command == "plan":
        _print_plan(config, repo, args.paste, args.bias)
    else:
        _print_budget(config, repo)


def _serve(config, repo, host: str, port: int) -> None:
    """Start uvicorn with routers wired to the persisted session."""
    import uvicorn

    from tradeplan.api.routers import configure_routers

    configure_routers(config=config, repo=repo, coordinator=build_coordinator(config))
    logger.info("TradePlan API available at http://%s:%d", host, port)
    uvicorn.run(app, host=host, port=port, log_level=config.log_level.lower())


def _print_plan(config, repo, paste_path, bias_filter: str) -> None:
    import pathlib

    from tradeplan.cli.dashboard import format_correlations, format_trade_plan, print_report
    from tradeplan.signals.aggregator import filter_pairs, has_correlation_values, resolve_pairs
    from tradeplan.state.session import replace_correlations
    from tradeplan.state.transfer import parse_paste

    state = repo.load()
    if paste_path:
        text = pathlib.Path(paste_path).read_text(encoding="utf-8")
        correlations, updated = parse_paste(text, state.correlations)
        if updated:
            state = replace_correlations(state, correlations)
            repo.save(state)
        logger.info("Imported %d currencies from %s", updated, paste_path)

    inputs = state.correlation_list()
    sections = [format_correlations(inputs, config.band_profile)]
    if has_correlation_values(inputs):
        groups = filter_pairs(resolve_pairs(inputs, config.band_profile), bias_filter=bias_filter)
        sections.append(format_trade_plan(groups))
    else:
        sections.append("No correlation values entered; trade plan unavailable.")
    print_report(*sections)


def _print_budget(config, repo) -> None:
    from tradeplan.cli.dashboard import format_budget, print_report
    from tradeplan.risk.budget import summarize

    state = repo.load()
    summary = summarize(state.budget, state.capital, config.pip_profile)
    print_report(format_budget(state.budget.values(), summary, state.capital))


if __name__ == "__main__":
    _run_cli()
