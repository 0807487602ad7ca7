from __future__ import annotations

import logging
from typing import Optional

import typer
import uvicorn

from cli.config import parse_price_arguments
from errors import ArgumentError
from logging_config import configure_logging
from services.sampler import build_price_sampler
from settings import get_settings

logger = logging.getLogger(__name__)


app = typer.Typer(
    help="Threshold monitors that text you when a market value crosses a line.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Logging level (defaults to LOG_LEVEL env or INFO).",
    ),
) -> None:
    """Entry point for the CLI."""
    configure_logging(log_level)


@app.command("price")
def price_command(
    asset: str = typer.Argument(..., help="Asset to watch: btc, eth or sol."),
    mode: str = typer.Argument(..., help="lt alerts below the threshold, gt above it."),
    threshold: str = typer.Argument(..., help="Price threshold."),
) -> None:
    """Poll the price of one asset and alert when it crosses the threshold."""
    try:
        config = parse_price_arguments(asset, mode, threshold)
    except ArgumentError as exc:
        logger.critical("%s", exc)
        raise typer.Exit(code=1) from exc

    logger.info(
        "Starting price monitor",
        extra={
            "asset": config.asset.value,
            "mode": config.mode.value,
            "threshold": config.threshold,
        },
    )
    sampler = build_price_sampler(config.asset, config.mode, config.threshold)
    sampler.run()


@app.command("funding")
def funding_command() -> None:
    """Stream the funding rate and serve the latest reading on the status page."""
    settings = get_settings()
    logger.info(
        "Status page listening on port %s",
        settings.status_port,
        extra={"symbol": settings.funding_symbol},
    )
    uvicorn.run(
        "app.main:create_app",
        factory=True,
        host=settings.status_host,
        port=settings.status_port,
        log_config=None,
    )
