"""Entry point for the seasonality testing toolkit.

Provides CLI commands that simulate a daily count series from the
configuration and run the seasonality test, residual diagnostics,
or periodogram on it.
"""

from __future__ import annotations

import argparse
import logging
import sys

import numpy as np
import pandas as pd

from harmonic_seasonality.data.periodogram import PeriodogramAnalyzer
from harmonic_seasonality.data.simulator import simulate_from_config, true_peak_day
from harmonic_seasonality.evaluation.residual_diagnostics import ResidualDiagnostics
from harmonic_seasonality.exceptions import SeasonalityError
from harmonic_seasonality.models.seasonality_tester import SeasonalityTester
from harmonic_seasonality.utils.config import Config, load_config
from harmonic_seasonality.utils.logger import setup_logger

logger = logging.getLogger(__name__)


def setup_logging(config_path: str = "configs/config.yaml") -> Config:
    """Configure the package logger from the config file.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        The loaded configuration.
    """
    config = load_config(config_path)
    setup_logger("harmonic_seasonality", config=config)
    return config


def _simulate(config: Config, seed: int | None) -> pd.DataFrame:
    rng = np.random.default_rng(seed if seed is not None else config.simulation["seed"])
    df = simulate_from_config(config, rng=rng)
    logger.info(
        "Simulated %d days from %s to %s: mean count %.2f, true peak day %.1f",
        len(df),
        df["date"].min().date(),
        df["date"].max().date(),
        df["y"].mean(),
        true_peak_day(config.simulation["phase_shift"], config.analysis["period"]),
    )
    return df


def _tester(config: Config) -> SeasonalityTester:
    analysis = config.analysis
    return SeasonalityTester(
        covariates=analysis["covariates"],
        period=analysis["period"],
        alpha=analysis["alpha"],
    )


def run_command(command: str, config: Config, seed: int | None = None) -> None:
    """Run one command against a series simulated from the config.

    Args:
        command: One of ``simulate``, ``test``, ``diagnose`` or
            ``periodogram``.
        config: Loaded configuration.
        seed: Optional override of ``simulation.seed``.
    """
    df = _simulate(config, seed)

    if command == "periodogram":
        analyzer = PeriodogramAnalyzer(
            min_period=config.analysis["min_period"],
            max_period=config.analysis["max_period"],
        )
        analyzer.analyze_series(df)
        return

    if command in ("test", "diagnose"):
        tester = _tester(config)
        prepared = tester.prepare(df)
        base, harmonic = tester.fit_models(prepared)
        result = tester.evaluate(base, harmonic)
        logger.info(
            "LR statistic=%.3f on %d df, p-value=%.4g, significant=%s",
            result.lr_test.statistic,
            result.lr_test.df,
            result.p_value,
            result.is_significant,
        )

        if command == "diagnose":
            diagnostics = ResidualDiagnostics(max_lag=config.analysis["max_lag"])
            diagnostics.analyze(harmonic, prepared)


def main() -> None:
    """Parse CLI arguments and dispatch to the appropriate command."""
    parser = argparse.ArgumentParser(
        description="Harmonic Regression Seasonality Testing",
    )
    parser.add_argument(
        "--config", default="configs/config.yaml", help="Path to the YAML config"
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="Override the simulation seed"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("simulate", help="Simulate a daily count series")
    subparsers.add_parser("test", help="Run the likelihood-ratio seasonality test")
    subparsers.add_parser("diagnose", help="Test and check residual autocorrelation")
    subparsers.add_parser("periodogram", help="Report dominant periods")

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    config = setup_logging(args.config)
    logger.info("Running command: %s", args.command)

    try:
        run_command(args.command, config, seed=args.seed)
    except SeasonalityError as exc:
        logger.error("%s failed: %s", args.command, exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
