#!/usr/bin/env python
"""
Pre/post-pandemic forecast comparison for monthly prescription counts.
Coordinates loading, seasonal ARIMA order selection, benchmarks and storage.
"""
import sys
import argparse
from pathlib import Path
import logging
from datetime import datetime
import time
import traceback
import psutil

# Add project root to path
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.append(str(project_root))

from data_manager.data_loader import SeriesLoader
from data_manager.database import ForecastDatabase
from sarima.config import SEARCH_MODES, SelectionConfig
from workflows.pandemic_comparison import (
    DEFAULT_BLANK_START, DEFAULT_CUTOFF, run_pandemic_comparison, summarize
)

LOG_HANDLER_NAMES = ("comparison_file", "comparison_console")


class PerformanceMonitor:
    """Tracks timing and memory of pipeline stages"""
    def __init__(self):
        self.start_time = time.time()
        self.last_checkpoint = self.start_time
        self.checkpoints = {}

    def checkpoint(self, name: str):
        """Record timing for a checkpoint"""
        now = time.time()
        self.checkpoints[name] = {
            'duration': now - self.last_checkpoint,
            'memory': psutil.Process().memory_info().rss / 1024 / 1024  # MB
        }
        self.last_checkpoint = now

    def report(self) -> str:
        """Generate checkpoint report"""
        total_time = time.time() - self.start_time
        report = ["Performance Report:", "-----------------"]

        for name, stats in self.checkpoints.items():
            report.append(f"{name}:")
            report.append(f"  Duration: {stats['duration']:.2f} seconds")
            report.append(f"  Memory: {stats['memory']:.2f} MB")

        peak = max((s['memory'] for s in self.checkpoints.values()), default=0.0)
        report.append("-----------------")
        report.append(f"Total Time: {total_time:.2f} seconds")
        report.append(f"Peak Memory: {peak:.2f} MB")
        return "\n".join(report)


def setup_logging(output_dir: Path) -> logging.Logger:
    """
    Configure logging with both file and console handlers

    Parameters:
    -----------
    output_dir : Path
        Directory for log file

    Returns:
    --------
    logging.Logger
        Configured logger
    """
    log_dir = output_dir / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"comparison_{timestamp}.log"

    # Root logger so package loggers reach both handlers
    root = logging.getLogger()
    root.setLevel(logging.INFO)
    teardown_logging()

    file_handler = logging.FileHandler(log_file)
    file_handler.set_name(LOG_HANDLER_NAMES[0])
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(
        logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.set_name(LOG_HANDLER_NAMES[1])
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter('%(message)s'))

    root.addHandler(file_handler)
    root.addHandler(console_handler)

    return logging.getLogger("comparison")


def teardown_logging():
    """Remove and close the handlers installed by setup_logging"""
    root = logging.getLogger()
    for handler in list(root.handlers):
        if handler.get_name() in LOG_HANDLER_NAMES:
            root.removeHandler(handler)
            handler.close()


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compare seasonal ARIMA, ETS and seasonal naive forecasts "
                    "around a structural break"
    )
    parser.add_argument('data', type=Path, help='CSV with one row per month')
    parser.add_argument('--date-column', default='date')
    parser.add_argument('--value-column', default='count')
    parser.add_argument('--cutoff', default=DEFAULT_CUTOFF,
                        help='Last month of the fitting segment (YYYY-MM)')
    parser.add_argument('--horizon', type=int, default=None,
                        help='Forecast horizon; defaults to the post-cutoff length')
    parser.add_argument('--search', choices=SEARCH_MODES, default='exhaustive')
    parser.add_argument('--max-order', type=int, default=5)
    parser.add_argument('--blank-start', default=DEFAULT_BLANK_START,
                        help="First blanked month, or 'none' to skip that scenario")
    parser.add_argument('--blank-months', type=int, default=24)
    parser.add_argument('--jobs', type=int, default=1)
    parser.add_argument('--output-dir', type=Path, default=project_root / 'results')
    parser.add_argument('--db', type=Path, default=None,
                        help='DuckDB file to store runs in')
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point with configuration and setup"""
    args = parse_args(argv)
    args.output_dir.mkdir(parents=True, exist_ok=True)
    logger = setup_logging(args.output_dir)
    monitor = PerformanceMonitor()
    database = None

    try:
        logger.info("Starting forecast comparison...")
        series = SeriesLoader().load_csv(args.data, args.date_column, args.value_column)
        monitor.checkpoint('load')

        config = SelectionConfig(
            search_mode=args.search,
            max_order=args.max_order,
            n_jobs=args.jobs,
            show_progress=True,
        )
        if args.db is not None:
            database = ForecastDatabase(args.db)

        blank_start = None if str(args.blank_start).lower() == 'none' else args.blank_start
        results = run_pandemic_comparison(
            series,
            cutoff=args.cutoff,
            config=config,
            blank_start=blank_start,
            blank_months=args.blank_months,
            database=database,
            horizon=args.horizon,
        )
        monitor.checkpoint('comparison')

        for name, result in results.items():
            result['forecasts'].to_csv(args.output_dir / f"forecasts_{name}.csv", index=False)
            result['selection'].to_frame().to_csv(
                args.output_dir / f"candidates_{name}.csv", index=False
            )
        summary = summarize(results)
        summary.to_csv(args.output_dir / "accuracy.csv", index=False)
        monitor.checkpoint('write')

        logger.info("\n" + summary.to_string(index=False))
        logger.info(monitor.report())
        logger.info("Comparison completed successfully")
        return results

    except Exception as e:
        logger.error(f"Comparison failed: {str(e)}")
        logger.error(f"Traceback: {traceback.format_exc()}")
        raise

    finally:
        if database is not None:
            database.close()
        teardown_logging()


if __name__ == '__main__':
    main()
