import argparse
from collections.abc import Sequence
from pathlib import Path

from loguru import logger

from balance_projections.app_config import get_config, init_config
from balance_projections.errors import InvalidRange
from balance_projections.projections.projection import ProjectionResult
from balance_projections.scenarios.scenario_file import ScenarioFile
from balance_projections.utils.logging import setup_logger
from balance_projections.utils.logical_date import LogicalDate


def run_scenario_file(
    scenario_path: str | Path,
    start: LogicalDate | None = None,
    end: LogicalDate | None = None,
    account_id: str | None = None,
    daily: bool = False,
) -> ProjectionResult:
    config = get_config()
    scenario = ScenarioFile.from_yaml(scenario_path)

    start = start or scenario.earliest_balance_date()
    if start is None:
        raise InvalidRange("No start date given and the scenario has no accounts")
    end = end or start.add_days(config.projection.default_horizon_days)
    if start.days_until(end) > config.projection.max_window_days:
        raise InvalidRange(
            f"Window {start} - {end} is longer than the configured maximum of "
            f"{config.projection.max_window_days} days"
        )

    result = scenario.to_projection().run(start, end, account_id)
    return result.to_daily() if daily else result


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Project account balances from a scenario file.")
    parser.add_argument("scenario", help="YAML file with accounts and transactions")
    parser.add_argument("--start", type=LogicalDate.from_string, help="First day of the window (YYYY-MM-DD)")
    parser.add_argument("--end", type=LogicalDate.from_string, help="Last day of the window (YYYY-MM-DD)")
    parser.add_argument("--account", help="Only project this account")
    parser.add_argument("--daily", action="store_true", help="Emit one row per account per day")
    parser.add_argument("--config", help="Alternative app_config.yaml")
    parser.add_argument("--output", help="CSV file to write, defaults to the configured output path")
    args = parser.parse_args(argv)

    config = init_config(args.config) if args.config else get_config()
    setup_logger(config.logging.level)

    result = run_scenario_file(args.scenario, args.start, args.end, args.account, args.daily)
    for account_id, balance in result.final_balances().items():
        logger.info("{account}: {balance} on {date}", account=account_id, balance=balance, date=result.window_end)
    result.to_csv(args.output or config.output.file_path())


if __name__ == "__main__":
    main()
