import argparse
import logging

import yaml

from epiagg import get_records
from epiagg.pipeline import run_queries, write_results

if __name__ == "__main__":
    p = argparse.ArgumentParser()
    p.add_argument("--config", help="config file", required=True)
    p.add_argument("--deaths", help="case/death records (.csv or .parquet)", required=True)
    p.add_argument("--vaccinations", help="vaccination records (.csv or .parquet)")
    p.add_argument("--output_dir", help="directory for the results", required=True)
    p.add_argument("--log_level", default="INFO")
    args = p.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    with open(args.config) as f:
        config = yaml.safe_load(f)

    assert isinstance(config, dict)
    date_format = config.get("date_format", "%Y-%m-%d")

    deaths = get_records.get_deaths(args.deaths, date_format)

    if args.vaccinations is None:
        vaccinations = None
    else:
        vaccinations = get_records.get_vaccinations(args.vaccinations, date_format)

    results = run_queries(config, deaths, vaccinations)

    write_results(
        results,
        args.output_dir,
        output_format=config.get("output_format", "parquet"),
        fail_on_empty=config.get("fail_on_empty", False),
    )
