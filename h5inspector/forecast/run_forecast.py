from __future__ import annotations

import argparse
import json
from typing import Any, Optional, Sequence

from h5inspector.config import load_config
from h5inspector.forecast.requester import request_forecast
from h5inspector.forecast.schemas import ForecastRequest, build_forecast_request
from h5inspector.logging_config import setup_logging


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Request a fictional energy-consumption forecast.")
    p.add_argument("--date", required=True, help="ISO-8601 date or date-time.")
    p.add_argument("--model-name", required=True)
    p.add_argument("--config", default=None)
    group = p.add_mutually_exclusive_group(required=True)
    group.add_argument("--city")
    group.add_argument("--temperature", nargs=2, type=float, metavar=("MIN", "MAX"))
    group.add_argument("--dataset")
    return p


def request_from_args(args: argparse.Namespace) -> ForecastRequest:
    payload: dict[str, Any] = {"date": args.date, "modelName": args.model_name}
    if args.city is not None:
        payload["city"] = args.city
    elif args.temperature is not None:
        payload["temperatureRange"] = list(args.temperature)
    else:
        payload["datasetName"] = args.dataset
    return build_forecast_request(payload)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    cfg = load_config(args.config)
    setup_logging((cfg.get("logging") or {}).get("level", "INFO"))

    request = request_from_args(args)
    result = request_forecast(request, cfg=cfg)
    print(json.dumps(result.to_payload(), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
