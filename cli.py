import argparse
import json
import logging

from client import TrackerClient
from config import YamlConfig
from rest_api import WorkoutAPI
from seed_sample_data import seed
from settings_schema import validate_settings

logger = logging.getLogger(__name__)


def serve(yaml_path: str | None, host: str | None, port: int | None, demo: bool) -> None:
    import uvicorn

    api = WorkoutAPI(yaml_path=yaml_path)
    if demo:
        seed(api)
    host = host or api.settings.host
    port = port or api.settings.port
    logger.info("Serving workout API on %s:%d", host, port)
    uvicorn.run(api.app, host=host, port=port)


def export_csv(url: str, out_path: str) -> int:
    """Write the CSV export of a running server to ``out_path``."""
    data = TrackerClient(url).export_csv()
    with open(out_path, "w", encoding="utf-8", newline="") as f:
        f.write(data)
    rows = max(len(data.splitlines()) - 1, 0)
    logger.info("Exported %d sets to %s", rows, out_path)
    return rows


def print_stats(url: str, timeframe: str) -> None:
    print(json.dumps(TrackerClient(url).stats(timeframe), indent=2))


def print_progress(url: str, exercise_id: str) -> None:
    print(json.dumps(TrackerClient(url).progress(exercise_id), indent=2))


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Workout tracker commands")
    parser.add_argument("--config", default=None, help="settings YAML file")
    sub = parser.add_subparsers(dest="cmd", required=True)

    srv = sub.add_parser("serve")
    srv.add_argument("--host", default=None)
    srv.add_argument("--port", type=int, default=None)
    srv.add_argument("--demo", action="store_true", help="seed sample workouts")

    exp = sub.add_parser("export")
    exp.add_argument("--url", default="http://localhost:8000")
    exp.add_argument("--out", default="workout-data.csv")

    st = sub.add_parser("stats")
    st.add_argument("--url", default="http://localhost:8000")
    st.add_argument("--timeframe", choices=["week", "month", "all"], default="all")

    prog = sub.add_parser("progress")
    prog.add_argument("--url", default="http://localhost:8000")
    prog.add_argument("exercise_id")

    args = parser.parse_args(argv)

    settings = validate_settings(YamlConfig(args.config).load())
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.cmd == "serve":
        serve(args.config, args.host, args.port, args.demo)
    elif args.cmd == "export":
        export_csv(args.url, args.out)
    elif args.cmd == "stats":
        print_stats(args.url, args.timeframe)
    elif args.cmd == "progress":
        print_progress(args.url, args.exercise_id)


if __name__ == "__main__":
    main()
