from __future__ import annotations

import argparse
import logging
import os
from typing import Iterable, List, Optional, Tuple

import yaml

from .dates import api_date, parse_date
from .dijon import DEFAULT_BASE_URL, DijonClient
from .errors import GenerationError, UploadError
from .generate import fetch_stage, generate_spreadsheet, save_spreadsheet
from .ingest import parse_root_servers, parse_service_bodies, parse_snapshots
from .models import Config, GenerationOptions, RootServer, ServiceBody, Snapshot
from .upload import read_naws_codes, upload_naws_codes

LOGGER = logging.getLogger(__name__)


def load_config(path: str) -> Config:
    if not os.path.exists(path):
        LOGGER.debug("No config at %s, using defaults", path)
        return {}
    with open(path, "r", encoding="utf-8") as file:
        return yaml.safe_load(file) or {}


def make_client(config: Config) -> DijonClient:
    dijon = config.get("dijon") or {}
    client = DijonClient(
        base_url=dijon.get("base_url", DEFAULT_BASE_URL),
        token=dijon.get("token") or os.getenv("DIJON_TOKEN"),
        timeout=float(dijon.get("timeout", 30)),
    )
    if not client.is_logged_in and dijon.get("username") and dijon.get("password"):
        try:
            fetch_stage("token", lambda: client.create_token(dijon["username"], dijon["password"]))
        except GenerationError:
            client.close()
            raise
    return client


def options_from(config: Config, args: argparse.Namespace) -> GenerationOptions:
    gen = config.get("generation") or {}
    return GenerationOptions(
        show_original_naws_codes=args.show_original_naws_codes or bool(gen.get("show_original_naws_codes", False)),
        include_extra_meetings=args.include_extra_meetings or bool(gen.get("include_extra_meetings", False)),
        exclude_world_id_updates=args.exclude_world_id_updates or bool(gen.get("exclude_world_id_updates", False)),
    )


def find_root_server(client: DijonClient, server_id: int) -> RootServer:
    for server in parse_root_servers(fetch_stage("root servers", client.list_root_servers)):
        if server.id == server_id:
            return server
    raise SystemExit(f"Unknown root server: {server_id}")


def find_service_body(bodies: List[ServiceBody], bmlt_id: Optional[int]) -> Optional[ServiceBody]:
    if bmlt_id is None:
        return None
    for body in bodies:
        if body.bmlt_id == bmlt_id:
            return body
    raise SystemExit(f"Unknown service body: {bmlt_id}")


def snapshot_pair(server: RootServer, start: str, end: str) -> Tuple[Snapshot, Snapshot]:
    start_snap = Snapshot(server.id, parse_date(start))
    end_snap = Snapshot(server.id, parse_date(end))
    if end_snap.date < start_snap.date:
        raise SystemExit("--end must not be before --start")
    return start_snap, end_snap


def cmd_servers(config: Config, args: argparse.Namespace) -> int:
    try:
        with make_client(config) as client:
            servers = parse_root_servers(fetch_stage("root servers", client.list_root_servers))
    except GenerationError as exc:
        raise SystemExit(str(exc)) from exc
    for server in servers:
        print(f"{server.id}\t{server.menu_name()}\t{server.url}")
    return 0


def cmd_snapshots(config: Config, args: argparse.Namespace) -> int:
    try:
        with make_client(config) as client:
            raw = fetch_stage("snapshots", lambda: client.list_snapshots(args.server))
    except GenerationError as exc:
        raise SystemExit(str(exc)) from exc
    for snap in parse_snapshots(args.server, raw):
        print(api_date(snap.date))
    return 0


def cmd_generate(config: Config, args: argparse.Namespace) -> int:
    options = options_from(config, args)
    out_dir = args.out_dir or (config.get("output") or {}).get("dir", ".")
    try:
        with make_client(config) as client:
            server = find_root_server(client, args.server)
            start, end = snapshot_pair(server, args.start, args.end)
            bodies = parse_service_bodies(
                fetch_stage("service bodies", lambda: client.list_service_bodies(server.id, end.date))
            )
            service_body = find_service_body(bodies, args.service_body)
            generated = generate_spreadsheet(client, server, bodies, service_body, start, end, options)
    except GenerationError as exc:
        raise SystemExit(str(exc)) from exc
    save_spreadsheet(generated, out_dir)
    return 0


def cmd_upload(config: Config, args: argparse.Namespace) -> int:
    try:
        upload = read_naws_codes(args.file)
    except UploadError as exc:
        raise SystemExit(str(exc)) from exc
    print(upload.summary())
    for update in upload.updates:
        print(f"bmlt_id: {update.bmlt_id} code: {update.code}")
    if args.dry_run:
        return 0
    try:
        with make_client(config) as client:
            fetch_stage("NAWS code update", lambda: upload_naws_codes(client, args.server, upload))
    except GenerationError as exc:
        raise SystemExit(str(exc)) from exc
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="BMLT meeting change spreadsheets from Dijon snapshots")
    parser.add_argument("--config", default="config.yaml")
    parser.add_argument("--log-level", default="INFO")
    sub = parser.add_subparsers(dest="command", required=True)

    servers = sub.add_parser("servers", help="List root servers")
    servers.set_defaults(func=cmd_servers)

    snapshots = sub.add_parser("snapshots", help="List snapshot dates for a root server")
    snapshots.add_argument("--server", type=int, required=True)
    snapshots.set_defaults(func=cmd_snapshots)

    gen = sub.add_parser("generate", help="Write the changes spreadsheet between two snapshots")
    gen.add_argument("--server", type=int, required=True)
    gen.add_argument("--service-body", type=int, help="Service body bmlt_id; omit for the whole server")
    gen.add_argument("--start", required=True, help="Start snapshot date YYYY-MM-DD")
    gen.add_argument("--end", required=True, help="End snapshot date YYYY-MM-DD")
    gen.add_argument("--show-original-naws-codes", action="store_true")
    gen.add_argument("--include-extra-meetings", action="store_true")
    gen.add_argument("--exclude-world-id-updates", action="store_true")
    gen.add_argument("--out-dir")
    gen.set_defaults(func=cmd_generate)

    upload = sub.add_parser("upload-naws-codes", help="Submit NAWS codes from a spreadsheet")
    upload.add_argument("--server", type=int, required=True)
    upload.add_argument("--dry-run", action="store_true")
    upload.add_argument("file")
    upload.set_defaults(func=cmd_upload)
    return parser


def run(argv: Iterable[str] | None = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO), format="%(levelname)s %(name)s: %(message)s")
    config = load_config(args.config)
    return args.func(config, args)


def main() -> None:
    raise SystemExit(run())


if __name__ == "__main__":
    main()
