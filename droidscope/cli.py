"""
droidscope/cli.py
Command-line interface for droidscope.

USAGE:
  droidscope ingest                     # contacts, call log, SMS
  droidscope ingest --sms-only
  droidscope serve --port 3000
  droidscope --data-dir /cases/042 ingest
  droidscope --data-dir /cases/042 config --serial emulator-5554

EXAMPLES:
  # Pull everything from the only connected device
  droidscope ingest

  # Remember a specific device, then pull verbosely
  droidscope config --serial emulator-5554
  droidscope --verbose ingest

  # Serve the HTTP API on localhost
  droidscope serve
"""

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import Dict, List, Optional

from droidscope.config import ensure_data_dir, load_config, save_config
from droidscope.device.adb import AdbShell
from droidscope.errors import DroidscopeError, StoreConnectionError
from droidscope.pipeline import (
    ingest_call_log,
    ingest_contacts,
    ingest_sms,
    open_device_store,
)

logger = logging.getLogger(__name__)

GREEN  = '\033[92m'
RED    = '\033[91m'
CYAN   = '\033[96m'
RESET  = '\033[0m'
BOLD   = '\033[1m'


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog        = 'droidscope',
        description = 'droidscope — Android SMS, call log and contact extraction over adb',
        formatter_class = argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        '--config-dir',
        type    = Path,
        default = None,
        help    = 'Directory holding droidscope_config.json (default: current directory)',
    )
    parser.add_argument(
        '--data-dir',
        type    = Path,
        default = None,
        help    = 'Override data_dir from config (one .db per device)',
    )
    parser.add_argument(
        '--verbose', '-v',
        action  = 'store_true',
        help    = 'Enable debug logging',
    )

    sub = parser.add_subparsers(dest='command', required=True)

    ingest = sub.add_parser('ingest', help='Pull device data into the store once')
    only = ingest.add_mutually_exclusive_group()
    only.add_argument('--sms-only',      action='store_true', help='Pull SMS only')
    only.add_argument('--calls-only',    action='store_true', help='Pull call log only')
    only.add_argument('--contacts-only', action='store_true', help='Pull contacts only')

    serve = sub.add_parser('serve', help='Run the HTTP API')
    serve.add_argument('--host', default=None, help='Bind host (default: config host, 127.0.0.1)')
    serve.add_argument('--port', type=int, default=None, help='Bind port (default: config port, 3000)')

    configure = sub.add_parser('config', help='Save settings to droidscope_config.json')
    configure.add_argument('--adb-path', default=None, help='adb executable')
    configure.add_argument('--serial',   default=None, help='Device serial passed as adb -s')
    configure.add_argument('--host',     default=None, help='Default bind host for serve')
    configure.add_argument('--port',     type=int, default=None, help='Default bind port for serve')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # ── LOGGING SETUP ────────────────────────────────────────
    logging.basicConfig(
        level   = logging.DEBUG if args.verbose else logging.INFO,
        format  = '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt = '%H:%M:%S',
    )

    config = load_config(args.config_dir)
    if args.data_dir is not None:
        config['data_dir'] = str(args.data_dir)

    if args.command == 'config':
        return _configure(config, args)

    # ── VALIDATE DATA DIR ────────────────────────────────────
    try:
        data_dir = ensure_data_dir(config, args.config_dir)
    except StoreConnectionError as e:
        _print(f"{RED}Error: {e}{RESET}")
        return 1

    if args.command == 'serve':
        return _serve(config, args)
    return _ingest(config, data_dir, args)


def _ingest(config: Dict, data_dir: Path, args: argparse.Namespace) -> int:
    shell = AdbShell(config.get('adb_path') or 'adb', config.get('device_serial'))
    # Contacts first so SMS contact names resolve
    stages = [
        ('contacts', ingest_contacts, not (args.sms_only or args.calls_only)),
        ('call log', ingest_call_log, not (args.sms_only or args.contacts_only)),
        ('SMS',      ingest_sms,      not (args.calls_only or args.contacts_only)),
    ]

    async def run() -> Dict[str, int]:
        store = await open_device_store(shell, data_dir)
        _print(f"Device           : {CYAN}{store.device_name}{RESET}")
        _print(f"Store            : {CYAN}{store.db_path}{RESET}\n")
        counts: Dict[str, int] = {}
        for label, stage, enabled in stages:
            if not enabled:
                continue
            _step(f"Pulling {label}...")
            t0 = time.time()
            records = await stage(shell, store)
            counts[label] = len(records)
            _ok(f"{len(records)} {label} record(s) in {_elapsed(t0)}")
        return counts

    try:
        counts = asyncio.run(run())
    except DroidscopeError as e:
        logger.debug("Ingest failed", exc_info=True)
        _print(f"\n{RED}Error: {e}{RESET}")
        return 1

    _print(f"\n{BOLD}{GREEN}✓ Complete{RESET}")
    for label, n in counts.items():
        _print(f"  {label:<10}: {n:,}")
    return 0


def _configure(config: Dict, args: argparse.Namespace) -> int:
    updates = {
        'adb_path':      args.adb_path,
        'device_serial': args.serial,
        'host':          args.host,
        'port':          args.port,
    }
    config.update({k: v for k, v in updates.items() if v is not None})
    try:
        path = save_config(config, args.config_dir)
    except OSError as e:
        _print(f"{RED}Error: could not write config: {e}{RESET}")
        return 1
    _ok(f"Saved {path}")
    for key, value in config.items():
        _print(f"  {key:<26}: {value}")
    return 0


def _serve(config: Dict, args: argparse.Namespace) -> int:
    import uvicorn

    from droidscope.api import build_app

    host = args.host or config.get('host') or '127.0.0.1'
    port = args.port or int(config.get('port') or 3000)
    server_app = build_app(config=config, project_root=args.config_dir)

    _print(f"""
+--------------------------------------------------+
|   droidscope API                                 |
+--------------------------------------------------+
|  Local:    http://{host}:{port}
|  Data:     {config.get('data_dir')}
|  Docs:     http://{host}:{port}/docs
+--------------------------------------------------+
""")
    uvicorn.run(server_app, host=host, port=port, log_level='info')
    return 0


# ── PRINT HELPERS ────────────────────────────────────────────

def _step(msg):  _print(f"  {CYAN}→{RESET} {msg}")
def _ok(msg):    _print(f"  {GREEN}✓{RESET} {msg}")
def _print(msg): print(msg)

def _elapsed(t0: float) -> str:
    s = time.time() - t0
    return f"{s:.1f}s" if s < 60 else f"{int(s//60)}m {int(s%60)}s"


if __name__ == '__main__':
    sys.exit(main())
