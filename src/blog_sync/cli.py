"""Command-line entry point: ``blog-sync [options] {sync,upload,download}``."""

import argparse
import json
import logging
import sys

from dotenv import load_dotenv
from pydantic import ValidationError

from . import __version__
from .config import Settings, load_settings
from .config_loader import load_hierarchical_config
from .config_schema import UnifiedConfig, build_config
from .core.http import create_session
from .core.writeas import WriteAsClient
from .errors import BlogSyncError, ConfigError
from .images import create_image_store
from .logger import setup_logging
from .sync.engine import SyncEngine
from .sync.models import SyncReport
from .sync.reporter import format_sync_report, report_to_json

logger = logging.getLogger(__name__)

# subcommand -> (download, upload)
DIRECTIONS = {
    "sync": (True, True),
    "upload": (False, True),
    "download": (True, False),
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blog-sync",
        description="Bidirectional synchronizer for a Markdown blog",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Pull remote changes, then push local ones
  blog-sync --alias myblog --login me sync

  # Push only, hosting images on a WebDAV share
  blog-sync -t webdav --webdav-endpoint https://dav.example.com/blog \\
      --webdav-published-url https://img.example.com/blog upload

The password is read from WRITEAS_PASS when --password is not given.
        """,
    )

    parser.add_argument("-a", "--alias", help="Collection alias (WRITEAS_ALIAS)")
    parser.add_argument(
        "-r",
        "--root",
        help="Root directory of the blog (default: current directory)",
    )
    parser.add_argument("-l", "--login", help="Account login (WRITEAS_LOGIN)")
    parser.add_argument(
        "-p",
        "--password",
        help="Account password (visible in process list -- prefer WRITEAS_PASS)",
    )
    parser.add_argument(
        "-t",
        "--image-hosting-type",
        choices=("snapas", "webdav"),
        help="Image hosting type: snapas (default) or webdav",
    )
    parser.add_argument(
        "-i",
        "--image-login",
        help="Image hosting login, the account login if not specified",
    )
    parser.add_argument(
        "-v",
        "--image-password",
        help="Image hosting password, the account password if not specified",
    )
    parser.add_argument(
        "--webdav-endpoint", help="WebDAV endpoint URL (WRITEAS_WEBDAV_URL)"
    )
    parser.add_argument(
        "--webdav-published-url",
        help="Public URL of the WebDAV images (WRITEAS_WEBDAV_PUBLISHED_URL)",
    )
    parser.add_argument(
        "-s", "--snapas-endpoint", help="Snap.as API endpoint"
    )
    parser.add_argument(
        "-w", "--writeas-endpoint", help="Write.as API endpoint"
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging"
    )
    parser.add_argument("--log-file", help="Also write the log to this file")
    parser.add_argument(
        "--json", action="store_true", help="Print the sync report as JSON"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"blog-sync version {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True
    subparsers.add_parser(
        "sync", help="Synchronize your blog (download, then upload)"
    )
    subparsers.add_parser("upload", help="Push your local changes to the blog")
    subparsers.add_parser("download", help="Pull remote changes to your blog")

    return parser


def settings_from_args(args: argparse.Namespace, config: UnifiedConfig) -> Settings:
    return load_settings(
        alias=args.alias,
        root=args.root,
        login=args.login,
        password=args.password,
        image_hosting=args.image_hosting_type,
        image_login=args.image_login,
        image_password=args.image_password,
        webdav_endpoint=args.webdav_endpoint,
        webdav_published_url=args.webdav_published_url,
        snapas_endpoint=args.snapas_endpoint,
        writeas_endpoint=args.writeas_endpoint,
        debug=args.debug,
        config=config,
    )


def execute(settings: Settings, download: bool, upload: bool) -> SyncReport:
    """Log in, wire the image store and run the engine."""
    client = WriteAsClient(
        settings.writeas_endpoint,
        timeout=settings.timeout,
        session=create_session(verify=not settings.insecure),
    )
    logger.info("Logging in to %s", settings.writeas_endpoint)
    token = client.login(settings.login, settings.password)

    image_store = create_image_store(settings, token)
    engine = SyncEngine(
        client,
        image_store,
        settings.root_dir,
        settings.alias,
        retry=settings.retry_policy(),
    )
    return engine.run(download=download, upload=upload)


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    load_dotenv()

    try:
        config = build_config(load_hierarchical_config())
    except (OSError, ValueError, ValidationError) as exc:
        # Logging is not configured yet
        print(f"Error: invalid configuration: {exc}", file=sys.stderr)
        return 1

    setup_logging(
        debug=args.debug,
        log_file=args.log_file or config.logging.file,
        debug_format=config.logging.format,
        level=config.logging.level,
    )

    download, upload = DIRECTIONS[args.command]
    try:
        settings = settings_from_args(args, config)
        report = execute(settings, download, upload)
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        return 1
    except (BlogSyncError, OSError, ValueError) as exc:
        logger.error("Command failed: %s", exc)
        return 1

    if args.json:
        print(json.dumps(report_to_json(report), indent=2))
    else:
        print(format_sync_report(report))
    return 0


def run() -> None:
    """Console script entry point."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    run()
