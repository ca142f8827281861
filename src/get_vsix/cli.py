import argparse
import os
import pathlib
import sys
from typing import NoReturn, Optional, Sequence

from get_vsix import __version__
from get_vsix.config import (
    DEFAULT_API_URL,
    DEFAULT_API_VERSION,
    DEFAULT_LIMIT,
    LOG_LEVELS,
    GetVsixConfig,
)
from get_vsix.downloader import DownloadedPackage, download
from get_vsix.errors import ConfigError, GetVsixError
from get_vsix.installer import install
from get_vsix.marketplace import MarketplaceClient
from get_vsix.selector import Chooser, describe, select
from get_vsix.utils.logger import set_log_level, setup_logger

logger = setup_logger(name=__name__)


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        raise ConfigError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="get-vsix",
        description="Search the VS Code marketplace and download an extension's VSIX.",
    )
    parser.add_argument(
        "search_term",
        nargs="?",
        default=None,
        metavar="SEARCH",
        help="The name of the extension you are looking for.",
    )
    parser.add_argument(
        "-s",
        "--search",
        type=str,
        default=None,
        help="The name of the extension you are looking for (flag form).",
    )
    parser.add_argument(
        "-a",
        "--api",
        type=str,
        default=os.getenv("GET_VSIX_API", DEFAULT_API_URL),
        help="URL for the Visual Studio Code marketplace query API.",
    )
    parser.add_argument(
        "-l",
        "--limit",
        type=int,
        default=None,
        help=f"How many extensions to show (default: {DEFAULT_LIMIT}).",
    )
    parser.add_argument(
        "-v",
        "--api-version",
        type=str,
        default=os.getenv("GET_VSIX_API_VERSION", DEFAULT_API_VERSION),
        help="The version of the marketplace API.",
    )
    parser.add_argument(
        "-p",
        "--program",
        type=str,
        default=os.getenv("GET_VSIX_PROGRAM") or None,
        help="Program run with the downloaded file as its argument. "
        "On Windows use the batch wrapper (e.g. code.cmd).",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        help="File or directory the VSIX is saved to; a trailing separator marks "
        "a directory (default: current directory).",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="INFO",
        help="Logging verbosity.",
    )
    parser.add_argument(
        "--log-file", type=pathlib.Path, default=None, help="Path to log file"
    )
    parser.add_argument(
        "-V", "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def resolve_config(argv: Optional[Sequence[str]] = None) -> GetVsixConfig:
    args = parse_args(argv)

    if args.search is not None and args.search_term is not None:
        if args.search != args.search_term:
            raise ConfigError(
                "Give the search term either positionally or with --search, not both."
            )
    search = args.search if args.search is not None else args.search_term
    if search is None:
        raise ConfigError("the following arguments are required: SEARCH")

    return GetVsixConfig(
        search=search,
        api=args.api,
        limit=args.limit,
        api_version=args.api_version,
        program=args.program,
        output=args.output,
        log_level=args.log_level,
        log_file=args.log_file,
    )


def run(
    config: GetVsixConfig,
    client: Optional[MarketplaceClient] = None,
    chooser: Optional[Chooser] = None,
) -> DownloadedPackage:
    client = client or MarketplaceClient()

    candidates = client.search(config)
    candidate = select(candidates, limit=config.limit, chooser=chooser)
    print(describe(candidate))
    print()

    package = download(candidate, config.output, session=client.session)
    print(f"Saved {candidate.identifier} v{candidate.version} to {package.path}")

    if config.program:
        returncode = install(package, config.program)
        if returncode != 0:
            print(
                f"warning: {config.program} exited with code {returncode}; "
                f"the package is still at {package.path}",
                file=sys.stderr,
            )
    return package


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        config = resolve_config(argv)
        set_log_level(config.log_level)
        if config.log_file is not None:
            setup_logger(log_file=config.log_file)
        run(config)
    except GetVsixError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return 130
    return 0
