"""Command-line entry point for the ScholarAI API server and Streamlit UI."""

from __future__ import annotations

import argparse
import subprocess
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import uvicorn

from scholarai.config import config

if TYPE_CHECKING:
    from collections.abc import Sequence
    from logging import Logger

PROJECT_ROOT = Path(__file__).resolve().parent
DEFAULT_APP = PROJECT_ROOT / "app.py"


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Build the CLI parser and read command-line arguments."""  # noqa: DOC201
    parser = argparse.ArgumentParser(
        description="Run the ScholarAI API server or its Streamlit web application.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the /api/gemini HTTP endpoint.")
    serve.add_argument(
        "--host",
        default=config.API_HOST,
        help=f"Bind address for the API server (default: {config.API_HOST}).",
    )
    serve.add_argument(
        "--port",
        type=int,
        default=config.API_PORT,
        help=f"Port for the API server (default: {config.API_PORT}).",
    )
    serve.add_argument(
        "--reload",
        action="store_true",
        help="Restart the server when source files change.",
    )

    ui = subparsers.add_parser("ui", help="Launch the Streamlit web application.")
    ui.add_argument(
        "--app",
        type=Path,
        default=DEFAULT_APP,
        help="Path to the Streamlit script (default: app.py).",
    )
    ui.add_argument(
        "--port",
        type=int,
        default=8501,
        help="Port for the Streamlit server (default: 8501).",
    )
    ui.add_argument(
        "--address",
        default="localhost",
        help="Bind address for the Streamlit server (default: localhost).",
    )
    ui.add_argument(
        "--show",
        dest="headless",
        action="store_false",
        help="Open Streamlit in a browser window instead of headless mode.",
    )
    ui.set_defaults(headless=True)
    return parser.parse_args(argv)


def build_streamlit_command(
    script_path: Path,
    *,
    port: int,
    headless: bool,
    address: str,
) -> list[str]:
    """Construct the streamlit CLI invocation."""  # noqa: DOC201
    return [
        sys.executable,
        "-m",
        "streamlit",
        "run",
        str(script_path),
        "--server.port",
        str(port),
        "--server.address",
        address,
        "--server.headless",
        "true" if headless else "false",
    ]


def run_streamlit(command: Sequence[str], logger: Logger) -> int:
    """Execute the configured streamlit command and return its exit code."""  # noqa: DOC201
    try:
        result = subprocess.run(
            command,
            check=False,
            cwd=PROJECT_ROOT,
        )
    except KeyboardInterrupt:
        logger.info("ScholarAI UI stopped by user")
        return 0
    except OSError:
        logger.exception("Unable to launch Streamlit")
        return 1
    return result.returncode


def serve(args: argparse.Namespace, logger: Logger) -> int:
    """Validate the provider configuration and run the API server."""  # noqa: DOC201
    try:
        config.validate()
    except ValueError:
        logger.exception("Configuration invalid")
        return 1

    logger.info(
        "Starting ScholarAI API at http://%s:%s (provider=%s)",
        args.host,
        args.port,
        config.PROVIDER,
    )
    uvicorn.run(
        "scholarai.api:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=config.LOG_LEVEL.lower(),
    )
    return 0


def ui(args: argparse.Namespace, logger: Logger) -> int:
    """Open the study coach pages, which post every operation to BACKEND_URL.

    The pages keep working against the provider directly when that server is
    down and a personal key is saved in Settings.

    Returns:
        int: Exit status of the UI process, or 1 if the app file is missing.
    """
    app_file = args.app if args.app.is_absolute() else PROJECT_ROOT / args.app
    app_file = app_file.resolve()
    if not app_file.exists():
        logger.error("ScholarAI UI file %s does not exist; pass --app to point at it", app_file)
        return 1

    logger.info(
        "Opening the ScholarAI study coach on %s:%s; operations go to %s",
        args.address,
        args.port,
        config.BACKEND_URL,
    )
    if args.headless:
        logger.info("Headless mode: open the address above in a browser")

    command = build_streamlit_command(
        app_file,
        port=args.port,
        headless=args.headless,
        address=args.address,
    )

    return_code = run_streamlit(command, logger)
    if return_code != 0:
        logger.error("ScholarAI UI stopped with exit status %s", return_code)
    return return_code


def main(argv: Sequence[str] | None = None) -> int:
    """Dispatch to the selected subcommand."""  # noqa: DOC201
    args = parse_args(argv)

    config.setup_logging()
    logger = config.get_logger(__name__)

    if args.command == "serve":
        return serve(args, logger)
    return ui(args, logger)


if __name__ == "__main__":
    sys.exit(main())
