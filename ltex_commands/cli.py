"""Command-line interface for running LTeX commands outside an editor.

Examples:
  # Check one document and write a report next to it
  python -m ltex_commands --folder . check README.md --report ltex-report.md

  # Check every enabled document in the workspace folders
  python -m ltex_commands --folder docs --folder notes check-all

  # Add words to the dictionary of the scope chosen by ltex.configurationTarget
  python -m ltex_commands --folder . add-to-dictionary README.md --language en-US Kubernetes kubelet

Environment Variables:
  LTEX_USER_SETTINGS       Global settings file (default: ~/.config/ltex-commands/settings.json)
  LTEX_LOG_LEVEL           Logging level (default: INFO)
  LTEX_REMOTE_SERVER       URL of a running LanguageTool server
  LTEX_MAX_CHECK_TIME_MS   Server-side time limit per check
  LTEX_MAX_RETRIES         Retries for transient LanguageTool failures (default: 3)
"""

from __future__ import annotations

import argparse
import asyncio
import csv
import json
import locale
import logging
import signal
import sys
from pathlib import Path
from typing import Any, Iterable

from .app_config import AppConfiguration, load_app_configuration
from .checking.language_client import LanguageToolClient
from .checking.language_tool_manager import LanguageToolManager
from .command_handler import CommandHandler
from .notifications import LoggingNotifier
from .progress import logging_progress_reporter
from .report_utils import build_report_csv, build_report_markdown
from .settings.configuration import JsonConfigurationStore
from .settings.external_files import ExternalFileManager
from .workspace import TextDocument, Workspace, path_to_uri

LOGGER = logging.getLogger(__name__)

CHECK_COMMANDS = {"check", "check-all"}
ADD_COMMANDS = {"add-to-dictionary", "disable-rules", "hide-false-positives"}


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ltex-commands",
        description="Check documents with LanguageTool and manage LTeX settings.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("Examples:", 1)[1] if __doc__ else None,
    )
    parser.add_argument(
        "--folder",
        dest="folders",
        action="append",
        type=Path,
        default=[],
        help="Workspace folder (repeatable; default: none)",
    )
    parser.add_argument(
        "--workspace-file",
        type=Path,
        help="Workspace file whose 'settings' section holds workspace-level settings",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        help="Path to a .env file (default: .env in the current directory, if present)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Check a single document")
    check.add_argument("document", type=Path, help="Document to check")
    check.add_argument(
        "--language-id",
        help="Code language id of the document (default: inferred from the extension)",
    )
    check.add_argument("--report", type=Path, help="Write Markdown and CSV reports to this path")

    check_all = subparsers.add_parser(
        "check-all", help="Check every enabled document in the workspace folders"
    )
    check_all.add_argument(
        "--report", type=Path, help="Write Markdown and CSV reports to this path"
    )

    for name, help_text, metavar in (
        ("add-to-dictionary", "Add words to the dictionary", "WORD"),
        ("disable-rules", "Disable LanguageTool rules", "RULE_ID"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        _add_setting_arguments(sub)
        sub.add_argument("entries", nargs="+", metavar=metavar)

    hide = subparsers.add_parser(
        "hide-false-positives", help="Hide a rule match in sentences matching a pattern"
    )
    _add_setting_arguments(hide)
    hide.add_argument("--rule", required=True, help="LanguageTool rule id")
    hide.add_argument(
        "--sentence",
        required=True,
        help="Regular expression matched against the sentence of the rule match",
    )

    subparsers.add_parser("status", help="Print status information")

    return parser.parse_args(list(argv) if argv is not None else None)


def _add_setting_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("document", type=Path, help="Document the entries apply to")
    parser.add_argument(
        "--language", default="en-US", help="Language of the entries (default: en-US)"
    )
    parser.add_argument(
        "--recheck",
        action="store_true",
        help="Check the document again after the settings are updated",
    )


def _command_for(args: argparse.Namespace) -> tuple[str, Any]:
    if args.command == "check":
        return "ltex.checkCurrentDocument", None
    if args.command == "check-all":
        return "ltex.checkAllDocumentsInWorkspace", None
    if args.command == "status":
        return "ltex.showStatusInformation", None

    uri = path_to_uri(args.document)
    if args.command == "add-to-dictionary":
        return "ltex.addToDictionary", {"uri": uri, "words": {args.language: args.entries}}
    if args.command == "disable-rules":
        return "ltex.disableRules", {"uri": uri, "ruleIds": {args.language: args.entries}}
    entry = json.dumps({"rule": args.rule, "sentence": args.sentence})
    return "ltex.hideFalsePositives", {"uri": uri, "falsePositives": {args.language: [entry]}}


def _needs_client(args: argparse.Namespace) -> bool:
    return args.command in CHECK_COMMANDS or (
        args.command in ADD_COMMANDS and args.recheck
    )


def write_reports(report_path: Path, items: list[tuple[str, list[Any]]]) -> Path:
    """Write the Markdown report and a CSV next to it; return the CSV path."""
    report_path.parent.mkdir(parents=True, exist_ok=True)
    report_path.write_text(build_report_markdown(items), encoding="utf-8")

    csv_path = report_path.with_suffix(".csv")
    with csv_path.open("w", encoding="utf-8", newline="") as csv_file:
        writer = csv.writer(csv_file)
        writer.writerows(build_report_csv(items))
    return csv_path


def _install_cancel_handler(handler: CommandHandler) -> bool:
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, handler.cancel_batch_check)
    except (NotImplementedError, RuntimeError):
        LOGGER.debug("SIGINT handler not supported on this platform")
        return False
    return True


async def run_command(args: argparse.Namespace, config: AppConfiguration) -> int:
    active_document = None
    if args.command == "check":
        if not args.document.is_file():
            LOGGER.error("Document not found: %s", args.document)
            return 1
        active_document = TextDocument.from_path(
            args.document.resolve(), language_id=args.language_id
        )
    elif args.command in ADD_COMMANDS and args.recheck and args.document.is_file():
        active_document = TextDocument.from_path(args.document.resolve())

    workspace = Workspace(
        folders=list(args.folders),
        workspace_file=args.workspace_file,
        active_document=active_document,
    )
    configuration = JsonConfigurationStore(workspace, config.user_settings_path)
    external_files = ExternalFileManager(configuration)
    notifier = LoggingNotifier()

    client: LanguageToolClient | None = None
    if _needs_client(args):
        manager = LanguageToolManager(
            config=config.server_config,
            remote_server=config.remote_server,
        )
        client = LanguageToolClient(
            configuration,
            external_files,
            manager=manager,
            max_retries=config.max_retries,
        )

    handler = CommandHandler(
        workspace,
        configuration,
        notifier,
        external_files=external_files,
        language_client=client,
        progress_reporter=logging_progress_reporter,
        recheck_after_update=getattr(args, "recheck", False),
    )

    command_id, params = _command_for(args)
    cancel_handler_installed = args.command == "check-all" and _install_cancel_handler(handler)
    try:
        success = await handler.execute(command_id, params)
        await handler.drain_background_tasks()
    finally:
        if cancel_handler_installed:
            asyncio.get_running_loop().remove_signal_handler(signal.SIGINT)
        if client is not None:
            client.close()

    report_path = getattr(args, "report", None)
    if report_path is not None and client is not None and client.diagnostics is not None:
        csv_path = write_reports(report_path, client.diagnostics.items())
        print(f"Report written to {report_path} (CSV: {csv_path})")

    if notifier.errors:
        return 1
    return 0 if success else 1


def main(argv: Iterable[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        config = load_app_configuration(args.env_file)
    except ValueError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # Document ordering follows the user's collation rules
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as exc:
        LOGGER.warning("Could not apply the environment's collation locale: %s", exc)
    return asyncio.run(run_command(args, config))


if __name__ == "__main__":
    raise SystemExit(main())
