"""
Main application controller for the file sorter.
Wires configuration, rules and the organize pass together and provides the
command-line entry point for one-shot and daemon modes.
"""

import sys
import signal
import logging
import argparse
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Callable, List, Optional

from file_sorter import __version__
from file_sorter.file_access.mover import Mover
from file_sorter.file_access.scanner import Scanner
from file_sorter.organization_logic.organize_run import OrganizeRun, RunReport
from file_sorter.organization_logic.rule_loader import load_rule_set
from file_sorter.organization_logic.rules import RuleSet, ScriptHook
from file_sorter.utils.config_manager import ConfigManager
from file_sorter.utils.error_handler import ErrorHandler, FileSorterError
from file_sorter.utils.report_generator import ReportGenerator
from file_sorter.utils.scheduler import Scheduler

logger = logging.getLogger(__name__)


class FileSorterApp:
    """Application controller that runs organize passes."""

    def __init__(
        self,
        config_file: Optional[str] = None,
        cli_args: Optional[argparse.Namespace] = None,
        script_hook: Optional[ScriptHook] = None,
    ):
        """Initialize the application.

        Args:
            config_file: Path to configuration file
            cli_args: Parsed command line arguments overriding the configuration
            script_hook: Callable used as the script rule instead of a script file
        """
        self.config_file = config_file
        self.cli_args = cli_args
        self.script_hook = script_hook
        self.config_manager: Optional[ConfigManager] = None
        self.error_handler = ErrorHandler()
        self.scheduler: Optional[Scheduler] = None
        self._is_initialized = False

    def initialize(self, configure_logging: bool = True):
        """Load configuration and set up logging."""
        if self._is_initialized:
            return

        self.config_manager = ConfigManager(
            config_file=Path(self.config_file) if self.config_file else None,
            cli_args=self.cli_args,
        )

        if configure_logging:
            self._setup_logging()

        self._is_initialized = True
        logger.debug("Application initialized")

    def _setup_logging(self):
        """Configure logging based on application settings."""
        log_config = self.config_manager.get("logging", {})

        handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]

        log_file = log_config.get("file")
        if log_file:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            handlers.append(
                RotatingFileHandler(
                    log_file,
                    maxBytes=log_config.get("max_size", 10485760),
                    backupCount=log_config.get("backup_count", 5),
                    encoding="utf-8",
                )
            )

        logging.basicConfig(
            level=getattr(logging, str(log_config.get("level", "INFO")).upper()),
            format=log_config.get(
                "format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            ),
            handlers=handlers,
            force=True,
        )

    def _path_setting(self, key: str) -> Optional[Path]:
        value = self.config_manager.get(key)
        return Path(value).expanduser() if value else None

    def load_rules(self) -> RuleSet:
        """Build the RuleSet from the rules file and sorting script."""
        return load_rule_set(
            rules_path=self._path_setting("rules.file"),
            script_path=self._path_setting("rules.script"),
            script_function=self.config_manager.get("rules.script_function", "sort_file"),
            script_position=self.config_manager.get("rules.script_position", "after"),
            use_default_rules=self.config_manager.get("rules.use_default_rules", True),
            script_hook=self.script_hook,
        )

    def _create_organize_run(self) -> OrganizeRun:
        excluded = [
            p for p in (self._path_setting("rules.file"), self._path_setting("rules.script")) if p
        ]
        scanner = Scanner(
            recursive=bool(self.config_manager.get("scanner.recursive", False)),
            excluded_files=excluded,
        )
        mover = Mover(
            max_collision_probes=self.config_manager.get("mover.max_collision_probes", 1000)
        )
        return OrganizeRun(scanner=scanner, mover=mover)

    def sort_once(
        self,
        root: Optional[str] = None,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> RunReport:
        """Run a single organize pass.

        Rules are reloaded on every call, so edits to the rules file or the
        sorting script take effect on the next pass.

        Args:
            root: Directory to organize, defaults to the configured source directory
            should_stop: Cooperative cancellation check passed to the pass

        Returns:
            RunReport for the pass

        Raises:
            RootDirectoryError: If the directory cannot be enumerated
        """
        if not self._is_initialized:
            self.initialize()

        root_path = Path(root or self.config_manager.get("source.directory", ".")).expanduser()
        rules = self.load_rules()
        return self._create_organize_run().run(root_path, rules, should_stop=should_stop)

    def create_scheduler(
        self, root: Optional[str] = None, interval: Optional[float] = None
    ) -> Scheduler:
        """Create a scheduler that sorts ``root`` on every tick."""
        if not self._is_initialized:
            self.initialize()

        interval = interval if interval is not None else self.config_manager.get("daemon.interval", 10)

        def task(stop_event: threading.Event) -> RunReport:
            return self.sort_once(root, should_stop=stop_event.is_set)

        def on_result(report: RunReport):
            logger.info(ReportGenerator(report).generate_summary_line())

        self.scheduler = Scheduler(
            task, interval, on_result=on_result, error_handler=self.error_handler
        )
        return self.scheduler

    def run_daemon(self, root: Optional[str] = None, interval: Optional[float] = None):
        """Sort ``root`` every ``interval`` seconds until SIGINT or SIGTERM."""
        scheduler = self.create_scheduler(root, interval)

        previous_handlers = {}
        if threading.current_thread() is threading.main_thread():
            for signum in (signal.SIGINT, signal.SIGTERM):
                previous_handlers[signum] = signal.signal(signum, self._handle_stop_signal)

        try:
            scheduler.run_forever()
        finally:
            for signum, handler in previous_handlers.items():
                signal.signal(signum, handler)

        stats = self.error_handler.get_error_statistics()
        logger.info(
            f"Daemon stopped after {scheduler.completed_runs} runs "
            f"({scheduler.failed_runs} failed, {stats['total_errors']} errors recorded)"
        )

    def _handle_stop_signal(self, signum, frame):
        logger.info(f"Received signal {signum}, stopping after the current file")
        if self.scheduler is not None:
            self.scheduler.stop()


def create_argument_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-p", "--path", required=True, help="Directory to organize")
    common.add_argument("--config", help="Path to configuration file", default=None)
    common.add_argument("--rules", help="Rules file (JSON or YAML)", default=None)
    common.add_argument("--script", help="Python sorting script", default=None)
    common.add_argument(
        "--script-position",
        choices=["before", "after"],
        help="Evaluate the script before or after the extension rules",
        default=None,
    )
    common.add_argument(
        "--recursive",
        action="store_true",
        default=None,
        help="Also sort files in subdirectories",
    )
    common.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
        default=None,
    )
    common.add_argument("--log-file", help="Write logs to this file", default=None)

    parser = argparse.ArgumentParser(
        prog="file-sorter", description="A rule-based file organization tool"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sort_parser = subparsers.add_parser(
        "sort", parents=[common], help="Sort files based on the configured rules"
    )
    sort_parser.add_argument("--report", help="Write a JSON report to this path", default=None)

    daemon_parser = subparsers.add_parser(
        "daemon", parents=[common], help="Run the file sorter as a background process"
    )
    daemon_parser.add_argument(
        "-i", "--interval", type=int, default=None, help="Seconds between passes (default 10)"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    app = FileSorterApp(config_file=args.config, cli_args=args)

    try:
        app.initialize()
    except FileSorterError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    if args.command == "daemon":
        app.run_daemon(args.path)
        return 0

    try:
        report = app.sort_once(args.path)
    except FileSorterError as e:
        logger.error(f"Error sorting files: {e}")
        return 1

    generator = ReportGenerator(report)
    print(generator.generate_summary_report())
    if args.report:
        generator.save_json(Path(args.report))

    return 0


if __name__ == "__main__":
    sys.exit(main())
