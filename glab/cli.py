# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

"""glab - command line tool for GitLab pipelines"""

import argparse
import logging
import sys

from gitlab.exceptions import GitlabError
from requests.exceptions import RequestException

from . import __version__
from .config import Config
from .commands import CIViewCommand, ConfigCommand
from .errors import GlabError
from .utils import setup_logging

logger = logging.getLogger(__name__)


class GlabCLI:
    """Main CLI class routing areas to command handlers"""

    def __init__(self, config: Config = None):
        self.config = config or Config()
        self.ci_cmd = CIViewCommand()
        self.config_cmd = ConfigCommand()

    def create_parser(self):
        """Create the main argument parser with subcommands"""
        parser = argparse.ArgumentParser(
            prog="glab",
            description="glab - work with GitLab CI/CD pipelines from the terminal",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        parser.add_argument(
            "--verbose",
            "-v",
            action="store_true",
            help="Write debug logs to <cache_dir>/glab.log",
        )
        parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

        subparsers = parser.add_subparsers(
            dest="area",
            title="Available areas",
            description="Use `glab <area> --help` for area-specific commands",
            metavar="<area>",
        )
        self.ci_cmd.add_arguments(subparsers)
        self.config_cmd.add_arguments(subparsers)
        return parser

    def route_command(self, args):
        """Route commands to appropriate handlers"""
        # config doesn't need an API connection
        if args.area == "config":
            self.config_cmd.handle(self.config, args)
            return

        if args.area == "ci":
            if args.action != "view":
                self.create_parser().parse_args(["ci", "--help"])
                return

            valid, message = self.config.validate()
            if not valid:
                print(f"Error: {message}", file=sys.stderr)
                sys.exit(1)

            try:
                self.ci_cmd.handle(self.config, args)
            except (GlabError, GitlabError, RequestException, OSError) as e:
                # connection failures and timeouts are not GitlabErrors
                self.ci_cmd.output_error(str(e))

    def run(self, argv=None):
        """Main entry point"""
        parser = self.create_parser()
        args = parser.parse_args(argv)

        if not args.area:
            parser.print_help()
            sys.exit(0)

        try:
            setup_logging(self.config, verbose=args.verbose)
        except OSError as e:
            print(f"Warning: logging disabled: {e}", file=sys.stderr)
        logger.debug("glab %s: %s", __version__, vars(args))

        try:
            self.route_command(args)
        except KeyboardInterrupt:
            sys.exit(130)


def main():
    """Main entry point for glab"""
    cli = GlabCLI()
    cli.run()


if __name__ == "__main__":
    main()
