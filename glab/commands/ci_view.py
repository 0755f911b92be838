# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

"""glab ci view: interactive view of the pipeline of a branch"""

import argparse
import curses
import logging
import sys
import webbrowser

from ..api import ApiClient
from ..errors import PipelineNotFoundError
from ..utils import display_url, parse_time, pretty_time_ago
from ..view.app import PipelineViewer
from ..view.model import PipelineRef, PipelineStack
from ..view.terminal import CursesTerminal
from .base import BaseCommand

logger = logging.getLogger(__name__)


class CIViewCommand(BaseCommand):
    """Handle the ci view command"""

    def __init__(self, client_factory=ApiClient):
        self.client_factory = client_factory

    def add_arguments(self, subparsers):
        parser = subparsers.add_parser(
            "ci",
            help="CI/CD pipeline operations",
            description="Work with GitLab CI/CD pipelines",
        )
        ci_subparsers = parser.add_subparsers(dest="action", metavar="<action>")

        view_parser = ci_subparsers.add_parser(
            "view",
            help="View, run, trace, cancel jobs of the current pipeline",
            description=(
                "Interactive view of the latest pipeline of a branch.\n\n"
                "Keys:\n"
                "  arrows / hjkl   move between jobs\n"
                "  Enter           show logs, or open the child pipeline of a bridge\n"
                "  Esc / q         close logs, go back to the parent pipeline, or quit\n"
                "  Ctrl+R, Ctrl+P  run, retry or play the selected job\n"
                "  Ctrl+D          cancel the selected job\n"
                "  Ctrl+Space      follow the job trace outside the view\n"
                "  Ctrl+Q          quit"
            ),
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        view_parser.add_argument(
            "ref",
            nargs="?",
            help="Branch, tag or commit to view (default: current branch)",
        )
        source = view_parser.add_mutually_exclusive_group()
        source.add_argument("-b", "--branch", help="Check pipeline status for a branch")
        source.add_argument(
            "-p", "--pipelineid", type=int, help="Check pipeline status for a specific pipeline ID"
        )
        view_parser.add_argument(
            "-w", "--web", action="store_true", help="Open the pipeline in a browser"
        )
        return parser

    def resolve_ref(self, args) -> str:
        ref = getattr(args, "ref", None) or getattr(args, "branch", None)
        if not ref:
            ref = self.get_current_branch()
        if not ref:
            self.output_error("could not determine the current branch, pass a ref or --branch")
        return ref

    def handle(self, config, args):
        client = self.client_factory(config)
        project = config.project_path

        if args.pipelineid:
            pipeline = client.get_pipeline(project, args.pipelineid)
            sha = pipeline.get('sha', '')
            if args.web:
                self.open_in_browser(config, pipeline['web_url'])
                return
        else:
            ref = self.resolve_ref(args)
            commit = client.get_commit(project, ref)
            last_pipeline = commit.get('last_pipeline')
            if not last_pipeline:
                raise PipelineNotFoundError(f"Can't find pipeline for commit: {commit.get('id')}")
            if args.web:
                self.open_in_browser(config, last_pipeline['web_url'])
                return
            pipeline = client.get_pipeline(project, last_pipeline['id'])
            sha = pipeline.get('sha') or commit.get('id', '')

        root = PipelineRef(
            id=pipeline['id'],
            project_id=pipeline.get('project_id') or project,
            sha=sha,
            web_url=pipeline.get('web_url', ''),
        )
        logger.info("Viewing pipeline %s of %s", root.id, project)
        self.run_viewer(client, PipelineStack(root), self.pipeline_title(pipeline), config.refresh_interval)

    def pipeline_title(self, pipeline, now=None) -> str:
        user = pipeline.get('user') or {}
        ago = pretty_time_ago(parse_time(pipeline.get('created_at')), now)
        return f"Pipeline #{pipeline['id']} triggered {ago} by {user.get('name', 'unknown')}"

    def open_in_browser(self, config, url: str):
        if sys.stdout.isatty():
            print(f"Opening {display_url(url)} in your browser.", file=sys.stderr)
        logger.info("Opening %s", url)
        try:
            webbrowser.get(config.browser).open(url)
        except webbrowser.Error as e:
            self.output_error(f"could not open browser: {e}")

    def run_viewer(self, client, stack, title, refresh_interval):
        def main(stdscr):
            viewer = PipelineViewer(
                client, stack, CursesTerminal(stdscr), title,
                refresh_interval=refresh_interval,
            )
            viewer.run()

        curses.wrapper(main)
