# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

"""Configuration command handler"""

from .base import BaseCommand


class ConfigCommand(BaseCommand):
    """Handle configuration commands"""

    def add_arguments(self, subparsers):
        """Add config-specific arguments to parser"""
        parser = subparsers.add_parser(
            "config",
            help="Configuration management",
            description="View and update glab configuration",
        )

        config_subparsers = parser.add_subparsers(dest="action", help="Config action")

        config_subparsers.add_parser("show", help="Show current configuration")

        set_parser = config_subparsers.add_parser("set", help="Set configuration values")
        set_parser.add_argument("--gitlab-url", help="GitLab server URL")
        set_parser.add_argument("--project", help="GitLab project path")
        set_parser.add_argument("--browser", help="Browser used by --web")
        set_parser.add_argument(
            "--refresh-interval",
            type=float,
            help="Seconds between pipeline refreshes in the viewer",
        )

    def handle(self, config, args):
        """Handle configuration commands"""
        if not getattr(args, "action", None):
            args.action = "show"

        if args.action == "show":
            self.show_config(config)
        elif args.action == "set":
            self.set_config(config, args)

    def show_config(self, config):
        """Display current configuration"""
        print(f"GitLab URL:       {config.gitlab_url or 'Not set'}")
        print(f"Project:          {config.project_path or 'Not set (auto-detected)'}")
        print(f"Token:            {'Set' if config.gitlab_token else 'Not set'}")
        print(f"Browser:          {config.browser or 'System default'}")
        print(f"Refresh interval: {config.refresh_interval:g}s")
        print(f"Cache dir:        {config.cache_dir}")

    def set_config(self, config, args):
        """Update configuration values"""
        update = {}
        if getattr(args, "gitlab_url", None):
            update["gitlab_url"] = args.gitlab_url
        if getattr(args, "project", None):
            update["project_path"] = args.project
        if getattr(args, "browser", None):
            update["browser"] = args.browser
        if getattr(args, "refresh_interval", None):
            if args.refresh_interval <= 0:
                self.output_error("refresh interval must be positive")
            update["refresh_interval"] = args.refresh_interval

        if update:
            config.save_config(**update)
            print("Configuration saved")
        else:
            print("No configuration values provided")
