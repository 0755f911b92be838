# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

import os
import json
import logging
import subprocess
import re
import urllib.parse
from pathlib import Path
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_INTERVAL = 5

ENV_OVERRIDES = {
    'gitlab_url': 'GITLAB_URL',
    'gitlab_token': 'GITLAB_TOKEN',
    'project_path': 'GITLAB_PROJECT',
    'browser': 'BROWSER',
}


class Config:
    """Handle configuration from environment variables and config files"""

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = config_dir or Path.home() / ".config" / "glab"
        self.config_file = self.config_dir / "config.json"
        self._config = self._load_config()
        self._detected_project = None

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file and environment variables"""
        config = {
            'gitlab_url': None,
            'gitlab_token': None,
            'project_path': None,
            'cache_dir': str(Path.home() / ".cache" / "glab"),
            'browser': None,
            'refresh_interval': DEFAULT_REFRESH_INTERVAL,
        }

        if self.config_file.exists():
            try:
                with open(self.config_file, 'r') as f:
                    config.update(json.load(f))
            except (OSError, ValueError) as e:
                logger.warning("Ignoring unreadable config file %s: %s", self.config_file, e)

        # Environment variables override config file
        for key, var in ENV_OVERRIDES.items():
            if os.environ.get(var):
                config[key] = os.environ[var]

        return config

    def _git_remote_url(self) -> Optional[str]:
        try:
            result = subprocess.run(
                ['git', 'remote', 'get-url', 'origin'],
                capture_output=True,
                text=True,
                timeout=2
            )
        except (subprocess.TimeoutExpired, FileNotFoundError):
            return None
        if result.returncode != 0:
            return None
        return result.stdout.strip()

    def _detect_project_from_git(self) -> Optional[str]:
        """Detect GitLab project path from git remote URL"""
        if self._detected_project is not None:
            return self._detected_project or None

        remote_url = self._git_remote_url()
        self._detected_project = parse_project_path(remote_url, self.gitlab_url) or ""
        return self._detected_project or None

    def save_config(self, **kwargs):
        """Save configuration to file"""
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self._config.update(kwargs)

        # Don't save token to file for security
        config_to_save = {k: v for k, v in self._config.items() if k != 'gitlab_token'}

        with open(self.config_file, 'w') as f:
            json.dump(config_to_save, f, indent=2)

    @property
    def gitlab_url(self) -> Optional[str]:
        return self._config.get('gitlab_url')

    @property
    def gitlab_token(self) -> Optional[str]:
        return self._config.get('gitlab_token')

    @property
    def project_path(self) -> Optional[str]:
        # Priority: Environment variable > Config file > Git remote detection
        project = self._config.get('project_path')
        if not project:
            project = self._detect_project_from_git()
        return project

    @property
    def cache_dir(self) -> str:
        return self._config.get('cache_dir') or str(Path.home() / ".cache" / "glab")

    @property
    def browser(self) -> Optional[str]:
        return self._config.get('browser')

    @property
    def refresh_interval(self) -> float:
        try:
            interval = float(self._config.get('refresh_interval', DEFAULT_REFRESH_INTERVAL))
        except (TypeError, ValueError):
            return DEFAULT_REFRESH_INTERVAL
        return interval if interval > 0 else DEFAULT_REFRESH_INTERVAL

    def validate(self) -> tuple[bool, str]:
        """Validate required configuration"""
        if not self.gitlab_url:
            return False, "GITLAB_URL not set. Set via environment variable or run: glab config set --gitlab-url <url>"
        if not self.gitlab_token:
            return False, "GITLAB_TOKEN not set. Set via environment variable or run: export GITLAB_TOKEN=<token>"
        if not self.project_path:
            remote_url = self._git_remote_url()
            if remote_url:
                gitlab_domain = urllib.parse.urlparse(self.gitlab_url).netloc
                if gitlab_domain not in remote_url:
                    remote_domain = re.search(r'[@/]([^/:]+)[:/]', remote_url)
                    remote_host = remote_domain.group(1) if remote_domain else 'unknown'
                    return False, (
                        f"Git remote points to {remote_host} but glab is configured for {gitlab_domain}.\n"
                        "Move to a GitLab repository or set GITLAB_PROJECT explicitly."
                    )
            return False, "GITLAB_PROJECT not set. Set via environment variable or run: glab config set --project <path>"
        return True, "Configuration valid"

    def get_cache_path(self, filename: str) -> Path:
        """Get path for cache file"""
        cache_dir = Path(self.cache_dir)
        cache_dir.mkdir(parents=True, exist_ok=True)
        return cache_dir / filename


def parse_project_path(remote_url: Optional[str], gitlab_url: Optional[str] = None) -> Optional[str]:
    """Extract the project path from a git remote URL.

    Only remotes pointing at the configured GitLab host are accepted when a
    GitLab URL is known.
    """
    if not remote_url:
        return None

    if gitlab_url:
        gitlab_domain = urllib.parse.urlparse(gitlab_url).netloc
        if gitlab_domain not in remote_url:
            return None

    # git@gitlab.com:group/subgroup/project.git
    ssh_match = re.match(r'git@[^:]+:(.+?)(?:\.git)?$', remote_url)
    if ssh_match:
        return ssh_match.group(1)

    # https://gitlab.com/group/subgroup/project.git
    https_match = re.match(r'https?://[^/]+/(.+?)(?:\.git)?/?$', remote_url)
    if https_match:
        return https_match.group(1)

    return None
