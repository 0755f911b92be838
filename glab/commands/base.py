# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

"""Base command class with common functionality"""

import logging
import subprocess
import sys
from typing import Optional

logger = logging.getLogger(__name__)


class BaseCommand:
    """Base class for all command handlers"""

    def output_error(self, message: str):
        logger.error("%s", message)
        print(f"Error: {message}", file=sys.stderr)
        sys.exit(1)

    def get_current_branch(self) -> Optional[str]:
        """Get current git branch name"""
        try:
            result = subprocess.run(
                ["git", "branch", "--show-current"],
                capture_output=True,
                text=True,
                timeout=2,
            )
        except (subprocess.TimeoutExpired, FileNotFoundError):
            return None
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None
