# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

"""glab command modules"""

from .ci_view import CIViewCommand
from .config import ConfigCommand

__all__ = [
    'CIViewCommand',
    'ConfigCommand',
]
