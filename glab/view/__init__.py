# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

"""Interactive pipeline viewer"""

from .app import PipelineViewer
from .model import JobKind, PipelineRef, PipelineStack, ViewJob

__all__ = [
    'PipelineViewer',
    'JobKind',
    'PipelineRef',
    'PipelineStack',
    'ViewJob',
]
