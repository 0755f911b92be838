# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

"""Exception types shared by the API layer, the commands and the viewer"""


class GlabError(Exception):
    """Base class for errors reported to the user by the CLI"""


class ConfigError(GlabError):
    pass


class PipelineNotFoundError(GlabError):
    pass


class JobsNotFoundError(GlabError):
    """Polling a pipeline failed or returned neither jobs nor bridges"""


class BoxNotFoundError(GlabError):
    """A job in the snapshot has no box in the current layout"""

    def __init__(self, name: str, index: int):
        super().__init__(f"jobs-{name} not found at index: {index}")
        self.name = name
        self.index = index


class JobActionError(GlabError):
    """Cancelling, retrying or playing a job failed"""
