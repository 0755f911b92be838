"""glab - GitLab CLI with an interactive CI pipeline viewer"""

__version__ = "0.1.0"
