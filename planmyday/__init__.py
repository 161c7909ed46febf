"""planmyday: personal day planning and task scheduling."""

__version__ = "0.1.0"
