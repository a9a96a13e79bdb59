"""
Haiku SDK Command-Line Interface
================================

This package provides the command-line tools of the Haiku SDK:

- **haikuc**: compile one template into ``.brs`` and ``.xml``
- **haiku-deploy**: compile every template in a directory in place

Each tool is a Click application sharing the exit codes and exception
handling in ``haiku_sdk.cli.errors``.
"""

__all__ = ["haikuc", "haikudeploy"]
