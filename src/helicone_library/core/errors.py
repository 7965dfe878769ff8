# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""
Exception types for the helicone library.

Only input, configuration and output-file problems are raised. Transport and
API failures are returned as ApiResult values and never cross the client
boundary as exceptions.
"""


class HeliconeError(Exception):
    """Base class for all errors raised by the library."""


class UserInputError(HeliconeError, ValueError):
    """
    Invalid user-supplied input.

    Raised for malformed dates, malformed filter JSON, unreadable filter
    files, bad key=value pairs and unknown selectors. Never retried.
    """


class ConfigError(HeliconeError):
    """Missing or invalid connection configuration (API key, gateway URL...)."""


class OutputError(HeliconeError):
    """An export destination that cannot be opened or written."""
