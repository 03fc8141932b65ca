# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Errors raised while turning a terust YAML file into a TerustConfig.

They sit apart from the harness errors: a bad config is caught by the CLI
before any feed request or build happens, and always exits with the config
error code.
"""


class ConfigError(Exception):
    """A config file could not be used to start a run."""


class ConfigLoadError(ConfigError):
    """The file is missing, unreadable, not YAML, or not a mapping at the top level."""


class ConfigValidationError(ConfigError):
    """
    The YAML is fine but the values are not: an unknown section or key, a
    page size outside 1..200, a bad log level, or an ignored id that doesn't
    fit in 64 bits.
    """
