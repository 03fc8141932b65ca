# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Credentials for the timeline API.

The harness only reads public timelines, so an app-only bearer token is
enough. It comes from the environment, or from a `.env` file next to where
the harness runs (loaded by bootstrap via python-dotenv). Getting a token in
the first place is up to the user.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional

from terust.harness.errors import SetupError

BEARER_TOKEN_VAR: str = "TWITTER_BEARER_TOKEN"


@dataclass(frozen=True)
class Credentials:
    bearer_token: str

    def __repr__(self) -> str:
        return "Credentials(bearer_token=<redacted>)"


def load_credentials(environ: Optional[Mapping[str, str]] = None) -> Credentials:
    """
    Read the bearer token from the environment.

    Raises:
        SetupError: If the token is missing or blank.
    """
    env = os.environ if environ is None else environ
    token = env.get(BEARER_TOKEN_VAR, "").strip()
    if not token:
        raise SetupError(
            f"{BEARER_TOKEN_VAR} not defined in environment or .env file."
        )
    return Credentials(bearer_token=token)
