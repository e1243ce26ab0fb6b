# SPDX-FileCopyrightText: 2024-present Marc Love <copyright@marclove.com>
#
# SPDX-License-Identifier: MIT

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Iterable, Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_SCOPES = ["basic"]


class Scopes(list):
    """An ordered list of permission scopes.

    Order is whatever the caller supplied and duplicates are kept.
    """

    def spaced(self) -> str:
        return " ".join(self)

    def __str__(self) -> str:
        return ",".join(self)


@dataclass
class Configuration:
    client_id: str
    client_secret: str
    redirect_uri: str
    scopes: Scopes = field(default_factory=Scopes)

    def __post_init__(self):
        if not isinstance(self.scopes, Scopes):
            self.scopes = Scopes(self.scopes)

    def scopes_str(self) -> str:
        return str(self.scopes)

    @staticmethod
    def load(
        scopes: Optional[Iterable[str]] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        redirect_uri: Optional[str] = None,
    ) -> Configuration:
        """Builds a configuration, falling back to the environment.

        Any argument left out is read from ADN_CLIENT_ID, ADN_CLIENT_SECRET,
        ADN_REDIRECT_URI or ADN_SCOPES (comma-separated). A `.env` file is
        honored.

        Raises:
            ValueError: If the client id, client secret or redirect uri
                cannot be found
        """
        client_id = client_id or os.getenv("ADN_CLIENT_ID")
        client_secret = client_secret or os.getenv("ADN_CLIENT_SECRET")
        redirect_uri = redirect_uri or os.getenv("ADN_REDIRECT_URI")

        if client_id is None:
            raise ValueError("must define an ADN_CLIENT_ID env variable")

        if client_secret is None:
            raise ValueError("must define an ADN_CLIENT_SECRET env variable")

        if redirect_uri is None:
            raise ValueError("must define an ADN_REDIRECT_URI env variable")

        if scopes is None:
            env_scopes = os.getenv("ADN_SCOPES", "")
            scopes = [scope.strip() for scope in env_scopes.split(",") if scope.strip()]

        scopes = list(scopes)
        if len(scopes) == 0:
            scopes = list(DEFAULT_SCOPES)

        return Configuration(
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=redirect_uri,
            scopes=Scopes(scopes),
        )
