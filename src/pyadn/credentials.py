# SPDX-FileCopyrightText: 2024-present Marc Love <copyright@marclove.com>
#
# SPDX-License-Identifier: MIT

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Credentials:
    access_token: str
    scopes: List[str] = field(default_factory=list)
    user_id: Optional[str] = None
    username: Optional[str] = None

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @staticmethod
    def from_json(json_str: str) -> Credentials:
        data = json.loads(json_str)
        return Credentials(**data)

    @staticmethod
    def from_token_response(payload: Dict[str, Any]) -> Credentials:
        """Builds credentials from the body of an access_token response.

        App tokens carry no user, so `user_id` and `username` stay `None`.
        """
        token = payload.get("token") or {}
        user = token.get("user") or {}

        user_id = user.get("id", payload.get("user_id"))

        return Credentials(
            access_token=payload["access_token"],
            scopes=list(token.get("scopes", [])),
            user_id=str(user_id) if user_id is not None else None,
            username=user.get("username", payload.get("username")),
        )

    def is_app_token(self) -> bool:
        return self.user_id is None
