# SPDX-FileCopyrightText: 2024-present Marc Love <copyright@marclove.com>
#
# SPDX-License-Identifier: MIT

from typing import Optional, Union
from urllib.parse import urlencode

from oauthlib.oauth2 import MobileApplicationClient, WebApplicationClient

API_BASE_URL = "https://alpha-api.app.net/"
OAUTH_BASE_URL = "https://account.app.net/oauth/"


class AppNetAuthenticationError(RuntimeError): ...


class AppNet:
    @staticmethod
    def build_url(path, params: Union[dict, None] = None, base_url=None):
        base_url = base_url or API_BASE_URL
        full_path = f"{base_url}{path}"
        if params:
            return "?".join([full_path, urlencode(params)])
        return full_path

    """
    Authenticating with App.net (NOTE: the client id, client secret and
    redirect uri can be read from the environment, see Configuration.load).

    1.  Build an authorization url and send the user to it. Pass a `state`
        value and keep it somewhere you can reference later to mitigate CSRF
        attacks.

        >>> client = APIClient(Configuration.load())
        >>> client.authorization_url(state=state)

    2.  App.net redirects the user back to your redirect uri. For the
        server-side flow the url carries an authorization code:

        >>> code = AppNet.code_from_callback(requested_url, state=state)

        For the client-side flow (`client_side=True`) the url fragment
        already carries the token:

        >>> token = AppNet.token_from_callback(requested_url, state=state)

    3.  Exchange the code for a token, then set it on the client. The client
        never switches tokens on its own.

        >>> async with client:
        >>>     response = await client.exchange_code_for_token("authorization_code", code)
        >>>     credentials = await client.parse_token_response(response)
        >>>     client.access_token = credentials.access_token

        An app token (no user) is requested with the default grant type:

        >>> await client.exchange_code_for_token()

    4.  `Credentials` can be serialized to and from JSON for storage:

        >>> Credentials.from_json(credentials.to_json())

    """

    ALL_SCOPES = [
        "basic",
        "stream",
        "write_post",
        "follow",
        "update_profile",
        "public_messages",
        "messages",
        "files",
        "presence",
        "export",
    ]

    @staticmethod
    def code_from_callback(callback_url: str, state: Optional[str] = None) -> str:
        """Extracts the authorization code from a server-side flow redirect.

        Args:
            callback_url: the full request URL App.net redirected the user to
            state: [optional] the state value passed to `authorization_url`

        Returns:
            The authorization code

        Raises:
            OAuth2Error: If the state does not match, the redirect carries an
                `error`, or no code is present
        """
        client = WebApplicationClient(None)
        params = client.parse_request_uri_response(callback_url, state=state)
        return params["code"]

    @staticmethod
    def token_from_callback(callback_url: str, state: Optional[str] = None) -> str:
        """Extracts the access token from a client-side flow redirect fragment.

        Raises:
            OAuth2Error: If the redirect carries an `error` or no token
            ValueError: If the state does not match
        """
        client = MobileApplicationClient(None)
        token = client.parse_request_uri_response(callback_url, state=state)
        return token["access_token"]
