# SPDX-FileCopyrightText: 2024-present Marc Love <copyright@marclove.com>
#
# SPDX-License-Identifier: MIT

import asyncio
import base64
import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import aiohttp

from pyadn.appnet import (
    OAUTH_BASE_URL,
    AppNet,
    AppNetAuthenticationError,
)
from pyadn.configuration import Configuration, Scopes
from pyadn.credentials import Credentials

logger = logging.getLogger(__name__)

CONTENT_TYPE__FORM = "application/x-www-form-urlencoded"
CONTENT_TYPE__JSON = "application/json"

GRANT_TYPE__AUTHORIZATION_CODE = "authorization_code"
GRANT_TYPE__CLIENT_CREDENTIALS = "client_credentials"

HEADER__AUTHORIZATION = "Authorization"
HEADER__CONTENT_TYPE = "Content-Type"
HEADER__IDENTITY_DELEGATE_TOKEN = "Identity-Delegate-Token"

PARAMS__ADNVIEW = "adnview"
PARAMS__CLIENT_ID = "client_id"
PARAMS__CLIENT_SECRET = "client_secret"
PARAMS__CODE = "code"
PARAMS__GRANT_TYPE = "grant_type"
PARAMS__REDIRECT_URI = "redirect_uri"
PARAMS__RESPONSE_TYPE = "response_type"
PARAMS__SCOPE = "scope"
PARAMS__STATE = "state"
PARAMS__TEXT = "text"

PATH__AUTHENTICATE = "authenticate"
PATH__ACCESS_TOKEN = "access_token"
PATH__CONFIG = "stream/0/config"
PATH__TEXT_PROCESS = "stream/0/text/process"
PATH__TOKEN = "stream/0/token"


class AppNetInvalidParameter(ValueError): ...


class AppNetTransportError(RuntimeError): ...


class AppNetDecodeError(ValueError): ...


class AppNetResponseError(Exception):
    def __init__(self, status: int, body: str) -> None:
        self.status = status
        self.body = body
        self.error_message = _meta_error_message(body)
        super().__init__(f"{status}: {self.error_message or body}")


def _meta_error_message(body: str) -> Optional[str]:
    try:
        payload = json.loads(body)
    except ValueError:
        return None

    if not isinstance(payload, dict):
        return None

    meta = payload.get("meta")
    if isinstance(meta, dict):
        return meta.get("error_message")
    return None


class APIClient:
    def __init__(
        self,
        config: Configuration,
        access_token: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
    ) -> None:
        self.config = config
        self.access_token = access_token
        self.timeout = timeout
        self.external_session = session
        self._session = session
        self.manage_session = False

    @property
    def session(self) -> Optional[aiohttp.ClientSession]:
        return self._session

    @session.setter
    def session(self, value: aiohttp.ClientSession):
        self._session = value

    @property
    def client_id(self) -> str:
        return self.config.client_id

    @property
    def client_secret(self) -> str:
        return self.config.client_secret

    @property
    def redirect_uri(self) -> str:
        return self.config.redirect_uri

    @property
    def scopes(self) -> Scopes:
        return self.config.scopes

    async def __aenter__(self) -> "APIClient":
        if not self.external_session:
            self.session = aiohttp.ClientSession()
            self.manage_session = True
        else:
            self.session = self.external_session
            self.manage_session = False
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.manage_session and self.session:
            await self.session.close()

    async def _request(
        self,
        method: str,
        url: str,
        content_type: Optional[str] = None,
        form: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
        authenticate: bool = True,
    ) -> aiohttp.ClientResponse:
        """Sends a request and returns the response with its body read.

        This is the only place the bearer token and content type are attached.

        Raises:
            AppNetTransportError: If the request could not be completed
            AppNetResponseError: If the response status is not 2xx
            RuntimeError: If the session is missing
        """
        if self.session is None:
            raise RuntimeError("an APIClient instance must have a session to handle requests")

        request_headers = dict(headers or {})
        if authenticate and self.access_token:
            request_headers[HEADER__AUTHORIZATION] = f"Bearer {self.access_token}"
        if content_type:
            request_headers[HEADER__CONTENT_TYPE] = content_type

        kwargs: Dict[str, Any] = {"headers": request_headers}
        if form is not None:
            kwargs["data"] = urlencode(form)
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout

        logger.debug("%s %s", method, url)

        try:
            async with self.session.request(method, url, **kwargs) as response:
                await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise AppNetTransportError(f"{method} {url} failed: {exc!r}") from exc

        if not 200 <= response.status < 300:
            body = (await response.read()).decode("utf-8", errors="replace")
            logger.warning("%s %s returned %s", method, url, response.status)
            raise AppNetResponseError(response.status, body)

        return response

    async def _get(self, url: str, content_type: Optional[str] = None, **kwargs):
        return await self._request("GET", url, content_type, **kwargs)

    async def _post(
        self, url: str, form: Dict[str, str], content_type: str = CONTENT_TYPE__FORM, **kwargs
    ):
        return await self._request("POST", url, content_type, form, **kwargs)

    async def _put(
        self, url: str, form: Dict[str, str], content_type: str = CONTENT_TYPE__FORM, **kwargs
    ):
        return await self._request("PUT", url, content_type, form, **kwargs)

    async def _patch(
        self, url: str, form: Dict[str, str], content_type: str = CONTENT_TYPE__FORM, **kwargs
    ):
        return await self._request("PATCH", url, content_type, form, **kwargs)

    async def _delete(self, url: str, **kwargs):
        return await self._request("DELETE", url, CONTENT_TYPE__JSON, **kwargs)

    def authorization_url(
        self,
        client_side: bool = False,
        app_store_view: bool = False,
        state: Optional[str] = None,
    ) -> str:
        """Constructs the url to send the user to for authorization.

        Args:
            client_side: Request the token directly in the redirect fragment
                (`response_type=token`) instead of an authorization code
            app_store_view: Show the App.net app store flavored login page
            state: [optional] An opaque value echoed back on the redirect

        Returns:
            The authorization url
        """
        params = {
            PARAMS__CLIENT_ID: self.client_id,
            PARAMS__REDIRECT_URI: self.redirect_uri,
            PARAMS__SCOPE: str(self.scopes),
            PARAMS__RESPONSE_TYPE: "token" if client_side else "code",
        }

        if app_store_view:
            params[PARAMS__ADNVIEW] = "appstore"

        if state:
            params[PARAMS__STATE] = state

        return AppNet.build_url(PATH__AUTHENTICATE, params, base_url=OAUTH_BASE_URL)

    async def exchange_code_for_token(
        self,
        grant_type: str = GRANT_TYPE__CLIENT_CREDENTIALS,
        code: Optional[str] = None,
    ) -> aiohttp.ClientResponse:
        """Requests an access token from the token endpoint.

        The default `client_credentials` grant returns an app token. The
        `authorization_code` grant exchanges the `code` from a server-side
        flow redirect for a user token. The new token is not stored on the
        client; set `access_token` yourself.

        Raises:
            AppNetInvalidParameter: If the grant type is unknown or the
                authorization code is missing
            AppNetTransportError: If the request could not be completed
            AppNetResponseError: If the response status is not 2xx
        """
        form = {
            PARAMS__CLIENT_ID: self.client_id,
            PARAMS__CLIENT_SECRET: self.client_secret,
            PARAMS__GRANT_TYPE: grant_type,
        }

        if grant_type == GRANT_TYPE__AUTHORIZATION_CODE:
            if not code:
                raise AppNetInvalidParameter(
                    "the authorization_code grant requires a code"
                )
            form[PARAMS__REDIRECT_URI] = self.redirect_uri
            form[PARAMS__CODE] = code
        elif grant_type != GRANT_TYPE__CLIENT_CREDENTIALS:
            raise AppNetInvalidParameter(f"Unsupported grant type: {grant_type}")

        url = AppNet.build_url(PATH__ACCESS_TOKEN, base_url=OAUTH_BASE_URL)
        return await self._post(url, form, authenticate=False)

    async def parse_token_response(
        self, response: aiohttp.ClientResponse
    ) -> Credentials:
        """Decodes a token endpoint response into `Credentials`.

        Raises:
            AppNetDecodeError: If the body is not JSON
            AppNetAuthenticationError: If the body has no `access_token`
        """
        payload = await self._json(response)

        if not isinstance(payload, dict) or "access_token" not in payload:
            raise AppNetAuthenticationError(
                f"Response from App.net ({payload}) did not include expected `access_token` key"
            )

        return Credentials.from_token_response(payload)

    async def verify_token(self, delegate: bool = False) -> aiohttp.ClientResponse:
        """Asks App.net about a token.

        With `delegate`, the app's own client id and secret are sent as HTTP
        Basic credentials and the stored bearer token is left out.
        """
        url = AppNet.build_url(PATH__TOKEN)

        if delegate:
            auth = base64.b64encode(
                f"{self.client_id}:{self.client_secret}".encode("utf-8")
            ).decode("ascii")
            headers = {
                HEADER__AUTHORIZATION: f"Basic {auth}",
                HEADER__IDENTITY_DELEGATE_TOKEN: "True",
            }
            return await self._get(url, headers=headers, authenticate=False)

        return await self._get(url, CONTENT_TYPE__JSON)

    async def process_text(self, text: str) -> aiohttp.ClientResponse:
        url = AppNet.build_url(PATH__TEXT_PROCESS)
        return await self._post(url, {PARAMS__TEXT: text})

    async def fetch_config(self) -> Any:
        """Retrieves the App.net configuration object

        Returns:
            The decoded JSON body

        Raises:
            AppNetDecodeError: If the body is not JSON
            AppNetTransportError: If the request could not be completed
            AppNetResponseError: If the response status is not 2xx
        """
        url = AppNet.build_url(PATH__CONFIG)
        response = await self._get(url, CONTENT_TYPE__JSON)
        return await self._json(response)

    async def _json(self, response: aiohttp.ClientResponse) -> Any:
        try:
            # An empty body is not JSON either
            return json.loads(await response.read())
        except ValueError as exc:
            raise AppNetDecodeError(f"Response from App.net was not JSON: {exc}") from exc
