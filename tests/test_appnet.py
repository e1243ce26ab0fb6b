# SPDX-FileCopyrightText: 2024-present Marc Love <copyright@marclove.com>
#
# SPDX-License-Identifier: MIT

import unittest

from oauthlib.oauth2 import MismatchingStateError, MissingCodeError, OAuth2Error
from oauthlib.oauth2.rfc6749.errors import MissingTokenError

from pyadn.appnet import AppNet


class AppNetTest(unittest.TestCase):
    def test_build_url(self):
        without_params = AppNet.build_url(
            path="some_path", params={}, base_url="https://adn.api/"
        )
        self.assertEqual(without_params, "https://adn.api/some_path")

        with_params = AppNet.build_url(
            path="some_path",
            params={"some": "value", "another": "value"},
            base_url="https://adn.api/",
        )
        self.assertEqual(with_params, "https://adn.api/some_path?some=value&another=value")

    def test_build_url_defaults_to_api_base(self):
        self.assertEqual(
            AppNet.build_url("stream/0/config"),
            "https://alpha-api.app.net/stream/0/config",
        )

    def test_code_from_callback(self):
        code = AppNet.code_from_callback("https://x.app/cb?code=somecode")
        self.assertEqual(code, "somecode")

    def test_code_from_callback_with_state(self):
        code = AppNet.code_from_callback(
            "https://x.app/cb?code=somecode&state=somestate", state="somestate"
        )
        self.assertEqual(code, "somecode")

    def test_code_from_callback_with_mismatched_state(self):
        with self.assertRaises(MismatchingStateError):
            AppNet.code_from_callback(
                "https://x.app/cb?code=somecode&state=forged", state="somestate"
            )

    def test_code_from_callback_without_code(self):
        with self.assertRaises(MissingCodeError):
            AppNet.code_from_callback("https://x.app/cb?other=value")

    def test_code_from_callback_with_error(self):
        with self.assertRaises(OAuth2Error):
            AppNet.code_from_callback("https://x.app/cb?error=access_denied")

    def test_token_from_callback(self):
        token = AppNet.token_from_callback(
            "https://x.app/cb#access_token=sometoken&token_type=bearer"
        )
        self.assertEqual(token, "sometoken")

    def test_token_from_callback_without_token(self):
        with self.assertRaises(MissingTokenError):
            AppNet.token_from_callback("https://x.app/cb#token_type=bearer")

    def test_token_from_callback_with_mismatched_state(self):
        with self.assertRaises(ValueError):
            AppNet.token_from_callback(
                "https://x.app/cb#access_token=sometoken&token_type=bearer&state=forged",
                state="somestate",
            )
