import unittest
from unittest.mock import MagicMock, patch

import requests

from pygridconfig.core.exceptions import SourceError
from pygridconfig.utils.remote import fetch_source, is_remote

URL = "https://example.com/grid.yaml"


def make_response(status_code, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(response=response)
    return response


class TestFetchSource(unittest.TestCase):

    def test_is_remote(self):
        self.assertTrue(is_remote("https://example.com/a.json"))
        self.assertTrue(is_remote("http://example.com/a.json"))
        self.assertFalse(is_remote("configs/a.json"))
        self.assertFalse(is_remote("file:///tmp/a.json"))
        self.assertFalse(is_remote(None))

    @patch("pygridconfig.utils.remote.requests.get")
    def test_success(self, mock_get):
        mock_get.return_value = make_response(200, "a: 1\n")
        self.assertEqual(fetch_source(URL, timeout=5), "a: 1\n")
        mock_get.assert_called_once_with(URL, timeout=5)

    @patch("pygridconfig.utils.remote.requests.get")
    def test_not_found(self, mock_get):
        mock_get.return_value = make_response(404)
        with self.assertRaises(SourceError):
            fetch_source(URL)
        self.assertEqual(mock_get.call_count, 1)

    @patch("pygridconfig.utils.remote.time.sleep")
    @patch("pygridconfig.utils.remote.requests.get")
    def test_rate_limit_is_retried(self, mock_get, mock_sleep):
        mock_get.side_effect = [make_response(429), make_response(200, "a: 1\n")]
        self.assertEqual(fetch_source(URL), "a: 1\n")
        mock_sleep.assert_called_once_with(1)

    @patch("pygridconfig.utils.remote.requests.get")
    def test_network_errors_raise_after_retries(self, mock_get):
        mock_get.side_effect = requests.exceptions.ConnectionError("down")
        with self.assertRaises(requests.exceptions.ConnectionError):
            fetch_source(URL, retries=2)
        self.assertEqual(mock_get.call_count, 2)

    @patch("pygridconfig.utils.remote.time.sleep")
    @patch("pygridconfig.utils.remote.requests.get")
    def test_server_error_raises_after_retries(self, mock_get, mock_sleep):
        mock_get.return_value = make_response(500)
        with self.assertLogs("pygridconfig.utils.remote", level="WARNING"):
            with self.assertRaises(requests.exceptions.HTTPError):
                fetch_source(URL, retries=3)
        self.assertEqual(mock_get.call_count, 3)
        self.assertEqual([c.args for c in mock_sleep.call_args_list], [(1,), (2,)])

    @patch("pygridconfig.utils.remote.time.sleep")
    @patch("pygridconfig.utils.remote.requests.get")
    def test_server_error_then_success(self, mock_get, mock_sleep):
        mock_get.side_effect = [make_response(503), make_response(200, "a: 1\n")]
        self.assertEqual(fetch_source(URL), "a: 1\n")
        mock_sleep.assert_called_once_with(1)

    @patch("pygridconfig.utils.remote.requests.get")
    def test_zero_retries_still_makes_one_attempt(self, mock_get):
        mock_get.return_value = make_response(200, "a: 1\n")
        self.assertEqual(fetch_source(URL, retries=0), "a: 1\n")
        self.assertEqual(mock_get.call_count, 1)

        mock_get.reset_mock()
        mock_get.return_value = make_response(500)
        with self.assertRaises(requests.exceptions.HTTPError):
            fetch_source(URL, retries=0)
        self.assertEqual(mock_get.call_count, 1)


if __name__ == '__main__':
    unittest.main()
