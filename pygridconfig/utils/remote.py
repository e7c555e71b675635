"""Fetches configuration documents over HTTP(S).

Remote sources are downloaded as text and handed to a format adapter, exactly
like local files. Transient failures and rate limiting are retried with
exponential backoff.
"""

import logging
import time
from urllib.parse import urlparse

import requests

from ..core.exceptions import SourceError

# Initialize a logger for this module.
logger = logging.getLogger(__name__)


def is_remote(source: object) -> bool:
    """Checks whether a source looks like an ``http`` or ``https`` URL."""
    return isinstance(source, str) and urlparse(source).scheme in ("http", "https")


def fetch_source(url: str, timeout: int = 30, retries: int = 3) -> str:
    """Downloads a configuration document.

    Args:
        url (str): The URL of the document.
        timeout (int): The request timeout in seconds. Defaults to 30.
        retries (int): The number of attempts before giving up. Defaults to 3;
            values below 1 still make a single attempt.

    Returns:
        str: The body of the response, decoded as text.

    Raises:
        SourceError: If the document does not exist (HTTP 404).
        requests.RequestException: If the request fails after all retries
            due to another HTTP error or a network issue.
    """
    logger.info(f"Fetching configuration from {url}")
    retries = max(retries, 1)

    for attempt in range(retries):
        try:
            response = requests.get(url, timeout=timeout)
            if response.status_code == 429:  # Handle rate limiting
                sleep_time = 2 ** attempt
                logger.warning(f"Rate limited. Retrying in {sleep_time} seconds...")
                time.sleep(sleep_time)
                continue
            response.raise_for_status()
            return response.text
        except requests.exceptions.HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                raise SourceError(f"Configuration not found at {url}") from e
            if attempt == retries - 1:
                raise
            sleep_time = 2 ** attempt
            logger.warning(
                f"Request to {url} failed with {e} (attempt {attempt + 1}/{retries}), retrying in {sleep_time} seconds"
            )
            time.sleep(sleep_time)
        except requests.exceptions.RequestException:
            if attempt == retries - 1:
                raise
            logger.warning(f"Request to {url} failed (attempt {attempt + 1}/{retries}), retrying")
    raise requests.exceptions.RequestException(f"Failed to fetch {url} after {retries} attempts")
