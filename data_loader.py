"""
Remote data loading module.
Fetches CSV or JSON files from any HTTP(S) location, including public
cloud storage buckets, and parses them into a dataset.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple, Union

import httpx

import config
from error_handler import (
    FetchError,
    NetworkError,
    ParseError,
    UnsupportedFormatError,
)

logger = logging.getLogger('data_chat.data_loader')

Row = Dict[str, str]
Dataset = Union[List[Row], Any]

SUPPORTED_DATA_TYPES = ("csv", "json")


async def fetch_remote_data(url: str, client: Optional[httpx.AsyncClient] = None) -> str:
    """
    Fetch raw text from a remote URL.

    Args:
        url: The URL to fetch data from
        client: Optional client to reuse, a short-lived one is created otherwise

    Returns:
        The response body as text, unmodified

    Raises:
        FetchError: If the server answers with a non-success status
        NetworkError: If the request cannot be completed
    """
    logger.info(f"Fetching remote data from {url}")

    try:
        if client is not None:
            response = await client.get(url)
        else:
            async with httpx.AsyncClient(timeout=config.fetch_timeout_seconds) as owned_client:
                response = await owned_client.get(url)
    except (httpx.RequestError, httpx.InvalidURL) as e:
        logger.error(f"Error fetching data from {url}: {str(e)}")
        raise NetworkError(f"Could not reach {url}: {str(e)}") from e

    if not response.is_success:
        logger.error(f"Error fetching data from {url}: HTTP {response.status_code}")
        raise FetchError(response.status_code, url=url)

    return response.text


def _clean_field(field: str) -> str:
    """Trim a field and strip one pair of surrounding double quotes."""
    field = field.strip()
    if field.startswith('"'):
        field = field[1:]
    if field.endswith('"'):
        field = field[:-1]
    return field


def parse_csv(csv_text: str, delimiter: str = ",") -> List[Row]:
    """
    Parse delimited text into a list of row dictionaries.

    The first line holds the headers. Lines whose field count differs from
    the header count are skipped. Quoted delimiters inside a field are not
    supported, and values are never converted from text.

    Args:
        csv_text: The CSV text to parse
        delimiter: The delimiter used in the CSV (default: ',')

    Returns:
        List of dictionaries keyed by header, in file order
    """
    text = csv_text.strip()
    if not text:
        return []

    lines = text.split("\n")
    headers = [_clean_field(header) for header in lines[0].split(delimiter)]

    rows = []
    skipped = 0
    for line in lines[1:]:
        values = [_clean_field(value) for value in line.split(delimiter)]
        if len(values) != len(headers):
            skipped += 1
            continue
        rows.append(dict(zip(headers, values)))

    if skipped:
        logger.debug(f"Skipped {skipped} CSV line(s) with a field count different from {len(headers)} headers")

    return rows


def parse_json(json_text: str) -> Any:
    """
    Parse JSON text into an object, array or scalar.

    Raises:
        ParseError: If the text is not valid JSON
    """
    try:
        return json.loads(json_text)
    except json.JSONDecodeError as e:
        logger.error(f"Error parsing JSON: {str(e)}")
        raise ParseError(f"Invalid JSON: {str(e)}") from e


async def load_remote_data(url: str, data_type: str = "csv", client: Optional[httpx.AsyncClient] = None) -> Dataset:
    """
    Load and parse data from a remote CSV or JSON file.

    Args:
        url: The URL of the file to load
        data_type: The type of file ('csv' or 'json')
        client: Optional HTTP client passed through to the fetch

    Returns:
        A list of rows for CSV, the decoded value for JSON

    Raises:
        UnsupportedFormatError: If data_type is not 'csv' or 'json'
    """
    if data_type not in SUPPORTED_DATA_TYPES:
        raise UnsupportedFormatError(data_type)

    raw_data = await fetch_remote_data(url, client=client)

    if data_type == "csv":
        data = parse_csv(raw_data)
        logger.info(f"Loaded {len(data)} CSV row(s) from {url}")
        return data

    return parse_json(raw_data)


class DataCache:
    """Caller-owned cache of loaded datasets keyed by (url, data_type)."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self._client = client
        self._datasets: Dict[Tuple[str, str], Dataset] = {}

    def __contains__(self, key: Tuple[str, str]) -> bool:
        return key in self._datasets

    def __len__(self) -> int:
        return len(self._datasets)

    async def get_or_load(self, url: str, data_type: str = "csv") -> Dataset:
        """Return the cached dataset for url/data_type, loading it on a miss."""
        key = (url, data_type)
        if key in self._datasets:
            logger.debug(f"Dataset cache hit for {url} ({data_type})")
            return self._datasets[key]

        data = await load_remote_data(url, data_type, client=self._client)
        self._datasets[key] = data
        return data

    def invalidate(self, url: Optional[str] = None, data_type: Optional[str] = None) -> int:
        """
        Drop cached datasets.

        With no arguments everything is dropped. With only a url, every
        format of that url is dropped.

        Returns:
            Number of entries removed
        """
        if url is None and data_type is None:
            removed = len(self._datasets)
            self._datasets.clear()
            return removed

        stale = [
            key for key in self._datasets
            if (url is None or key[0] == url) and (data_type is None or key[1] == data_type)
        ]
        for key in stale:
            del self._datasets[key]
        return len(stale)
