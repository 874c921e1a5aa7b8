"""
Data chat configuration using environment variables and .env file support.

This module loads configuration from environment variables with .env file taking precedence.
Every setting has a default, so the loaders, formatters and chart builders work without
any environment at all. Only the chat session needs LLM_API_KEY.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
# Use override=True to prioritize .env file over system environment variables
load_dotenv(override=True)

# Chart Rendering Service (optional)
# Environment variables: QUICKCHART_BASE_URL, CHART_WIDTH, CHART_HEIGHT
# The core only builds image URLs against this service, it never calls it
quickchart_base_url = os.getenv('QUICKCHART_BASE_URL', 'https://quickchart.io/chart')
chart_width = int(os.getenv('CHART_WIDTH', '600'))
chart_height = int(os.getenv('CHART_HEIGHT', '400'))

# Data Context Configuration (optional)
# Environment variable: DEFAULT_MAX_ROWS
# Number of rows included in the system prompt when the caller does not say otherwise
default_max_rows = int(os.getenv('DEFAULT_MAX_ROWS', '50'))

# Fetch Timeout (optional)
# Environment variable: FETCH_TIMEOUT_SECONDS
# Unset means no timeout, callers wrap fetches with their own deadline if they need one
_fetch_timeout_raw = os.getenv('FETCH_TIMEOUT_SECONDS')
fetch_timeout_seconds = float(_fetch_timeout_raw) if _fetch_timeout_raw else None

# LLM Configuration (only required for the chat session)
# Environment variables: LLM_API_KEY, LLM_BASE_URL, LLM_MODEL, LLM_MAX_TOKENS, LLM_TEMPERATURE
# Works with any OpenAI-compatible API that supports tool calling
llm_api_key = os.getenv('LLM_API_KEY')
llm_base_url = os.getenv('LLM_BASE_URL', 'https://api.openai.com/v1')
llm_model = os.getenv('LLM_MODEL', 'gpt-4o')
llm_max_tokens = int(os.getenv('LLM_MAX_TOKENS', '2000'))
llm_temperature = float(os.getenv('LLM_TEMPERATURE', '0.7'))

# Logging Configuration (optional)
# Environment variable: LOG_DIRECTORY
# Set to an empty string to log to the console only
log_directory = os.getenv('LOG_DIRECTORY', 'logs')
