"""
Data context formatting for LLM system prompts.
Turns a loaded dataset into a bounded text block the model can read.
"""

import json
from typing import Any, Optional

import config

NO_DATA_MESSAGE = "No data available."

DATASET_INTRO = "You have access to the following dataset:"
DATASET_INSTRUCTIONS = (
    "When answering questions, use this data to provide accurate and relevant responses. "
    "You can analyze trends, provide statistics, and answer specific questions about the data."
)


def is_row_list(data: Any) -> bool:
    """True for a list of mapping rows. Arrays of scalars or nested arrays are not rows."""
    return isinstance(data, (list, tuple)) and all(isinstance(row, dict) for row in data)


def format_data_for_ai(data: Any, max_rows: Optional[int] = None) -> str:
    """
    Convert a list of rows into a formatted text summary for AI context.

    Only the first max_rows rows are included, in their original order.

    Args:
        data: The rows to format
        max_rows: Maximum number of rows to include (default: config.default_max_rows)

    Returns:
        str: Formatted text representation of the data
    """
    if max_rows is None:
        max_rows = config.default_max_rows

    if not is_row_list(data) or len(data) == 0:
        return NO_DATA_MESSAGE

    limited_data = list(data[:max(max_rows, 0)])
    headers = list(limited_data[0].keys()) if limited_data else []

    lines = [
        f"Data Summary ({len(data)} total rows, showing {len(limited_data)}):",
        "",
        f"Columns: {', '.join(headers)}",
        "",
        "Sample Data:",
    ]
    for index, row in enumerate(limited_data, start=1):
        lines.append(f"Row {index}: {json.dumps(row, ensure_ascii=False, separators=(',', ':'))}")

    return "\n".join(lines) + "\n"


def create_data_context_prompt(data: Any, base_prompt: str = "", max_rows: Optional[int] = None) -> str:
    """
    Create a system prompt that includes data context.

    Row lists go through format_data_for_ai, anything else (a decoded JSON
    object or an array of scalars for example) is included as indented JSON.

    Args:
        data: The data to include in context
        base_prompt: The base system prompt
        max_rows: Maximum number of rows to include

    Returns:
        str: The complete system prompt with data context
    """
    if is_row_list(data):
        data_context = format_data_for_ai(data, max_rows)
    else:
        data_context = json.dumps(data, indent=2, ensure_ascii=False)

    return f"{base_prompt}\n\n{DATASET_INTRO}\n\n{data_context}\n\n{DATASET_INSTRUCTIONS}"
