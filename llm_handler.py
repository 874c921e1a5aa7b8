"""
Chat session handler for talking to an LLM about a remote dataset.

The dataset is loaded once, placed in the system prompt, and the model is
offered the chart functions as tools. Tool calls are answered locally with
chart images built by chart_generator.
"""

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import openai
from openai import AsyncOpenAI

import config
from chart_generator import CHART_FUNCTION_DEFINITIONS, RenderPayload, handle_chart_function
from config_validator import validate_config
from data_context import create_data_context_prompt
from data_loader import Dataset, load_remote_data
from error_handler import (
    INVALID_ARGUMENTS_MESSAGE,
    ConfigurationError,
    DataLoadError,
    ErrorSeverity,
    log_error_with_context,
)
from logging_config import logger

DEFAULT_BASE_PROMPT = (
    "You are a helpful assistant that can analyze and answer questions about the provided dataset. "
    "When users ask about the data, provide clear and accurate answers based on the information available."
)

ERROR_MESSAGES = {
    'timeout': "Sorry, the request timed out. Please try again later.",
    'api_error': "Sorry, I encountered an error while processing your request. Please try again later.",
}


@dataclass
class ChatReply:
    """The assistant's answer plus any charts it asked for."""

    text: str
    charts: List[RenderPayload] = field(default_factory=list)


def infer_data_type(url: str) -> str:
    """Guess the data type from the URL path: '.json' files are JSON, everything else CSV."""
    path = urlparse(url).path
    return "json" if path.lower().endswith(".json") else "csv"


def get_chart_tools() -> List[Dict[str, Any]]:
    """Wrap the chart function definitions in the OpenAI tools format."""
    return [{"type": "function", "function": definition} for definition in CHART_FUNCTION_DEFINITIONS]


def create_client() -> AsyncOpenAI:
    """
    Create an OpenAI-compatible client from config.

    Raises:
        ConfigurationError: If no LLM API key is configured
    """
    if not config.llm_api_key:
        logger.error("LLM API key not found in config.py or is empty")
        raise ConfigurationError("LLM_API_KEY is required for chat sessions")

    return AsyncOpenAI(
        base_url=config.llm_base_url,
        api_key=config.llm_api_key,
        timeout=60.0
    )


def _decode_arguments(raw_arguments: Optional[str]) -> Optional[Dict[str, Any]]:
    try:
        arguments = json.loads(raw_arguments or "{}")
    except json.JSONDecodeError:
        return None
    return arguments if isinstance(arguments, dict) else None


def _is_empty_dataset(data: Dataset) -> bool:
    """Falsy JSON values count as no data. An empty object is still a dataset."""
    if isinstance(data, (list, tuple, str)):
        return len(data) == 0
    return data is None or data is False or data == 0


class DataChatSession:
    """Conversation about one dataset, holding the message history."""

    def __init__(
        self,
        dataset: Dataset,
        base_prompt: str = DEFAULT_BASE_PROMPT,
        max_rows: Optional[int] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.dataset = dataset
        self.system_prompt = create_data_context_prompt(dataset, base_prompt, max_rows)
        self.messages: List[Dict[str, Any]] = [{"role": "system", "content": self.system_prompt}]
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = create_client()
        return self._client

    def _run_tool_call(self, tool_call) -> RenderPayload:
        name = tool_call.function.name
        arguments = _decode_arguments(tool_call.function.arguments)
        if arguments is None:
            logger.warning(f"Malformed arguments in tool call {name}: {tool_call.function.arguments!r}")
            payload = RenderPayload(html="", text=INVALID_ARGUMENTS_MESSAGE.format(name=name))
        else:
            payload = handle_chart_function(name, arguments)

        self.messages.append({
            "role": "tool",
            "tool_call_id": tool_call.id,
            "content": payload.text,
        })
        return payload

    async def ask(self, question: str) -> ChatReply:
        """
        Send a user question and return the reply with any requested charts.

        API failures are logged and turned into a friendly reply text; the
        question stays in the history so the caller can simply ask again.
        """
        logger.info(f"Asking about dataset: {question[:50]}{'...' if len(question) > 50 else ''}")
        self.messages.append({"role": "user", "content": question})

        try:
            completion = await self.client.chat.completions.create(
                model=config.llm_model,
                messages=self.messages,
                tools=get_chart_tools(),
                max_tokens=config.llm_max_tokens,
                temperature=config.llm_temperature
            )
        except (asyncio.TimeoutError, openai.APITimeoutError) as e:
            log_error_with_context(e, "LLM request timed out", ErrorSeverity.MEDIUM)
            return ChatReply(text=ERROR_MESSAGES['timeout'])
        except openai.OpenAIError as e:
            log_error_with_context(e, "Error calling LLM API", ErrorSeverity.HIGH)
            return ChatReply(text=ERROR_MESSAGES['api_error'])

        message = completion.choices[0].message
        content = message.content or ""
        tool_calls = message.tool_calls or []

        assistant_message: Dict[str, Any] = {"role": "assistant", "content": content}
        if tool_calls:
            assistant_message["tool_calls"] = [
                {
                    "id": tool_call.id,
                    "type": "function",
                    "function": {
                        "name": tool_call.function.name,
                        "arguments": tool_call.function.arguments,
                    },
                }
                for tool_call in tool_calls
            ]
        self.messages.append(assistant_message)

        charts = [self._run_tool_call(tool_call) for tool_call in tool_calls]
        if not content and charts:
            content = "\n".join(chart.text for chart in charts)

        logger.info(f"LLM reply received with {len(charts)} chart(s)")
        return ChatReply(text=content, charts=charts)


async def create_session_from_url(
    url: str,
    data_type: Optional[str] = None,
    base_prompt: str = DEFAULT_BASE_PROMPT,
    max_rows: Optional[int] = None,
    client: Optional[AsyncOpenAI] = None,
) -> DataChatSession:
    """
    Load a remote dataset and open a chat session about it.

    Args:
        url: The dataset URL
        data_type: 'csv' or 'json', inferred from the URL when omitted
        base_prompt: The base system prompt
        max_rows: Maximum number of rows placed in the prompt
        client: Optional OpenAI client, created from config when omitted

    Raises:
        ConfigurationError: If no client is given and no LLM API key is configured
        DataLoadError: If loading fails or the dataset is empty
    """
    validate_config(config)
    if client is None:
        client = create_client()

    if data_type is None:
        data_type = infer_data_type(url)

    data = await load_remote_data(url, data_type)
    if _is_empty_dataset(data):
        raise DataLoadError("No data loaded from file")

    return DataChatSession(data, base_prompt=base_prompt, max_rows=max_rows, client=client)
