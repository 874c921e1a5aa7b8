"""
Test suite for the dataset chat session.
The OpenAI client is replaced by mocks, so no API key or network is needed.
"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai
import pytest

import config
import llm_handler
from error_handler import ConfigurationError, DataLoadError, FetchError


def make_tool_call(call_id, name, arguments):
    tool_call = MagicMock()
    tool_call.id = call_id
    tool_call.function.name = name
    tool_call.function.arguments = arguments
    return tool_call


def make_client(content=None, tool_calls=None, side_effect=None):
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    response.choices[0].message.tool_calls = tool_calls

    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=response, side_effect=side_effect)
    return client


ROWS = [{"month": "Jan", "sales": "10"}, {"month": "Feb", "sales": "12"}]


class TestHelpers:
    """Test module level helpers."""

    def test_infer_data_type(self):
        assert llm_handler.infer_data_type("https://example.com/data/sales.json") == "json"
        assert llm_handler.infer_data_type("https://example.com/data/SALES.JSON?token=1") == "json"
        assert llm_handler.infer_data_type("https://storage.googleapis.com/bucket/MonteCarlo.csv") == "csv"
        assert llm_handler.infer_data_type("https://example.com/export?format=json") == "csv"

    def test_get_chart_tools(self):
        tools = llm_handler.get_chart_tools()

        assert len(tools) == 4
        assert all(tool["type"] == "function" for tool in tools)
        assert [tool["function"]["name"] for tool in tools] == [
            "create_line_chart",
            "create_bar_chart",
            "create_pie_chart",
            "create_scatter_plot",
        ]

    def test_create_client_requires_api_key(self, monkeypatch):
        monkeypatch.setattr(config, "llm_api_key", None)
        with pytest.raises(ConfigurationError):
            llm_handler.create_client()

    def test_create_client(self, monkeypatch):
        monkeypatch.setattr(config, "llm_api_key", "sk-test-key-1234567890")
        monkeypatch.setattr(config, "llm_base_url", "https://llm.example.com/v1")
        client = llm_handler.create_client()
        assert str(client.base_url).startswith("https://llm.example.com/v1")


class TestDataChatSession:
    """Test DataChatSession.ask."""

    def test_system_prompt_contains_dataset(self):
        session = llm_handler.DataChatSession(ROWS, base_prompt="Base", client=make_client())

        assert session.messages[0]["role"] == "system"
        assert session.system_prompt.startswith("Base\n\n")
        assert 'Row 2: {"month":"Feb","sales":"12"}' in session.system_prompt

    @pytest.mark.asyncio
    async def test_plain_answer(self):
        client = make_client(content="Sales grew by 20%.")
        session = llm_handler.DataChatSession(ROWS, client=client)

        reply = await session.ask("How did sales change?")

        assert reply.text == "Sales grew by 20%."
        assert reply.charts == []
        assert [m["role"] for m in session.messages] == ["system", "user", "assistant"]

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == config.llm_model
        assert kwargs["tools"] == llm_handler.get_chart_tools()

    @pytest.mark.asyncio
    async def test_tool_call_is_dispatched(self):
        arguments = json.dumps({"title": "Sales", "labels": ["Jan", "Feb"], "data": [10, 12]})
        client = make_client(tool_calls=[make_tool_call("call_1", "create_pie_chart", arguments)])
        session = llm_handler.DataChatSession(ROWS, client=client)

        reply = await session.ask("Show sales as a pie chart")

        assert len(reply.charts) == 1
        assert reply.charts[0].text == "Here's your Sales"
        assert 'alt="Sales"' in reply.charts[0].html
        assert reply.text == "Here's your Sales"

        assistant, tool = session.messages[-2:]
        assert assistant["tool_calls"][0]["function"]["name"] == "create_pie_chart"
        assert tool == {"role": "tool", "tool_call_id": "call_1", "content": "Here's your Sales"}

    @pytest.mark.asyncio
    async def test_malformed_tool_arguments(self):
        client = make_client(content="Here you go", tool_calls=[make_tool_call("call_9", "create_bar_chart", "{oops")])
        session = llm_handler.DataChatSession(ROWS, client=client)

        reply = await session.ask("Bar chart please")

        assert reply.text == "Here you go"
        assert reply.charts[0].text == "Error: Invalid arguments for create_bar_chart"
        assert reply.charts[0].html == ""

    @pytest.mark.asyncio
    async def test_unknown_tool(self):
        client = make_client(tool_calls=[make_tool_call("call_2", "create_radar_chart", "{}")])
        session = llm_handler.DataChatSession(ROWS, client=client)

        reply = await session.ask("Radar chart please")

        assert reply.charts[0].text == "Error: Unknown function create_radar_chart"

    @pytest.mark.asyncio
    async def test_api_error_returns_friendly_message(self):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        client = make_client(side_effect=openai.APIConnectionError(request=request))
        session = llm_handler.DataChatSession(ROWS, client=client)

        reply = await session.ask("Anything?")

        assert reply.text == llm_handler.ERROR_MESSAGES['api_error']
        assert reply.charts == []

    @pytest.mark.asyncio
    async def test_timeout_returns_friendly_message(self):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        client = make_client(side_effect=openai.APITimeoutError(request=request))
        session = llm_handler.DataChatSession(ROWS, client=client)

        reply = await session.ask("Anything?")

        assert reply.text == llm_handler.ERROR_MESSAGES['timeout']


class TestCreateSessionFromURL:
    """Test create_session_from_url."""

    @pytest.mark.asyncio
    async def test_loads_and_builds_prompt(self):
        loader = AsyncMock(return_value=ROWS)
        with patch('llm_handler.load_remote_data', loader):
            session = await llm_handler.create_session_from_url(
                "https://example.com/sales.csv", client=make_client(), max_rows=1
            )

        loader.assert_awaited_once_with("https://example.com/sales.csv", "csv")
        assert "(2 total rows, showing 1)" in session.system_prompt

    @pytest.mark.asyncio
    async def test_json_is_inferred(self):
        loader = AsyncMock(return_value={"data": [1, 2]})
        with patch('llm_handler.load_remote_data', loader):
            session = await llm_handler.create_session_from_url("https://example.com/d.json", client=make_client())

        loader.assert_awaited_once_with("https://example.com/d.json", "json")
        assert '"data": [' in session.system_prompt

    @pytest.mark.asyncio
    async def test_empty_dataset_is_rejected(self):
        with patch('llm_handler.load_remote_data', AsyncMock(return_value=[])):
            with pytest.raises(DataLoadError, match="No data loaded from file"):
                await llm_handler.create_session_from_url("https://example.com/e.csv", client=make_client())

    @pytest.mark.asyncio
    @pytest.mark.parametrize("data", [None, "", 0, False, ()])
    async def test_falsy_dataset_is_rejected(self, data):
        with patch('llm_handler.load_remote_data', AsyncMock(return_value=data)):
            with pytest.raises(DataLoadError, match="No data loaded from file"):
                await llm_handler.create_session_from_url("https://example.com/e.json", client=make_client())

    @pytest.mark.asyncio
    async def test_scalar_array_is_accepted(self):
        with patch('llm_handler.load_remote_data', AsyncMock(return_value=[1, 2, 3])):
            session = await llm_handler.create_session_from_url("https://example.com/n.json", client=make_client())

        assert json.dumps([1, 2, 3], indent=2) in session.system_prompt

    @pytest.mark.asyncio
    async def test_load_errors_propagate(self):
        with patch('llm_handler.load_remote_data', AsyncMock(side_effect=FetchError(403))):
            with pytest.raises(FetchError):
                await llm_handler.create_session_from_url("https://example.com/p.csv", client=make_client())

    @pytest.mark.asyncio
    async def test_missing_api_key(self, monkeypatch):
        monkeypatch.setattr(config, "llm_api_key", None)
        loader = AsyncMock(return_value=ROWS)
        with patch('llm_handler.load_remote_data', loader):
            with pytest.raises(ConfigurationError):
                await llm_handler.create_session_from_url("https://example.com/sales.csv")

        loader.assert_not_awaited()
