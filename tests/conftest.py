"""Shared pytest fixtures for Chat Driver SDK tests."""

from types import SimpleNamespace
from typing import Any, Dict, List
from unittest.mock import AsyncMock

import pytest

from chat_driver_sdk.models import FunctionDescriptor
from chat_driver_sdk.reliability.retry import RetryConfig

FILES = {
    "notes.txt": "Meeting moved to Thursday.",
    "todo.txt": "Buy milk.",
}


def pytest_configure(config):
    config.addinivalue_line("markers", "live: test calls a real provider API")


class RecordingSleep:
    """Awaitable sleep replacement that records requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def retry_config():
    return RetryConfig()


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Provider credentials for driver construction."""
    env_vars = {
        "OPENAI_API_KEY": "test-openai-key",
        "AZURE_OPENAI_API_KEY": "test-azure-key",
        "AZURE_OPENAI_ENDPOINT": "https://test-resource.openai.azure.com",
        "GOOGLE_GEMINI_API_KEY": "test-gemini-key",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


@pytest.fixture
def mock_openai_client():
    """AsyncOpenAI-shaped client; set ``responses.create`` return values per test."""
    return SimpleNamespace(
        responses=SimpleNamespace(create=AsyncMock()),
        embeddings=SimpleNamespace(create=AsyncMock()),
    )


@pytest.fixture
def mock_gemini_client():
    """genai.Client-shaped client exposing the async models API."""
    return SimpleNamespace(
        aio=SimpleNamespace(
            models=SimpleNamespace(
                generate_content=AsyncMock(),
                generate_content_stream=AsyncMock(),
            )
        )
    )


@pytest.fixture
def file_calls():
    """Names passed to read_file, in call order."""
    return []


@pytest.fixture
def horoscope_calls():
    return []


@pytest.fixture
def read_file_function(file_calls):
    def read_file(args: Dict[str, Any]) -> Dict[str, str]:
        file_calls.append(args["name"])
        return {"name": args["name"], "content": FILES[args["name"]]}

    return FunctionDescriptor(
        name="read_file",
        description="Read one of the user's files by name",
        input_schema={
            "type": "object",
            "properties": {"name": {"type": "string", "enum": sorted(FILES)}},
            "required": ["name"],
        },
        execute=read_file,
    )


@pytest.fixture
def horoscope_function(horoscope_calls):
    async def get_horoscope(args: Dict[str, Any]) -> str:
        horoscope_calls.append(args["sign"])
        return f"{args['sign']}: a good week for finishing things."

    return FunctionDescriptor(
        name="get_horoscope",
        description="Today's horoscope for an astrological sign",
        input_schema={
            "type": "object",
            "properties": {"sign": {"type": "string"}},
            "required": ["sign"],
        },
        execute=get_horoscope,
    )


@pytest.fixture
def functions(read_file_function, horoscope_function):
    return [read_file_function, horoscope_function]


@pytest.fixture
def person_schema():
    return {
        "type": "object",
        "properties": {
            "name": {"type": "string"},
            "age": {"type": "integer"},
        },
        "required": ["name", "age"],
        "additionalProperties": False,
    }
