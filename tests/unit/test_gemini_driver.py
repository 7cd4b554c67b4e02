"""Tests for the Google Gemini driver."""

from types import SimpleNamespace

import pytest

from chat_driver_sdk.config.constants import INTERRUPTION_MESSAGE
from chat_driver_sdk.models import (
    ChatMessage,
    ChatRole,
    FileReference,
    FunctionDescriptor,
    InputFile,
    InputText,
    ModelTier,
    ToolCallRequest,
    ToolCallResult,
    Verbosity,
)
from chat_driver_sdk.orchestration import TurnRequest
from chat_driver_sdk.providers.errors import EmptyOutputError, ProviderError
from chat_driver_sdk.providers.gemini import GeminiChatDriver
from chat_driver_sdk.providers.gemini.parsers import extract_text, extract_tool_calls, parse_reply
from chat_driver_sdk.providers.gemini.payloads import (
    build_config,
    build_contents,
    build_tools,
    function_calling_mode,
)
from tests.helpers.mock_exceptions import MockGeminiAPIError, MockStructuredError
from tests.helpers.response_mocks import gemini_function_call_response, gemini_text_response
from tests.helpers.streaming_mocks import TrackingStream, gemini_text_chunks


@pytest.fixture
def driver(mock_gemini_client, recording_sleep):
    return GeminiChatDriver(ModelTier.LARGE, client=mock_gemini_client, sleep=recording_sleep)


def sent_calls(client):
    return [c.kwargs for c in client.aio.models.generate_content.call_args_list]


class TestPayloads:

    @pytest.mark.parametrize("verbosity,temperature,max_tokens", [
        (Verbosity.LOW, 0.3, 2048),
        (Verbosity.MEDIUM, 0.7, 4096),
        (Verbosity.HIGH, 1.0, 8192),
    ])
    def test_verbosity_mapping(self, verbosity, temperature, max_tokens):
        config = build_config(None, verbosity)

        assert config.temperature == temperature
        assert config.max_output_tokens == max_tokens
        assert config.automatic_function_calling.disable is True
        assert config.tools is None

    def test_function_calling_mode(self):
        transcript = (ChatMessage.user("x"),)
        assert function_calling_mode(TurnRequest(transcript, 0, True, True)) == "ANY"
        assert function_calling_mode(TurnRequest(transcript, 1, True, False)) == "AUTO"
        assert function_calling_mode(TurnRequest(transcript, 2, False, False)) == "NONE"

    def test_tools_declared(self, functions):
        config = build_config(None, Verbosity.MEDIUM, functions=functions, mode="ANY")

        declarations = config.tools[0].function_declarations
        assert [d.name for d in declarations] == ["read_file", "get_horoscope"]
        assert declarations[0].parameters_json_schema["required"] == ["name"]
        assert declarations[0].parameters is None
        assert config.tool_config.function_calling_config.mode == "ANY"

    def test_nullable_tool_argument_declared(self):
        async def lookup(args):
            return args

        function = FunctionDescriptor(
            name="lookup",
            description="Look up a record",
            input_schema={
                "type": "object",
                "properties": {"note": {"type": ["string", "null"]}},
                "required": ["note"],
                "additionalProperties": False,
            },
            execute=lookup,
        )

        declaration = build_tools([function])[0].function_declarations[0]

        assert declaration.parameters_json_schema == {
            "type": "object",
            "properties": {"note": {"type": ["string", "null"]}},
            "required": ["note"],
        }

    def test_response_schema_without_tools(self, person_schema):
        config = build_config(None, Verbosity.LOW, json_schema=person_schema)

        assert config.response_mime_type == "application/json"
        assert config.response_json_schema == {
            "type": "object",
            "properties": {"name": {"type": "string"}, "age": {"type": "integer"}},
            "required": ["name", "age"],
        }
        assert config.response_schema is None
        assert "additionalProperties" in person_schema

    def test_schema_skipped_while_tools_active(self, functions, person_schema):
        config = build_config(None, Verbosity.LOW, functions=functions, mode="AUTO", json_schema=person_schema)

        assert config.tools is not None
        assert config.response_json_schema is None

    def test_schema_applied_once_tools_disabled(self, functions, person_schema):
        config = build_config(None, Verbosity.LOW, functions=functions, mode="NONE", json_schema=person_schema)

        assert config.tools is None
        assert config.response_mime_type == "application/json"

    def test_schema_keywords_preserved(self):
        schema = {
            "type": "object",
            "properties": {
                "name": {"type": ["string", "null"]},
                "score": {"anyOf": [{"type": "integer", "minimum": 0}, {"type": "null"}]},
                "born": {"type": "string", "format": "date"},
                "level": {"type": "integer", "enum": [1, 2, 3]},
            },
            "additionalProperties": False,
        }

        config = build_config(None, Verbosity.LOW, json_schema=schema)

        properties = config.response_json_schema["properties"]
        assert properties["name"] == {"type": ["string", "null"]}
        assert properties["score"]["anyOf"][0] == {"type": "integer", "minimum": 0}
        assert properties["born"]["format"] == "date"
        assert properties["level"]["enum"] == [1, 2, 3]

    def test_contents_fold_system_messages(self):
        transcript = [
            ChatMessage(role=ChatRole.SYSTEM, content="Answer in French."),
            ChatMessage.user("Hello"),
            ChatMessage.assistant("Bonjour"),
            ChatMessage.assistant(""),
            ChatMessage.user("How are you?"),
        ]

        system_instruction, contents = build_contents("Be polite.", transcript)

        assert system_instruction == "Be polite.\n\nAnswer in French."
        assert [c.role for c in contents] == ["user", "model", "user"]
        assert contents[1].parts[0].text == "Bonjour"

    def test_contents_group_tool_round(self):
        first = ToolCallRequest(name="read_file", arguments_json='{"name": "notes.txt"}', call_id="read_file_0")
        second = ToolCallRequest(name="get_horoscope", arguments_json='{"sign": "Leo"}', call_id="get_horoscope_1")
        transcript = [
            ChatMessage.user("Go"),
            ChatMessage.function_call_message(first),
            ChatMessage.function_output(ToolCallResult.success(first, {"content": "hi"})),
            ChatMessage.function_call_message(second),
            ChatMessage.function_output(ToolCallResult.success(second, "sunny")),
        ]

        _, contents = build_contents(None, transcript)

        assert [c.role for c in contents] == ["user", "model", "user"]
        calls, responses = contents[1], contents[2]
        assert [p.function_call.name for p in calls.parts] == ["read_file", "get_horoscope"]
        assert calls.parts[0].function_call.args == {"name": "notes.txt"}
        assert responses.parts[0].function_response.response == {"content": "hi"}
        assert responses.parts[1].function_response.response == {"result": "sunny"}
        assert responses.parts[1].function_response.name == "get_horoscope"

    def test_contents_file_parts(self):
        reference = FileReference(
            file_id="files/abc",
            provider="gemini",
            mime_type="application/pdf",
            uri="https://generativelanguage.googleapis.com/v1beta/files/abc",
        )
        message = ChatMessage.user([InputText(text="Summarize"), InputFile(file=reference)])

        _, contents = build_contents(None, [message])

        parts = contents[0].parts
        assert parts[0].text == "Summarize"
        assert parts[1].file_data.file_uri == reference.uri
        assert parts[1].file_data.mime_type == "application/pdf"


class TestParsers:

    def test_text_parts_joined_without_thoughts(self):
        parts = [
            SimpleNamespace(text="thinking...", thought=True),
            SimpleNamespace(text="Hello ", thought=None),
            SimpleNamespace(text="world", thought=None),
        ]
        response = SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=parts))])
        assert extract_text(response) == "Hello world"

    def test_falls_back_to_text_property(self):
        assert extract_text(SimpleNamespace(candidates=[], text="shortcut")) == "shortcut"

    def test_empty_response(self):
        response = SimpleNamespace(candidates=None, text=None)
        with pytest.raises(EmptyOutputError, match="Gemini returned empty output"):
            parse_reply(response, "Gemini")

    def test_tool_call_ids(self):
        response = gemini_function_call_response([("read_file", {"name": "a"}), ("read_file", {"name": "b"})])
        calls = extract_tool_calls(response)

        assert [c.call_id for c in calls] == ["read_file_0", "read_file_1"]
        assert calls[1].parse_arguments() == {"name": "b"}

    def test_provider_call_id_kept(self):
        part = SimpleNamespace(text=None, function_call=SimpleNamespace(name="f", args=None, id="abc"))
        response = SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])
        call = extract_tool_calls(response)[0]
        assert call.call_id == "abc"
        assert call.arguments_json == "{}"


@pytest.mark.asyncio
class TestGeminiChatDriver:

    async def test_get_model_response(self, driver, mock_gemini_client):
        mock_gemini_client.aio.models.generate_content.return_value = gemini_text_response("Hi from Gemini")

        text = await driver.get_model_response("Be brief", "Hello", Verbosity.LOW)

        assert text == "Hi from Gemini"
        call = sent_calls(mock_gemini_client)[0]
        assert call["model"] == "gemini-3-pro-preview"
        assert call["config"].temperature == 0.3
        assert call["contents"][0].parts[0].text == "Hello"

    async def test_mini_tier(self, mock_gemini_client):
        driver = GeminiChatDriver(ModelTier.MINI, client=mock_gemini_client)
        assert driver.model_name == "gemini-3-flash-preview"

    async def test_forced_tools(self, driver, mock_gemini_client, functions, file_calls, horoscope_calls):
        mock_gemini_client.aio.models.generate_content.side_effect = [
            gemini_function_call_response([("read_file", {"name": "notes.txt"}), ("get_horoscope", {"sign": "Leo"})]),
            gemini_text_response("Thursday meeting, good week."),
        ]

        text = await driver.get_model_response_with_forced_tools(None, "Go", functions=functions)

        assert text == "Thursday meeting, good week."
        assert file_calls == ["notes.txt"]
        assert horoscope_calls == ["Leo"]
        first, second = sent_calls(mock_gemini_client)
        assert first["config"].tool_config.function_calling_config.mode == "ANY"
        assert second["config"].tool_config.function_calling_config.mode == "AUTO"
        assert [c.role for c in second["contents"]] == ["user", "model", "user"]

    async def test_safety_error(self, driver, mock_gemini_client, recording_sleep):
        mock_gemini_client.aio.models.generate_content.side_effect = MockStructuredError("safety", "Blocked: harassment")

        with pytest.raises(ProviderError, match="^Gemini safety system triggered: Blocked: harassment$"):
            await driver.get_model_response(None, "Hello")
        assert recording_sleep.delays == []

    async def test_rate_limit_retried(self, driver, mock_gemini_client, recording_sleep):
        mock_gemini_client.aio.models.generate_content.side_effect = [
            MockGeminiAPIError(429, "Resource exhausted"),
            gemini_text_response("ok"),
        ]

        assert await driver.get_model_response(None, "Hello") == "ok"
        assert recording_sleep.delays == [1.0]

    async def test_streamed_response(self, driver, mock_gemini_client):
        stream = TrackingStream(gemini_text_chunks(["Gem", "ini"]))
        mock_gemini_client.aio.models.generate_content_stream.return_value = stream

        fragments = [f async for f in driver.get_streamed_model_response(None, "Hello", Verbosity.HIGH)]

        assert fragments == ["Gem", "ini"]
        assert stream.closed
        kwargs = mock_gemini_client.aio.models.generate_content_stream.call_args.kwargs
        assert kwargs["config"].max_output_tokens == 8192

    async def test_streamed_response_interrupted(self, driver, mock_gemini_client):
        stream = TrackingStream(gemini_text_chunks(["one", "two", "three"]), fail_after=3)
        mock_gemini_client.aio.models.generate_content_stream.return_value = stream

        fragments = [f async for f in driver.get_streamed_model_response(None, "Hello")]

        assert fragments[-1] == INTERRUPTION_MESSAGE
        assert fragments[:3] == ["one", "two", "three"]

    async def test_constrained_response(self, driver, mock_gemini_client, person_schema):
        mock_gemini_client.aio.models.generate_content.return_value = gemini_text_response(
            '{"name": "Bob", "age": 42}'
        )

        result = await driver.get_constrained_model_response(
            None, "Bob is 42", Verbosity.MEDIUM, person_schema, default_value=None,
        )

        assert result == {"name": "Bob", "age": 42}
        config = sent_calls(mock_gemini_client)[0]["config"]
        assert config.response_mime_type == "application/json"

    async def test_constrained_response_nullable_field(self, driver, mock_gemini_client):
        schema = {
            "type": "object",
            "properties": {
                "name": {"type": ["string", "null"]},
                "age": {"anyOf": [{"type": "integer"}, {"type": "null"}]},
            },
            "required": ["name"],
        }
        mock_gemini_client.aio.models.generate_content.return_value = gemini_text_response(
            '{"name": null, "age": 42}'
        )

        result = await driver.get_constrained_model_response(
            None, "Someone is 42", Verbosity.LOW, schema, default_value={"d": 1},
        )

        assert result == {"name": None, "age": 42}
        config = sent_calls(mock_gemini_client)[0]["config"]
        assert config.response_json_schema["properties"]["name"] == {"type": ["string", "null"]}

    async def test_forced_tools_with_nullable_argument(self, driver, mock_gemini_client):
        seen = []

        def tag(args):
            seen.append(args["label"])
            return "tagged"

        function = FunctionDescriptor(
            name="tag",
            description="Tag the record",
            input_schema={
                "type": "object",
                "properties": {"label": {"type": ["string", "null"]}},
                "required": ["label"],
            },
            execute=tag,
        )
        mock_gemini_client.aio.models.generate_content.side_effect = [
            gemini_function_call_response([("tag", {"label": None})]),
            gemini_text_response("Tagged."),
        ]

        text = await driver.get_model_response_with_forced_tools(None, "Tag it", functions=[function])

        assert text == "Tagged."
        assert seen == [None]
