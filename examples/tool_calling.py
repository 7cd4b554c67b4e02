"""
Example: Forced tool calling with streaming

Registers two functions, forces the model to use them, and streams the
final answer. Requires OPENAI_API_KEY (or pass provider=... and the
matching credentials).
"""

import asyncio
import json
import logging

from chat_driver_sdk import FunctionDescriptor, ModelProvider, ModelTier, Verbosity, create_chat_driver

logging.basicConfig(level=logging.INFO)

FILES = {"notes.txt": "Meeting moved to Thursday."}


def read_file(args):
    name = args["name"]
    if name not in FILES:
        raise FileNotFoundError(name)
    return {"name": name, "content": FILES[name]}


async def get_horoscope(args):
    return f"{args['sign']}: a good week for finishing things."


FUNCTIONS = [
    FunctionDescriptor(
        name="read_file",
        description="Read one of the user's files by name",
        input_schema={
            "type": "object",
            "properties": {"name": {"type": "string", "enum": list(FILES)}},
            "required": ["name"],
        },
        execute=read_file,
    ),
    FunctionDescriptor(
        name="get_horoscope",
        description="Today's horoscope for an astrological sign",
        input_schema={
            "type": "object",
            "properties": {"sign": {"type": "string"}},
            "required": ["sign"],
        },
        execute=get_horoscope,
    ),
]


async def example_forced_tools():
    print("=== Forced tools, streamed ===\n")
    driver = create_chat_driver(ModelTier.MINI, ModelProvider.OPENAI)

    stream = driver.get_streamed_model_response_with_forced_tools(
        "You are a helpful assistant. Use the tools to answer.",
        "Read notes.txt and tell me my horoscope as a Leo.",
        Verbosity.LOW,
        functions=FUNCTIONS,
    )
    async for fragment in stream:
        print(fragment, end="", flush=True)
    print()


async def example_constrained():
    print("\n=== Constrained output ===\n")
    driver = create_chat_driver(ModelTier.MINI, ModelProvider.OPENAI)
    schema = {
        "type": "object",
        "properties": {"name": {"type": "string"}, "age": {"type": "integer"}},
        "required": ["name", "age"],
    }
    person = await driver.get_constrained_model_response(
        None,
        "Extract the person: Bob is 42 years old.",
        Verbosity.LOW,
        schema,
        default_value={"name": "", "age": 0},
    )
    print(json.dumps(person))


async def main():
    await example_forced_tools()
    await example_constrained()


if __name__ == "__main__":
    asyncio.run(main())
