import json
from types import SimpleNamespace

import httpx
import pytest
from pydantic_ai import Agent

from storyflow.errors import GenerationAdapterError
from storyflow.generation import NullContentGenerator
from storyflow.generation.agent import AgentContentGenerator
from storyflow.generation.http import HttpContentGenerator
from storyflow.models import Storyboard, StructureInput


class DummyAgent:
    def __init__(self, output=None, error=None):
        self.output = output
        self.error = error
        self.prompts = []

    async def run(self, prompt: str):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(output=self.output)


@pytest.mark.asyncio
async def test_null_generator_suggests_nothing(payloads):
    assert await NullContentGenerator().generate(1, payloads[1]) == {}


@pytest.mark.asyncio
async def test_agent_generator_returns_wire_document(payloads):
    agent = DummyAgent(output=StructureInput.model_validate(payloads[2]))
    generator = AgentContentGenerator("test", agents={1: agent})

    suggestion = await generator.generate(1, payloads[1], Storyboard(title="Draft"))

    assert suggestion == payloads[2]
    assert payloads[1]["storyText"] in agent.prompts[0]
    assert "Draft" in agent.prompts[0]


@pytest.mark.asyncio
async def test_agent_failures_become_adapter_errors(payloads):
    generator = AgentContentGenerator(
        "test", agents={1: DummyAgent(error=RuntimeError("model unavailable"))}
    )
    with pytest.raises(GenerationAdapterError) as excinfo:
        await generator.generate(1, payloads[1])
    assert excinfo.value.step == 1
    assert "model unavailable" in str(excinfo.value)


@pytest.mark.asyncio
async def test_agent_generator_has_nothing_after_last_step(payloads):
    generator = AgentContentGenerator("test")
    assert await generator.generate(7, payloads[7]) == {}


def test_agents_are_built_lazily_per_step():
    generator = AgentContentGenerator("test")
    agent = generator.agent_for(3)

    assert isinstance(agent, Agent)
    assert generator.agent_for(3) is agent
    assert generator.agent_for(4) is not agent


@pytest.mark.asyncio
async def test_http_generator_posts_step_input(payloads):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=payloads[3])

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    generator = HttpContentGenerator("http://generator.local/", client=client)

    suggestion = await generator.generate(2, payloads[2])

    assert suggestion == payloads[3]
    assert seen["url"] == "http://generator.local/steps/2/generate"
    assert seen["body"] == {"step": 2, "input": payloads[2], "storyboard": None}
    await client.aclose()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"error": "boom"}),
        httpx.Response(200, content=b"not json"),
        httpx.Response(200, json=["a", "list"]),
    ],
)
async def test_http_generator_failures_become_adapter_errors(payloads, response):
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: response))
    generator = HttpContentGenerator("http://generator.local", client=client)

    with pytest.raises(GenerationAdapterError):
        await generator.generate(1, payloads[1])
    await client.aclose()


@pytest.mark.asyncio
async def test_http_generator_connection_errors_become_adapter_errors(payloads):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    generator = HttpContentGenerator("http://generator.local", client=client)

    with pytest.raises(GenerationAdapterError):
        await generator.generate(1, payloads[1])
    await client.aclose()
