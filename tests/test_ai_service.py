from types import SimpleNamespace
import pytest
from insightflow.models.schemas import ContentPart, ConversationRequest, ConversationTurn, StructuredRequest
from insightflow.services import ai_service
from insightflow.services.ai_service import OpenAIService, WEB_SEARCH_TOOL


class StubEndpoint:
    def __init__(self, response):
        self.response = response
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        return self.response


def stub_client(completion=None, response=None):
    return SimpleNamespace(
        chat=SimpleNamespace(completions=StubEndpoint(completion)),
        responses=StubEndpoint(response)
    )


@pytest.mark.asyncio
async def test_generate_structured_sends_json_mode_request(monkeypatch):
    completion = SimpleNamespace(choices=[SimpleNamespace(
        message=SimpleNamespace(content='{"summary": "ok"}'),
        finish_reason="stop"
    )])
    client = stub_client(completion=completion)
    monkeypatch.setattr(ai_service, "get_openai_client", lambda: client)

    request = StructuredRequest(
        parts=[ContentPart(mime_type="image/png", data="aGVsbG8="), ContentPart(text="FILE: a.txt\nx\n---")],
        system_instruction="strict json",
        temperature=0.2,
        max_output_tokens=8192
    )
    text = await OpenAIService(analysis_model="test-model").generate_structured(request)

    assert text == '{"summary": "ok"}'
    call = client.chat.completions.calls[0]
    assert call["model"] == "test-model"
    assert call["response_format"] == {"type": "json_object"}
    assert call["max_tokens"] == 8192
    assert call["messages"][0] == {"role": "system", "content": "strict json"}
    content = call["messages"][1]["content"]
    assert content[0] == {"type": "image_url", "image_url": {"url": "data:image/png;base64,aGVsbG8="}}
    assert content[1] == {"type": "text", "text": "FILE: a.txt\nx\n---"}


@pytest.mark.asyncio
async def test_converse_enables_search_and_collects_citations(monkeypatch):
    annotation = SimpleNamespace(type="url_citation", title="Market report", url="https://example.com/r")
    response = SimpleNamespace(
        output_text="Growing market.",
        output=[
            SimpleNamespace(type="web_search_call"),
            SimpleNamespace(type="message", content=[SimpleNamespace(annotations=[annotation])])
        ]
    )
    client = stub_client(response=response)
    monkeypatch.setattr(ai_service, "get_openai_client", lambda: client)

    request = ConversationRequest(
        history=[ConversationTurn(role="user", text="hi"), ConversationTurn(role="assistant", text="hello")],
        parts=[ContentPart(text="outlook?")],
        system_instruction="consultant",
        temperature=0.7,
        max_output_tokens=2000,
        tools=[WEB_SEARCH_TOOL]
    )
    reply = await OpenAIService(chat_model="chat-model").converse(request)

    assert reply.text == "Growing market."
    assert [(c.title, c.uri) for c in reply.citations] == [("Market report", "https://example.com/r")]
    call = client.responses.calls[0]
    assert call["model"] == "chat-model"
    assert call["instructions"] == "consultant"
    assert call["tools"] == [{"type": "web_search"}]
    assert call["input"][:2] == [
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "hello"}
    ]
    assert call["input"][2] == {"role": "user", "content": [{"type": "input_text", "text": "outlook?"}]}


@pytest.mark.asyncio
async def test_converse_without_tools(monkeypatch):
    client = stub_client(response=SimpleNamespace(output_text="", output=[]))
    monkeypatch.setattr(ai_service, "get_openai_client", lambda: client)

    request = ConversationRequest(parts=[ContentPart(text="q")], system_instruction="s", temperature=0.7, max_output_tokens=10)
    reply = await OpenAIService().converse(request)

    assert reply.text == ""
    assert "tools" not in client.responses.calls[0]
