import pytest
from conftest import FakeAIService, make_file
from insightflow.core.config import settings
from insightflow.models.schemas import AnalysisResult, ChatMessage, ChatReply, Citation, FileCategory
from insightflow.services.ai_service import OpenAIService, WEB_SEARCH_TOOL
from insightflow.services.chat_service import ChatService
from insightflow.services.response_builder import ResponseBuilder
from insightflow.utils import dependencies
from insightflow.utils.prompts import CHAT_APOLOGY, CHAT_SYSTEM_INSTRUCTION, MEMORY_PREAMBLE

ANALYSIS = AnalysisResult.model_validate({
    "summary": "Revenue up, margin down",
    "kpis": [
        {"label": "Revenue", "value": "$1M", "trend": "up"},
        {"label": "Margin", "value": "12%", "trend": "down"}
    ]
})


def make_history(count):
    roles = ["user", "assistant"]
    return [ChatMessage(role=roles[i % 2], text=f"turn {i}") for i in range(count)]


@pytest.fixture
def files():
    return [
        make_file("sales.csv", "month,value\njan,100"),
        make_file("chart.png", "aGVsbG8=", category=FileCategory.IMAGE, mime_type="image/png"),
    ]


@pytest.mark.asyncio
async def test_short_conversation_attaches_file_excerpts(files):
    fake = FakeAIService()
    await ChatService(ai_service=fake).reply(make_history(3), "What drives revenue?", files, ANALYSIS)

    request = fake.conversation_requests[0]
    assert len(request.parts) == 2
    assert request.parts[0].text == "[Ref: sales.csv]\nmonth,value\njan,100\n---"
    assert request.parts[-1].text == "What drives revenue?"


@pytest.mark.asyncio
async def test_long_conversation_relies_on_memory(files):
    fake = FakeAIService()
    await ChatService(ai_service=fake).reply(make_history(4), "And costs?", files, ANALYSIS)

    request = fake.conversation_requests[0]
    assert [part.text for part in request.parts] == ["And costs?"]


def test_excerpts_are_capped():
    builder = ResponseBuilder()
    parts = builder.build_turn_parts("q", [], [make_file("big.txt", "z" * 3000)])
    assert parts[0].text == "[Ref: big.txt]\n" + "z" * 2500 + "\n[...]" + "\n---"


def test_memory_context_includes_summary_and_kpis():
    memory = ResponseBuilder().build_memory_context(ANALYSIS)
    assert memory.startswith(MEMORY_PREAMBLE)
    assert "SUMMARY: Revenue up, margin down" in memory
    assert "KPIs: Revenue: $1M, Margin: 12%" in memory


def test_memory_context_without_analysis():
    assert ResponseBuilder().build_memory_context(None) == MEMORY_PREAMBLE


def test_request_carries_history_instruction_and_search_tool():
    history = make_history(2)
    request = ResponseBuilder().build_request("next", history, [], ANALYSIS)

    assert [(t.role, t.text) for t in request.history] == [("user", "turn 0"), ("assistant", "turn 1")]
    assert request.system_instruction.startswith(CHAT_SYSTEM_INSTRUCTION)
    assert "FILE MEMORY CONTEXT:" in request.system_instruction
    assert "SUMMARY: Revenue up, margin down" in request.system_instruction
    assert request.temperature == settings.OPENAI_CHAT_TEMPERATURE
    assert request.tools == [WEB_SEARCH_TOOL]


def test_search_tool_can_be_disabled(monkeypatch):
    monkeypatch.setattr(settings, "CHAT_WEB_SEARCH_ENABLED", False)
    request = ResponseBuilder().build_request("next", [], [], None)
    assert request.tools == []


@pytest.mark.asyncio
async def test_sources_are_deduplicated():
    fake = FakeAIService(chat_reply=ChatReply(
        text="Market is growing.",
        citations=[
            Citation(title="Report", uri="https://example.com/a"),
            Citation(title="Report", uri="https://example.com/a"),
            Citation(title="Survey", uri="https://example.com/b"),
        ]
    ))
    text = await ChatService(ai_service=fake).reply([], "Market outlook?", [], None)

    assert text == (
        "Market is growing.\n\n**Sources Consulted:**\n"
        "- [Report](https://example.com/a)\n"
        "- [Survey](https://example.com/b)"
    )


@pytest.mark.asyncio
async def test_reply_without_sources_is_unchanged():
    fake = FakeAIService(chat_reply=ChatReply(text="Plain answer."))
    assert await ChatService(ai_service=fake).reply([], "q", [], None) == "Plain answer."


@pytest.mark.asyncio
async def test_empty_reply_text():
    fake = FakeAIService(chat_reply=ChatReply(text=""))
    assert await ChatService(ai_service=fake).reply([], "q", [], None) == "No response."


@pytest.mark.asyncio
async def test_errors_become_apology():
    fake = FakeAIService(error=RuntimeError("Error code: 429"))
    assert await ChatService(ai_service=fake).reply([], "q", [], ANALYSIS) == CHAT_APOLOGY


@pytest.mark.asyncio
async def test_missing_credentials_become_apology(monkeypatch):
    monkeypatch.setattr(settings, "OPENAI_API_KEY", None)
    monkeypatch.setattr(dependencies, "_openai_client", None)
    assert await ChatService(ai_service=OpenAIService()).reply([], "q", [], None) == CHAT_APOLOGY
