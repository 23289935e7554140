import asyncio

import httpx

from storefront.chat_session import ChatSession, HttpChatTransport, SessionState
from storefront.core.errors import CompletionFailed


class RecordingTransport:
    def __init__(self, reply="Ji, Panadol Rs. 50 ka hai.", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def __call__(self, message, history):
        self.calls.append((message, list(history)))
        if self.error is not None:
            raise self.error
        return self.reply


def test_open_seeds_one_welcome_message():
    """Test that opening an empty session adds exactly one assistant message."""
    session = ChatSession(RecordingTransport())
    assert session.state is SessionState.CLOSED

    session.open()
    assert session.state is SessionState.OPEN
    assert len(session.messages) == 1
    assert session.messages[0].role == "assistant"

    session.close()
    session.open()
    assert len(session.messages) == 1


def test_whitespace_submit_is_a_noop():
    """Test that blank input sends nothing and leaves the history unchanged."""
    transport = RecordingTransport()
    session = ChatSession(transport)
    session.open()

    assert asyncio.run(session.submit("   ")) is False
    assert transport.calls == []
    assert len(session.messages) == 1


def test_submit_appends_user_turn_and_one_reply():
    """Test a normal turn: trimmed user message, then the reply."""
    transport = RecordingTransport()
    session = ChatSession(transport)
    session.open()

    assert asyncio.run(session.submit("  Panadol hai?  ")) is True
    assert [(m.role, m.content) for m in session.messages[1:]] == [
        ("user", "Panadol hai?"),
        ("assistant", "Ji, Panadol Rs. 50 ka hai."),
    ]
    message, history = transport.calls[0]
    assert message == "Panadol hai?"
    assert [m.role for m in history] == ["assistant"]
    assert session.state is SessionState.OPEN


def test_history_sent_is_capped_to_ten():
    """Test that only the ten most recent messages are sent."""
    transport = RecordingTransport()
    session = ChatSession(transport)
    session.open()
    for i in range(7):
        asyncio.run(session.submit(f"question {i}"))

    _, history = transport.calls[-1]
    assert len(history) == 10
    assert history == session.messages[-12:-2]


def test_second_submit_while_awaiting_is_a_noop():
    """Test that only one request is in flight per session."""

    async def scenario():
        gate = asyncio.Event()
        calls = []

        async def slow_transport(message, history):
            calls.append(message)
            await gate.wait()
            return "reply"

        session = ChatSession(slow_transport)
        session.open()
        first = asyncio.create_task(session.submit("first"))
        await asyncio.sleep(0)
        assert session.state is SessionState.AWAITING_REPLY

        assert await session.submit("second") is False
        gate.set()
        assert await first is True
        return session, calls

    session, calls = asyncio.run(scenario())
    assert calls == ["first"]
    assert [m.content for m in session.messages[1:]] == ["first", "reply"]


def test_transport_error_appends_fallback_and_session_recovers():
    """Test that a failed request adds the fixed apology and the session stays usable."""
    transport = RecordingTransport(error=CompletionFailed("boom"))
    session = ChatSession(transport, support_phone="03310076524")
    session.open()

    asyncio.run(session.submit("Panadol hai?"))
    assert session.messages[-1].role == "assistant"
    assert session.messages[-1].content == session.fallback_message
    assert "03310076524" in session.fallback_message
    assert len(session.messages) == 3
    assert session.state is SessionState.OPEN

    transport.error = None
    assert asyncio.run(session.submit("Brufen?")) is True
    assert session.messages[-1].content == transport.reply


def test_submit_on_closed_session_is_a_noop():
    """Test that a closed widget does not send."""
    transport = RecordingTransport()
    session = ChatSession(transport)
    assert asyncio.run(session.submit("hello")) is False
    assert transport.calls == []


def test_quick_questions_only_before_first_turn():
    """Test that suggestions disappear once the user has asked something."""
    session = ChatSession(RecordingTransport())
    session.open()
    assert len(session.quick_questions) == 3
    asyncio.run(session.submit(session.quick_questions[1]))
    assert session.quick_questions == ()


def test_http_transport_posts_message_and_history():
    """Test the wire payload and reply parsing of the HTTP transport."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = request.read()
        return httpx.Response(200, json={"reply": "ok"})

    async def scenario():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            transport = HttpChatTransport("http://shop.test/", client=client)
            session = ChatSession(transport)
            session.open()
            await session.submit("hi")
            return session

    session = asyncio.run(scenario())
    assert seen["url"] == "http://shop.test/api/chat"
    assert b'"message":"hi"' in seen["body"].replace(b" ", b"")
    assert session.messages[-1].content == "ok"


def test_http_transport_error_status_becomes_fallback():
    """Test that a 500 from the server is shown as the fallback message."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"detail": "boom"})

    async def scenario():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            session = ChatSession(HttpChatTransport("http://shop.test", client=client))
            session.open()
            await session.submit("hi")
            return session

    session = asyncio.run(scenario())
    assert session.messages[-1].content == session.fallback_message
