from enum import Enum
from typing import Awaitable, Callable, List, Optional, Sequence

import httpx

from storefront.core.config import settings
from storefront.core.errors import CompletionFailed
from storefront.core.logger import get_logger
from storefront.core.models import ChatMessage, ChatReply

logger = get_logger(__name__)

HISTORY_LIMIT = 10

WELCOME_MESSAGE = (
    "Assalam o Alaikum! Main {store_name} ka assistant hoon. "
    "Aapko kaunsi medicine chahiye? Hum se khareedein, best prices milenge!"
)
FALLBACK_MESSAGE = "Maaf kijiye, kuch problem ho gayi. Please {phone} pe call karein!"

QUICK_QUESTIONS = (
    "Kya medicines hain?",
    "Panadol hai?",
    "Order kaise karoon?",
)

Transport = Callable[[str, List[ChatMessage]], Awaitable[str]]


class SessionState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    AWAITING_REPLY = "awaiting_reply"


class HttpChatTransport:
    """Posts chat turns to the storefront's ``/api/chat`` route."""

    def __init__(self, base_url: str = settings.STOREFRONT_URL, timeout: Optional[float] = None,
                 client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    async def __call__(self, message: str, history: List[ChatMessage]) -> str:
        payload = {
            "message": message,
            "history": [m.model_dump() for m in history],
        }
        try:
            if self._client is not None:
                response = await self._client.post(f"{self.base_url}/api/chat", json=payload)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(f"{self.base_url}/api/chat", json=payload)
            response.raise_for_status()
            return ChatReply.model_validate(response.json()).reply
        except (httpx.HTTPError, ValueError) as e:
            raise CompletionFailed(str(e)) from e


class ChatSession:
    """Conversation state of one chat widget.

    The session moves CLOSED -> OPEN on ``open``, OPEN -> AWAITING_REPLY on an
    accepted ``submit`` and back to OPEN once the reply (or the fallback
    message) has been appended. Only one request is ever in flight, so
    replies append in submission order.
    """

    def __init__(self, transport: Transport, store_name: str = settings.STORE_NAME,
                 support_phone: str = settings.SUPPORT_PHONE):
        self.transport = transport
        self.messages: List[ChatMessage] = []
        self.welcome_message = WELCOME_MESSAGE.format(store_name=store_name)
        self.fallback_message = FALLBACK_MESSAGE.format(phone=support_phone)
        self._open = False
        self._awaiting = False

    @property
    def state(self) -> SessionState:
        if not self._open:
            return SessionState.CLOSED
        if self._awaiting:
            return SessionState.AWAITING_REPLY
        return SessionState.OPEN

    @property
    def quick_questions(self) -> Sequence[str]:
        """Suggested first questions, offered until the user has said something."""
        return QUICK_QUESTIONS if len(self.messages) <= 1 else ()

    def open(self) -> None:
        self._open = True
        if not self.messages:
            self.messages.append(ChatMessage(role="assistant", content=self.welcome_message))

    def close(self) -> None:
        self._open = False

    async def submit(self, text: str) -> bool:
        """Send one user turn and append the single reply.

        Blank input, a closed session or a reply already in flight make this
        a no-op.

        Returns:
            bool: True if a request was sent.
        """
        message = text.strip()
        if not message or not self._open or self._awaiting:
            return False

        history = self.messages[-HISTORY_LIMIT:]
        self.messages.append(ChatMessage(role="user", content=message))
        self._awaiting = True
        try:
            reply = await self.transport(message, history)
        except Exception as e:
            logger.error("Chat request failed: %s", e, exc_info=True)
            reply = self.fallback_message
        finally:
            self._awaiting = False

        self.messages.append(ChatMessage(role="assistant", content=reply))
        return True
