from typing import List, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage
from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder
from langchain_openai import ChatOpenAI

from storefront.core.config import settings
from storefront.core.errors import CompletionFailed
from storefront.core.logger import get_logger
from storefront.core.models import ChatMessage, Product, SiteSettings, format_price

logger = get_logger(__name__)

HISTORY_LIMIT = 10

EMPTY_STOCK_LINE = "Abhi koi medicine stock mein nahi hai."
FALLBACK_REPLY = "Maaf kijiye, kuch problem ho gayi. Dobara try karein!"

SYSTEM_PROMPT = (
    "You are the assistant of {store_name} in {store_city}. "
    "Always reply in Roman Urdu, short and friendly, like a helpful friend.\n\n"
    "MEDICINES WE HAVE IN STOCK:\n{price_list}\n\n"
    "Your job:\n"
    "- Help customers find medicines and tell them the price whenever you recommend one.\n"
    "- Encourage them to order from {store_name}: best prices, quality guaranteed.\n"
    "- Orders are taken on WhatsApp at {order_number}.\n"
    "- If a medicine is not in the list, say it is not in stock right now and "
    "that they can call the pharmacy.\n"
    "- Never give medical advice; tell them to see a doctor."
)

PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", SYSTEM_PROMPT),
        MessagesPlaceholder(variable_name="history"),
        ("human", "{message}"),
    ]
)


def _get_chat_model() -> BaseChatModel:
    """Initialize the completion model client.

    Returns:
        BaseChatModel: Chat model bound to the OpenAI-compatible completion API.
    """
    return ChatOpenAI(
        model=settings.COMPLETION_MODEL,
        temperature=settings.COMPLETION_TEMPERATURE,
        max_tokens=settings.COMPLETION_MAX_TOKENS,
        base_url=settings.COMPLETION_BASE_URL,
        api_key=settings.COMPLETION_API_KEY or None,
    )


def format_price_list(products: Sequence[Product]) -> str:
    if not products:
        return EMPTY_STOCK_LINE
    lines = []
    for p in products:
        line = f"- {p.name}: Rs. {format_price(p.price)}"
        if p.description:
            line += f" ({p.description})"
        lines.append(line)
    return "\n".join(lines)


def _to_langchain(history: Sequence[ChatMessage]) -> List[BaseMessage]:
    return [
        HumanMessage(content=m.content) if m.role == "user" else AIMessage(content=m.content)
        for m in history[-HISTORY_LIMIT:]
    ]


def _prompt_inputs(
    history: Sequence[ChatMessage],
    message: str,
    products: Sequence[Product],
    site_settings: SiteSettings,
) -> dict:
    return {
        "store_name": settings.STORE_NAME,
        "store_city": settings.STORE_CITY,
        "price_list": format_price_list(products),
        "order_number": site_settings.whatsapp_number or settings.SUPPORT_PHONE,
        "history": _to_langchain(history),
        "message": message,
    }


def assemble_messages(
    history: Sequence[ChatMessage],
    message: str,
    products: Sequence[Product],
    site_settings: SiteSettings,
) -> List[BaseMessage]:
    """Build the ordered message list sent to the completion API.

    The list is the system prompt (with the live price list), the last ten
    history messages and the new user turn, in that order.
    """
    return PROMPT.format_messages(**_prompt_inputs(history, message, products, site_settings))


def generate_reply(
    history: Sequence[ChatMessage],
    message: str,
    products: Sequence[Product],
    site_settings: SiteSettings,
) -> str:
    """Ask the completion API for exactly one assistant reply.

    Args:
        history: Client-supplied conversation, oldest first. Only the last
            ten messages are forwarded.
        message: The new user message.
        products: Catalog snapshot used for the price list.
        site_settings: Site configuration providing the order number.

    Returns:
        str: The reply text, or a fixed apology when the API returns no content.

    Raises:
        CompletionFailed: If the completion call fails.
    """
    inputs = _prompt_inputs(history, message, products, site_settings)
    logger.debug(
        "Assembling completion request: %d history messages, %d products",
        len(inputs["history"]),
        len(products),
    )

    try:
        chain = PROMPT | _get_chat_model()
        response = chain.invoke(inputs)
    except Exception as e:
        raise CompletionFailed(str(e)) from e

    content = getattr(response, "content", None)
    if not isinstance(content, str) or not content.strip():
        logger.warning("Completion returned no content, using fallback reply")
        return FALLBACK_REPLY

    logger.info("Generated reply (%d chars): %s...", len(content), content[:120])
    return content
