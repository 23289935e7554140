from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


def format_price(price: float) -> str:
    """Render a price as stored, without a trailing '.0' for whole amounts."""
    value = float(price)
    if value.is_integer():
        return str(int(value))
    return repr(value)


class Product(BaseModel):
    """A catalog product as read from the catalog store."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., description="Store-assigned product identifier")
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    description: str = ""
    image_url: Optional[str] = Field(None, alias="imageUrl")

    @property
    def price_label(self) -> str:
        return format_price(self.price)


class SiteSettings(BaseModel):
    """The single site configuration record."""
    model_config = ConfigDict(populate_by_name=True)

    whatsapp_number: str = Field("", alias="whatsappNumber")
    phone: str = ""
    email: str = ""


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """Defines the structure for an incoming chat turn."""
    message: str = Field(..., min_length=1, description="The new user message.")
    history: List[ChatMessage] = Field(
        default_factory=list, description="Most recent conversation messages, oldest first."
    )


class ChatReply(BaseModel):
    """Defines the structure for the assistant's reply."""
    reply: str


class ProductPage(BaseModel):
    products: List[Product]
    page: int
    total_pages: int = Field(..., alias="totalPages")
    has_previous: bool = Field(..., alias="hasPrevious")
    has_next: bool = Field(..., alias="hasNext")
    page_numbers: List[int] = Field(default_factory=list, alias="pageNumbers")

    model_config = ConfigDict(populate_by_name=True)


class SearchResponse(BaseModel):
    query: str
    results: List[Product]


class OrderLink(BaseModel):
    message: str
    url: str
