"""Models for the Resend provider."""
from pydantic import BaseModel, ConfigDict, Field


class EmailMessage(BaseModel):
    """Body for POST /emails. One message, usually one recipient."""

    model_config = ConfigDict(populate_by_name=True)

    sender: str = Field(serialization_alias="from")
    to: list[str]
    subject: str
    html: str
