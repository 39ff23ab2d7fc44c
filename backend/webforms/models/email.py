from pydantic import BaseModel


class Sender(BaseModel):
    """Fixed sender identity used for every outgoing email."""

    email: str
    name: str

    model_config = {"frozen": True}


class RecipientSet(BaseModel):
    """Who an email goes to and where replies land."""

    to: tuple[str, ...]
    cc: tuple[str, ...] = ()
    reply_to: str

    model_config = {"frozen": True}


class RenderedEmail(BaseModel):
    """A fully rendered email, ready to hand to the delivery client."""

    subject: str
    html: str
    recipients: RecipientSet
    sender: Sender

    model_config = {"frozen": True}
