"""Notification request handed to the notifier collaborator."""

from pydantic import BaseModel


class Notification(BaseModel):
    """A user-visible notification; click_url is opened when it is clicked."""

    title: str
    body: str
    subtitle: str | None = None
    icon_asset: str | None = None
    click_url: str | None = None

    model_config = {"frozen": True}
