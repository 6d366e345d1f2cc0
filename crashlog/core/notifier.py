"""
Notifier identity block sent at the top of every payload.
"""
from pydantic import BaseModel

from crashlog.core import config


class NotifierInfo(BaseModel):
    name: str
    url: str
    version: str

    @classmethod
    def from_config(cls) -> "NotifierInfo":
        return cls(
            name=config.NOTIFIER_NAME,
            url=config.NOTIFIER_URL,
            version=config.NOTIFIER_VERSION,
        )
