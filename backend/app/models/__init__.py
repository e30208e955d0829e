from app.models.message import MessageRecord

__all__ = [
    "MessageRecord",
]
