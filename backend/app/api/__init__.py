from app.api.routes.info import router as info_router
from app.api.routes.messages import router as messages_router

__all__ = ["info_router", "messages_router"]
