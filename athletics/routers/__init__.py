from athletics.routers.notifications import router as notifications_router
from athletics.routers.subscriptions import router as subscriptions_router
from athletics.routers.push import router as push_router

__all__ = ["notifications_router", "subscriptions_router", "push_router"]
