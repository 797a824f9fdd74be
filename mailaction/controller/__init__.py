from .message_controller import router as message_router

__all__ = [
    "message_router",
]
