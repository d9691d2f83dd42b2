from activity_feed.api.routes import router

__all__ = ["router"]
