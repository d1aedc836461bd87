from coursehub.api.main import app

__all__ = ["app"]
