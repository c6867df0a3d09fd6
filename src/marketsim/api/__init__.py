from .server import create_app, seller_view

__all__ = ["create_app", "seller_view"]
