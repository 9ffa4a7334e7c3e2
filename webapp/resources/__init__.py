from .webapp import WebApp, build_owner_reference

__all__ = ["WebApp", "build_owner_reference"]
