from webapp.handlers import probes, webapp

__all__ = [
    "probes",
    "webapp",
]
