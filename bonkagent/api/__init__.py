"""HTTP surface."""

from bonkagent.api.app import create_app

__all__ = ["create_app"]
