"""HTTP service exposing the digest pipeline."""

from gitdigest.service.app import create_app

__all__ = ["create_app"]
