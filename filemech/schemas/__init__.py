"""Pydantic schemas for filemech configuration files."""

from .config import FileMechConfig

__all__ = ["FileMechConfig"]
