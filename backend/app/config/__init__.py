"""Configuration package for the mortgage optimizer service."""

from .settings import AppSettings, get_settings

__all__ = ["AppSettings", "get_settings"]
