"""CLI package for Bookshelf"""
from .main import cli

__all__ = ['cli']
