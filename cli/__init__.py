"""CLI package for the library circulation backend"""
from .main import cli

__all__ = ['cli']
