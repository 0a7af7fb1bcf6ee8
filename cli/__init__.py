"""CLI package for Readloom"""
from .main import cli

__all__ = ['cli']
