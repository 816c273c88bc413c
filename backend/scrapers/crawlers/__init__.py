"""Crawler implementations for page acquisition."""

from .browser import BrowserCrawler

__all__ = ['BrowserCrawler']
