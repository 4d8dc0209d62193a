"""Scraper utilities for browser sessions and request identity."""

from .browser_manager import BrowserManager, get_browser_manager
from .user_agents import CHROME_USER_AGENTS, get_chrome_user_agent, resolve_user_agent


__all__ = [
    # Browser sessions
    "BrowserManager",
    "get_browser_manager",
    # User agents
    "CHROME_USER_AGENTS",
    "get_chrome_user_agent",
    "resolve_user_agent",
]
