"""
genieMCP - search core for a desktop quick-launcher.

Turns a free-text query into a ranked list of installed apps, indexed files,
inline calculations, system commands and a web search fallback, and exposes
it to any launcher front end through an MCP server.

Stack:
- Python + FastMCP (host surface)
- rapidfuzz (fuzzy fallback scoring)
- PyYAML (settings file)
- httpx (web search URLs and launch checks)
"""

__version__ = "0.1.0"
