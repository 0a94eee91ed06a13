"""Modpack installer (manifest-driven, sequential).

Core design goals:
- Declarative manifest, validated before touching the filesystem
- Linear, ordered pipeline of small steps
- Game-client formats written natively (servers.dat, splash.properties)
- Fatal errors stop the run; hooks never do
- Centralized logging
"""

__all__ = []
