"""
y2m - bulk checkout of the YaST and libyui repositories.

Keeps a flat directory of module checkouts in sync with the repositories
published under the ``yast`` and ``libyui`` GitHub organizations:

- Listing: paginated GitHub API fetch with ETag-based caching
- Resolver: maps short module names (``core``) to full repository names (``yast-core``)
- Repository manager: shallow-then-full clone, pull and checkout via GitPython
- Pipeline: expands ``ALL``/``FAV`` module sets and runs one operation per module
"""

__version__ = "0.1.0"
