"""OCTOmatiz - publish small-business landing pages under short slugs.

This package provides the storage gate, slug allocation, short links,
branded error pages, and the publication/resolution pipeline behind the
HTTP API in web/.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
