"""folio: publish a blog and portfolio as a static site, and serve it locally."""

__version__ = "0.1.0"
