"""SEOForge: audit and remediate SEO markup in HTML and template files."""

__version__ = "0.1.0"
