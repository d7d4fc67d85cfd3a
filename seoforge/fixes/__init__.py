"""Mechanical fixes that insert missing markup."""


def _register_all() -> None:
    """Import all fix modules to trigger @register_fix.

    Called lazily by the pipeline to avoid circular imports.
    """
    from seoforge.fixes import head  # noqa: F401
    from seoforge.fixes import language  # noqa: F401
    from seoforge.fixes import images  # noqa: F401
