"""Plugin package for Genro HashRouter.

This package contains built-in plugins for the Router.

Note: Do not import concrete plugins here to keep imports side-effect free.
Concrete plugin modules (logging) self-register when imported via the main
genro_hashrouter package.
"""

__all__: list[str] = []
