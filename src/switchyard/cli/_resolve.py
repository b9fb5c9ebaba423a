"""Router import resolution — resolves ``"module:attribute"`` strings to Routers.

Shared by ``switchyard routes`` and ``switchyard match``.
"""

from switchyard.dispatch import import_reference
from switchyard.router import Router


def resolve_router(import_string: str) -> Router:
    """Resolve an import string to a Router instance.

    Accepts ``"module:attribute"`` format.  When the attribute portion
    is omitted, defaults to ``"router"`` (e.g. ``"myapp"`` resolves to
    ``myapp.router``).

    Supports factory functions: if the resolved object is callable and
    not a Router instance, it will be called with no arguments.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the resolved object is not a Router or factory.
    """
    module_path, _, attr_name = import_string.partition(":")
    obj = import_reference(f"{module_path}:{attr_name or 'router'}")

    if callable(obj) and not isinstance(obj, Router):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, Router):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, not a switchyard.Router instance"
        raise TypeError(msg)

    return obj
