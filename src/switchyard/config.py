"""Router configuration.

RouterConfig is a frozen dataclass, immutable after creation. Routers
share one config with their route table.
"""

from dataclasses import dataclass

from switchyard.routing.template import RE_SLUG


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RouterConfig(continue_on_not_found=True, path_variables_attribute="path")
    """

    # When no route matches, call ``next`` instead of answering 404
    continue_on_not_found: bool = False

    # Attach path variables as one dict under this attribute name.
    # None attaches each variable as its own request attribute.
    path_variables_attribute: str | None = None

    # Pattern for template variables with no per-variable pattern
    default_variable_pattern: str = RE_SLUG

    # Include an Allow header on 405 responses from method maps
    list_allowed_methods: bool = True
