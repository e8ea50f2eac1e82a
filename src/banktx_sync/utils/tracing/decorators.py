"""
Tracing decorator for plain functions.
"""

import functools

from .context import trace_operation


def trace_function(operation_name: str | None = None, **default_attributes):
    """
    Wrap every call of the decorated function in a span.

    The span is named ``operation_name`` or ``<module>.<function>`` and
    carries ``default_attributes`` plus the function name.

    Example:
        >>> @trace_function("sequence.diff", component="matcher")
        ... def diff(old, new, key):
        ...     ...
    """
    def decorator(func):
        span_name = operation_name or f"{func.__module__}.{func.__qualname__}"
        attributes = {**default_attributes, "function": func.__name__}

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with trace_operation(span_name, **attributes):
                return func(*args, **kwargs)

        return wrapper
    return decorator
