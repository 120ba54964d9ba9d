"""
Exception types for service context construction.

Errors fall into three groups:
- recoverable per annotation (handler could not produce a value)
- recoverable per selector (annotation key not understood)
- fatal (type resolution, owned resource listing, merge failures)
"""


class BindingError(Exception):
    """Base class for all binding engine errors."""
    pass


class EmptyAnnotationNameError(BindingError):
    """Raised when a binding annotation key carries the prefix but no name."""
    pass


class HandlerNotFoundError(BindingError):
    """Raised when no handler family can interpret an annotation."""
    pass


class InvalidAnnotationValueError(BindingError):
    """Raised when an annotation value does not follow the option grammar."""
    pass


class HandlerExecutionError(BindingError):
    """Raised by a dispatched handler that cannot extract its value."""
    pass


class MergeError(BindingError):
    """Raised when handler output cannot be merged into accumulated state."""
    pass


class TypeNotFoundError(BindingError):
    """Raised when a selector or GVK cannot be resolved to a served type."""
    pass


class ResourceNotFoundError(BindingError):
    """Raised by cluster capabilities when an object does not exist."""
    pass


class ClusterError(BindingError):
    """Raised when a cluster capability fails for reasons other than NotFound."""
    pass


class OwnedResourceListError(BindingError):
    """Raised when resources owned by a service cannot be listed."""
    pass


class WatchRegistrationError(BindingError):
    """Raised when a watch for a GVK cannot be started."""
    pass


def is_skippable_selector_error(err: Exception) -> bool:
    """True for errors that abandon a single selector instead of the whole build."""
    return isinstance(err, (EmptyAnnotationNameError, HandlerNotFoundError))
