"""ViewState enum for the vehicle list and detail views."""

from enum import Enum


class ViewState(Enum):
    """
    Lifecycle of one view instance:
    INITIALIZING -> LOADING -> READY | NOT_FOUND | ERROR.

    NOT_FOUND and ERROR are terminal for the instance.
    """

    INITIALIZING = "initializing"
    LOADING = "loading"
    READY = "ready"
    NOT_FOUND = "not_found"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (ViewState.NOT_FOUND, ViewState.ERROR)
