"""Status polling for asynchronous provisioning."""

from fabric_provider.polling.waiter import wait_for_state, status_of

__all__ = [
    "wait_for_state",
    "status_of",
]
