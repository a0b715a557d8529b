"""Session controller for kioskctl.

Public API:
    RemoteSession -- Owns the browser connection and the reload schedule
    ReloadScheduler -- One cancellable periodic-reload loop
"""

from kioskctl.session.controller import RemoteSession
from kioskctl.session.scheduler import ReloadScheduler

__all__ = ["ReloadScheduler", "RemoteSession"]
