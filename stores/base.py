"""
Shared behaviour of the domain stores: loading and error bookkeeping,
command dispatch and retry-last-action.
"""

from dataclasses import fields
from typing import Any, Awaitable, Callable, Optional

from config.log import get_logger
from models.commands import Command
from models.result import ApiResult
from stores.ui_store import UIStore
from tools.api_client import ApiClient

log = get_logger(__name__)


class BaseStore:
    """
    Per-domain cache of server state.

    Fetches absorb failures into ``error`` and the UI banner. Mutations record
    the failure the same way and then re-raise it to the caller. Each public
    action is dispatched as a Command and remembered, so ``retry_last_action``
    replays exactly the last one. Creates run through ``_execute`` directly
    and are never remembered, so a replay cannot duplicate a record.
    """

    name = "Store"

    def __init__(self, api: ApiClient, ui: UIStore):
        self.api = api
        self.ui = ui
        self.is_loading = False
        self.error: Optional[str] = None
        self.last_command: Optional[Command] = None
        self._handlers: dict[type, Callable[..., Awaitable[Any]]] = {}

    def reset(self) -> None:
        self.is_loading = False
        self.error = None
        self.last_command = None

    async def dispatch(self, command: Command) -> Any:
        self.last_command = command
        return await self._execute(command)

    async def _execute(self, command: Command) -> Any:
        handler = self._handlers[type(command)]
        return await handler(**{f.name: getattr(command, f.name) for f in fields(command)})

    async def retry_last_action(self) -> Any:
        if self.last_command is None:
            return None
        self.ui.clear_error()
        log.info("[%s] Retrying %s", self.name, type(self.last_command).__name__)
        return await self._execute(self.last_command)

    def _record_failure(self, message: str) -> None:
        log.warning("[%s] %s", self.name, message)
        self.error = message
        self.ui.set_error(message)

    async def _fetch(self, method: str, path: str, fallback_error: str, **kwargs) -> ApiResult:
        """Run a fetch; a failure is recorded but never raised."""
        self.is_loading = True
        self.error = None
        self.ui.set_loading(True)

        result = await self.api.request(method, path, fallback_error=fallback_error, **kwargs)

        self.is_loading = False
        self.ui.set_loading(False)
        if not result.success:
            self._record_failure(result.message or fallback_error)
        return result

    async def _mutate(self, method: str, path: str, fallback_error: str, **kwargs) -> ApiResult:
        """Run a mutation; a failure is recorded and re-raised."""
        self.ui.set_loading(True)
        result = await self.api.request(method, path, fallback_error=fallback_error, **kwargs)
        self.ui.set_loading(False)

        if not result.success:
            self._record_failure(result.message or fallback_error)
            raise result.error
        return result


def merge_by_id(records: list, record) -> list:
    """Replace the record with the same id, keeping list order."""
    return [record if r.id == record.id else r for r in records]


def remove_by_id(records: list, record_id: str) -> list:
    return [r for r in records if r.id != record_id]
