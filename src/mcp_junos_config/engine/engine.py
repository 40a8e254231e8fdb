"""Resource Engine - create/read/update/delete of Junos resources.

Wraps the codec with the candidate configuration lifecycle:

    lock -> load set/delete lines -> commit -> unlock -> read back

Every mutating operation is written to the audit log, whether it
succeeded or not.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from ..codec.schema import OptionSet
from ..codec.lines import CMD_SHOW_CONFIG
from ..resources import JunosResource, create_resource
from ..session.base import JunosSession, SessionError
from ..utils.audit_log import ChangeTracker
from ..utils.logging_config import timed_section, timed_section_sync
from .schema import Operation, OperationResult, ResourceError

logger = logging.getLogger(__name__)

PIPE_DISPLAY_SET = " | display set"


class ResourceEngine:
    """
    Apply resource configurations to one device.

    The engine owns its session; operations on it are serialized.

    Usage:
        engine = ResourceEngine(session)
        result = await engine.create("security_policy", config)
        print(result.lines, result.state)
    """

    def __init__(self, session: JunosSession, device_id: Optional[str] = None):
        self.session = session
        self.device_id = device_id or session.device_id
        self.tracker = ChangeTracker(self.device_id)
        self._lock = asyncio.Lock()

    @staticmethod
    def render(resource_type: str, config: dict[str, Any]) -> OperationResult:
        """Validate a configuration and return its set lines; no device contact."""
        resource, options = ResourceEngine._prepare(resource_type, config)
        with timed_section_sync("resource_render", resource_type=resource.type_name):
            lines = resource.encode(options)
        return OperationResult(
            operation=Operation.RENDER,
            resource_type=resource.type_name,
            resource_id=resource.make_id(resource.identity(options)),
            success=True,
            dry_run=True,
            lines=lines,
            state=options.to_dict(),
        )

    async def create(
        self, resource_type: str, config: dict[str, Any], dry_run: bool = False
    ) -> OperationResult:
        """
        Create a resource on the device.

        Args:
            resource_type: Resource type name (with or without `junos_`)
            config: Resource attributes
            dry_run: Only validate and render the lines

        Returns:
            OperationResult with the lines sent and the state read back

        Raises:
            ValidationError: If the configuration is invalid
            ResourceError: If the resource already exists or is missing after commit
            SessionError: If the device rejects the change
        """
        resource, options = self._prepare(resource_type, config)
        identity = resource.identity(options)
        result = OperationResult(
            operation=Operation.CREATE,
            resource_type=resource.type_name,
            resource_id=resource.make_id(identity),
            dry_run=dry_run,
        )

        async with self._lock, self._audited(result, options):
            result.lines = resource.encode(options)
            if dry_run:
                result.state = options.to_dict()
                result.success = True
                return result

            if self.session.writes_only:
                await self.session.config_set(result.lines)
                result.state = options.to_dict()
                result.success = True
                return result

            if resource.singleton_id is None:
                existing = await self._read(resource, identity)
                if existing is not None:
                    raise ResourceError(
                        f"{resource.type_name} {result.resource_id} already exists"
                    )

            result.warnings = await self._apply(
                result.lines, f"create resource junos_{resource.type_name}"
            )
            state = await self._read(resource, identity)
            if state is None:
                raise ResourceError(
                    f"{resource.type_name} {result.resource_id} not exists after commit "
                    "=> check your config"
                )
            result.state = state.to_dict()
            result.success = True
        return result

    async def read(self, resource_type: str, resource_id: str) -> OperationResult:
        """Read a resource; `state` is None when the device does not have it."""
        resource = create_resource(resource_type)
        identity = resource.parse_id(resource_id)
        async with self._lock:
            state = await self._read(resource, identity)
        return OperationResult(
            operation=Operation.READ,
            resource_type=resource.type_name,
            resource_id=resource.make_id(identity),
            success=True,
            state=state.to_dict() if state is not None else None,
        )

    async def update(
        self, resource_type: str, config: dict[str, Any], dry_run: bool = False
    ) -> OperationResult:
        """
        Replace a resource: its delete lines and set lines go in one commit.

        Raises:
            ValidationError: If the configuration is invalid
            SessionError: If the device rejects the change
        """
        resource, options = self._prepare(resource_type, config)
        identity = resource.identity(options)
        result = OperationResult(
            operation=Operation.UPDATE,
            resource_type=resource.type_name,
            resource_id=resource.make_id(identity),
            dry_run=dry_run,
        )

        async with self._lock, self._audited(result, options):
            result.lines = resource.delete_lines(identity) + resource.encode(options)
            if dry_run or self.session.writes_only:
                if not dry_run:
                    await self.session.config_set(result.lines)
                result.state = options.to_dict()
                result.success = True
                return result

            result.warnings = await self._apply(
                result.lines, f"update resource junos_{resource.type_name}"
            )
            state = await self._read(resource, identity)
            if state is None:
                logger.warning(
                    f"{self.device_id}: {resource.type_name} {result.resource_id} "
                    "not found after update"
                )
            result.state = state.to_dict() if state is not None else None
            result.success = True
        return result

    async def delete(
        self, resource_type: str, resource_id: str, dry_run: bool = False
    ) -> OperationResult:
        """Remove a resource from the device configuration."""
        resource = create_resource(resource_type)
        identity = resource.parse_id(resource_id)
        result = OperationResult(
            operation=Operation.DELETE,
            resource_type=resource.type_name,
            resource_id=resource_id,
            dry_run=dry_run,
            lines=resource.delete_lines(identity),
        )

        async with self._lock, self._audited(result):
            if dry_run:
                result.success = True
                return result
            if self.session.writes_only:
                await self.session.config_set(result.lines)
            else:
                result.warnings = await self._apply(
                    result.lines, f"delete resource junos_{resource.type_name}"
                )
            result.success = True
        return result

    async def import_state(self, resource_type: str, resource_id: str) -> OperationResult:
        """
        Read an existing resource by id, failing when it is absent.

        Raises:
            ResourceError: If the device has no such resource
        """
        resource = create_resource(resource_type)
        identity = resource.parse_id(resource_id)
        async with self._lock:
            state = await self._read(resource, identity)
        if state is None:
            raise ResourceError(
                f"don't find {resource.type_name} with id '{resource_id}' "
                f"(id must be {resource.id_format})"
            )
        return OperationResult(
            operation=Operation.IMPORT,
            resource_type=resource.type_name,
            resource_id=resource.make_id(identity),
            success=True,
            state=state.to_dict(),
        )

    async def show_configuration(self, path: str = "") -> str:
        """Device configuration under `path` as set lines."""
        command = CMD_SHOW_CONFIG + path.strip()
        async with self._lock:
            return await self.session.command(command.rstrip() + PIPE_DISPLAY_SET)

    # === Internals ===

    @staticmethod
    def _prepare(resource_type: str, config: dict[str, Any]) -> tuple[JunosResource, OptionSet]:
        resource = create_resource(resource_type)
        return resource, resource.from_config(config)

    async def _read(self, resource: JunosResource, identity: dict[str, Any]) -> Optional[OptionSet]:
        output = await self.session.command(resource.show_command(identity))
        return resource.decode(output, identity)

    async def _apply(self, lines: list[str], message: str) -> list[str]:
        """Load `lines` into a locked candidate and commit; returns warnings."""
        await self.session.lock()
        try:
            await self.session.config_set(lines)
            warnings = await self.session.commit(message)
        except BaseException:
            # any failure, cancellation included, leaves the candidate clean and unlocked
            await self._discard()
            raise
        warnings.extend(await self.session.unlock())
        for warning in warnings:
            logger.warning(f"{self.device_id}: {message}: {warning}")
        return warnings

    async def _discard(self) -> None:
        try:
            await self.session.clear()
        except SessionError as e:
            logger.error(f"{self.device_id}: failed to discard candidate changes: {e}")
        for message in await self.session.unlock():
            logger.warning(f"{self.device_id}: {message}")

    @asynccontextmanager
    async def _audited(self, result: OperationResult, options: Optional[OptionSet] = None):
        """Time an operation and write its audit record on exit."""
        async with timed_section(
            f"resource_{result.operation.value}",
            device_id=self.device_id,
            resource_type=result.resource_type,
        ):
            try:
                yield result
            except Exception as e:
                result.success = False
                result.error = str(e)
                result.warnings.extend(getattr(e, "warnings", []))
                raise
            finally:
                config = result.state
                if config is None and options is not None:
                    config = options.to_dict()
                self.tracker.log_change(
                    operation=result.operation.value,
                    resource_type=result.resource_type,
                    resource_id=result.resource_id,
                    success=result.success,
                    lines=result.lines,
                    warnings=result.warnings,
                    config=config,
                    error=result.error,
                    dry_run=result.dry_run,
                )
