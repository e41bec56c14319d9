"""
toolkit-hub Guardrail Pipeline

Wraps every bound package handler. Each call runs the same fixed
sequence:

1. Parameter validation against the tool's params model
2. Resource scoping → the scoped parameter must hold an allowed value
3. Delegated execution → handler errors become error results
4. Audit → one InvocationRecord per attempt (if logging is enabled)

Scoping always precedes execution: a denied call never reaches the
package handler. Nothing raised by a handler propagates past this
boundary.
"""

from __future__ import annotations

import asyncio
import inspect
import time
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from toolkit_hub.logging import get_logger
from toolkit_hub.tools.models import InvocationOutcome, InvocationRecord, ToolResult

if TYPE_CHECKING:
    from toolkit_hub.audit.invocation_log import InvocationLog
    from toolkit_hub.config import PackagePolicy
    from toolkit_hub.packages.manifest import ToolDefinition

logger = get_logger("toolkit_hub.guardrails")


class GuardrailPipeline:
    """Policy-enforcing wrapper around one package tool.

    The policy and definition are fixed at construction; concurrent
    calls all observe the same, unchanging policy.
    """

    def __init__(
        self,
        package: str,
        definition: ToolDefinition,
        policy: PackagePolicy,
        invocation_log: InvocationLog | None = None,
        handler_timeout_s: float | None = None,
    ):
        self._package = package
        self._definition = definition
        self._policy = policy
        self._log = invocation_log
        self._timeout = handler_timeout_s

    @property
    def tool_name(self) -> str:
        return self._definition.name

    async def __call__(self, arguments: dict[str, Any] | None = None) -> ToolResult:
        start = time.monotonic()
        result = await self._run(arguments or {})
        self._audit(result.outcome, (time.monotonic() - start) * 1000)
        return result

    async def _run(self, arguments: dict[str, Any]) -> ToolResult:
        # 1. Validation
        try:
            validated = self.validate(arguments)
        except ValidationError as e:
            return ToolResult.error(f"Invalid arguments for {self._full_name}: {_summarize_errors(e)}")

        # 2. Resource scoping
        denial = self.check_scope(validated)
        if denial is not None:
            logger.warning(
                "Scope denied",
                extra={"package": self._package, "tool": self.tool_name, "outcome": "denied"},
            )
            return denial

        # 3. Delegated execution
        return await self._execute(validated)

    def validate(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """Validate arguments against the params model.

        Only fields the caller supplied are passed on, so a handler's own
        defaults still apply to omitted parameters.

        Raises:
            ValidationError: if the arguments do not match the model.
        """
        params = self._definition.params
        if params is None:
            return dict(arguments)
        model = params.model_validate(arguments)
        return model.model_dump(exclude_unset=True)

    def check_scope(self, arguments: dict[str, Any]) -> ToolResult | None:
        """Return a denial result if the scoped parameter holds a disallowed value.

        A call that does not address the scoped parameter passes through.
        """
        scope = self._policy.resource_scope
        if scope is None:
            return None
        value = arguments.get(scope.param)
        if value is None:
            return None
        if str(value) in scope.allowed:
            return None
        return ToolResult.denied(
            f"Access denied: {scope.param} '{value}' is not within the configured "
            f"scope for package '{self._package}'."
        )

    async def _invoke(self, arguments: dict[str, Any]) -> Any:
        """Run the handler. Sync handlers run in a worker thread so a
        blocking call stalls only its own invocation."""
        handler = self._definition.handler
        if inspect.iscoroutinefunction(handler) or inspect.iscoroutinefunction(
            getattr(handler, "__call__", None)
        ):
            output = handler(**arguments)
        else:
            output = await asyncio.to_thread(handler, **arguments)
        if inspect.isawaitable(output):
            output = await output
        return output

    async def _execute(self, arguments: dict[str, Any]) -> ToolResult:
        try:
            if self._timeout is None:
                output = await self._invoke(arguments)
            else:
                task = asyncio.ensure_future(self._invoke(arguments))
                done, _ = await asyncio.wait({task}, timeout=self._timeout)
                if not done:
                    task.cancel()
                    logger.warning(
                        "Handler timed out after %ss",
                        self._timeout,
                        extra={"package": self._package, "tool": self.tool_name, "outcome": "errored"},
                    )
                    return ToolResult.error(
                        f"Error: {self._full_name} timed out after {self._timeout}s"
                    )
                output = task.result()
        except Exception as e:
            logger.warning(
                "Handler raised %s: %s",
                type(e).__name__,
                e,
                extra={"package": self._package, "tool": self.tool_name, "outcome": "errored"},
            )
            return ToolResult.error(f"Error: {e}" if str(e) else f"Error: {type(e).__name__}")

        return ToolResult.ok(output if isinstance(output, str) else str(output))

    def _audit(self, outcome: InvocationOutcome, duration_ms: float) -> None:
        if self._log is None or not self._log.enabled:
            return
        self._log.append(
            InvocationRecord(
                package=self._package,
                tool=self.tool_name,
                duration_ms=round(max(duration_ms, 0.0), 3),
                outcome=outcome,
            )
        )

    @property
    def _full_name(self) -> str:
        return f"{self._package}_{self.tool_name}"


def _summarize_errors(error: ValidationError) -> str:
    """Condense a ValidationError into one line for the caller."""
    parts = []
    for err in error.errors()[:3]:
        loc = ".".join(str(p) for p in err["loc"]) or "arguments"
        parts.append(f"{loc}: {err['msg']}")
    suffix = ", ..." if error.error_count() > 3 else ""
    return ", ".join(parts) + suffix
