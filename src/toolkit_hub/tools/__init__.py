"""
toolkit-hub Guarded Tool Execution

Every exposed operation is a package tool wrapped by the guardrail
pipeline:

    call_tool → ToolRegistry → GuardrailPipeline → package handler

Components:
- ToolRegistry: namespaced, collision-checked map of exposed tools
- exposed_tools: allowlist + write-gate filter, applied once at startup
- GuardrailPipeline: validation, scoping, execution, audit
- ToolResult / InvocationRecord: call results and audit records
"""

from toolkit_hub.tools.models import InvocationOutcome, InvocationRecord, ToolResult
from toolkit_hub.tools.registry import RegisteredTool, ToolRegistry, exposed_tools, full_tool_name
from toolkit_hub.tools.router import GuardrailPipeline

__all__ = [
    "GuardrailPipeline",
    "InvocationOutcome",
    "InvocationRecord",
    "RegisteredTool",
    "ToolRegistry",
    "ToolResult",
    "exposed_tools",
    "full_tool_name",
]
