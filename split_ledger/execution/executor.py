# split_ledger/execution/executor.py

from typing import Dict, Any, Set
from split_ledger.tools.registry import ToolRegistry
from split_ledger.schemas.tool_result import ToolResult
from split_ledger.schemas.error_type import ErrorType
from split_ledger.logger import get_logger

logger = get_logger(__name__)

class PythonExecutor:
    def __init__(self, registry: ToolRegistry):
        self.registry = registry

    def execute(self, *, tool_name: str, args: Dict[str, Any], allowlist: Set[str]) -> ToolResult:
        '''
        Execute a tool by name with given arguments, enforcing an allowlist.
        steps:
        1) check allowlist
        2) lookup tool spec
        3) execute tool function with args
        4) return the ToolResult, or a SystemError result when the tool misbehaves
        '''
        # 1 allowlist gate
        if tool_name not in allowlist:
            return ToolResult(
                ok=False,
                error_type=ErrorType.TOOL_NOT_ALLOWED,
                error_message=f"{tool_name} is not allowed for this caller.",
                explanation="This tool is not on the caller's allowlist.",
            )

        # 2 lookup
        spec = self.registry.get(tool_name)
        if not spec:
            return ToolResult(
                ok=False,
                error_type=ErrorType.SYSTEM_ERROR,
                error_message=f"Tool '{tool_name}' not found in registry.",
                explanation="This is a system configuration error. Escalate.",
            )

        # 3 execute
        try:
            result = spec.func(**args)
        except Exception as e:
            # tools classify their own errors; reaching here means a bad call or a tool bug
            logger.exception(f"[executor] unhandled exception in tool {tool_name}")
            return ToolResult(
                ok=False,
                error_type=ErrorType.SYSTEM_ERROR,
                error_message=str(e),
                explanation="Unhandled exception in executor. Escalate.",
            )

        if not isinstance(result, ToolResult):
            return ToolResult(
                ok=False,
                error_type=ErrorType.SYSTEM_ERROR,
                error_message="Tool did not return ToolResult instance.",
                explanation="Tool implementation error. Escalate.",
            )
        return result
