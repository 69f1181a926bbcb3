# split_ledger/tools/auto_discover.py
import pkgutil
import importlib
import split_ledger.tools
'''
Import every module under split_ledger.tools so each tool registers itself:

from split_ledger.tools.registry import tool_registry
from split_ledger.tools.auto_discover import discover_tools
discover_tools()

tool_registry.get("execute_split")
'''
def discover_tools():
    for _, module_name, _ in pkgutil.walk_packages(
        split_ledger.tools.__path__,
        split_ledger.tools.__name__ + "."
    ):
        importlib.import_module(module_name)
