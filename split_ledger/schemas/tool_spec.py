from typing import Callable, Any, Dict, Optional
from pydantic import BaseModel
from split_ledger.schemas.risk_profile import ToolRiskProfile

class ToolSpec(BaseModel):
    '''
    Registration record of a tool.

    name: unique name used to register and call the tool
    func: the implementation; takes keyword arguments and returns a ToolResult
    description: what the tool does, its preconditions and side effects
    input_schema: argument names and types
    output_schema: name of the returned model
    risk_profile: see ToolRiskProfile
    example_usage: optional example call
    '''
    name: str
    func: Callable[..., Any]
    description: str
    input_schema:Dict[str,Any]
    output_schema:str
    risk_profile:ToolRiskProfile
    example_usage:Optional[str] = None
