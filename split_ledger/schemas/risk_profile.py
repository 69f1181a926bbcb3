from pydantic import BaseModel

class ToolRiskProfile(BaseModel):
    '''
    Risk characteristics of a tool.

    modifies_persistent_data: writes to the database
    irreversible: writes can only be undone by offsetting entries
    deletes_data: removes rows
    affects_multiple_records: writes more than one row per call
    require_human_auth: must be confirmed by a human before running
    '''
    modifies_persistent_data:bool = False
    irreversible:bool = False
    deletes_data:bool = False
    affects_multiple_records:bool = False
    require_human_auth:bool = False
