from services.agent_store.operations import AGENT_NOT_FOUND, AgentOperations
from services.agent_store.records import (
    AGENT_STATUSES,
    STORE_VERSION,
    new_agent_record,
    new_store_document,
    public_view,
)
from services.agent_store.store import (
    LOAD_CORRUPT,
    LOAD_DEFAULTED,
    LOAD_LOADED,
    AgentStore,
    StoreClosedError,
    StoreLoad,
    StoreLockTimeout,
)
from services.agent_store.tools import AgentTool, build_agent_tools, tool_schemas

__all__ = [
    "AGENT_NOT_FOUND",
    "AGENT_STATUSES",
    "LOAD_CORRUPT",
    "LOAD_DEFAULTED",
    "LOAD_LOADED",
    "STORE_VERSION",
    "AgentOperations",
    "AgentStore",
    "AgentTool",
    "StoreClosedError",
    "StoreLoad",
    "StoreLockTimeout",
    "build_agent_tools",
    "new_agent_record",
    "new_store_document",
    "public_view",
    "tool_schemas",
]
