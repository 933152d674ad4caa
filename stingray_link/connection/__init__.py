from .drop_counter import (
    DropCounter as DropCounter,
    DropCounterSnapshot as DropCounterSnapshot,
)
from .identify import (
    IDENTIFY_LUA as IDENTIFY_LUA,
    IDENTIFY_TIMEOUT as IDENTIFY_TIMEOUT,
    IdentifyCache as IdentifyCache,
)
from .stingray_connection import (
    ConnectionState as ConnectionState,
    StingrayConnection as StingrayConnection,
)
