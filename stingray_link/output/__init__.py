from .output_router import (
    OutputRouter as OutputRouter,
    route_frame as route_frame,
)
from .output_sink import (
    OutputSink as OutputSink,
    get_timestamp as get_timestamp,
)
