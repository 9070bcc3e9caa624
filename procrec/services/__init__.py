from .capabilities import probe_capabilities
from .sampler import Sampler
from .stream import StreamRecorder
from .window import WindowBuffer, WindowRecorder

__all__ = [
    "probe_capabilities",
    "Sampler",
    "StreamRecorder",
    "WindowBuffer",
    "WindowRecorder",
]
