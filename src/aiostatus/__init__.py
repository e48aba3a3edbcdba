from .modules.adapter import *
from .modules.broadcast import *
from .modules.config import *
from .modules.future_state import *
from .modules.labels import *
from .modules.observer import *
from .modules.reducer import *
from .modules.scheduler import *
from .modules.settle import *
from .modules.state_cache import *
from .modules.threshold import *
