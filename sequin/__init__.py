r"""
'    ____  ____  ___  _  _  ____  _  _
'   / ___)(  __)/ _ \/ )( \(_  _)( \( )
'   \___ \ ) _)( (_) ) \/ ( _)(_  )  (
'   (____/(____)\___\_)____/(____)(_)\_)
"""

# expose the main class
from .stream import Stream

# expose the factory functions
from .factories import (
    from_iterable,
    of,
    from_range,
    range_closed,
    repeat,
    empty,
    generate,
    iterate,
    concat,
    from_source,
    sequin,
    S
)

# expose supporting data classes
from .types import (
    Option,
    SummaryStatistics,
    FloatSummaryStatistics
)

# collectors are used as `collectors.grouping_by(...)` or imported by name
from . import collectors
from .collectors import Collector, Characteristics

from .config import ParallelConfig, get_default_config, set_default_config
from .source import Source, ListSource, IteratorSource, ConcatSource
from .errors import SequinError, DuplicateKeyError, NoSuchElementError, StreamConsumedError

# define what `import *` does
__all__ = [
    "Stream",
    "from_iterable",
    "of",
    "from_range",
    "range_closed",
    "repeat",
    "empty",
    "generate",
    "iterate",
    "concat",
    "from_source",
    "sequin",
    "S",
    "Option",
    "SummaryStatistics",
    "FloatSummaryStatistics",
    "collectors",
    "Collector",
    "Characteristics",
    "ParallelConfig",
    "get_default_config",
    "set_default_config",
    "Source",
    "ListSource",
    "IteratorSource",
    "ConcatSource",
    "SequinError",
    "DuplicateKeyError",
    "NoSuchElementError",
    "StreamConsumedError"
]
