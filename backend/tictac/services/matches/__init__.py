"""Match domain services: win evaluation and the match registry.

Pure game mechanics live here so the socket handlers and HTTP routes only
deal with transport concerns.
"""

from .errors import MatchError
from .evaluator import evaluate
from .registry import MatchRegistry
