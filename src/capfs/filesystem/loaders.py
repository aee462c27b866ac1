"""
Parsers for FileEntry.load_data().

Each data type token maps to an ordered tuple of parsers. load_data() tries
them in order and returns the first successful result.
"""

import json
from typing import Any, Callable, Dict, Tuple

import json5
import yaml

from ..exceptions import InvalidArgumentError

Parser = Callable[[str], Any]

PARSE_ERRORS = (ValueError, yaml.YAMLError)

DATA_LOADERS: Dict[str, Tuple[Parser, ...]] = {
    "json5": (json5.loads,),
    "json": (json.loads,),
    "yaml": (yaml.safe_load,),
    "any": (json5.loads, yaml.safe_load),
}


def parsers_for(data_type: str) -> Tuple[Parser, ...]:
    """
    Look up the parsers registered for a data type token (case-insensitive).

    Raises:
        InvalidArgumentError: If the token is not recognized
    """
    parsers = DATA_LOADERS.get(data_type.lower())
    if parsers is None:
        raise InvalidArgumentError(
            f"Unsupported data type '{data_type}'. "
            f"Supported types: {', '.join(DATA_LOADERS)}.",
            context={"data_type": data_type},
        )
    return parsers
