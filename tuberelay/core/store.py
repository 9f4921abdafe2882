"""
Mapping Store: the persisted {source channel id -> destination chat id} map.

The file is a flat JSON object pretty-printed with a 2-space indent. It is
read once at startup and fully rewritten on every mutation.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Union

from pydantic import TypeAdapter, ValidationError

from tuberelay.core.errors import MappingParseError, MappingWriteError

logger = logging.getLogger(__name__)

ChannelMap = Dict[str, str]

_channel_map_adapter = TypeAdapter(ChannelMap)


class MappingStore:
    """Load and save the channel map file."""
    
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
    
    def load(self) -> ChannelMap:
        """
        Read the persisted mapping.
        
        Returns:
            The mapping, or an empty dict when the file does not exist
        
        Raises:
            MappingParseError: the file exists but is not a JSON object of strings
        """
        if not self.path.exists():
            logger.info(f"No mapping file at {self.path}, starting empty")
            return {}
        
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise MappingParseError(self.path, f"cannot read: {e}") from e
        
        try:
            mapping = _channel_map_adapter.validate_json(raw, strict=True)
        except ValidationError as e:
            raise MappingParseError(self.path, f"malformed channel map: {e}") from e
        
        logger.info(f"Loaded {len(mapping)} tracked channel(s) from {self.path}")
        return mapping
    
    def save(self, mapping: ChannelMap) -> None:
        """
        Overwrite the file with the given mapping.
        
        Raises:
            MappingWriteError: the file could not be written
        """
        data = json.dumps(mapping, indent=2, ensure_ascii=False)
        try:
            self.path.write_text(data, encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to write mapping file {self.path}: {e}")
            raise MappingWriteError(self.path, str(e)) from e
        logger.debug(f"Saved {len(mapping)} tracked channel(s) to {self.path}")
