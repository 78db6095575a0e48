"""JSON file data source - one <collection>.json array per collection"""

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List

from finquery.config import settings
from finquery.domain.exceptions import FetchError, SourceUnavailableError
from finquery.infrastructure.clients.base import Collection, ensure_record_list


class FileDataSource:
    """Reads collections from a local data directory"""

    def __init__(self, data_dir: str | Path | None = None):
        self.data_dir = Path(data_dir or settings.data_dir)

    def path_for(self, collection: Collection) -> Path:
        return self.data_dir / f"{collection.value}.json"

    async def fetch(self, collection: Collection) -> List[Dict[str, Any]]:
        """
        Load one collection from disk.

        Raises:
            SourceUnavailableError: The collection file does not exist
            FetchError: The file cannot be read or is not a JSON array
        """
        return await asyncio.to_thread(self._read, collection)

    def _read(self, collection: Collection) -> List[Dict[str, Any]]:
        path = self.path_for(collection)

        if not path.is_file():
            raise SourceUnavailableError(f"Data file not found: {path}")

        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise FetchError(f"Could not read {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise FetchError(f"Invalid JSON in {path}: {e}") from e

        return ensure_record_list(payload, collection)
