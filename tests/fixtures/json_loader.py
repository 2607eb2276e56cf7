import copy
import json
from pathlib import Path
from typing import Any, Dict, List


class TestDataLoader:
    """Named seed accounts from test_data.json, handed out as deep copies"""

    _data: Dict[str, Any] = None

    @classmethod
    def load(cls) -> Dict[str, Any]:
        if cls._data is None:
            with open(Path(__file__).parent / "test_data.json") as f:
                cls._data = json.load(f)
        return cls._data

    @classmethod
    def account(cls, key: str) -> Dict[str, Any]:
        data = cls.load()
        if key not in data:
            raise KeyError(f"No seed account {key!r} in test_data.json")
        return copy.deepcopy(data[key])

    @classmethod
    def keys(cls) -> List[str]:
        return list(cls.load())
