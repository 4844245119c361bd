from abc import ABC, abstractmethod
from typing import Any

class BaseExtractor(ABC):
    
    @abstractmethod
    def extract(self, raw: bytes) -> Any:
        pass
