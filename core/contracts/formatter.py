from typing import Protocol
from .models import ChangeReport

class Formatter(Protocol):
    def format(self, report: ChangeReport) -> str:
        ...
