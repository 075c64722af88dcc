from typing import List, Optional, Tuple
from xml.etree import ElementTree as ET

import pytest

from oicp.shared.settings import load_shared_settings


@pytest.fixture(scope="session", autouse=True)
def shared_settings_loaded():
    load_shared_settings()


class ExceptionSink:
    """Collects everything handed to an on_exception callback"""

    def __init__(self):
        self.reports: List[Tuple[Optional[ET.Element], Exception]] = []

    def __call__(self, timestamp, node, exc):
        self.reports.append((node, exc))

    @property
    def errors(self) -> List[Exception]:
        return [exc for _, exc in self.reports]


@pytest.fixture
def exception_sink():
    return ExceptionSink()
