import os
from pathlib import Path

import pytest
from dotenv import load_dotenv

load_dotenv()
FIXTURES_PATH = Path(os.getenv("VITAE_FIXTURES_PATH", Path(__file__).parent / "fixtures"))


@pytest.fixture
def fixtures_path() -> Path:
    return FIXTURES_PATH
