import copy

import pytest

STRUCTURED = {
    "personality": {"tags": ["warm", "curious"], "description": "Easygoing."},
    "interests": [{"name": "Hiking", "level": "high", "description": "Most weekends."}],
    "lifestyle": {"habits": ["early riser"], "description": "Routine driven."},
    "values": {"career": "ambitious", "relationship": "loyal", "family": "close", "life": "balanced"},
    "emotion": {"state": "content", "description": "Upbeat posts."},
    "suggestions": {
        "topics": ["trails"],
        "openings": ["Which trail was that?"],
        "dating": {"places": ["park"], "activities": ["hike"]},
        "warnings": ["do not rush"],
        "strategy": ["build rapport", "suggest a hike"],
    },
}


@pytest.fixture
def structured():
    return copy.deepcopy(STRUCTURED)
