import copy
import json
import sys
from pathlib import Path

import pytest

# This repo uses a src/ layout; make it importable without an editable install.
_SRC = str(Path(__file__).resolve().parents[2] / "src")
if _SRC not in sys.path:
    sys.path.insert(0, _SRC)


VALID_REVIEW = {
    "summary": "Clean layout with a clear primary action, but contrast is weak.",
    "scores": {
        "visual_hierarchy": 7,
        "typography": 6.5,
        "color": 5,
        "accessibility": 4,
        "usability": 8,
        "emotional_tone": "calm",
    },
    "product_value": "Fast sign-in supports activation.",
    "priority_fixes": [
        "Raise text contrast to WCAG AA",
        "Label the password field",
        "Show inline validation errors",
    ],
    "suggestions": [
        "Add a show-password toggle",
        "Support passkeys",
        "Tighten vertical rhythm",
    ],
}


class ScriptedGateway:
    """Completion gateway that replays scripted outcomes.

    Each script item is either a string (returned) or an exception (raised).
    The last item repeats once the script runs out.
    """

    def __init__(self, *script):
        self.script = list(script)
        self.prompts: list[str] = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    def complete(self, prompt_text: str) -> str:
        self.prompts.append(prompt_text)
        idx = min(len(self.prompts) - 1, len(self.script) - 1)
        item = self.script[idx]
        if isinstance(item, BaseException):
            raise item
        return item


@pytest.fixture
def valid_review():
    return copy.deepcopy(VALID_REVIEW)


@pytest.fixture
def valid_review_json(valid_review):
    return json.dumps(valid_review)


@pytest.fixture
def scripted_gateway():
    """Fixture: factory for ScriptedGateway."""

    def _factory(*script):
        return ScriptedGateway(*script)

    return _factory


@pytest.fixture
def fast_policy():
    """Pipeline policy with instant backoff."""
    from design_review._retry import RetryConfig
    from design_review.review.pipeline import PipelinePolicy

    return PipelinePolicy(
        retry=RetryConfig(max_retries=2, base_delay_s=0.0, max_delay_s=0.0),
        timeout_s=5.0,
        poll_interval_s=0.01,
    )
