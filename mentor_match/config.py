import os
from dataclasses import dataclass, field

from .core.models import MatchingConfig, ScoringWeights

DEFAULT_SENDER = "Mentor Match <onboarding@resend.dev>"

@dataclass(frozen=True)
class Settings:
    resend_api_key: str = ""
    data_path: str = "mentor_match_data.json"
    email_from: str = DEFAULT_SENDER
    # Reroute example.com and malformed recipients to the provider test inbox
    email_sandbox: bool = True
    matching: MatchingConfig = field(default_factory=MatchingConfig)

def parse_weights(raw: str) -> ScoringWeights:
    """Parse ``"expertise=0.5,industry=0.1,..."``; omitted keys keep their default."""
    values: dict[str, float] = {}
    for part in raw.split(","):
        if not part.strip():
            continue
        key, sep, value = part.partition("=")
        if not sep:
            raise ValueError(f"Invalid weight entry {part!r}; expected name=value.")
        values[key.strip().replace("-", "_")] = float(value)
    return ScoringWeights(**values)

def _flag(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}

def load_settings() -> Settings:
    weights = os.getenv("MENTOR_MATCH_WEIGHTS", "").strip()
    matching = MatchingConfig(
        weights=parse_weights(weights) if weights else ScoringWeights(),
        threshold=int(os.getenv("MENTOR_MATCH_THRESHOLD", "70")),
        max_matches_per_mentee=int(os.getenv("MENTOR_MATCH_MAX_MATCHES", "3")),
    )
    return Settings(
        resend_api_key=os.getenv("RESEND_API_KEY", "").strip(),
        data_path=os.getenv("MENTOR_MATCH_DATA_PATH", "mentor_match_data.json"),
        email_from=os.getenv("MENTOR_MATCH_EMAIL_FROM", DEFAULT_SENDER),
        email_sandbox=_flag("MENTOR_MATCH_EMAIL_SANDBOX", True),
        matching=matching,
    )
