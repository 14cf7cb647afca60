import yaml
import os
from typing import List, Optional, Dict
from pydantic import BaseModel, Field


class DatabaseConfig(BaseModel):
    url: str = "sqlite:///staffing_match.db"


class ScorerConfig(BaseModel):
    """
    Tolerances for the continuous dimension scorers.
    """
    max_distance_km: float = 50.0  # location score reaches 0 at this radius
    max_salary_diff_percent: float = 20.0  # salary score reaches 0 at this relative gap


class WeightProfileConfig(BaseModel):
    """A named weight set as written in config.yaml.

    Weights must sum to 1.0; this is checked when the profile is resolved,
    not when the file is parsed.
    """
    weights: Dict[str, float]
    hard_gates: List[str] = Field(default_factory=list)


class MatchingConfig(BaseModel):
    """
    Top-level matching configuration.
    """
    enabled: bool = True

    # Minimum aggregate score (0-1) for a pair to be reported
    threshold: float = 0.7

    # Which weight profile the orchestrator uses unless a caller picks another.
    # Built-ins: "five_dimension" (with availability) and "four_dimension".
    weight_profile: str = "five_dimension"

    # Extra or overriding profiles, keyed by name
    weight_profiles: Dict[str, WeightProfileConfig] = Field(default_factory=dict)

    # Scoring thread pool size; None = CPU count
    max_workers: Optional[int] = None

    scorer: ScorerConfig = Field(default_factory=ScorerConfig)


class NotificationConfig(BaseModel):
    """
    Configuration for match notifications.

    Notification is best-effort: failures are logged, never raised.
    """
    enabled: bool = False  # Disabled by default - must opt-in
    channel: str = "log"  # "log" or "webhook"
    recipient: Optional[str] = None  # Webhook URL for the webhook channel
    base_url: str = "http://localhost:8080"  # Base URL for links in notifications
    min_score_threshold: Optional[float] = None  # Extra bar above the match threshold; None notifies every match
    max_attempts: int = 3  # Send attempts per notification


class AppConfig(BaseModel):
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)


def load_config(config_path: str = "config.yaml") -> AppConfig:
    # If not found at relative path (e.g. running from root), try next to the package
    if not os.path.exists(config_path):
        base_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(base_dir, "..", "config.yaml")

    with open(config_path, "r") as f:
        data = yaml.safe_load(f) or {}

    # Allow env var override for DB URL
    env_db_url = os.environ.get("DATABASE_URL")
    if env_db_url:
        data.setdefault('database', {})
        data['database']['url'] = env_db_url

    # Allow env var override for the match threshold
    env_threshold = os.environ.get("MATCH_THRESHOLD")
    if env_threshold:
        if not data.get('matching'):
            data['matching'] = {}
        data['matching']['threshold'] = float(env_threshold)

    # Allow env var override for the webhook recipient
    env_webhook_url = os.environ.get("NOTIFICATION_WEBHOOK_URL")
    if env_webhook_url:
        if not data.get('notifications'):
            data['notifications'] = {}
        data['notifications']['recipient'] = env_webhook_url

    return AppConfig(**data)
