"""Configuration settings for flashdeck."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from flashdeck.exceptions import ConfigurationError

# Define base directory
BASE_DIR = Path(__file__).parent.parent.parent

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)


# Define data directories from environment variables
DATA_DIR = Path(os.getenv("DATA_DIR", "./data"))
DECKS_DIR = DATA_DIR / "decks"
AUDIO_DIR = DATA_DIR / "audio"

# Scheduling settings
REPETITION_LEVELS = [1, 2, 4, 10, 25, 60, 150]  # day buckets between reviews
DAY_BUCKET_SECONDS = 86400  # calendar day; 8640 gives the older 2.4 hour buckets


def ensure_directories() -> None:
    """Ensure all required directories exist."""
    directories = [
        DATA_DIR,
        DECKS_DIR,
        AUDIO_DIR,
    ]

    for directory in directories:
        directory.mkdir(parents=True, exist_ok=True)


def get_repetition_levels() -> List[int]:
    """Get repetition levels from environment variable."""
    raw = os.getenv("REPETITION_LEVELS", "")
    if not raw:
        return list(REPETITION_LEVELS)
    return [int(level) for level in raw.split(",") if level.strip()]


@dataclass
class PathSettings:
    """Path configuration settings."""
    base_dir: Path = BASE_DIR
    data_dir: Path = DATA_DIR
    decks_dir: Path = DECKS_DIR
    audio_dir: Path = AUDIO_DIR


@dataclass
class SchedulingSettings:
    """Spaced repetition settings."""
    levels: List[int] = field(default_factory=get_repetition_levels)
    day_bucket_seconds: int = int(os.getenv("DAY_BUCKET_SECONDS", str(DAY_BUCKET_SECONDS)))


@dataclass
class SessionSettings:
    """Practice session settings."""
    hand_count: int = int(os.getenv("HAND_COUNT", "3"))
    completion_window: int = int(os.getenv("COMPLETION_WINDOW", "3"))
    choice_count: int = int(os.getenv("CHOICE_COUNT", "4"))
    card_timeout: float = float(os.getenv("CARD_TIMEOUT", "6.0"))  # seconds
    success_delay: float = float(os.getenv("SUCCESS_DELAY", "0.4"))
    max_replay: int = int(os.getenv("MAX_REPLAY", "5"))
    replay_start_delay: float = float(os.getenv("REPLAY_START_DELAY", "1.0"))
    replay_pause: float = float(os.getenv("REPLAY_PAUSE", "2.0"))
    question_audio_pause: float = float(os.getenv("QUESTION_AUDIO_PAUSE", "0.5"))


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class MonitoringSettings:
    """Prometheus metrics settings."""
    enabled: bool = os.getenv("METRICS_ENABLED", "false").lower() == "true"
    port: int = int(os.getenv("METRICS_PORT", "9090"))


def get_path_settings() -> PathSettings:
    """Get path settings."""
    return PathSettings()


def get_scheduling_settings() -> SchedulingSettings:
    """Get scheduling settings."""
    return SchedulingSettings()


def get_session_settings() -> SessionSettings:
    """Get session settings."""
    return SessionSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_monitoring_settings() -> MonitoringSettings:
    """Get monitoring settings."""
    return MonitoringSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    paths: PathSettings = field(default_factory=get_path_settings)
    scheduling: SchedulingSettings = field(default_factory=get_scheduling_settings)
    session: SessionSettings = field(default_factory=get_session_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)

    def validate(self) -> None:
        """Validate settings and raise ConfigurationError if invalid."""
        if not self.scheduling.levels:
            raise ConfigurationError("REPETITION_LEVELS must not be empty")

        if any(level < 1 for level in self.scheduling.levels):
            raise ConfigurationError("REPETITION_LEVELS must be positive")

        if self.scheduling.day_bucket_seconds < 1:
            raise ConfigurationError("DAY_BUCKET_SECONDS must be positive")

        if self.session.hand_count < 1:
            raise ConfigurationError("HAND_COUNT must be positive")

        if self.session.completion_window < 1:
            raise ConfigurationError("COMPLETION_WINDOW must be positive")

        if self.session.choice_count < 2:
            raise ConfigurationError("CHOICE_COUNT must be at least 2")

        timings = (
            self.session.card_timeout,
            self.session.success_delay,
            self.session.replay_start_delay,
            self.session.replay_pause,
            self.session.question_audio_pause,
        )
        if any(value < 0 for value in timings) or self.session.max_replay < 0:
            raise ConfigurationError("Session timings cannot be negative")


# Create global settings instance
settings = Settings()
settings.validate()
