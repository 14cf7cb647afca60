from dataclasses import dataclass
from typing import Optional

from core.availability.conflicts import AvailabilityConflictChecker
from core.config_loader import AppConfig
from core.interfaces import MatchingRepository
from core.matcher.orchestrator import MatchOrchestrator
from core.matcher.service import MatchService
from notification.service import MatchNotificationService


@dataclass
class AppContext:
    """Application context container that holds all wired dependencies.

    Holds no DB session; repositories come from matching_uow() per
    command and are bound with service_for().
    """
    config: AppConfig
    orchestrator: MatchOrchestrator
    notifier: Optional[MatchNotificationService] = None

    @classmethod
    def build(cls, config: AppConfig) -> "AppContext":
        """Build an AppContext from config.

        Args:
            config: Loaded application configuration

        Returns:
            Fully wired AppContext instance

        Raises:
            InvalidWeightConfigurationError: a configured weight profile is invalid
        """
        orchestrator = MatchOrchestrator(config.matching, AvailabilityConflictChecker())

        # Notification Service (only if enabled)
        notifier = None
        if config.notifications and config.notifications.enabled:
            notifier = cls._build_notification_service(config)

        return cls(config=config, orchestrator=orchestrator, notifier=notifier)

    def service_for(self, repo: MatchingRepository) -> MatchService:
        return MatchService(
            repo=repo,
            orchestrator=self.orchestrator,
            notifier=self.notifier,
            notify_min_score=self.config.notifications.min_score_threshold
        )

    @staticmethod
    def _build_notification_service(config: AppConfig) -> MatchNotificationService:
        notification_config = config.notifications
        return MatchNotificationService(
            channel_type=notification_config.channel,
            recipient=notification_config.recipient,
            base_url=notification_config.base_url,
            max_attempts=notification_config.max_attempts
        )
