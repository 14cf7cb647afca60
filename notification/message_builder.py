from typing import Any, Dict, Optional
from urllib.parse import urljoin

from pydantic import BaseModel


class MatchNotificationContent(BaseModel):
    worker_id: str
    job_id: str
    score: float
    match_url: Optional[str] = None


class MatchMessageBuilder:
    @staticmethod
    def build(worker_id: str, job_id: str, score: float, base_url: Optional[str] = None) -> MatchNotificationContent:
        match_url = None
        if base_url:
            match_url = urljoin(base_url.rstrip('/') + '/', f"jobs/{job_id}/matches/{worker_id}")
        return MatchNotificationContent(
            worker_id=worker_id,
            job_id=job_id,
            score=round(float(score), 4),
            match_url=match_url,
        )

    @staticmethod
    def subject(content: MatchNotificationContent) -> str:
        return f"New job match: {content.score * 100:.0f}% fit"

    @staticmethod
    def to_text(content: MatchNotificationContent) -> str:
        lines = [
            f"You match job {content.job_id} with a score of {content.score * 100:.0f}%.",
        ]
        if content.match_url:
            lines.append(f"Details: {content.match_url}")
        return "\n".join(lines)

    @staticmethod
    def to_payload(content: MatchNotificationContent) -> Dict[str, Any]:
        """JSON body for webhook delivery."""
        return {
            'type': 'job_match',
            'subject': MatchMessageBuilder.subject(content),
            'match': content.model_dump(),
        }
