"""Gating policy: decides whether a requester sees reviewed or unreviewed pages."""

import logging

from gadgetrl.domain.models.gating import GatingMode
from gadgetrl.domain.models.request_context import UserRef
from gadgetrl.domain.providers.review_service import ReviewService

logger = logging.getLogger(__name__)


class GatingPolicy:
    """Chooses the gating mode for a requester.

    Rules, first match wins:
    - review service absent or not installed -> UNREVIEWED
    - registered user in review test mode -> UNREVIEWED
    - anything else, including no user at all -> REVIEWED
    """

    def __init__(self, review_service: ReviewService | None = None) -> None:
        self._review_service = review_service

    @property
    def review_installed(self) -> bool:
        return self._review_service is not None and self._review_service.is_installed()

    def decide(self, user: UserRef | None = None) -> GatingMode:
        if not self.review_installed:
            return GatingMode.UNREVIEWED

        service = self._review_service
        if service is not None and user is not None and user.is_registered:
            if service.is_user_in_test_mode(user.user_id):
                logger.debug(f"User {user.user_id} is in review test mode")
                return GatingMode.UNREVIEWED

        return GatingMode.REVIEWED
