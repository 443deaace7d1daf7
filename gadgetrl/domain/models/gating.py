from enum import Enum


class GatingMode(str, Enum):
    """Which revision of a page is served.

    UNREVIEWED: latest stored revision.
    REVIEWED: latest revision approved by the review service.
    """

    UNREVIEWED = "unreviewed"
    REVIEWED = "reviewed"
