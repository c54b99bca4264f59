from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass(frozen=True, slots=True)
class SystemSettings:
    """Site-wide email toggles.  Every toggle defaults to on."""

    newsletter_enabled: bool = True
    course_notifications_enabled: bool = True
    course_update_notifications_enabled: bool = True

    @property
    def review_notifications_enabled(self) -> bool:
        # Review emails have no toggle of their own; they follow the
        # general email switch.
        return self.newsletter_enabled

    def to_dict(self) -> dict[str, bool]:
        return asdict(self)
