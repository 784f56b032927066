"""Single owner of the save state of the strip being edited."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum

from retrivia.domain.sessions import SaveResult

logger = logging.getLogger(__name__)


class SaveStatus(StrEnum):
    unsaved = "unsaved"
    in_flight = "in_flight"
    saved = "saved"


@dataclass
class SaveCoordinator:
    """Makes automatic and manual saves collapse into one session row.

    ``save`` only runs its action from ``unsaved``; while a save is in flight or
    after it succeeded, further calls return the current result untouched. A
    failed save returns to ``unsaved`` so the user can try again. ``reset``
    starts a new flow; a save still running for the previous flow cannot
    change the state of the new one.
    """

    status: SaveStatus = SaveStatus.unsaved
    result: SaveResult | None = None
    message: str | None = None
    flow: int = 0

    @property
    def session_id(self) -> str | None:
        """Id of the saved row, when one was recorded."""
        if self.result is None or not self.result.is_tracked:
            return None
        return self.result.session_id

    @property
    def can_update(self) -> bool:
        """Whether an in-place update of the saved session is possible."""
        return self.status == SaveStatus.saved and self.session_id is not None

    async def save(
        self, action: Callable[[], Awaitable[SaveResult | None]]
    ) -> SaveResult | None:
        """Run ``action`` once per editing flow."""
        if self.status != SaveStatus.unsaved:
            logger.debug("Save skipped, status is %s", self.status)
            return self.result
        flow = self.flow
        self.status = SaveStatus.in_flight
        self.message = None
        try:
            result = await action()
        except Exception:
            logger.exception("Save failed")
            result = None
        if flow != self.flow:
            logger.warning(
                "Discarding save of superseded flow %d (current %d): %s",
                flow,
                self.flow,
                result,
            )
            return None
        if result is None:
            self.status = SaveStatus.unsaved
            self.message = "Could not save your photostrip. Please try again."
            return None
        self.status = SaveStatus.saved
        self.result = result
        if result.is_tracked:
            self.message = "Photostrip saved"
        else:
            self.message = (
                "Photostrip uploaded, but it could not be added to your gallery"
            )
        return result

    async def update(
        self, action: Callable[[str], Awaitable[str | None]]
    ) -> str | None:
        """Overwrite the saved session; returns the composite URL or None."""
        session_id = self.session_id
        if self.status != SaveStatus.saved or session_id is None:
            self.message = "Save the photostrip before updating it"
            return None
        flow = self.flow
        url = await action(session_id)
        if flow != self.flow:
            logger.warning("Discarding update of superseded flow %d", flow)
            return None
        if url is None:
            self.message = "Could not update your photostrip. Please try again."
            return None
        self.result = SaveResult(url=url, session_id=session_id)
        self.message = "Photostrip updated"
        return url

    def reset(self) -> None:
        """Start a new editing flow."""
        self.flow += 1
        self.status = SaveStatus.unsaved
        self.result = None
        self.message = None
