"""Page-level workflow: flight list, equipment selection, scanning, preview.

State lives in an explicit, immutable :class:`WorkflowContext` that carries the
signed-in :class:`Session`; every transition returns a new context.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from trolleyseal.equipment import EquipmentKind, UnknownEquipmentKind, kind_of
from trolleyseal.errors import ValidationFailed
from trolleyseal.services.flights import FlightStore

logger = logging.getLogger(__name__)


class Step(str, Enum):
    FLIGHT_LIST = "flight-list"
    EQUIPMENT_SELECT = "equipment-select"
    SCAN = "scan"
    PREVIEW = "preview"


class WorkflowError(ValidationFailed):
    """Raised when a transition is missing the state it requires."""

    code = "invalid_transition"


@dataclass(frozen=True)
class Session:
    """Signed-in staff member, created at login and dropped at logout."""

    user_id: int
    display_name: str
    access_token: Optional[str] = None


@dataclass(frozen=True)
class WorkflowContext:
    session: Optional[Session] = None
    step: Step = Step.FLIGHT_LIST
    flight_id: Optional[int] = None
    equipment: Optional[EquipmentKind] = None
    archive_target: Optional[int] = None

    @property
    def archive_pending(self) -> bool:
        return self.archive_target is not None


class Workflow:
    """Transition functions over :class:`WorkflowContext`."""

    @staticmethod
    def start(session: Session) -> WorkflowContext:
        return WorkflowContext(session=session)

    @staticmethod
    def logout(context: WorkflowContext) -> WorkflowContext:
        return WorkflowContext()

    @staticmethod
    def _require_session(context: WorkflowContext) -> Session:
        if context.session is None:
            raise WorkflowError("Sign in to continue")
        return context.session

    @classmethod
    def select_flight(cls, context: WorkflowContext, flight_id: int) -> WorkflowContext:
        cls._require_session(context)
        if context.step is not Step.FLIGHT_LIST:
            raise WorkflowError("Flights are selected from the flight list")
        if context.archive_pending:
            raise WorkflowError("Confirm or cancel the pending archive first")
        if not isinstance(flight_id, int) or flight_id <= 0:
            raise WorkflowError("A valid flight is required")
        return replace(context, step=Step.EQUIPMENT_SELECT, flight_id=flight_id)

    @classmethod
    def select_equipment(
        cls, context: WorkflowContext, equipment: EquipmentKind | str
    ) -> WorkflowContext:
        cls._require_session(context)
        if context.step is not Step.EQUIPMENT_SELECT or context.flight_id is None:
            raise WorkflowError("Select a flight before choosing equipment")
        try:
            kind = kind_of(equipment)
        except UnknownEquipmentKind as exc:
            raise WorkflowError(str(exc)) from exc
        return replace(context, step=Step.SCAN, equipment=kind)

    @classmethod
    def open_preview(cls, context: WorkflowContext) -> WorkflowContext:
        cls._require_session(context)
        if context.step not in (Step.EQUIPMENT_SELECT, Step.SCAN) or context.flight_id is None:
            raise WorkflowError("Select a flight before previewing its report")
        return replace(context, step=Step.PREVIEW, equipment=None)

    @staticmethod
    def back(context: WorkflowContext) -> WorkflowContext:
        """Step back unconditionally; scan-step state is discarded."""

        if context.step is Step.SCAN:
            return replace(context, step=Step.EQUIPMENT_SELECT, equipment=None)
        if context.step in (Step.PREVIEW, Step.EQUIPMENT_SELECT):
            return replace(
                context,
                step=Step.FLIGHT_LIST,
                flight_id=None,
                equipment=None,
            )
        return replace(context, archive_target=None)

    @classmethod
    def request_archive(cls, context: WorkflowContext, flight_id: int) -> WorkflowContext:
        cls._require_session(context)
        if context.step is not Step.FLIGHT_LIST:
            raise WorkflowError("Flights are archived from the flight list")
        return replace(context, archive_target=flight_id)

    @staticmethod
    def cancel_archive(context: WorkflowContext) -> WorkflowContext:
        return replace(context, archive_target=None)

    @classmethod
    async def confirm_archive(
        cls, context: WorkflowContext, store: FlightStore
    ) -> WorkflowContext:
        cls._require_session(context)
        if not context.archive_pending:
            raise WorkflowError("No archive is awaiting confirmation")
        await store.archive(context.archive_target)
        return replace(context, archive_target=None)

    @classmethod
    async def print_completed(
        cls, context: WorkflowContext, store: FlightStore
    ) -> bool:
        """Handle the host's print-dialog-closed signal."""

        if context.step is not Step.PREVIEW or context.flight_id is None:
            logger.debug("Ignoring print completion outside the preview step")
            return False
        return await store.mark_printed(context.flight_id)


__all__ = [
    "Session",
    "Step",
    "Workflow",
    "WorkflowContext",
    "WorkflowError",
]
