"""Entity dialogs: form state machines bound to the gateway.

A details dialog moves ``closed -> viewing -> editing -> submitting`` and
back to ``viewing`` on success or ``editing`` on failure. Deletion goes
through its own confirmation gate. Every successful mutation re-reads the
record from the store before the form is reset, then fires the page
refresh once and posts a notification.
"""
import enum
import logging
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple, Type

from pydantic import BaseModel

from catalog.client.context import SessionContext, Severity
from catalog.client.forms import FormState
from catalog.client.gateway import CommentGateway, GatewayError, SpeciesGateway, TableGateway
from catalog.schemas import CommentCreate, CommentUpdate, SpeciesCreate

logger = logging.getLogger("catalog.dialogs")

DISCARD_PROMPT = "Discard all changes?"
FAILURE_TITLE = "Something went wrong."
SAVED_TITLE = "Changes saved!"

SPECIES_FIELDS = ("scientific_name", "common_name", "kingdom", "total_population", "image", "description")


class DialogState(str, enum.Enum):
    CLOSED = "closed"
    VIEWING = "viewing"
    EDITING = "editing"
    SUBMITTING = "submitting"


class DeleteState(str, enum.Enum):
    IDLE = "idle"
    CONFIRMING = "confirming"
    DELETING = "deleting"
    DELETED = "deleted"
    CANCELLED = "cancelled"


class DialogError(Exception):
    pass


class DialogStateError(DialogError):
    """The requested transition is not valid from the current state."""


class DialogPermissionError(DialogError):
    """The current user may not modify this record."""


def notify_failure(context: SessionContext, error: GatewayError) -> None:
    context.notify(FAILURE_TITLE, error.message, Severity.DESTRUCTIVE)


class EntityDialog:
    """View, edit and delete one persisted record."""

    entity_name = "record"
    pk_field = "id"
    form_schema: Type[BaseModel]
    form_fields: Tuple[str, ...] = ()

    def __init__(
        self,
        record: Mapping[str, Any],
        context: SessionContext,
        gateway: TableGateway,
        state: DialogState = DialogState.CLOSED,
    ):
        self.record: Dict[str, Any] = dict(record)
        self.context = context
        self.gateway = gateway
        self.state = state
        self.delete_state = DeleteState.IDLE
        self.form = FormState(self.form_schema, self.record, self.form_fields)

    def __repr__(self):
        return f"<{type(self).__name__}({self.pk_field}={self.pk}, state={self.state.value})>"

    @property
    def pk(self) -> int:
        return self.record[self.pk_field]

    @property
    def is_author(self) -> bool:
        return self.context.is_author(self.record.get("author"))

    @property
    def can_edit(self) -> bool:
        return self.is_author

    @property
    def is_open(self) -> bool:
        return self.state != DialogState.CLOSED

    def _require(self, *states: DialogState) -> None:
        if self.state not in states:
            allowed = ", ".join(s.value for s in states)
            raise DialogStateError(f"{self.entity_name} dialog is {self.state.value}, expected {allowed}")

    def _require_author(self) -> None:
        if not self.can_edit:
            raise DialogPermissionError(f"Only the author can modify this {self.entity_name}")

    def open(self) -> None:
        if self.state == DialogState.CLOSED:
            self.state = DialogState.VIEWING

    def close(self) -> None:
        self._require(DialogState.CLOSED, DialogState.VIEWING, DialogState.EDITING)
        self.form.reset()
        self.state = DialogState.CLOSED
        self.delete_state = DeleteState.IDLE

    def start_editing(self) -> None:
        self._require(DialogState.VIEWING)
        self._require_author()
        self.state = DialogState.EDITING

    def set_value(self, field: str, value: Any) -> None:
        self._require(DialogState.EDITING)
        self.form.set_value(field, value)

    def cancel_editing(self) -> bool:
        """Restore the last known-good values if the user confirms."""
        self._require(DialogState.EDITING)
        if not self.context.confirm(DISCARD_PROMPT):
            return False
        self.form.reset()
        self.state = DialogState.VIEWING
        return True

    def _payload(self, model: BaseModel) -> Dict[str, Any]:
        return model.model_dump(mode="json", exclude_unset=True)

    def _saved_message(self, model: BaseModel) -> str:
        return f"Successfully updated {self.entity_name}."

    async def refresh_from_source(self) -> bool:
        """Re-read the record and make it the form's new defaults.

        Returns False when nothing was read: the record is gone (skipped
        silently) or the read failed (the user is notified).
        """
        result = await self.gateway.read_by_id(self.pk)
        if result.error is not None:
            notify_failure(self.context, result.error)
            return False
        if result.data is None:
            logger.debug("%s %s no longer exists", self.entity_name, self.pk)
            return False
        self.record = dict(result.data)
        self.form.reset(self.record)
        return True

    async def submit(self) -> bool:
        self._require(DialogState.EDITING)
        self._require_author()
        model = self.form.validate()
        if model is None:
            return False

        payload = self._payload(model)
        self.state = DialogState.SUBMITTING
        result = await self.gateway.update_by_id(self.pk, payload)
        if result.error is not None:
            self.state = DialogState.EDITING
            notify_failure(self.context, result.error)
            return False

        if not await self.refresh_from_source():
            # keep what was submitted rather than showing stale defaults
            self.form.reset({**self.form.defaults, **payload})
        self.state = DialogState.VIEWING
        await self.context.request_refresh()
        self.context.notify(SAVED_TITLE, self._saved_message(model))
        return True

    def request_delete(self) -> None:
        self._require_author()
        if self.delete_state in (DeleteState.DELETING, DeleteState.DELETED):
            raise DialogStateError(f"{self.entity_name} is already {self.delete_state.value}")
        self.delete_state = DeleteState.CONFIRMING

    def cancel_delete(self) -> None:
        if self.delete_state != DeleteState.CONFIRMING:
            raise DialogStateError("No delete is awaiting confirmation")
        self.delete_state = DeleteState.CANCELLED

    async def confirm_delete(self) -> bool:
        if self.delete_state != DeleteState.CONFIRMING:
            raise DialogStateError("No delete is awaiting confirmation")
        self.delete_state = DeleteState.DELETING
        result = await self.gateway.delete_by_id(self.pk)
        if result.error is not None:
            self.delete_state = DeleteState.CONFIRMING
            notify_failure(self.context, result.error)
            return False

        # the delete already succeeded, so a failed re-read is only logged
        reread = await self.gateway.read_by_id(self.pk)
        if reread.error is not None:
            logger.warning("re-read of deleted %s %s failed: %s", self.entity_name, self.pk, reread.error.message)
        elif reread.data is not None:
            logger.warning("%s %s is still readable after delete", self.entity_name, self.pk)
        self.delete_state = DeleteState.DELETED
        self.form.reset()
        self.state = DialogState.CLOSED
        await self._deleted()
        await self.context.request_refresh()
        self.context.notify(SAVED_TITLE, f"Successfully deleted {self.entity_name}.")
        return True

    async def _deleted(self) -> None:
        """Runs after a successful delete, before the page refresh."""


class CommentDetailsDialog(EntityDialog):
    """Inline view of one comment; editable only in the list's edit layout."""

    entity_name = "comment"
    pk_field = "commentid"
    form_schema = CommentUpdate
    form_fields = ("other_sugs",)

    def __init__(
        self,
        comment: Mapping[str, Any],
        context: SessionContext,
        gateway: CommentGateway,
        is_commenting: bool = False,
        on_deleted: Optional[Callable[["CommentDetailsDialog"], None]] = None,
    ):
        super().__init__(comment, context, gateway, state=DialogState.VIEWING)
        self.is_commenting = is_commenting
        self.on_deleted = on_deleted

    @property
    def can_edit(self) -> bool:
        return self.is_commenting and self.is_author

    async def _deleted(self) -> None:
        if self.on_deleted is not None:
            self.on_deleted(self)

    def set_commenting(self, is_commenting: bool) -> None:
        self.is_commenting = is_commenting
        if not is_commenting:
            if self.state == DialogState.EDITING:
                self.form.reset()
                self.state = DialogState.VIEWING
            if self.delete_state == DeleteState.CONFIRMING:
                self.delete_state = DeleteState.CANCELLED


class SpeciesDetailsDialog(EntityDialog):
    """View or edit a species, and browse and add its comments."""

    entity_name = "species"
    pk_field = "id"
    form_schema = SpeciesCreate
    form_fields = SPECIES_FIELDS

    def __init__(
        self,
        species: Mapping[str, Any],
        context: SessionContext,
        gateway: SpeciesGateway,
        comment_gateway: CommentGateway,
    ):
        super().__init__(species, context, gateway)
        self.comment_gateway = comment_gateway
        self.comments: List[CommentDetailsDialog] = []
        self.is_commenting = False
        self.add_comment = AddCommentDialog(self.pk, context, comment_gateway, on_created=self._comment_added)

    @property
    def title(self) -> str:
        return self.record["scientific_name"]

    def _saved_message(self, model: BaseModel) -> str:
        return f"Successfully changed {model.scientific_name}."

    def sync(self, species: Mapping[str, Any]) -> None:
        """Take a freshly listed row; unsaved edits are left alone."""
        self.record = dict(species)
        if self.state not in (DialogState.EDITING, DialogState.SUBMITTING):
            self.form.reset(self.record)

    async def load_comments(self) -> bool:
        """Fetch this species' comments, keeping the store's order."""
        result = await self.comment_gateway.list_by_foreign_key(self.pk)
        if result.error is not None:
            notify_failure(self.context, result.error)
            return False
        self.comments = [
            CommentDetailsDialog(
                comment, self.context, self.comment_gateway, self.is_commenting,
                on_deleted=self._comment_deleted,
            )
            for comment in result.data or []
        ]
        return True

    async def _comment_added(self, comment: Dict[str, Any]) -> None:
        await self.load_comments()

    def _comment_deleted(self, dialog: CommentDetailsDialog) -> None:
        self.comments = [c for c in self.comments if c is not dialog]

    def toggle_commenting(self) -> bool:
        """Flip the comment list between read-only and editable layouts."""
        self.is_commenting = not self.is_commenting
        for dialog in self.comments:
            dialog.set_commenting(self.is_commenting)
        return self.is_commenting


class CreateDialog:
    """Collect a new record and insert it."""

    entity_name = "record"
    pk_field = "id"
    form_schema: Type[BaseModel]
    form_fields: Tuple[str, ...] = ()
    success_title = "Saved!"

    def __init__(
        self,
        context: SessionContext,
        gateway: TableGateway,
        defaults: Mapping[str, Any],
        on_created: Optional[Callable[[Dict[str, Any]], Awaitable[None]]] = None,
    ):
        self.context = context
        self.gateway = gateway
        self.on_created = on_created
        self.state = DialogState.CLOSED
        self.form = FormState(self.form_schema, defaults, self.form_fields)

    @property
    def is_open(self) -> bool:
        return self.state != DialogState.CLOSED

    def open(self) -> None:
        if not self.context.is_authenticated:
            raise DialogPermissionError(f"Sign in to add a {self.entity_name}")
        if self.state == DialogState.CLOSED:
            self.state = DialogState.EDITING

    def close(self) -> None:
        if self.state == DialogState.SUBMITTING:
            raise DialogStateError(f"{self.entity_name} is being submitted")
        self.form.reset()
        self.state = DialogState.CLOSED

    def set_value(self, field: str, value: Any) -> None:
        if self.state != DialogState.EDITING:
            raise DialogStateError(f"{self.entity_name} dialog is {self.state.value}, expected editing")
        self.form.set_value(field, value)

    def _payload(self, model: BaseModel) -> Dict[str, Any]:
        return model.model_dump(mode="json")

    def _success_message(self, model: BaseModel) -> str:
        return f"Successfully added {self.entity_name}"

    async def submit(self) -> Optional[Dict[str, Any]]:
        """Insert the record; returns the stored row, or None on failure."""
        if self.state != DialogState.EDITING:
            raise DialogStateError(f"{self.entity_name} dialog is {self.state.value}, expected editing")
        model = self.form.validate()
        if model is None:
            return None

        self.state = DialogState.SUBMITTING
        result = await self.gateway.create(self._payload(model))
        if result.error is not None:
            self.state = DialogState.EDITING
            notify_failure(self.context, result.error)
            return None

        created = result.data
        if created and created.get(self.pk_field) is not None:
            reread = await self.gateway.read_by_id(created[self.pk_field])
            if reread.data is not None:
                created = reread.data
        self.form.reset()
        self.state = DialogState.CLOSED
        if self.on_created is not None:
            await self.on_created(created)
        await self.context.request_refresh()
        self.context.notify(self.success_title, self._success_message(model))
        return created


class AddCommentDialog(CreateDialog):
    entity_name = "comment"
    pk_field = "commentid"
    form_schema = CommentCreate
    form_fields = ("species_id", "other_sugs", "time_made", "author")
    success_title = "New comment added!"

    def __init__(
        self,
        species_id: int,
        context: SessionContext,
        gateway: CommentGateway,
        on_created: Optional[Callable[[Dict[str, Any]], Awaitable[None]]] = None,
    ):
        defaults = {
            "species_id": species_id,
            "other_sugs": "",
            "time_made": None,
            "author": context.user_id,
        }
        super().__init__(context, gateway, defaults, on_created)
        self.species_id = species_id

    def _payload(self, model: BaseModel) -> Dict[str, Any]:
        # the store stamps the author and, when absent, the time
        return model.model_dump(mode="json", exclude={"author"}, exclude_none=True)


class AddSpeciesDialog(CreateDialog):
    entity_name = "species"
    pk_field = "id"
    form_schema = SpeciesCreate
    form_fields = SPECIES_FIELDS
    success_title = "New species added!"

    def __init__(self, context: SessionContext, gateway: SpeciesGateway):
        defaults = {field: None for field in SPECIES_FIELDS}
        defaults["scientific_name"] = ""
        super().__init__(context, gateway, defaults)

    def _success_message(self, model: BaseModel) -> str:
        return f"Successfully added {model.scientific_name}."
