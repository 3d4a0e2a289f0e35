"""Client side of the catalog: gateway, forms, dialogs and views."""

from catalog.client.context import Notification, SessionContext, Severity
from catalog.client.dialogs import (
    AddCommentDialog,
    AddSpeciesDialog,
    CommentDetailsDialog,
    DeleteState,
    DialogError,
    DialogPermissionError,
    DialogState,
    DialogStateError,
    SpeciesDetailsDialog,
)
from catalog.client.gateway import (
    CommentGateway,
    GatewayError,
    GatewayResult,
    SpeciesGateway,
    create_client,
)
from catalog.client.views import CommentCard, CommentList, SpeciesCard, SpeciesPage

__all__ = [
    "Notification", "SessionContext", "Severity",
    "AddCommentDialog", "AddSpeciesDialog", "CommentDetailsDialog", "SpeciesDetailsDialog",
    "DeleteState", "DialogState", "DialogError", "DialogPermissionError", "DialogStateError",
    "CommentGateway", "SpeciesGateway", "GatewayError", "GatewayResult", "create_client",
    "CommentCard", "CommentList", "SpeciesCard", "SpeciesPage",
]
