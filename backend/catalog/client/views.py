"""Read-only list and card views that mount the detail dialogs.

Views never reorder what the gateway returned and never write data; their
``render()`` output is a plain dict for whatever template or UI sits on top.
"""
from typing import Any, Dict, List, Mapping, Optional

from catalog.client.context import SessionContext
from catalog.client.dialogs import (
    AddSpeciesDialog,
    CommentDetailsDialog,
    DialogState,
    SpeciesDetailsDialog,
    notify_failure,
)
from catalog.client.gateway import CommentGateway, SpeciesGateway

PREVIEW_LENGTH = 150


def description_preview(description: Optional[str]) -> str:
    if not description:
        return ""
    return description[:PREVIEW_LENGTH].strip() + "..."


class CommentCard:
    def __init__(self, dialog: CommentDetailsDialog):
        self.dialog = dialog

    def render(self) -> Dict[str, Any]:
        dialog = self.dialog
        return {
            "commentid": dialog.pk,
            "time_made": dialog.record.get("time_made"),
            "author": dialog.record.get("author"),
            "other_sugs": dialog.form.values.get("other_sugs"),
            "read_only": dialog.state != DialogState.EDITING,
            "can_edit": dialog.can_edit,
            "can_delete": dialog.can_edit,
        }


class CommentList:
    """The comments of one species, with the read-only/editable toggle."""

    def __init__(self, species_dialog: SpeciesDetailsDialog):
        self.species_dialog = species_dialog

    @property
    def cards(self) -> List[CommentCard]:
        return [CommentCard(dialog) for dialog in self.species_dialog.comments]

    @property
    def editable(self) -> bool:
        return self.species_dialog.is_commenting

    def toggle_editing(self) -> bool:
        return self.species_dialog.toggle_commenting()

    def render(self) -> List[Dict[str, Any]]:
        return [card.render() for card in self.cards]


class SpeciesCard:
    def __init__(
        self,
        species: Mapping[str, Any],
        context: SessionContext,
        species_gateway: SpeciesGateway,
        comment_gateway: CommentGateway,
    ):
        self.species = dict(species)
        self.dialog = SpeciesDetailsDialog(self.species, context, species_gateway, comment_gateway)
        self.comment_list = CommentList(self.dialog)

    def update(self, species: Mapping[str, Any]) -> None:
        self.species = dict(species)
        self.dialog.sync(self.species)

    def render(self) -> Dict[str, Any]:
        return {
            "id": self.species["id"],
            "scientific_name": self.species["scientific_name"],
            "common_name": self.species.get("common_name"),
            "image": self.species.get("image"),
            "description_preview": description_preview(self.species.get("description")),
            "can_edit": self.dialog.can_edit,
        }


class SpeciesPage:
    """The species list page: the target of the context's refresh signal.

    Unless the context already has a refresh hook, the page installs
    ``load`` as one so that every successful mutation re-fetches the list.
    """

    def __init__(self, context: SessionContext, species_gateway: SpeciesGateway, comment_gateway: CommentGateway):
        self.context = context
        self.species_gateway = species_gateway
        self.comment_gateway = comment_gateway
        self.cards: List[SpeciesCard] = []
        self.add_species = AddSpeciesDialog(context, species_gateway)
        if context.on_refresh is None:
            context.on_refresh = self.load

    async def load(self) -> bool:
        """Re-fetch the species list.

        Cards are kept by species id, so open dialogs, their loaded comments
        and the commenting toggle survive a refresh.
        """
        result = await self.species_gateway.list_all()
        if result.error is not None:
            notify_failure(self.context, result.error)
            return False
        existing = {card.species["id"]: card for card in self.cards}
        cards = []
        for species in result.data or []:
            card = existing.get(species["id"])
            if card is None:
                card = SpeciesCard(species, self.context, self.species_gateway, self.comment_gateway)
            else:
                card.update(species)
            cards.append(card)
        self.cards = cards
        return True

    def render(self) -> Dict[str, Any]:
        return {
            "species": [card.render() for card in self.cards],
            "can_add": self.context.is_authenticated,
        }
