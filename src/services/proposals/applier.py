"""
Patch Applier

Writes an accepted proposal into the deck's section/component tree. Every
change type has its own handler; a handler reports whether it modified the
deck, and the deck is saved only when it did.
"""
import logging
from typing import Optional, assert_never

from pydantic import BaseModel, ValidationError

from src.core import ConcurrentModificationError, DeckNotFoundError, ProposalApplyError
from src.models import (
    ChartUpdateData,
    Deck,
    DeckAiUpdateProposal,
    DeleteElementData,
    ImageSwapData,
    NewElementData,
    NewSlideData,
    ReorderElementData,
    ReorderSlideData,
    Section,
    TextEditData,
    VisualComponent,
)
from src.models.deck import ComponentLayout, new_id

from ..audit import AuditAction, AuditLogger
from ..storage import DeckReviewRepository

logger = logging.getLogger(__name__)


class ApplyOutcome(BaseModel):
    """Result of applying one proposal."""
    applied: bool = False
    no_op: bool = False
    deck: Optional[Deck] = None


def _move(items: list, item, position: int) -> bool:
    """Move ``item`` to ``position`` (clamped). Returns True if it moved."""
    current = next(i for i, existing in enumerate(items) if existing is item)
    target = max(0, min(position, len(items) - 1))
    if target == current:
        return False
    items.pop(current)
    items.insert(target, item)
    return True


class PatchApplier:
    """Applies accepted proposals to decks with optimistic concurrency."""

    def __init__(self, repository: DeckReviewRepository, audit: AuditLogger):
        self._repository = repository
        self._audit = audit

    def apply(self, proposal: DeckAiUpdateProposal) -> ApplyOutcome:
        """
        Apply a proposal to its deck.

        Raises:
            DeckNotFoundError: if the deck or its owner is missing
            ConcurrentModificationError: if the deck changed since it was loaded
            ProposalApplyError: if the modified deck could not be saved
        """
        deck = self._repository.get_deck(proposal.deck_id)
        if deck is None or not deck.user_id:
            raise DeckNotFoundError(proposal.deck_id)

        working = deck.model_copy(deep=True)
        try:
            modified = self._mutate(working, proposal)
        except ValidationError as e:
            self._log_failure(proposal, deck, e)
            raise ProposalApplyError(f"Proposal {proposal.id} produced an invalid deck: {e}") from e

        if not modified:
            logger.info(f"Proposal {proposal.id} accepted with no effective change")
            self._audit.log(
                deck.id,
                AuditAction.AI_PROPOSAL_ACCEPTED_NO_OP,
                {"proposalId": proposal.id, "changeType": proposal.change_type.value},
                user_id=deck.user_id,
                slide_id=proposal.slide_id,
                element_id=proposal.element_id,
            )
            return ApplyOutcome(no_op=True, deck=deck)

        try:
            saved = self._repository.save_deck(working, expected_version=deck.version)
        except ConcurrentModificationError as e:
            self._log_failure(proposal, deck, e)
            raise
        except Exception as e:
            self._log_failure(proposal, deck, e)
            raise ProposalApplyError(f"Failed to save deck {deck.id}: {e}") from e

        self._audit.log(
            deck.id,
            AuditAction.AI_PROPOSAL_APPLIED,
            {
                "proposalId": proposal.id,
                "changeType": proposal.change_type.value,
                "version": saved.version,
            },
            user_id=deck.user_id,
            slide_id=proposal.slide_id,
            element_id=proposal.element_id,
        )
        return ApplyOutcome(applied=True, deck=saved)

    def _log_failure(self, proposal: DeckAiUpdateProposal, deck: Deck, error: Exception) -> None:
        logger.error(f"Error applying proposal {proposal.id} to deck {deck.id}: {error}")
        self._audit.log(
            deck.id,
            AuditAction.AI_PROPOSAL_APPLY_FAILED,
            {
                "proposalId": proposal.id,
                "changeType": proposal.change_type.value,
                "error": str(error),
            },
            user_id=deck.user_id,
            slide_id=proposal.slide_id,
            element_id=proposal.element_id,
        )

    def _mutate(self, deck: Deck, proposal: DeckAiUpdateProposal) -> bool:
        """Dispatch on the payload variant. Returns True if the deck changed."""
        payload = proposal.proposed_content_data
        match payload:
            case NewSlideData():
                return self._new_slide(deck, payload)
            case ReorderSlideData():
                return self._reorder_slide(deck, proposal.slide_id, payload)
            case NewElementData():
                section = self._find_section(deck, proposal.slide_id)
                return section is not None and self._new_element(section, payload)
            case TextEditData():
                _, component = self._find_target(deck, proposal)
                return component is not None and self._text_edit(component, payload)
            case ImageSwapData():
                _, component = self._find_target(deck, proposal)
                return component is not None and self._image_swap(component, payload)
            case ChartUpdateData():
                _, component = self._find_target(deck, proposal)
                return component is not None and self._chart_update(component, payload)
            case DeleteElementData():
                section, component = self._find_target(deck, proposal)
                return component is not None and self._delete_element(section, component)
            case ReorderElementData():
                section, component = self._find_target(deck, proposal)
                return component is not None and self._reorder_element(section, component, payload)
            case _:
                assert_never(payload)

    @staticmethod
    def _find_section(deck: Deck, slide_id: str) -> Optional[Section]:
        section = deck.find_section(slide_id)
        if section is None:
            logger.warning(f"Slide {slide_id} not found in deck {deck.id}")
        return section

    def _find_target(
        self,
        deck: Deck,
        proposal: DeckAiUpdateProposal,
    ) -> tuple[Optional[Section], Optional[VisualComponent]]:
        section = self._find_section(deck, proposal.slide_id)
        if section is None:
            return None, None
        component = section.find_component(proposal.element_id) if proposal.element_id else None
        if component is None:
            logger.warning(f"Element {proposal.element_id} not found on slide {section.id}")
        return section, component

    # -------------------------------------------------------------------------
    # Component handlers
    # -------------------------------------------------------------------------

    @staticmethod
    def _text_edit(component: VisualComponent, payload: TextEditData) -> bool:
        if payload.new_text_content is None:
            return False
        key = component.text_field()
        if component.data.get(key) == payload.new_text_content:
            return False
        component.data[key] = payload.new_text_content
        return True

    @staticmethod
    def _image_swap(component: VisualComponent, payload: ImageSwapData) -> bool:
        data = component.data
        key = "imageUrl" if "imageUrl" in data and "src" not in data else "src"
        modified = False
        if data.get(key) != payload.new_image_url:
            data[key] = payload.new_image_url
            modified = True
        if payload.new_alt_text is not None and data.get("alt") != payload.new_alt_text:
            data["alt"] = payload.new_alt_text
            modified = True
        return modified

    @staticmethod
    def _chart_update(component: VisualComponent, payload: ChartUpdateData) -> bool:
        data = component.data
        key = "data" if "data" in data and "chartData" not in data else "chartData"
        modified = False
        if data.get(key) != payload.new_data:
            data[key] = payload.new_data
            modified = True
        if payload.new_chart_options:
            merged = {**(data.get("options") or {}), **payload.new_chart_options}
            if merged != data.get("options"):
                data["options"] = merged
                modified = True
        return modified

    @staticmethod
    def _new_element(section: Section, payload: NewElementData) -> bool:
        section.components.append(
            VisualComponent(
                id=new_id(),
                type=payload.component_type,
                data=dict(payload.data),
                layout=payload.layout or ComponentLayout(),
                order=len(section.components),
            )
        )
        return True

    @staticmethod
    def _delete_element(section: Section, component: VisualComponent) -> bool:
        section.components = [c for c in section.components if c is not component]
        section.resequence()
        return True

    @staticmethod
    def _reorder_element(section: Section, component: VisualComponent, payload: ReorderElementData) -> bool:
        section.components.sort(key=lambda c: c.order)
        moved = _move(section.components, component, payload.new_order)
        section.resequence()
        return moved

    # -------------------------------------------------------------------------
    # Slide handlers
    # -------------------------------------------------------------------------

    @staticmethod
    def _new_slide(deck: Deck, payload: NewSlideData) -> bool:
        slide = Section.model_validate({**payload.new_slide_data, "id": new_id(), "order": 0})
        slide.resequence()
        deck.sections.sort(key=lambda s: s.order)
        position = max(0, min(payload.target_order, len(deck.sections)))
        deck.sections.insert(position, slide)
        deck.resequence()
        return True

    @staticmethod
    def _reorder_slide(deck: Deck, slide_id: str, payload: ReorderSlideData) -> bool:
        section = deck.find_section(slide_id)
        if section is None:
            logger.warning(f"Slide {slide_id} not found in deck {deck.id}")
            return False
        deck.sections.sort(key=lambda s: s.order)
        moved = _move(deck.sections, section, payload.new_order)
        deck.resequence()
        return moved
