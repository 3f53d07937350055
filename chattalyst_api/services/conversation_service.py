import uuid
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from chattalyst_api.logging_config import get_logger
from chattalyst_api.models import Conversation, ConversationParticipant, IntegrationConfig, ParticipantRole
from chattalyst_api.services.result import CONVERSATION_ERROR, PARTICIPANT_ERROR, Result

logger = get_logger("conversation_service")


@dataclass
class ResolvedIdentity:
    conversation_id: UUID
    participant_id: UUID
    created: bool = False


def role_for_direction(from_me: bool) -> ParticipantRole:
    return ParticipantRole.ADMIN if from_me else ParticipantRole.MEMBER


def find_conversation(db: Session, config_id: UUID, contact_identifier: str) -> Optional[Conversation]:
    """Conversation under ``config_id`` whose member participant is the contact, newest first."""
    return (
        db.query(Conversation)
        .join(ConversationParticipant, ConversationParticipant.conversation_id == Conversation.conversation_id)
        .filter(
            Conversation.integrations_config_id == config_id,
            ConversationParticipant.role == ParticipantRole.MEMBER.value,
            ConversationParticipant.external_user_identifier == contact_identifier,
        )
        .order_by(Conversation.created_at.desc())
        .first()
    )


def get_participant(db: Session, conversation_id: UUID, role: ParticipantRole) -> Optional[ConversationParticipant]:
    return (
        db.query(ConversationParticipant)
        .filter(
            ConversationParticipant.conversation_id == conversation_id,
            ConversationParticipant.role == role.value,
        )
        .first()
    )


def _participant_for(db: Session, conversation: Conversation, from_me: bool) -> Result[ResolvedIdentity]:
    role = role_for_direction(from_me)
    participant = get_participant(db, conversation.conversation_id, role)
    if not participant:
        hint = " (is user_reference_id set on the integration config?)" if from_me else ""
        return Result.failure(
            f"No {role.value} participant in conversation {conversation.conversation_id}{hint}",
            PARTICIPANT_ERROR,
        )
    return Result.success(ResolvedIdentity(conversation.conversation_id, participant.id))


def _create_conversation(
    db: Session,
    config: IntegrationConfig,
    contact_identifier: str,
    customer_id: Optional[UUID],
) -> tuple[Conversation, Optional[ConversationParticipant], ConversationParticipant]:
    conversation = Conversation(
        conversation_id=uuid.uuid4(),
        integrations_config_id=config.id,
        contact_identifier=contact_identifier,
    )
    db.add(conversation)
    db.flush()

    admin = None
    if config.user_reference_id:
        admin = ConversationParticipant(
            id=uuid.uuid4(),
            conversation_id=conversation.conversation_id,
            role=ParticipantRole.ADMIN.value,
            external_user_identifier=config.user_reference_id,
        )
        db.add(admin)
    else:
        logger.warning(f"Integration config {config.id} has no user_reference_id, admin participant not created")

    member = ConversationParticipant(
        id=uuid.uuid4(),
        conversation_id=conversation.conversation_id,
        role=ParticipantRole.MEMBER.value,
        external_user_identifier=contact_identifier,
        customer_id=customer_id,
    )
    db.add(member)
    db.flush()
    return conversation, admin, member


def find_or_create_conversation(
    db: Session,
    contact_identifier: str,
    config: IntegrationConfig,
    from_me: bool,
    customer_id: Optional[UUID],
) -> Result[ResolvedIdentity]:
    """Resolve the conversation and the sender participant for one message.

    A new conversation is created together with its admin and member
    participants. When the unique (config, contact) constraint rejects the
    insert another delivery won the race, and its conversation is used.
    """
    try:
        conversation = find_conversation(db, config.id, contact_identifier)
        if conversation:
            return _participant_for(db, conversation, from_me)

        try:
            with db.begin_nested():
                conversation, admin, member = _create_conversation(db, config, contact_identifier, customer_id)
        except IntegrityError:
            logger.info(f"Conversation for {contact_identifier} on {config.id} created concurrently, re-fetching")
            conversation = find_conversation(db, config.id, contact_identifier)
            if not conversation:
                return Result.failure(
                    f"Conversation for {contact_identifier} vanished after conflict", CONVERSATION_ERROR
                )
            return _participant_for(db, conversation, from_me)

        logger.info(f"Created conversation {conversation.conversation_id} for {contact_identifier}")
        participant = admin if from_me else member
        if participant is None:
            return Result.failure(
                f"Conversation {conversation.conversation_id} has no admin participant for an outbound message",
                PARTICIPANT_ERROR,
            )
        return Result.success(ResolvedIdentity(conversation.conversation_id, participant.id, created=True))

    except SQLAlchemyError as e:
        logger.error(f"Conversation resolution failed for {contact_identifier}: {e}")
        return Result.failure(str(e), CONVERSATION_ERROR)
