"""observation_offload.features.observation_masking.openai_adapter

Pont entre les messages chat au format OpenAI et l'historique `Turn`/`Part`.

Invariants préservés au retour:
- ne jamais supprimer/ajouter/réordonner des messages,
- ne jamais modifier `assistant.tool_calls` ni `tool.tool_call_id`,
- remplacer uniquement `content` des messages `role="tool"` masqués.

Le `tool_call_id` est recopié dans la clé `callId` de la réponse pour nommer les
fichiers déchargés. Cette clé fait partie de la réponse: elle est donc comptée
par l'estimateur de tokens (quelques tokens par observation).
"""

from __future__ import annotations

from typing import Optional

from ...core.constants import CALL_ID_KEY
from ...core.models import (
    ConversationHistory,
    OpaquePart,
    Part,
    TextPart,
    ToolCallPart,
    ToolObservationPart,
    Turn,
)
from ...core.storage import HistoryDirResolver
from .service import MaskingResult, ObservationMaskingService


ChatMessage = dict[str, object]


def _extract_tool_name_from_tool_call(tool_call: dict[str, object]) -> Optional[str]:
    """Extrait `function.name` d'un tool_call OpenAI compatible."""

    function_obj = tool_call.get("function")
    if not isinstance(function_obj, dict):
        return None

    name_obj = function_obj.get("name")
    if isinstance(name_obj, str) and name_obj:
        return name_obj

    return None


def _map_tool_call_names(messages: list[ChatMessage]) -> dict[str, str]:
    """Mapping tool_call_id -> tool_name depuis les `assistant.tool_calls`."""

    id_to_tool_name: dict[str, str] = {}
    for msg in messages:
        if msg.get("role") != "assistant":
            continue

        tool_calls_obj = msg.get("tool_calls")
        if not isinstance(tool_calls_obj, list):
            continue

        for tc in tool_calls_obj:
            if not isinstance(tc, dict):
                continue
            tc_id = tc.get("id")
            if not isinstance(tc_id, str) or not tc_id:
                continue
            tool_name = _extract_tool_name_from_tool_call(tc)
            if tool_name is not None:
                id_to_tool_name[tc_id] = tool_name

    return id_to_tool_name


def _message_to_parts(msg: ChatMessage, id_to_tool_name: dict[str, str]) -> tuple[Part, ...]:
    role = msg.get("role")
    content = msg.get("content")

    if role == "tool":
        tool_call_id_obj = msg.get("tool_call_id")
        tool_call_id = tool_call_id_obj if isinstance(tool_call_id_obj, str) and tool_call_id_obj else None
        if not isinstance(content, str):
            # Format inattendu (multimodal, etc.) => non interprété
            return (OpaquePart(data=dict(msg)),)

        response: dict[str, object] = {"output": content}
        if tool_call_id is not None:
            response[CALL_ID_KEY] = tool_call_id
        return (
            ToolObservationPart(
                name=id_to_tool_name.get(tool_call_id) if tool_call_id else None,
                response=response,
                call_id=tool_call_id,
            ),
        )

    parts: list[Part] = []
    if isinstance(content, str):
        if content:
            parts.append(TextPart(text=content))
    elif content is not None:
        parts.append(OpaquePart(data={"content": content}))

    tool_calls_obj = msg.get("tool_calls")
    if role == "assistant" and isinstance(tool_calls_obj, list):
        for tc in tool_calls_obj:
            if not isinstance(tc, dict):
                continue
            tc_id = tc.get("id")
            function_obj = tc.get("function")
            arguments = function_obj.get("arguments") if isinstance(function_obj, dict) else None
            parts.append(
                ToolCallPart(
                    name=_extract_tool_name_from_tool_call(tc) or "",
                    args={"arguments": arguments},
                    call_id=tc_id if isinstance(tc_id, str) else None,
                )
            )

    return tuple(parts)


def history_from_chat_messages(messages: list[ChatMessage]) -> ConversationHistory:
    """Convertit des messages chat en historique: un `Turn` par message."""

    id_to_tool_name = _map_tool_call_names(messages)
    return [
        Turn(role=str(msg.get("role", "")), parts=_message_to_parts(msg, id_to_tool_name))
        for msg in messages
    ]


def chat_messages_from_history(
    history: ConversationHistory,
    messages: list[ChatMessage],
) -> list[ChatMessage]:
    """Réinjecte le contenu des observations de `history` dans `messages`.

    Les messages inchangés sont retournés tels quels (même objet); les messages
    tool dont le contenu a changé sont copiés avec le nouveau `content`.

    Raises:
        ValueError: Si `history` ne correspond pas message pour message
    """

    if len(history) != len(messages):
        raise ValueError(
            f"Historique incompatible: {len(history)} tours pour {len(messages)} messages"
        )

    output: list[ChatMessage] = []
    for turn, msg in zip(history, messages):
        if msg.get("role") != "tool" or len(turn.parts) != 1:
            output.append(msg)
            continue

        part = turn.parts[0]
        if not isinstance(part, ToolObservationPart) or not isinstance(part.response, dict):
            output.append(msg)
            continue

        new_content = part.response.get("output")
        if not isinstance(new_content, str) or new_content == msg.get("content"):
            output.append(msg)
            continue

        masked_msg = dict(msg)
        masked_msg["content"] = new_content
        output.append(masked_msg)

    return output


async def mask_chat_messages(
    messages: list[ChatMessage],
    service: ObservationMaskingService,
    storage: HistoryDirResolver,
) -> tuple[list[ChatMessage], MaskingResult]:
    """Applique le masking à une liste de messages chat OpenAI."""

    history = history_from_chat_messages(messages)
    result = await service.mask(history, storage)
    if result.masked_count == 0:
        return messages, result
    return chat_messages_from_history(result.new_history, messages), result
