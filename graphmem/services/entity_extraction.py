"""
Entity, relation and deletion extraction through LLM tool calls.
"""

from typing import Any, Dict, Iterable, List, Optional

from ..models.core import EntityRecord, RelationshipTriple, SearchHit
from ..utils.logging_config import get_logger
from ..utils.providers import ChatModel
from ..utils.tool_calls import ParseFailure, parse_tool_call
from .graph_prompts import (DELETE_MEMORY_TOOL_GRAPH, EXTRACT_ENTITIES_TOOL, RELATIONS_TOOL, build_delete_system_prompt,
                            build_delete_user_prompt, build_entities_system_prompt, build_relations_system_prompt,
                            build_relations_user_prompt)

logger = get_logger(__name__)


class EntityExtractionService:
    """Turn free text into entities, relationship triples and deletion decisions.

    Malformed tool-call arguments are logged and dropped. Errors raised by the
    chat model itself are not caught here.
    """

    def __init__(self, llm: ChatModel):
        """
        Initialize the entity extraction service.

        Args:
            llm: Chat model supporting function tools
        """
        self.llm = llm

        logger.info('Initialized EntityExtractionService')

    async def extract_entities(self, text: str, tenant_id: str) -> Dict[str, str]:
        """
        Extract entities and their types from text.

        Args:
            text: Input text (statement or query)
            tenant_id: Tenant identifier used for self-references

        Returns:
            Mapping of normalized entity name to normalized entity type
        """
        messages = [
            {'role': 'system', 'content': build_entities_system_prompt(tenant_id)},
            {'role': 'user', 'content': text},
        ]
        response = await self.llm.generate_response(messages, tools=[EXTRACT_ENTITIES_TOOL])

        entity_type_map: Dict[str, str] = {}
        for call in response.tool_calls:
            if call.name != 'extract_entities':
                continue

            parsed = parse_tool_call(call)
            if isinstance(parsed, ParseFailure):
                logger.error(f'Failed to parse extract_entities arguments: {parsed.error}')
                continue

            entities = parsed.arguments.get('entities')
            if not isinstance(entities, list):
                logger.error(f'extract_entities returned malformed entities payload: {entities!r}')
                continue

            for item in entities:
                if not isinstance(item, dict) or not item.get('entity') or not item.get('entity_type'):
                    logger.error(f'Skipping malformed entity item: {item!r}')
                    continue
                record = EntityRecord(name=str(item['entity']), type=str(item['entity_type'])).normalized()
                entity_type_map[record.name] = record.type

        logger.debug(f'Entity type map: {entity_type_map}')
        return entity_type_map

    async def extract_relations(self,
                                text: str,
                                tenant_id: str,
                                entity_type_map: Dict[str, str],
                                custom_prompt: Optional[str] = None) -> List[RelationshipTriple]:
        """
        Establish relationships among the extracted entities.

        Only the first tool call is read.

        Args:
            text: Input text
            tenant_id: Tenant identifier used for self-references
            entity_type_map: Entities found by extract_entities
            custom_prompt: Optional extra extraction instruction

        Returns:
            Normalized relationship triples
        """
        messages = [
            {'role': 'system', 'content': build_relations_system_prompt(tenant_id, custom_prompt)},
            {'role': 'user', 'content': build_relations_user_prompt(list(entity_type_map.keys()), text)},
        ]
        response = await self.llm.generate_response(messages, tools=[RELATIONS_TOOL])

        if not response.tool_calls:
            logger.debug('No relations tool call returned')
            return []

        parsed = parse_tool_call(response.tool_calls[0])
        if isinstance(parsed, ParseFailure):
            logger.error(f'Failed to parse establish_relationships arguments: {parsed.error}')
            return []

        items = parsed.arguments.get('entities')
        if not isinstance(items, list):
            logger.error(f'establish_relationships returned malformed entities payload: {items!r}')
            return []

        relations = _normalize_triples(items)
        logger.debug(f'Extracted relations: {[str(relation) for relation in relations]}')
        return relations

    async def decide_deletions(self, search_hits: List[SearchHit], text: str, tenant_id: str) -> List[RelationshipTriple]:
        """
        Ask the model which existing relationships the new text contradicts.

        Args:
            search_hits: Neighbourhood of the new entities in the graph
            text: New information
            tenant_id: Tenant identifier used for self-references

        Returns:
            Normalized triples to delete
        """
        existing_memories = '\n'.join(str(hit.to_triple()) for hit in search_hits)
        messages = [
            {'role': 'system', 'content': build_delete_system_prompt(tenant_id)},
            {'role': 'user', 'content': build_delete_user_prompt(existing_memories, text)},
        ]
        response = await self.llm.generate_response(messages, tools=[DELETE_MEMORY_TOOL_GRAPH])

        items = []
        for call in response.tool_calls:
            if call.name != 'delete_graph_memory':
                continue

            parsed = parse_tool_call(call)
            if isinstance(parsed, ParseFailure):
                logger.error(f'Failed to parse delete_graph_memory arguments: {parsed.error}')
                continue
            items.append(parsed.arguments)

        to_be_deleted = _normalize_triples(items)
        logger.debug(f'Deletions decided: {[str(triple) for triple in to_be_deleted]}')
        return to_be_deleted


def _normalize_triples(items: Iterable[Any]) -> List[RelationshipTriple]:
    triples = []
    for item in items:
        if not isinstance(item, dict) or not all(item.get(key) for key in ('source', 'relationship', 'destination')):
            logger.warning(f'Skipping incomplete relationship item: {item!r}')
            continue
        triples.append(
            RelationshipTriple(source=str(item['source']),
                               relationship=str(item['relationship']),
                               destination=str(item['destination'])).normalized())
    return triples
