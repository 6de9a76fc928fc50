"""
Prompts and function-tool schemas used for graph memory extraction and maintenance.
"""

EXTRACT_ENTITIES_TOOL = {
    'type': 'function',
    'function': {
        'name': 'extract_entities',
        'description': 'Extract entities and their types from the text.',
        'parameters': {
            'type': 'object',
            'properties': {
                'entities': {
                    'type': 'array',
                    'items': {
                        'type': 'object',
                        'properties': {
                            'entity': {
                                'type': 'string',
                                'description': 'The name or identifier of the entity.'
                            },
                            'entity_type': {
                                'type': 'string',
                                'description': 'The type or category of the entity.'
                            },
                        },
                        'required': ['entity', 'entity_type'],
                        'additionalProperties': False,
                    },
                    'description': 'An array of entities with their types.',
                }
            },
            'required': ['entities'],
            'additionalProperties': False,
        },
    },
}

RELATIONS_TOOL = {
    'type': 'function',
    'function': {
        'name': 'establish_relationships',
        'description': 'Establish relationships among the entities based on the provided text.',
        'parameters': {
            'type': 'object',
            'properties': {
                'entities': {
                    'type': 'array',
                    'items': {
                        'type': 'object',
                        'properties': {
                            'source': {
                                'type': 'string',
                                'description': 'The source entity of the relationship.'
                            },
                            'relationship': {
                                'type': 'string',
                                'description': 'The relationship between the source and destination entities.'
                            },
                            'destination': {
                                'type': 'string',
                                'description': 'The destination entity of the relationship.'
                            },
                        },
                        'required': ['source', 'relationship', 'destination'],
                        'additionalProperties': False,
                    },
                }
            },
            'required': ['entities'],
            'additionalProperties': False,
        },
    },
}

DELETE_MEMORY_TOOL_GRAPH = {
    'type': 'function',
    'function': {
        'name': 'delete_graph_memory',
        'description': 'Delete the relationship between two nodes.',
        'parameters': {
            'type': 'object',
            'properties': {
                'source': {
                    'type': 'string',
                    'description': 'The identifier of the source node in the relationship.'
                },
                'relationship': {
                    'type': 'string',
                    'description': 'The existing relationship between the source and destination nodes that needs to be deleted.'
                },
                'destination': {
                    'type': 'string',
                    'description': 'The identifier of the destination node in the relationship.'
                },
            },
            'required': ['source', 'relationship', 'destination'],
            'additionalProperties': False,
        },
    },
}

EXTRACT_ENTITIES_PROMPT = """You are a smart assistant who understands entities and their types in a given text. \
If user message contains self reference such as 'I', 'me', 'my' etc. then use {user_id} as the source entity. \
Extract all the entities from the text. ***DO NOT*** answer the question itself if the given text is a question."""

EXTRACT_RELATIONS_PROMPT = """
You are an advanced algorithm designed to extract structured information from text to construct knowledge graphs. \
Your goal is to capture comprehensive and accurate information. Follow these key principles:

1. Extract only explicitly stated information from the text.
2. Establish relationships among the entities provided.
3. Use "USER_ID" as the source entity for any self-references (e.g., "I," "me," "my," etc.) in user messages.
CUSTOM_PROMPT

Relationships:
    - Use consistent, general, and timeless relationship types.
    - Example: Prefer "professor" over "became_professor."
    - Relationships should only be established among the entities explicitly mentioned in the user message.

Entity Consistency:
    - Ensure that relationships are coherent and logically align with the context of the message.
    - Maintain consistent naming for entities across the extracted data.

Strive to construct a coherent and easily understandable knowledge graph by establishing all the relationships \
among the entities and adherence to the user's context.

Adhere strictly to these guidelines to ensure high-quality knowledge graph extraction.
"""

DELETE_RELATIONS_SYSTEM_PROMPT = """
You are a graph memory manager specializing in identifying, managing, and optimizing relationships within \
graph-based memories. Your primary task is to analyze a list of existing relationships and determine which ones \
should be deleted based on the new information provided.
Input:
1. Existing Graph Memories: A list of current graph memories, each containing source, relationship, and destination information.
2. New Text: The new information to be integrated into the existing graph structure.
3. Use "USER_ID" as node for any self-references (e.g., "I," "me," "my," etc.) in user messages.

Guidelines:
1. Identification: Use the new information to evaluate existing relationships in the memory graph.
2. Deletion Criteria: Delete a relationship only if it meets at least one of these conditions:
   - Outdated or Inaccurate: The new information is more recent or accurate.
   - Contradictory: The new information conflicts with or negates the existing information.
3. DO NOT DELETE if there is a possibility of same type of relationship but different destination nodes.
4. Comprehensive Analysis:
   - Thoroughly examine each existing relationship against the new information and delete as necessary.
   - Multiple deletions may be required based on the new information.
5. Semantic Integrity:
   - Ensure that deletions maintain or improve the overall semantic structure of the graph.
   - Avoid deleting relationships that are NOT contradictory/outdated to the new information.
6. Temporal Awareness: Prioritize recency when timestamps are available.
7. Necessity Principle: Only DELETE relationships that must be deleted and are contradictory/outdated to the new \
information to maintain an accurate and coherent memory graph.

Note: DO NOT DELETE if there is a possibility of same type of relationship but different destination nodes.

For example:
Existing Memory: alice -- loves_to_eat -- pizza
New Information: Alice also loves to eat burger.

Do not delete in the above example because there is a possibility that Alice loves to eat both pizza and burger.

Memory Format:
source -- relationship -- destination

Provide a list of deletion instructions, each specifying the relationship to be deleted.
"""

JSON_RESPONSE_SUFFIX = '\nPlease provide your response in JSON format.'


def build_entities_system_prompt(user_id: str) -> str:
    return EXTRACT_ENTITIES_PROMPT.format(user_id=user_id)


def build_relations_system_prompt(user_id: str, custom_prompt: str = None) -> str:
    """
    Fill the relations template for a tenant.

    Args:
        user_id: Tenant identifier substituted for self-references
        custom_prompt: Optional extra instruction appended as rule 4

    Returns:
        System prompt text
    """
    prompt = EXTRACT_RELATIONS_PROMPT.replace('USER_ID', user_id)
    prompt = prompt.replace('CUSTOM_PROMPT', f'4. {custom_prompt}' if custom_prompt else '')
    return prompt + JSON_RESPONSE_SUFFIX


def build_relations_user_prompt(entity_names, text: str) -> str:
    return f'List of entities: {", ".join(entity_names)}. \n\nText: {text}'


def build_delete_system_prompt(user_id: str) -> str:
    return DELETE_RELATIONS_SYSTEM_PROMPT.replace('USER_ID', user_id)


def build_delete_user_prompt(existing_memories: str, text: str) -> str:
    return f'Here are the existing memories: {existing_memories} \n\n New Information: {text}'
